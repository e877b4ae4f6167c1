"""PDF text extraction services."""

from app.services.pdf.decoder import DecoderConfig, PyMuPDFDecoder
from app.services.pdf.extractor import (
    PDFExtractor,
    clean_extracted_text,
    reconstruct_page_text,
    sort_reading_order,
)
from app.services.pdf.models import (
    ExtractedDocumentText,
    ExtractionResult,
    GlyphRun,
    PageExtraction,
    PageGlyphs,
    PositionedFragment,
)

__all__ = [
    "DecoderConfig",
    "ExtractedDocumentText",
    "ExtractionResult",
    "GlyphRun",
    "PDFExtractor",
    "PageExtraction",
    "PageGlyphs",
    "PositionedFragment",
    "PyMuPDFDecoder",
    "clean_extracted_text",
    "reconstruct_page_text",
    "sort_reading_order",
]
