"""PDF decoding boundary backed by PyMuPDF.

The decoder is the only code that touches PyMuPDF's loosely typed text
dictionaries. Everything it hands to the extractor is a ``PageGlyphs`` made of
``GlyphRun`` values whose transform uses PDF's bottom-up page space, so the
extractor's normalization does not depend on the decoding library.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import fitz  # PyMuPDF

from app.services.pdf.models import GlyphRun, PageGlyphs

logger = logging.getLogger(__name__)

DEFAULT_TEXT_FLAGS = fitz.TEXT_PRESERVE_LIGATURES | fitz.TEXT_PRESERVE_WHITESPACE


@dataclass(frozen=True)
class DecoderConfig:
    """Explicit decoder settings, passed in at construction time."""

    scale: float = 1.0
    text_flags: int = DEFAULT_TEXT_FLAGS


class DecodedDocument(Protocol):
    page_count: int

    def decode_page(self, page_number: int) -> PageGlyphs: ...

    def close(self) -> None: ...

    def __enter__(self) -> "DecodedDocument": ...

    def __exit__(self, *exc_info) -> None: ...


class PDFDecoder(Protocol):
    def open(self, pdf_content: bytes) -> DecodedDocument: ...


class PyMuPDFDocument:
    """An open PyMuPDF document that decodes one page at a time."""

    def __init__(self, doc: fitz.Document, config: DecoderConfig):
        self._doc = doc
        self._config = config
        self.page_count = doc.page_count

    def decode_page(self, page_number: int) -> PageGlyphs:
        """Decode a 1-based page into glyph runs and its viewport size."""
        page = self._doc.load_page(page_number - 1)
        scale = self._config.scale
        page_rect = page.rect
        page_height = page_rect.height

        runs: list[GlyphRun] = []
        page_dict = page.get_text("dict", flags=self._config.text_flags)

        for block in page_dict.get("blocks", []):
            # Skip image blocks (type 1)
            if block.get("type") != 0:
                continue

            for line in block.get("lines", []):
                cos, sin = line.get("dir", (1.0, 0.0))
                for span in line.get("spans", []):
                    runs.append(
                        self._span_to_run(span, cos, sin, page_rect.x0, page_rect.y0, page_height, scale)
                    )

        return PageGlyphs(
            page_number=page_number,
            viewport_width=page_rect.width * scale,
            viewport_height=page_height * scale,
            runs=runs,
        )

    @staticmethod
    def _span_to_run(
        span: dict,
        cos: float,
        sin: float,
        offset_x: float,
        offset_y: float,
        page_height: float,
        scale: float,
    ) -> GlyphRun:
        """Convert a PyMuPDF span (top-down coordinates) into a GlyphRun."""
        x0, y0, x1, y1 = span["bbox"]
        origin_x, origin_y = span.get("origin", (x0, y1))
        size = span.get("size", 0.0)

        # PyMuPDF reports a top-down baseline; flip it into PDF page space
        transform = (
            size * cos * scale,
            size * sin * scale,
            -size * sin * scale,
            size * cos * scale,
            (origin_x - offset_x) * scale,
            (page_height - (origin_y - offset_y)) * scale,
        )
        return GlyphRun(
            text=span.get("text", ""),
            transform=transform,
            width=max(0.0, x1 - x0) * scale,
            height=max(0.0, y1 - y0) * scale,
        )

    def close(self) -> None:
        self._doc.close()

    def __enter__(self) -> "PyMuPDFDocument":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class PyMuPDFDecoder:
    """Open PDF byte buffers with PyMuPDF."""

    def __init__(self, config: DecoderConfig | None = None):
        self.config = config or DecoderConfig()

    def open(self, pdf_content: bytes) -> PyMuPDFDocument:
        """
        Open a PDF from memory.

        Raises:
            ValueError: If the document is encrypted or has no pages.
            fitz.FileDataError: If the buffer is not a readable PDF.
        """
        doc = fitz.open(stream=pdf_content, filetype="pdf")
        if doc.needs_pass:
            doc.close()
            raise ValueError("PDF is password protected")
        if doc.page_count < 1:
            doc.close()
            raise ValueError("PDF has no pages")

        logger.debug(f"Opened PDF with {doc.page_count} pages")
        return PyMuPDFDocument(doc, self.config)
