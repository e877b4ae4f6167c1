"""Positional PDF text extraction.

Turns a PDF byte buffer into normalized text fragments plus a reconstructed
reading-order text for the whole document.
"""

import logging
import re
from collections.abc import Iterator
from functools import cmp_to_key

from app.config import settings
from app.exceptions import ExtractionError
from app.services.pdf.decoder import DecodedDocument, PDFDecoder, PyMuPDFDecoder
from app.services.pdf.models import (
    ExtractedDocumentText,
    ExtractionResult,
    GlyphRun,
    PageExtraction,
    PageGlyphs,
    PositionedFragment,
)

logger = logging.getLogger(__name__)

PAGE_SEPARATOR = "\n\n"

# C0/C1 control characters except \t, \n and \r
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_HORIZONTAL_WHITESPACE = re.compile(r"[^\S\r\n]+")
_SPACE_AROUND_NEWLINE = re.compile(r" *(\r?\n) *")
_BLANK_LINES = re.compile(r"\n\s*\n")


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    """Clamp a value to [low, high]."""
    return max(low, min(high, value))


def normalize_run(run: GlyphRun, page: PageGlyphs) -> PositionedFragment:
    """Map a glyph run into normalized, top-down page coordinates."""
    viewport_width = page.viewport_width
    viewport_height = page.viewport_height

    x = run.origin_x / viewport_width
    # PDF y grows upwards; flip so 0 is the top of the page
    y = (viewport_height - run.origin_y) / viewport_height
    width = run.width / viewport_width
    height = run.height / viewport_height

    return PositionedFragment(
        text=run.text,
        page_number=page.page_number,
        x=clamp(x),
        y=clamp(y),
        width=clamp(width),
        height=clamp(height),
    )


def sort_reading_order(
    fragments: list[PositionedFragment],
    line_tolerance: float = 0.01,
) -> list[PositionedFragment]:
    """
    Sort fragments top-to-bottom, then left-to-right within a line.

    Two fragments whose y positions differ by at most ``line_tolerance`` are
    on the same line and ordered by x.
    """

    def compare(a: PositionedFragment, b: PositionedFragment) -> int:
        y_diff = a.y - b.y
        if abs(y_diff) > line_tolerance:
            return -1 if y_diff < 0 else 1
        if a.x < b.x:
            return -1
        if a.x > b.x:
            return 1
        return 0

    return sorted(fragments, key=cmp_to_key(compare))


def reconstruct_page_text(
    fragments: list[PositionedFragment],
    line_tolerance: float = 0.01,
    word_gap_tolerance: float = 0.02,
) -> str:
    """
    Join sorted fragments into page text.

    A newline separates fragments on different lines, a single space
    separates fragments on the same line with a visible gap, and fragments
    that touch are concatenated so words split across runs stay whole.
    """
    parts: list[str] = []
    last_y: float | None = None
    last_end: float | None = None

    for fragment in fragments:
        if last_y is not None and abs(fragment.y - last_y) > line_tolerance:
            parts.append("\n")
        elif last_end is not None and fragment.x - last_end > word_gap_tolerance:
            parts.append(" ")

        parts.append(fragment.text)
        last_y = fragment.y
        last_end = fragment.x + fragment.width

    return "".join(parts)


def clean_extracted_text(text: str) -> str:
    """Remove control characters and normalize whitespace."""
    text = text.replace("\x00", "")
    text = _CONTROL_CHARS.sub("", text)
    text = _HORIZONTAL_WHITESPACE.sub(" ", text)
    text = _SPACE_AROUND_NEWLINE.sub(r"\1", text)
    text = _BLANK_LINES.sub("\n\n", text)
    return text.strip()


def truncate_text(text: str, max_length: int) -> str:
    """Cut text at max_length characters."""
    if len(text) <= max_length:
        return text
    logger.info(f"Truncating extracted text from {len(text)} to {max_length} characters")
    return text[:max_length]


class PDFExtractor:
    """Extract positioned text fragments and reading-order text from PDFs."""

    def __init__(
        self,
        decoder: PDFDecoder | None = None,
        line_tolerance: float | None = None,
        word_gap_tolerance: float | None = None,
        max_text_length: int | None = None,
    ):
        self.decoder = decoder or PyMuPDFDecoder()
        self.line_tolerance = (
            settings.line_tolerance if line_tolerance is None else line_tolerance
        )
        self.word_gap_tolerance = (
            settings.word_gap_tolerance if word_gap_tolerance is None else word_gap_tolerance
        )
        self.max_text_length = (
            settings.max_extracted_text_length if max_text_length is None else max_text_length
        )

    def extract(self, pdf_content: bytes) -> ExtractionResult:
        """
        Extract text and fragment geometry from a PDF.

        Args:
            pdf_content: Raw PDF bytes

        Returns:
            ExtractionResult with the cleaned full text, page count, and
            every non-blank fragment in reading order

        Raises:
            ExtractionError: If the document or any page cannot be decoded
        """
        fragments: list[PositionedFragment] = []
        pages: list[str] = []
        buffer: list[str] = []

        for page in self.iter_pages(pdf_content):
            fragments.extend(page.fragments)
            pages.append(page.text)
            buffer.append(page.text + PAGE_SEPARATOR)

        full_text = truncate_text(clean_extracted_text("".join(buffer)), self.max_text_length)
        logger.info(
            f"Total text extraction: {len(fragments)} fragments across {len(pages)} pages"
        )

        return ExtractionResult(
            text=ExtractedDocumentText(page_count=len(pages), full_text=full_text),
            fragments=fragments,
            pages=pages,
        )

    def iter_pages(self, pdf_content: bytes) -> Iterator[PageExtraction]:
        """
        Yield one PageExtraction per page, in page order.

        Each page is decoded only when the previous one has been consumed,
        so callers can stop between pages.

        Raises:
            ExtractionError: If the document or any page cannot be decoded
        """
        try:
            document = self.decoder.open(pdf_content)
        except Exception as e:
            logger.error(f"PDF extraction failed: {e}")
            raise ExtractionError(f"PDF text extraction failed: {e}") from e

        with document:
            for page_number in range(1, document.page_count + 1):
                yield self._extract_page(document, page_number)

    def _extract_page(self, document: DecodedDocument, page_number: int) -> PageExtraction:
        try:
            page = document.decode_page(page_number)
        except Exception as e:
            logger.error(f"PDF extraction failed on page {page_number}: {e}")
            raise ExtractionError(
                f"PDF text extraction failed on page {page_number}: {e}"
            ) from e

        if page.viewport_width <= 0 or page.viewport_height <= 0:
            raise ExtractionError(f"Page {page_number} has an empty viewport")

        fragments = [normalize_run(run, page) for run in page.runs if run.text.strip()]
        fragments = sort_reading_order(fragments, self.line_tolerance)
        text = reconstruct_page_text(fragments, self.line_tolerance, self.word_gap_tolerance)

        logger.debug(f"Page {page_number}: Extracted {len(fragments)} text items")
        return PageExtraction(page_number=page_number, fragments=fragments, text=text)
