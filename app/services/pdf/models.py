"""Data models for PDF text extraction."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GlyphRun:
    """A contiguous span of text sharing one position in the content stream.

    ``transform`` is the PDF text matrix ``(a, b, c, d, e, f)``; ``e`` and
    ``f`` locate the run's origin in page space with a bottom-up y axis.
    ``width`` and ``height`` are rendered extents in page-space units.
    """

    text: str
    transform: tuple[float, float, float, float, float, float]
    width: float
    height: float

    @property
    def origin_x(self) -> float:
        return self.transform[4]

    @property
    def origin_y(self) -> float:
        return self.transform[5]


@dataclass
class PageGlyphs:
    """Decoded text runs of one page plus its viewport at scale 1.0."""

    page_number: int
    viewport_width: float
    viewport_height: float
    runs: list[GlyphRun] = field(default_factory=list)


@dataclass(frozen=True)
class PositionedFragment:
    """One extracted text run with normalized top-left-origin geometry."""

    text: str
    page_number: int
    x: float
    y: float
    width: float
    height: float


@dataclass
class ExtractedDocumentText:
    """Reconstructed text for a whole document."""

    page_count: int
    full_text: str


@dataclass
class ExtractionResult:
    """Result of extracting a PDF."""

    text: ExtractedDocumentText
    fragments: list[PositionedFragment]
    pages: list[str] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return self.text.page_count


@dataclass
class PageExtraction:
    """Fragments of one page in reading order and the page's reconstructed text."""

    page_number: int
    fragments: list[PositionedFragment]
    text: str
