"""Data models for highlight annotations."""

from dataclasses import asdict, dataclass

from app.enums import AnnotationType
from app.services.pdf.models import PositionedFragment

DEFAULT_HIGHLIGHT_COLOR = "#ffff00"


@dataclass(frozen=True)
class HighlightAnnotation:
    """A renderable region on a page, in normalized coordinates."""

    page_number: int
    x: float
    y: float
    width: float
    height: float
    type: AnnotationType = AnnotationType.HIGHLIGHT
    color: str = DEFAULT_HIGHLIGHT_COLOR
    source_text: str | None = None

    @classmethod
    def from_fragment(
        cls, fragment: PositionedFragment, color: str = DEFAULT_HIGHLIGHT_COLOR
    ) -> "HighlightAnnotation":
        return cls(
            page_number=fragment.page_number,
            x=fragment.x,
            y=fragment.y,
            width=fragment.width,
            height=fragment.height,
            type=AnnotationType.HIGHLIGHT,
            color=color,
            source_text=fragment.text,
        )

    def to_dict(self) -> dict:
        """JSON-serializable form, used for message metadata."""
        data = asdict(self)
        data["type"] = str(self.type)
        return data
