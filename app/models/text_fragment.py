"""Text fragment model: positioned text extracted from a document page."""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Float, ForeignKey, Index, Integer, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base
from app.services.pdf.models import PositionedFragment

if TYPE_CHECKING:
    from app.models.document import Document


class TextFragment(Base):
    __tablename__ = "text_fragments"
    __table_args__ = (Index("ix_text_fragments_document_page", "document_id", "page_number"),)

    id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    document_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("documents.id", ondelete="CASCADE"), nullable=False
    )
    page_number: Mapped[int] = mapped_column(Integer, nullable=False)
    # Position in document reading order
    fragment_index: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    x: Mapped[float] = mapped_column(Float, nullable=False)
    y: Mapped[float] = mapped_column(Float, nullable=False)
    width: Mapped[float] = mapped_column(Float, nullable=False)
    height: Mapped[float] = mapped_column(Float, nullable=False)

    document: Mapped["Document"] = relationship(back_populates="fragments")

    def to_fragment(self) -> PositionedFragment:
        return PositionedFragment(
            text=self.text,
            page_number=self.page_number,
            x=self.x,
            y=self.y,
            width=self.width,
            height=self.height,
        )
