"""Read-only access to persisted text fragments."""

import logging
import uuid
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import FRAGMENT_LOOKUP_ERRORS, FragmentLookupError
from app.models import TextFragment
from app.services.pdf.models import PositionedFragment

logger = logging.getLogger(__name__)


class FragmentStore(Protocol):
    async def find_fragments(
        self,
        document_id: uuid.UUID,
        search_text: str,
        page_number: int | None = None,
        limit: int = 5,
    ) -> list[PositionedFragment]: ...


def escape_like(value: str, escape: str = "\\") -> str:
    """Escape LIKE wildcards so the value matches literally."""
    return (
        value.replace(escape, escape * 2)
        .replace("%", f"{escape}%")
        .replace("_", f"{escape}_")
    )


class SqlFragmentStore:
    """Case-insensitive substring search over the text_fragments table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_fragments(
        self,
        document_id: uuid.UUID,
        search_text: str,
        page_number: int | None = None,
        limit: int = 5,
    ) -> list[PositionedFragment]:
        """
        Find fragments whose text contains search_text, ignoring case.

        Results come back in reading order: pages ascending, then the order
        fragments were extracted in.

        Raises:
            FragmentLookupError: If the database query fails
        """
        query = select(TextFragment).where(
            TextFragment.document_id == document_id,
            TextFragment.text.ilike(f"%{escape_like(search_text)}%", escape="\\"),
        )
        if page_number is not None:
            query = query.where(TextFragment.page_number == page_number)
        query = query.order_by(TextFragment.page_number, TextFragment.fragment_index).limit(limit)

        # Savepoint, so a failed lookup leaves the outer transaction usable
        try:
            async with self.db.begin_nested():
                result = await self.db.execute(query)
                rows = result.scalars().all()
        except (SQLAlchemyError, *FRAGMENT_LOOKUP_ERRORS) as e:
            raise FragmentLookupError(f"Fragment lookup failed: {e}") from e

        return [row.to_fragment() for row in rows]
