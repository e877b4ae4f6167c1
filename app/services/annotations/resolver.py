"""Resolve textual references from tutor answers into highlight rectangles.

Lookups are literal, case-insensitive substring matches against the
fragments stored at upload time. There is no fuzzy matching or relevance
ranking: results keep the order they were found in.
"""

import logging
import uuid

from app.config import settings
from app.exceptions import FragmentLookupError
from app.services.annotations.models import HighlightAnnotation
from app.services.annotations.phrases import extract_key_phrases, extract_page_references
from app.services.annotations.store import FragmentStore

logger = logging.getLogger(__name__)


class AnnotationResolver:
    """Map search phrases to highlight annotations for a document."""

    def __init__(
        self,
        store: FragmentStore,
        max_per_query: int | None = None,
        max_total: int | None = None,
        max_per_phrase_page: int | None = None,
        fallback_phrases: int | None = None,
        max_candidates: int | None = None,
        color: str | None = None,
    ):
        self.store = store
        self.max_per_query = (
            settings.annotation_max_per_query if max_per_query is None else max_per_query
        )
        self.max_total = settings.annotation_max_total if max_total is None else max_total
        self.max_per_phrase_page = (
            settings.annotation_max_per_phrase_page
            if max_per_phrase_page is None
            else max_per_phrase_page
        )
        self.fallback_phrases = (
            settings.annotation_fallback_phrases if fallback_phrases is None else fallback_phrases
        )
        self.max_candidates = (
            settings.annotation_max_candidates if max_candidates is None else max_candidates
        )
        self.color = settings.annotation_default_color if color is None else color

    async def resolve(
        self,
        document_id: uuid.UUID,
        search_text: str,
        page_number: int | None = None,
        response_text: str | None = None,
    ) -> list[HighlightAnnotation]:
        """
        Find highlight annotations for a phrase.

        Args:
            document_id: Document whose fragments are searched
            search_text: Phrase to look for
            page_number: Restrict the search to this page
            response_text: Full tutor answer, used to broaden the search
                when the phrase itself matches nothing

        Returns:
            Up to max_total annotations; empty when nothing matches or the
            fragment store is unavailable
        """
        try:
            annotations: list[HighlightAnnotation] = []
            if search_text.strip():
                annotations = await self._find(
                    document_id, search_text, page_number, self.max_per_query
                )

            if not annotations and response_text:
                annotations = await self._broaden(document_id, response_text, page_number)
        except FragmentLookupError as e:
            logger.warning(
                f"Annotation lookup failed for document {document_id}: {e}",
                extra={"document_id": str(document_id)},
            )
            return []

        return annotations[: self.max_total]

    async def _find(
        self,
        document_id: uuid.UUID,
        phrase: str,
        page_number: int | None,
        limit: int,
    ) -> list[HighlightAnnotation]:
        fragments = await self.store.find_fragments(
            document_id, phrase, page_number=page_number, limit=limit
        )
        return [HighlightAnnotation.from_fragment(f, color=self.color) for f in fragments[:limit]]

    async def _broaden(
        self,
        document_id: uuid.UUID,
        response_text: str,
        page_number: int | None,
    ) -> list[HighlightAnnotation]:
        """Search key phrases of the response on each page it references."""
        phrases = extract_key_phrases(response_text, self.max_candidates)[: self.fallback_phrases]
        if not phrases:
            return []

        pages: list[int | None] = list(dict.fromkeys(extract_page_references(response_text)))
        if not pages:
            pages = [page_number]

        logger.debug(f"Broadening annotation search: phrases={phrases} pages={pages}")

        results: list[HighlightAnnotation] = []
        seen: set[HighlightAnnotation] = set()
        for phrase in phrases:
            for page in pages:
                for annotation in await self._find(
                    document_id, phrase, page, self.max_per_phrase_page
                ):
                    if annotation in seen:
                        continue
                    seen.add(annotation)
                    results.append(annotation)
                    if len(results) >= self.max_total:
                        return results
        return results
