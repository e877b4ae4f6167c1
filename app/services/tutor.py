"""AI tutor: answers questions about a document and suggests highlights."""

import logging
from dataclasses import dataclass, field

import anthropic

from app.config import settings
from app.exceptions import TutorServiceError
from app.models import Document
from app.services.anthropic import generate_text
from app.services.annotations import (
    AnnotationResolver,
    HighlightAnnotation,
    extract_page_references,
)

logger = logging.getLogger(__name__)

TEXT_PREVIEW_CHARS = 2000
SUMMARY_SOURCE_CHARS = 4000

TUTOR_SYSTEM_PROMPT = """You are an AI tutor helping students understand documents.

Document context:
- Document name: {document_name}
- Total pages: {page_count}
- Document text preview: {text_preview}

Your capabilities:
1. Answer questions about the document content
2. Reference specific pages when relevant
3. Suggest highlights or annotations to help learning
4. Provide clear explanations of concepts

When referencing content:
- Include page numbers when possible, written as "page N"
- Quote or **bold** the exact phrases from the document worth highlighting
- Use simple, clear language
- Be encouraging and supportive"""

SUMMARY_SYSTEM_PROMPT = """You summarize study material for students.
Write a concise summary of the main ideas in plain language, in at most a few short paragraphs."""

NO_TEXT_SUMMARY = "Document summary not available - no text content found."


@dataclass
class TutorResponse:
    """A tutor answer with the page it points to and suggested highlights."""

    content: str
    page_reference: int | None = None
    annotations: list[HighlightAnnotation] = field(default_factory=list)
    confidence: float = 0.5


def build_system_prompt(document: Document) -> str:
    """Build the tutor system prompt with document context."""
    return TUTOR_SYSTEM_PROMPT.format(
        document_name=document.original_name,
        page_count=document.page_count,
        text_preview=(document.extracted_text or "")[:TEXT_PREVIEW_CHARS] or "Not available",
    )


def calculate_confidence(response: str, document: Document) -> float:
    """
    Heuristic confidence for a tutor answer.

    Starts at 0.5 and rises when the document has text, when the answer
    references a page, and when the answer is detailed.
    """
    confidence = 0.5

    if document.extracted_text and len(document.extracted_text) > 100:
        confidence += 0.2

    if extract_page_references(response):
        confidence += 0.2

    if len(response) > 100:
        confidence += 0.1

    return min(round(confidence, 2), 1.0)


class TutorService:
    """Generate tutor answers and resolve the highlights they point to."""

    def __init__(self, resolver: AnnotationResolver):
        self.resolver = resolver

    async def generate_response(
        self,
        document: Document,
        history: list[dict],
        user_message: str,
    ) -> TutorResponse:
        """
        Answer a user question about a document.

        Args:
            document: Document being discussed
            history: Previous messages as role/content dicts, oldest first
            user_message: The new question

        Returns:
            TutorResponse with suggested highlight annotations

        Raises:
            TutorServiceError: If the completion service fails
        """
        messages = [*history, {"role": "user", "content": user_message}]
        # The conversation sent to the model must open with a user turn
        while messages and messages[0]["role"] != "user":
            messages.pop(0)

        try:
            content = await generate_text(
                messages,
                system_prompt=build_system_prompt(document),
                model=settings.claude_model,
                max_tokens=settings.tutor_max_tokens,
                temperature=settings.tutor_temperature,
            )
        except anthropic.APIError as e:
            logger.error(f"Tutor response generation failed: {e}")
            raise TutorServiceError(f"Tutor service failed: {e}") from e

        page_references = extract_page_references(content)
        page_reference = next(
            (p for p in page_references if p <= document.page_count), None
        )

        annotations = await self.resolver.resolve(
            document.id,
            user_message,
            page_number=page_reference,
            response_text=content,
        )

        return TutorResponse(
            content=content,
            page_reference=page_reference,
            annotations=annotations,
            confidence=calculate_confidence(content, document),
        )

    async def summarize_document(self, document: Document) -> str:
        """
        Summarize the start of a document's text.

        Raises:
            TutorServiceError: If the completion service fails
        """
        if not document.extracted_text:
            return NO_TEXT_SUMMARY

        prompt = (
            "Please provide a concise summary of this document: "
            f"{document.extracted_text[:SUMMARY_SOURCE_CHARS]}"
        )
        try:
            return await generate_text(
                [{"role": "user", "content": prompt}],
                system_prompt=SUMMARY_SYSTEM_PROMPT,
                model=settings.claude_fast_model,
                max_tokens=500,
                temperature=0.5,
            )
        except anthropic.APIError as e:
            logger.error(f"Document summarization failed: {e}")
            raise TutorServiceError(f"Document summarization failed: {e}") from e
