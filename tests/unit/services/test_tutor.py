"""Tests for the tutor service."""

from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import httpx
import pytest

from app.exceptions import FragmentLookupError, TutorServiceError
from app.services.annotations import AnnotationResolver, HighlightAnnotation
from app.services.tutor import (
    NO_TEXT_SUMMARY,
    TutorService,
    build_system_prompt,
    calculate_confidence,
)


@pytest.fixture
def resolver():
    resolver = MagicMock()
    resolver.resolve = AsyncMock(return_value=[])
    return resolver


def _api_error() -> anthropic.APIError:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    return anthropic.APIConnectionError(request=request)


class TestBuildSystemPrompt:
    def test_includes_document_context(self, document_factory):
        document = document_factory(original_name="Physics 101.pdf", page_count=12)

        prompt = build_system_prompt(document)

        assert "Physics 101.pdf" in prompt
        assert "Total pages: 12" in prompt

    def test_preview_is_limited(self, document_factory):
        document = document_factory(extracted_text="a" * 1990 + "b" * 100)

        prompt = build_system_prompt(document)

        assert "a" * 1990 + "b" * 10 in prompt
        assert "b" * 11 not in prompt

    def test_missing_text(self, document_factory):
        prompt = build_system_prompt(document_factory(extracted_text=None))

        assert "Document text preview: Not available" in prompt


class TestCalculateConfidence:
    def test_base_confidence(self, document_factory):
        assert calculate_confidence("Short.", document_factory(extracted_text="")) == 0.5

    def test_all_signals(self, document_factory):
        response = "As shown on page 2, " + "the force is constant. " * 5

        assert calculate_confidence(response, document_factory()) == 1.0

    def test_text_and_page_reference(self, document_factory):
        assert calculate_confidence("See page 4.", document_factory()) == 0.9


class TestGenerateResponse:
    """Tests for TutorService.generate_response."""

    @pytest.mark.asyncio
    async def test_returns_answer_with_annotations(self, resolver, document_factory):
        document = document_factory(page_count=5)
        annotation = HighlightAnnotation(page_number=3, x=0.1, y=0.2, width=0.3, height=0.02)
        resolver.resolve.return_value = [annotation]

        with patch(
            "app.services.tutor.generate_text",
            AsyncMock(return_value='Gravity is explained on page 3: "gravity affects"'),
        ) as mock_generate:
            response = await TutorService(resolver).generate_response(
                document, [], "What is gravity?"
            )

        assert response.page_reference == 3
        assert response.annotations == [annotation]
        assert 0.5 <= response.confidence <= 1.0
        resolver.resolve.assert_awaited_once_with(
            document.id,
            "What is gravity?",
            page_number=3,
            response_text='Gravity is explained on page 3: "gravity affects"',
        )
        messages = mock_generate.call_args.args[0]
        assert messages == [{"role": "user", "content": "What is gravity?"}]

    @pytest.mark.asyncio
    async def test_ignores_page_references_beyond_document(self, resolver, document_factory):
        document = document_factory(page_count=2)

        with patch(
            "app.services.tutor.generate_text",
            AsyncMock(return_value="See page 40 and page 2."),
        ):
            response = await TutorService(resolver).generate_response(document, [], "Where?")

        assert response.page_reference == 2

    @pytest.mark.asyncio
    async def test_history_starts_with_user_turn(self, resolver, document_factory):
        history = [
            {"role": "assistant", "content": "Welcome!"},
            {"role": "user", "content": "Hi"},
            {"role": "assistant", "content": "Hello"},
        ]

        with patch(
            "app.services.tutor.generate_text", AsyncMock(return_value="Answer")
        ) as mock_generate:
            await TutorService(resolver).generate_response(document_factory(), history, "Next?")

        messages = mock_generate.call_args.args[0]
        assert [m["role"] for m in messages] == ["user", "assistant", "user"]
        assert messages[-1]["content"] == "Next?"

    @pytest.mark.asyncio
    async def test_api_error_raises_tutor_error(self, resolver, document_factory):
        with patch("app.services.tutor.generate_text", AsyncMock(side_effect=_api_error())):
            with pytest.raises(TutorServiceError):
                await TutorService(resolver).generate_response(document_factory(), [], "Hi")

        resolver.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unavailable_fragments_give_no_annotations(self, document_factory):
        store = MagicMock()
        store.find_fragments = AsyncMock(side_effect=FragmentLookupError("statement timeout"))
        answer = 'On page 2 the notes say "gravity affects" falling bodies.'

        with patch("app.services.tutor.generate_text", AsyncMock(return_value=answer)):
            response = await TutorService(AnnotationResolver(store)).generate_response(
                document_factory(page_count=3), [], "What is gravity?"
            )

        assert response.content == answer
        assert response.page_reference == 2
        assert response.annotations == []
        store.find_fragments.assert_awaited()


class TestSummarizeDocument:
    @pytest.mark.asyncio
    async def test_summarizes_start_of_text(self, resolver, document_factory):
        document = document_factory(extracted_text="x" * 5000)

        with patch(
            "app.services.tutor.generate_text", AsyncMock(return_value="A summary.")
        ) as mock_generate:
            summary = await TutorService(resolver).summarize_document(document)

        assert summary == "A summary."
        prompt = mock_generate.call_args.args[0][0]["content"]
        assert prompt.count("x") == 4000

    @pytest.mark.asyncio
    async def test_no_text(self, resolver, document_factory):
        with patch("app.services.tutor.generate_text", AsyncMock()) as mock_generate:
            summary = await TutorService(resolver).summarize_document(
                document_factory(extracted_text="")
            )

        assert summary == NO_TEXT_SUMMARY
        mock_generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_api_error(self, resolver, document_factory):
        with patch("app.services.tutor.generate_text", AsyncMock(side_effect=_api_error())):
            with pytest.raises(TutorServiceError):
                await TutorService(resolver).summarize_document(document_factory())
