"""Tests for the enums module."""

from app.enums import AnnotationType, MessageRole


class TestAnnotationType:
    """Tests for AnnotationType enum."""

    def test_values_are_strings(self):
        """Enum values should be strings for database compatibility."""
        assert AnnotationType.HIGHLIGHT == "highlight"
        assert AnnotationType.CIRCLE == "circle"
        assert AnnotationType.ARROW == "arrow"

    def test_all_types_defined(self):
        assert {t.value for t in AnnotationType} == {"highlight", "circle", "arrow"}

    def test_str_is_value(self):
        assert str(AnnotationType.HIGHLIGHT) == "highlight"


class TestMessageRole:
    """Tests for MessageRole enum."""

    def test_values_are_strings(self):
        assert MessageRole.USER == "user"
        assert MessageRole.ASSISTANT == "assistant"

    def test_comparison_with_string(self):
        """Should be comparable with raw strings read back from the database."""
        assert "assistant" == MessageRole.ASSISTANT
