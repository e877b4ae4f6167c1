"""Enums for string values used throughout the application."""

from enum import StrEnum


class AnnotationType(StrEnum):
    """Geometry variant used when rendering an annotation overlay."""

    HIGHLIGHT = "highlight"
    CIRCLE = "circle"
    ARROW = "arrow"


class MessageRole(StrEnum):
    """Author of a chat message."""

    USER = "user"
    ASSISTANT = "assistant"
