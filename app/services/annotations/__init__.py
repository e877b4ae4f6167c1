"""Highlight annotation resolution."""

from app.services.annotations.models import DEFAULT_HIGHLIGHT_COLOR, HighlightAnnotation
from app.services.annotations.phrases import extract_key_phrases, extract_page_references
from app.services.annotations.resolver import AnnotationResolver
from app.services.annotations.store import FragmentStore, SqlFragmentStore

__all__ = [
    "AnnotationResolver",
    "DEFAULT_HIGHLIGHT_COLOR",
    "FragmentStore",
    "HighlightAnnotation",
    "SqlFragmentStore",
    "extract_key_phrases",
    "extract_page_references",
]
