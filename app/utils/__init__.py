"""Request parsing helpers shared by the routes."""

from app.utils.helpers import parse_document_id, validate_uuid

__all__ = [
    "parse_document_id",
    "validate_uuid",
]
