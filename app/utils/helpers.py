"""Parsing helpers for path parameters."""

import uuid

from fastapi import HTTPException


def validate_uuid(value: str, name: str = "ID") -> uuid.UUID:
    """Parse a UUID path parameter, answering 400 "Invalid <name>" when malformed."""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {name}") from None


def parse_document_id(document_id: str) -> uuid.UUID:
    return validate_uuid(document_id, "document ID")
