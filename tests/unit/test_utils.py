"""Tests for the utils module."""

import uuid

import pytest
from fastapi import HTTPException

from app.utils import parse_document_id, validate_uuid


class TestValidateUuid:
    """Tests for UUID validation utility."""

    @pytest.mark.parametrize(
        "value",
        [
            "550e8400-e29b-41d4-a716-446655440000",
            "550E8400-E29B-41D4-A716-446655440000",
            "550e8400e29b41d4a716446655440000",
        ],
    )
    def test_valid_forms(self, value):
        assert validate_uuid(value) == uuid.UUID(value)

    @pytest.mark.parametrize(
        "value", ["", "not-a-uuid", "550e8400-e29b-41d4", "550e8400-e29b-41d4-a716-446655440000-x"]
    )
    def test_invalid_raises_400(self, value):
        with pytest.raises(HTTPException) as exc_info:
            validate_uuid(value)

        assert exc_info.value.status_code == 400

    def test_names_the_parameter(self):
        with pytest.raises(HTTPException) as exc_info:
            validate_uuid("invalid", "document ID")

        assert exc_info.value.detail == "Invalid document ID"


class TestParseDocumentId:
    def test_valid(self):
        document_id = uuid.uuid4()

        assert parse_document_id(str(document_id)) == document_id

    def test_invalid(self):
        with pytest.raises(HTTPException) as exc_info:
            parse_document_id("doc-1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Invalid document ID"
