"""Tests for request size limit middleware."""

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route
from starlette.testclient import TestClient

from app.middleware.size_limit import RequestSizeLimitMiddleware


async def echo_endpoint(request: Request) -> Response:
    body = await request.body()
    return JSONResponse({"size": len(body)})


@pytest.fixture
def client():
    """App with a 1KB upload limit and a 100 byte limit everywhere else."""
    app = Starlette(
        routes=[
            Route("/api/documents", echo_endpoint, methods=["POST"]),
            Route("/api/chat/send", echo_endpoint, methods=["POST"]),
        ]
    )
    app.add_middleware(RequestSizeLimitMiddleware, max_size=1024, max_json_size=100)
    return TestClient(app, raise_server_exceptions=False)


class TestRequestSizeLimitMiddleware:
    """Tests for RequestSizeLimitMiddleware."""

    def test_upload_under_limit(self, client):
        response = client.post("/api/documents", content="x" * 1000)

        assert response.status_code == 200
        assert response.json()["size"] == 1000

    def test_upload_at_limit(self, client):
        response = client.post("/api/documents", content="x" * 1024)

        assert response.status_code == 200

    def test_upload_over_limit(self, client):
        response = client.post("/api/documents", content="x" * 2048)

        assert response.status_code == 413
        assert "1024 bytes" in response.json()["detail"]

    def test_trailing_slash_counts_as_upload_path(self, client):
        response = client.post("/api/documents/", content="x" * 500)

        assert response.status_code != 413

    def test_other_routes_use_json_limit(self, client):
        """A body fine for an upload is too large for a chat message."""
        response = client.post("/api/chat/send", content="x" * 500)

        assert response.status_code == 413
        assert "100 bytes" in response.json()["detail"]

    def test_small_json_body_allowed(self, client):
        response = client.post("/api/chat/send", content='{"message": "hi"}')

        assert response.status_code == 200

    def test_empty_body_allowed(self, client):
        response = client.post("/api/chat/send", content="")

        assert response.status_code == 200
        assert response.json()["size"] == 0


class TestRequestSizeLimitDefaults:
    def test_defaults_come_from_settings(self):
        from app.config import settings

        middleware = RequestSizeLimitMiddleware(Starlette())

        assert middleware.max_size == settings.max_request_size_bytes
        assert middleware.max_json_size == settings.max_json_request_size_bytes
