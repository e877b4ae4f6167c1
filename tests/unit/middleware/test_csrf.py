"""Tests for the Origin check on state-changing requests."""

import pytest
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from app.middleware.csrf import CSRFProtectionMiddleware


async def ok_endpoint(request):
    return JSONResponse({"ok": True})


@pytest.fixture
def client():
    app = Starlette(routes=[Route("/api/documents", ok_endpoint, methods=["GET", "POST", "DELETE"])])
    app.add_middleware(CSRFProtectionMiddleware, allowed_origins=["http://localhost:3000"])
    return TestClient(app)


class TestCSRFProtectionMiddleware:
    def test_allows_known_origin(self, client):
        response = client.post("/api/documents", headers={"Origin": "http://localhost:3000"})

        assert response.status_code == 200

    def test_blocks_foreign_origin(self, client):
        response = client.delete("/api/documents", headers={"Origin": "https://evil.example"})

        assert response.status_code == 403
        assert "CSRF" in response.json()["detail"]

    def test_allows_missing_origin(self, client):
        assert client.post("/api/documents").status_code == 200

    def test_reads_are_not_checked(self, client):
        response = client.get("/api/documents", headers={"Origin": "https://evil.example"})

        assert response.status_code == 200
