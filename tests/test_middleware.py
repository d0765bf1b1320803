"""
test_middleware.py — Tests for request/response middleware and error handlers

Verifies request ID generation, the ErrorResponse envelope for HTTP,
validation and unhandled errors, and the health endpoint in main.py.

Called by: pytest
Depends on: outreach/main.py (middleware, handlers), tests/conftest.py (client fixture)
"""

from fastapi import APIRouter
from fastapi.testclient import TestClient

from outreach.main import app


def test_request_id_header_present(client):
    """Every response should include X-Request-ID."""
    resp = client.get("/health")
    assert "X-Request-ID" in resp.headers
    assert len(resp.headers["X-Request-ID"]) == 8  # uuid4().hex[:8]


def test_request_id_unique_per_request(client):
    id1 = client.get("/health").headers["X-Request-ID"]
    id2 = client.get("/health").headers["X-Request-ID"]
    assert id1 != id2


def test_health_returns_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": "1.0.0"}


def test_404_uses_error_envelope(client):
    """Error responses carry the request ID in header and body."""
    resp = client.get("/nonexistent-route-xyz")
    assert resp.status_code == 404
    body = resp.json()
    assert body["status_code"] == 404
    assert body["error"] == "Not Found"
    assert body["request_id"] == resp.headers["X-Request-ID"]
    assert body["detail"] is None


def test_validation_error_envelope(client):
    resp = client.get("/api/sessions/queue?session_type=call&limit=0")
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "Validation error"
    assert body["detail"][0]["loc"] == ["query", "limit"]
    assert body["request_id"] == resp.headers["X-Request-ID"]


def test_unhandled_error_returns_500():
    """Unexpected exceptions are logged and hidden behind a generic 500."""
    router = APIRouter()

    @router.get("/_boom")
    async def boom():
        raise RuntimeError("secret internals")

    app.include_router(router)
    try:
        with TestClient(app, raise_server_exceptions=False) as c:
            resp = c.get("/_boom")
    finally:
        app.router.routes[:] = [r for r in app.router.routes if getattr(r, "path", None) != "/_boom"]

    assert resp.status_code == 500
    body = resp.json()
    assert body["error"] == "Internal server error"
    assert "secret" not in resp.text
    assert len(resp.headers["X-Request-ID"]) == 8
    assert body["request_id"] == resp.headers["X-Request-ID"]
