"""Tests for custom middleware (security headers, request timing) and error bodies."""

from unittest.mock import patch


def test_health_ok(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


def test_security_headers_present(client):
    resp = client.get("/health")
    assert resp.headers["X-Content-Type-Options"] == "nosniff"
    assert resp.headers["X-Frame-Options"] == "DENY"
    assert resp.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"


def test_hsts_only_in_production(client):
    assert "Strict-Transport-Security" not in client.get("/health").headers
    with patch("app.core.config.settings.environment", "production"):
        resp = client.get("/health")
        assert "max-age=31536000" in resp.headers["Strict-Transport-Security"]


def test_response_time_header(client):
    resp = client.get("/api/users/me")
    assert resp.status_code == 401
    assert float(resp.headers["X-Response-Time-Ms"]) >= 0


def test_requests_are_logged(client, caplog):
    with caplog.at_level("INFO", logger="app.requests"):
        client.get("/api/courses/")
    assert any("GET /api/courses/ -> 401" in r.getMessage() for r in caplog.records)


def test_health_not_logged(client, caplog):
    with caplog.at_level("INFO", logger="app.requests"):
        client.get("/health")
    assert not [r for r in caplog.records if r.name == "app.requests"]
