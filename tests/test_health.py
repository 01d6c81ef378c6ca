"""Health check."""
from fastapi.testclient import TestClient


def test_health_returns_ok(client: TestClient):
    r = client.get("/health")
    assert r.status_code == 200
    j = r.json()
    assert j.get("status") == "ok"
    assert j.get("database") == "ok"
    assert j.get("stripe_configured") is True
    assert r.headers.get("X-Request-ID")


def test_invalid_path_param_uses_error_body(client: TestClient):
    r = client.get("/games/abc")
    assert r.status_code == 422
    j = r.json()
    assert j["status_code"] == 422
    assert "error" in j
