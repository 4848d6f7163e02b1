"""Tests for error handling — structured envelope, retry hints, no info leak."""
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from skillbarter.database import storage_call
from skillbarter.main import app
from skillbarter.services import SkillCatalog
from tests.conftest import headers_for


def _unavailable(self):
    with storage_call(self.db, "list_skills"):
        raise OperationalError("SELECT 1", {}, Exception("database is locked"))


def test_not_found_structured(client):
    """API 404 should return structured error with code."""
    r = client.get("/api/v1/barters/99999", headers={"X-Request-ID": "req-404"})
    assert r.status_code == 404
    detail = r.json()["detail"]
    assert detail["code"] == "NOT_FOUND"
    assert detail["message"]
    assert detail["request_id"] == "req-404"


def test_error_no_stack_trace(client):
    """API errors should not leak stack traces or internal details."""
    r = client.get("/api/v1/barters/99999")
    assert "Traceback" not in r.text
    assert "File" not in r.text


def test_request_id_in_response(client):
    """Every response should have X-Request-ID header."""
    r = client.get("/health")
    assert r.headers.get("X-Request-ID")


def test_security_headers(client):
    r = client.get("/api/v1/skills")
    assert r.headers["X-Content-Type-Options"] == "nosniff"
    assert r.headers["X-Frame-Options"] == "DENY"


def test_unauthenticated_envelope(client, seed):
    r = client.post("/api/v1/barters/1/bookmark")
    assert r.status_code == 401
    detail = r.json()["detail"]
    assert detail["code"] == "UNAUTHENTICATED"
    assert detail["message"] == "You must be signed in to do that."


def test_storage_outage_is_retryable(client, monkeypatch):
    monkeypatch.setattr(SkillCatalog, "list_skills", _unavailable)
    r = client.get("/api/v1/skills")
    assert r.status_code == 503
    assert r.headers["Retry-After"] == "2"
    detail = r.json()["detail"]
    assert detail["code"] == "STORAGE_UNAVAILABLE"
    assert "locked" not in detail["message"]


def test_unexpected_error_is_opaque(monkeypatch):
    def explode(self):
        raise RuntimeError("secret connection string")

    monkeypatch.setattr(SkillCatalog, "list_skills", explode)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.get("/api/v1/skills")
    assert r.status_code == 500
    assert r.json()["detail"]["code"] == "INTERNAL_ERROR"
    assert "secret" not in r.text


def test_write_key_required_when_configured(client, seed, monkeypatch):
    monkeypatch.setenv("API_WRITE_KEY", "s3cret")
    payload = {
        "title": "Guitar for Spanish",
        "description": "Chords for conjugations",
        "teach_skill_id": seed.skills["Guitar"],
        "learn_skill_id": seed.skills["Spanish"],
    }
    r = client.post("/api/v1/barters/", json=payload, headers=headers_for(seed.alice))
    assert r.status_code == 403
    assert r.json()["detail"]["code"] == "FORBIDDEN"

    r = client.post(
        "/api/v1/barters/", json=payload,
        headers={**headers_for(seed.alice), "X-API-Key": "s3cret"},
    )
    assert r.status_code == 201

    assert client.get("/api/v1/skills").status_code == 200
