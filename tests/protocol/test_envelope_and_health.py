from __future__ import annotations

from fastapi.testclient import TestClient

from bitchess.config import EngineSettings
from bitchess.protocol.http.app import create_app
from bitchess.protocol.http.error import error_envelope, status_to_code


def _client() -> TestClient:
    return TestClient(create_app(EngineSettings(search_depth=1, search_workers=1)))


def test_healthz() -> None:
    r = _client().get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers.get("x-request-id")


def test_request_id_is_echoed_into_errors() -> None:
    r = _client().get("/api/games/missing/state", headers={"x-request-id": "req-42"})
    assert r.status_code == 404
    assert r.headers["x-request-id"] == "req-42"
    err = r.json()["error"]
    assert err["request_id"] == "req-42"
    assert err["type"] == "client_error"


def test_missing_body_field_is_422() -> None:
    client = _client()
    gid = client.post("/api/games").json()["game_id"]
    r = client.post(f"/api/games/{gid}/move", json={})
    assert r.status_code == 422
    assert r.json()["error"]["field_errors"]


def test_error_envelope_shape() -> None:
    body = error_envelope(code="bad_request", message="x", err_type="client_error", request_id="r")
    assert body == {
        "error": {"code": "bad_request", "message": "x", "type": "client_error", "request_id": "r"}
    }


def test_status_to_code() -> None:
    assert status_to_code(400) == "bad_request"
    assert status_to_code(404) == "not_found"
    assert status_to_code(503) == "internal_error"
    assert status_to_code(418) == "error"
