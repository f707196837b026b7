from __future__ import annotations

from fastapi.testclient import TestClient


def test_preserves_incoming_request_id_header(client: TestClient):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client: TestClient):
    resp = client.get("/api/records")

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_error_body_carries_request_id(client: TestClient):
    resp = client.put("/api/records/9", json={"age": 30}, headers={"X-Request-ID": "req-9"})

    assert resp.status_code == 400
    assert resp.json()["error"]["request_id"] == "req-9"
    assert resp.headers.get("X-Request-ID") == "req-9"


def test_access_log_is_emitted(client: TestClient, caplog):
    with caplog.at_level("INFO", logger="recordstore.core.middleware"):
        client.get("/health")

    entries = [r for r in caplog.records if r.getMessage() == "http.request"]
    assert entries
    assert entries[-1].path == "/health"
    assert entries[-1].status_code == 200
