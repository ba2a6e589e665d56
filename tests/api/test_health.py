from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from exam_service.api import health


def test_health_without_database(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {
        "status": "ok",
        "checks": {"database": "not_configured"},
    }


def test_ready_without_database(client: TestClient) -> None:
    assert client.get("/ready").status_code == 200


def _fake_ping(result: bool | None):
    async def _ping() -> bool | None:
        return result

    return _ping


def test_health_reports_degraded_database(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(health, "ping_database", _fake_ping(False))
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "degraded"
    assert resp.json()["checks"]["database"] == "degraded"


def test_ready_fails_when_database_unreachable(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(health, "ping_database", _fake_ping(False))
    assert client.get("/ready").status_code == 503


def test_ready_with_healthy_database(
    client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(health, "ping_database", _fake_ping(True))
    assert client.get("/ready").status_code == 200
    assert client.get("/health").json()["checks"]["database"] == "ok"
