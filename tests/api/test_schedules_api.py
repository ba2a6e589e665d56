"""Tests for the /v1/schedules endpoints."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from fastapi.testclient import TestClient

from tests.conftest import auth, open_window


def _create(client: TestClient, token: str, **overrides: object) -> dict:
    start, end = open_window()
    body: dict[str, object] = {
        "examId": str(uuid4()),
        "classId": str(uuid4()),
        "startTime": start,
        "endTime": end,
    }
    body.update(overrides)
    resp = client.post("/v1/schedules", json=body, headers=auth(token))
    assert resp.status_code == 201, resp.text
    return resp.json()


# ---- create ----


def test_create_schedule_returns_camel_case_with_is_open(
    client: TestClient, teacher_token: str
) -> None:
    created = _create(client, teacher_token)
    assert set(created) >= {
        "id",
        "examId",
        "classId",
        "startTime",
        "endTime",
        "isClosed",
        "isOpen",
        "createdAt",
        "updatedAt",
    }
    assert created["isOpen"] is True
    assert created["isClosed"] is False


def test_future_schedule_is_not_open(client: TestClient, teacher_token: str) -> None:
    start = datetime.now(UTC) + timedelta(days=1)
    created = _create(
        client,
        teacher_token,
        startTime=start.isoformat(),
        endTime=(start + timedelta(hours=1)).isoformat(),
    )
    assert created["isOpen"] is False


def test_create_schedule_missing_fields(client: TestClient, teacher_token: str) -> None:
    resp = client.post(
        "/v1/schedules", json={"examId": str(uuid4())}, headers=auth(teacher_token)
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["kind"] == "missing_field"
    assert body["fields"] == ["classId", "startTime", "endTime"]


def test_create_schedule_rejects_inverted_window(
    client: TestClient, teacher_token: str
) -> None:
    start, end = open_window()
    resp = client.post(
        "/v1/schedules",
        json={
            "examId": str(uuid4()),
            "classId": str(uuid4()),
            "startTime": end,
            "endTime": start,
        },
        headers=auth(teacher_token),
    )
    assert resp.status_code == 400
    assert resp.json() == {
        "message": "endTime must be after startTime",
        "kind": "invalid_window",
    }


def test_create_schedule_rejects_malformed_id(
    client: TestClient, teacher_token: str
) -> None:
    start, end = open_window()
    resp = client.post(
        "/v1/schedules",
        json={"examId": "nope", "classId": str(uuid4()), "startTime": start, "endTime": end},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "validation_error"
    assert resp.json()["fields"] == ["examId"]


# ---- read ----


def test_get_and_list_schedules(client: TestClient, teacher_token: str, student_token: str) -> None:
    exam_id = str(uuid4())
    a = _create(client, teacher_token, examId=exam_id)
    _create(client, teacher_token)

    got = client.get(f"/v1/schedules/{a['id']}", headers=auth(student_token))
    assert got.status_code == 200
    assert got.json()["examId"] == exam_id

    listed = client.get(
        "/v1/schedules", params={"examId": exam_id}, headers=auth(student_token)
    )
    assert [s["id"] for s in listed.json()] == [a["id"]]
    assert len(client.get("/v1/schedules", headers=auth(student_token)).json()) == 2


def test_get_unknown_schedule(client: TestClient, teacher_token: str) -> None:
    resp = client.get(f"/v1/schedules/{uuid4()}", headers=auth(teacher_token))
    assert resp.status_code == 404
    assert resp.json() == {"message": "Not found", "kind": "not_found"}


# ---- update ----


def test_update_schedule_partial(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    resp = client.put(
        f"/v1/schedules/{created['id']}",
        json={"isClosed": True},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["isClosed"] is True
    assert body["isOpen"] is False
    assert body["startTime"] == created["startTime"]


def test_update_schedule_rejects_window_after_merge(
    client: TestClient, teacher_token: str
) -> None:
    created = _create(client, teacher_token)
    too_late = datetime.fromisoformat(created["endTime"]) + timedelta(minutes=1)
    resp = client.put(
        f"/v1/schedules/{created['id']}",
        json={"startTime": too_late.isoformat()},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 400
    assert resp.json()["kind"] == "invalid_window"


def test_update_schedule_explicit_null(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    resp = client.put(
        f"/v1/schedules/{created['id']}",
        json={"endTime": None},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["endTime"]


def test_update_schedule_null_is_closed_is_rejected(
    client: TestClient, teacher_token: str
) -> None:
    created = _create(client, teacher_token)
    url = f"/v1/schedules/{created['id']}"
    client.put(url, json={"isClosed": True}, headers=auth(teacher_token))

    resp = client.put(url, json={"isClosed": None}, headers=auth(teacher_token))

    assert resp.status_code == 400
    assert resp.json()["fields"] == ["isClosed"]
    assert client.get(url, headers=auth(teacher_token)).json()["isClosed"] is True


def test_update_unknown_schedule(client: TestClient, teacher_token: str) -> None:
    resp = client.put(
        f"/v1/schedules/{uuid4()}", json={"isClosed": True}, headers=auth(teacher_token)
    )
    assert resp.status_code == 404


# ---- delete ----


def test_delete_schedule(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    url = f"/v1/schedules/{created['id']}"

    assert client.delete(url, headers=auth(teacher_token)).status_code == 204
    assert client.get(url, headers=auth(teacher_token)).status_code == 404
    assert client.delete(url, headers=auth(teacher_token)).status_code == 404
