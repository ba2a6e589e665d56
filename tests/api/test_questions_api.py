"""Tests for the /v1/questions endpoints."""

from __future__ import annotations

from uuid import uuid4

from fastapi.testclient import TestClient

from tests.conftest import auth, question_payload


def _create(client: TestClient, token: str, **overrides: object) -> dict:
    resp = client.post(
        "/v1/questions", json=question_payload(**overrides), headers=auth(token)
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_question(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token, correct="B", difficulty="easy")
    assert created["answerA"] == "4"
    assert created["answerD"] == "22"
    assert created["correctAnswer"] == "B"
    assert created["difficulty"] == "easy"
    assert created["type"] == "multiple-choice"
    assert created["score"] == 1.0
    assert created["text"] == created["content"]


def test_create_with_only_content(client: TestClient, teacher_token: str) -> None:
    resp = client.post(
        "/v1/questions", json={"content": "Capital of France?"}, headers=auth(teacher_token)
    )
    assert resp.status_code == 400
    assert resp.json() == {
        "message": "Missing required fields",
        "kind": "validation_error",
        "fields": ["answerA", "answerB", "answerC", "answerD", "correctAnswer"],
    }


def test_update_only_answer_b(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    resp = client.put(
        f"/v1/questions/{created['id']}",
        json={"answerB": "four"},
        headers=auth(teacher_token),
    )
    assert resp.status_code == 200
    body = resp.json()
    assert [body[k] for k in ("answerA", "answerB", "answerC", "answerD")] == [
        "",
        "four",
        "",
        "",
    ]
    assert body["content"] == created["content"]


def test_update_content_keeps_options(client: TestClient, teacher_token: str) -> None:
    created = _create(client, teacher_token)
    resp = client.put(
        f"/v1/questions/{created['id']}",
        json={"content": "2 + 2 = ?"},
        headers=auth(teacher_token),
    )
    assert resp.json()["answerC"] == created["answerC"]


def test_get_list_delete_question(client: TestClient, teacher_token: str) -> None:
    course = str(uuid4())
    created = _create(client, teacher_token, courseId=course)
    _create(client, teacher_token)
    url = f"/v1/questions/{created['id']}"

    assert client.get(url, headers=auth(teacher_token)).json()["courseId"] == course
    listed = client.get(
        "/v1/questions", params={"courseId": course}, headers=auth(teacher_token)
    )
    assert [q["id"] for q in listed.json()] == [created["id"]]

    assert client.delete(url, headers=auth(teacher_token)).status_code == 204
    assert client.get(url, headers=auth(teacher_token)).status_code == 404


def test_students_cannot_read_question_bank(
    client: TestClient, student_token: str
) -> None:
    assert client.get("/v1/questions", headers=auth(student_token)).status_code == 403
