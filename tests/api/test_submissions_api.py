"""End-to-end tests for the /v1/submissions endpoints.

Each test builds the same fixture through the API: a teacher creates
questions and an open schedule, a student is enrolled in the class.
"""

from __future__ import annotations

from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from tests.conftest import auth, enroll, mint_token, open_window, question_payload


class ExamSetup:
    def __init__(self, client: TestClient, teacher_token: str) -> None:
        self.client = client
        self.teacher = auth(teacher_token)
        self.exam_id = str(uuid4())
        self.class_id = uuid4()
        start, end = open_window()
        resp = client.post(
            "/v1/schedules",
            json={
                "examId": self.exam_id,
                "classId": str(self.class_id),
                "startTime": start,
                "endTime": end,
            },
            headers=self.teacher,
        )
        assert resp.status_code == 201
        self.schedule_id = resp.json()["id"]
        self.question_ids = [
            client.post(
                "/v1/questions", json=question_payload(), headers=self.teacher
            ).json()["id"]
            for _ in range(5)
        ]

    def student(self) -> tuple[UUID, dict[str, str]]:
        sid = uuid4()
        enroll(self.class_id, sid)
        return sid, auth(mint_token(username=str(sid)))

    def body(self, letters: str = "AAAAA", **extra: object) -> dict[str, object]:
        body: dict[str, object] = {
            "examId": self.exam_id,
            "answers": [
                {"questionId": qid, "selectedOption": letter}
                for qid, letter in zip(self.question_ids, letters, strict=True)
            ],
        }
        body.update(extra)
        return body


@pytest.fixture
def setup(client: TestClient, teacher_token: str) -> ExamSetup:
    return ExamSetup(client, teacher_token)


# ---- POST /v1/submissions ----


def test_submit_and_auto_grade(client: TestClient, setup: ExamSetup) -> None:
    sid, headers = setup.student()

    resp = client.post("/v1/submissions", json=setup.body("AABCA"), headers=headers)

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["studentId"] == str(sid)
    assert body["userId"] == str(sid)
    assert body["status"] == "graded"
    assert body["isGraded"] is True
    assert body["score"] == 3
    assert [a["score"] for a in body["answers"]] == [1, 1, 0, 0, 1]


def test_graded_submission_reports_totals(client: TestClient, setup: ExamSetup) -> None:
    _, headers = setup.student()
    body = setup.body("AABAA")
    body["answers"][4]["selectedOption"] = ""  # type: ignore[index]

    resp = client.post("/v1/submissions", json=body, headers=headers)

    assert resp.status_code == 201, resp.text
    assert resp.json()["totals"] == {
        "totalQuestions": 5,
        "correct": 3,
        "incorrect": 1,
        "skipped": 1,
        "accuracy": 60.0,
    }


def test_submit_as_explicit_student_id(client: TestClient, setup: ExamSetup) -> None:
    sid, headers = setup.student()
    resp = client.post(
        "/v1/submissions", json=setup.body(studentId=str(sid)), headers=headers
    )
    assert resp.status_code == 201


def test_submit_accepts_user_id_alias(client: TestClient, setup: ExamSetup) -> None:
    sid, headers = setup.student()
    resp = client.post(
        "/v1/submissions", json=setup.body(userId=str(sid)), headers=headers
    )
    assert resp.status_code == 201
    assert resp.json()["studentId"] == str(sid)


def test_duplicate_submission_is_409(client: TestClient, setup: ExamSetup) -> None:
    _, headers = setup.student()
    assert client.post("/v1/submissions", json=setup.body(), headers=headers).status_code == 201

    resp = client.post("/v1/submissions", json=setup.body("BBBBB"), headers=headers)

    assert resp.status_code == 409
    assert resp.json()["message"] == "Duplicate submission"
    assert resp.json()["kind"] == "duplicate_submission"


def test_submit_when_not_enrolled_is_403(client: TestClient, setup: ExamSetup) -> None:
    outsider = auth(mint_token(username=str(uuid4())))
    resp = client.post("/v1/submissions", json=setup.body(), headers=outsider)
    assert resp.status_code == 403
    assert resp.json()["kind"] == "exam_not_open"


def test_submit_after_force_close_is_403(client: TestClient, setup: ExamSetup) -> None:
    client.put(
        f"/v1/schedules/{setup.schedule_id}",
        json={"isClosed": True},
        headers=setup.teacher,
    )
    _, headers = setup.student()
    resp = client.post("/v1/submissions", json=setup.body(), headers=headers)
    assert resp.status_code == 403


def test_student_cannot_submit_for_someone_else(
    client: TestClient, setup: ExamSetup
) -> None:
    other, _ = setup.student()
    _, headers = setup.student()
    resp = client.post(
        "/v1/submissions", json=setup.body(studentId=str(other)), headers=headers
    )
    assert resp.status_code == 403


def test_submit_with_bad_option_is_400(client: TestClient, setup: ExamSetup) -> None:
    _, headers = setup.student()
    resp = client.post("/v1/submissions", json=setup.body("AAAAZ"), headers=headers)
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["answers[4].selectedOption"]


def test_submit_without_exam_id_is_400(client: TestClient, setup: ExamSetup) -> None:
    _, headers = setup.student()
    body = setup.body()
    del body["examId"]
    resp = client.post("/v1/submissions", json=body, headers=headers)
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["examId"]


# ---- PUT /v1/submissions/{id} ----


def _submitted(client: TestClient, setup: ExamSetup, letters: str = "AAAAA") -> dict:
    _, headers = setup.student()
    resp = client.post("/v1/submissions", json=setup.body(letters), headers=headers)
    assert resp.status_code == 201
    return resp.json()


def test_review_via_put(client: TestClient, setup: ExamSetup) -> None:
    sub = _submitted(client, setup, "AABBB")
    resp = client.put(
        f"/v1/submissions/{sub['id']}",
        json={"status": "reviewed", "score": 4},
        headers=setup.teacher,
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "reviewed"
    assert resp.json()["score"] == 4


def test_regrade_via_put_is_idempotent(client: TestClient, setup: ExamSetup) -> None:
    sub = _submitted(client, setup, "ABABA")
    url = f"/v1/submissions/{sub['id']}"
    first = client.put(url, json={"status": "graded"}, headers=setup.teacher).json()
    second = client.put(url, json={"isGraded": True}, headers=setup.teacher).json()
    assert first["score"] == second["score"] == sub["score"] == 3


def test_put_after_review_is_409(client: TestClient, setup: ExamSetup) -> None:
    sub = _submitted(client, setup)
    url = f"/v1/submissions/{sub['id']}"
    client.put(url, json={"status": "reviewed"}, headers=setup.teacher)

    resp = client.put(url, json={"status": "graded"}, headers=setup.teacher)

    assert resp.status_code == 409
    assert resp.json()["kind"] == "invalid_transition"


def test_put_score_without_status_is_400(client: TestClient, setup: ExamSetup) -> None:
    sub = _submitted(client, setup)
    resp = client.put(
        f"/v1/submissions/{sub['id']}", json={"score": 100}, headers=setup.teacher
    )
    assert resp.status_code == 400
    assert resp.json()["fields"] == ["status"]


def test_grading_after_question_deleted_is_409(
    client: TestClient, setup: ExamSetup
) -> None:
    sub = _submitted(client, setup)
    client.delete(f"/v1/questions/{setup.question_ids[0]}", headers=setup.teacher)

    resp = client.put(
        f"/v1/submissions/{sub['id']}", json={"status": "graded"}, headers=setup.teacher
    )

    assert resp.status_code == 409
    assert resp.json()["kind"] == "data_integrity_error"


def test_put_unknown_submission_is_404(client: TestClient, setup: ExamSetup) -> None:
    resp = client.put(
        f"/v1/submissions/{uuid4()}", json={"status": "graded"}, headers=setup.teacher
    )
    assert resp.status_code == 404


# ---- reads ----


def test_list_by_exam_and_user(client: TestClient, setup: ExamSetup) -> None:
    sid, headers = setup.student()
    mine = client.post("/v1/submissions", json=setup.body(), headers=headers).json()
    _submitted(client, setup)

    by_exam = client.get(f"/v1/submissions/exam/{setup.exam_id}", headers=setup.teacher)
    by_user = client.get(f"/v1/submissions/user/{sid}", headers=headers)
    everything = client.get("/v1/submissions", headers=setup.teacher)

    assert len(by_exam.json()) == 2
    assert [s["id"] for s in by_user.json()] == [mine["id"]]
    assert len(everything.json()) == 2


def test_student_reads_own_submission_only(client: TestClient, setup: ExamSetup) -> None:
    _, headers = setup.student()
    mine = client.post("/v1/submissions", json=setup.body(), headers=headers).json()
    theirs = _submitted(client, setup)

    assert client.get(f"/v1/submissions/{mine['id']}", headers=headers).status_code == 200
    assert client.get(f"/v1/submissions/{theirs['id']}", headers=headers).status_code == 403


def test_delete_submission(client: TestClient, setup: ExamSetup) -> None:
    sub = _submitted(client, setup)
    url = f"/v1/submissions/{sub['id']}"
    assert client.delete(url, headers=setup.teacher).status_code == 204
    assert client.get(url, headers=setup.teacher).status_code == 404
