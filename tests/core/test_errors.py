from __future__ import annotations

import pytest

from exam_service.core.errors import (
    DataIntegrityError,
    DuplicateSubmissionError,
    ExamNotOpenError,
    ExamServiceError,
    InvalidTransitionError,
    InvalidWindowError,
    MissingFieldError,
    NotFoundError,
    ValidationError,
)


@pytest.mark.parametrize(
    "error,status_code",
    [
        (ValidationError("bad"), 400),
        (MissingFieldError("Missing fields", fields=["examId"]), 400),
        (InvalidWindowError("endTime must be after startTime"), 400),
        (NotFoundError("Not found"), 404),
        (ExamNotOpenError("Exam is not open"), 403),
        (DuplicateSubmissionError(), 409),
        (InvalidTransitionError("no"), 409),
        (DataIntegrityError("gone"), 409),
    ],
)
def test_error_status_codes(error: ExamServiceError, status_code: int) -> None:
    assert error.status_code == status_code
    assert isinstance(error, ExamServiceError)


def test_payload_has_message_and_kind() -> None:
    payload = NotFoundError("Not found").to_payload()
    assert payload == {"message": "Not found", "kind": "not_found"}


def test_validation_payload_lists_fields() -> None:
    payload = MissingFieldError("Missing fields", fields=["examId", "endTime"]).to_payload()
    assert payload["fields"] == ["examId", "endTime"]
    assert payload["kind"] == "missing_field"


def test_validation_payload_omits_empty_fields() -> None:
    assert "fields" not in ValidationError("bad").to_payload()


def test_duplicate_submission_default_message() -> None:
    assert DuplicateSubmissionError().to_payload()["message"] == "Duplicate submission"


def test_missing_field_is_a_validation_error() -> None:
    with pytest.raises(ValidationError):
        raise MissingFieldError("Missing fields", fields=["classId"])
