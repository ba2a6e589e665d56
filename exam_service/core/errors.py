"""Error taxonomy for the exam core.

Services raise these; the HTTP layer turns every one of them into a
structured ``{"message", "kind", "fields"?}`` response (see
exam_service.api.errors).  Anything that is *not* an ExamServiceError is
an unexpected failure and surfaces as a generic 500.
"""

from __future__ import annotations

from collections.abc import Sequence


class ExamServiceError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def to_payload(self) -> dict[str, object]:
        return {"message": self.message, "kind": self.kind}


class ValidationError(ExamServiceError):
    """Missing or malformed input. ``fields`` lists every offending field."""

    kind = "validation_error"

    def __init__(self, message: str, fields: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.fields = list(fields)

    def to_payload(self) -> dict[str, object]:
        payload = super().to_payload()
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload


class MissingFieldError(ValidationError):
    kind = "missing_field"


class InvalidWindowError(ExamServiceError):
    kind = "invalid_window"


class NotFoundError(ExamServiceError):
    kind = "not_found"
    status_code = 404


class ExamNotOpenError(ExamServiceError):
    kind = "exam_not_open"
    status_code = 403


class DuplicateSubmissionError(ExamServiceError):
    kind = "duplicate_submission"
    status_code = 409

    def __init__(self, message: str = "Duplicate submission") -> None:
        super().__init__(message)


class InvalidTransitionError(ExamServiceError):
    kind = "invalid_transition"
    status_code = 409


class DataIntegrityError(ExamServiceError):
    """A stored record points at something that no longer exists."""

    kind = "data_integrity_error"
    status_code = 409
