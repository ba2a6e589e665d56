from __future__ import annotations

import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from exam_service.api.dependencies import (
    class_registry,
    question_repo,
    schedule_repo,
    submission_repo,
)
from exam_service.main import app
from exam_service.services import token_service

# Ensure repo root is on sys.path so `import exam_service` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def reset_exam_state() -> None:
    """Clear the in-memory stores between tests."""
    question_repo._by_id.clear()
    schedule_repo._by_id.clear()
    submission_repo._by_id.clear()
    submission_repo._by_pair.clear()
    submission_repo._locks.clear()
    class_registry._members.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(
    username: str = "test-user",
    roles: list[str] | None = None,
) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=username, roles=roles)


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_id() -> UUID:
    return uuid4()


@pytest.fixture
def student_token(student_id: UUID) -> str:
    """Token with the default role (student); sub is the student's UUID."""
    return mint_token(username=str(student_id))


@pytest.fixture
def teacher_token() -> str:
    return mint_token(username=str(uuid4()), roles=["teacher"])


@pytest.fixture
def admin_token() -> str:
    return mint_token(username=str(uuid4()), roles=["admin"])


# ---------------------------------------------------------------------------
# Exam test helpers
# ---------------------------------------------------------------------------


def enroll(class_id: UUID, student_id: UUID) -> None:
    """Put a student in a class in the in-memory registry."""
    class_registry._members.add((class_id, student_id))


def open_window(minutes: int = 30) -> tuple[str, str]:
    """ISO start/end around now, for schedules that are open right away."""
    now = datetime.now(UTC)
    return (
        (now - timedelta(minutes=minutes)).isoformat(),
        (now + timedelta(minutes=minutes)).isoformat(),
    )


def question_payload(correct: str = "A", **overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "content": "What is 2 + 2?",
        "answerA": "4",
        "answerB": "3",
        "answerC": "5",
        "answerD": "22",
        "correctAnswer": correct,
    }
    payload.update(overrides)
    return payload
