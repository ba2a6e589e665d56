from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID, uuid4

PENDING = "pending"
GRADED = "graded"
REVIEWED = "reviewed"

STATUSES = (PENDING, GRADED, REVIEWED)


@dataclass(frozen=True, slots=True)
class Answer:
    question_id: UUID
    selected_option: str | None = None  # A|B|C|D, None when skipped
    score: float = 0.0


@dataclass(frozen=True, slots=True)
class GradingTotals:
    """Per-question tally recorded when a submission is graded."""

    total_questions: int
    correct: int
    incorrect: int
    skipped: int

    @property
    def accuracy(self) -> float:
        """Percentage of questions answered correctly; 0 for an empty attempt."""
        if self.total_questions == 0:
            return 0.0
        return self.correct / self.total_questions * 100


@dataclass(frozen=True, slots=True)
class Submission:
    """One student's single attempt at an exam.

    ``user_id`` and ``student_id`` always hold the same identity; both are
    kept because existing clients read either one.
    """

    id: UUID
    user_id: UUID
    student_id: UUID
    exam_id: UUID
    answers: tuple[Answer, ...]
    submitted_at: datetime
    score: float = 0.0
    status: str = PENDING  # pending|graded|reviewed
    is_graded: bool = False
    graded_at: datetime | None = None
    totals: GradingTotals | None = None  # set by grading

    @staticmethod
    def new(
        *,
        student_id: UUID,
        exam_id: UUID,
        answers: tuple[Answer, ...],
        submitted_at: datetime,
    ) -> Submission:
        return Submission(
            id=uuid4(),
            user_id=student_id,
            student_id=student_id,
            exam_id=exam_id,
            answers=tuple(
                Answer(question_id=a.question_id, selected_option=a.selected_option)
                for a in answers
            ),
            submitted_at=submitted_at,
        )
