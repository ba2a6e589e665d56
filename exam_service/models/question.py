from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

QUESTION_TYPES = ("multiple-choice", "essay", "true-false")
DIFFICULTIES = ("easy", "medium", "hard")
OPTION_LETTERS = ("A", "B", "C", "D")

MIN_OPTIONS = 2
MAX_OPTIONS = 4


def option_index(letter: str) -> int | None:
    """Position of an answer letter in the options list, or None."""
    try:
        return OPTION_LETTERS.index(letter)
    except ValueError:
        return None


@dataclass(frozen=True, slots=True)
class Question:
    id: UUID
    content: str
    options: tuple[str, ...]
    correct_answer: str | None
    type: str = "multiple-choice"  # multiple-choice|essay|true-false
    score: float = 1.0  # weight awarded for a correct answer
    difficulty: str = "medium"  # easy|medium|hard
    course_id: UUID | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        if self.type not in QUESTION_TYPES:
            raise ValueError(f"unknown question type {self.type!r}")
        if not MIN_OPTIONS <= len(self.options) <= MAX_OPTIONS:
            raise ValueError(
                f"options must have {MIN_OPTIONS}-{MAX_OPTIONS} entries "
                f"(got {len(self.options)})"
            )
        if self.correct_answer is not None:
            idx = option_index(self.correct_answer)
            if idx is None or idx >= len(self.options):
                raise ValueError(
                    f"correct_answer {self.correct_answer!r} does not index options"
                )
        if self.score < 0:
            raise ValueError("score must be non-negative")

    @staticmethod
    def new(
        *,
        content: str,
        options: tuple[str, ...],
        correct_answer: str,
        score: float = 1.0,
        difficulty: str = "medium",
        course_id: UUID | None = None,
    ) -> Question:
        # The store only authors multiple-choice questions
        return Question(
            id=uuid4(),
            content=content,
            options=options,
            correct_answer=correct_answer,
            type="multiple-choice",
            score=score,
            difficulty=difficulty,
            course_id=course_id,
        )
