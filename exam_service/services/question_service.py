"""Question Store: authoring rules for the question bank.

Two rules shape the payloads clients depend on:

- create reports *every* missing required field in one ValidationError
  (``fields`` lists them in a fixed order), never just the first;
- update treats the four option slots as one unit: touching any slot
  rebuilds the whole options list, absent slots becoming "".
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping
from uuid import UUID

from exam_service.core.errors import NotFoundError, ValidationError
from exam_service.core.identity import normalize_id
from exam_service.models.question import DIFFICULTIES, OPTION_LETTERS, Question
from exam_service.repos.question_repo import QuestionRepo

logger = logging.getLogger(__name__)

OPTION_FIELDS = ("answerA", "answerB", "answerC", "answerD")
REQUIRED_FIELDS = ("content", *OPTION_FIELDS, "correctAnswer")


def _blank(value: object) -> bool:
    return value is None or value == ""


def _check_correct_answer(value: object) -> str:
    if value not in OPTION_LETTERS:
        raise ValidationError(
            "correctAnswer must be one of A, B, C, D", fields=["correctAnswer"]
        )
    return value  # type: ignore[return-value]


def _check_score(value: object) -> float:
    try:
        score = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        raise ValidationError("score must be a number", fields=["score"]) from None
    if score < 0:
        raise ValidationError("score must be non-negative", fields=["score"])
    return score


def _check_difficulty(value: object) -> str:
    if value not in DIFFICULTIES:
        raise ValidationError(
            "difficulty must be one of easy, medium, hard", fields=["difficulty"]
        )
    return value  # type: ignore[return-value]


def _check_course_id(value: object) -> UUID | None:
    if value is None:
        return None
    course_id = normalize_id(value)
    if course_id is None:
        raise ValidationError("courseId is not a valid id", fields=["courseId"])
    return course_id


class QuestionService:
    def __init__(self, repo: QuestionRepo) -> None:
        self._repo = repo

    async def create(self, fields: Mapping[str, object]) -> Question:
        missing = [name for name in REQUIRED_FIELDS if _blank(fields.get(name))]
        if missing:
            logger.warning("Rejected question: missing fields=%s", missing)
            raise ValidationError("Missing required fields", fields=missing)

        correct = _check_correct_answer(fields["correctAnswer"])
        score = _check_score(fields["score"]) if fields.get("score") is not None else 1.0
        difficulty = (
            _check_difficulty(fields["difficulty"])
            if fields.get("difficulty") is not None
            else "medium"
        )

        question = Question.new(
            content=str(fields["content"]),
            options=tuple(str(fields[name]) for name in OPTION_FIELDS),
            correct_answer=correct,
            score=score,
            difficulty=difficulty,
            course_id=_check_course_id(fields.get("courseId")),
        )
        await self._repo.add(question)
        logger.info(
            "Created question id=%s course=%s",
            question.id,
            question.course_id,
            extra={"question_id": str(question.id)},
        )
        return question

    async def update(self, question_id: UUID, fields: Mapping[str, object]) -> Question:
        """Apply a partial update. ``fields`` holds only the keys supplied."""
        current = await self._repo.get_by_id(question_id)
        if current is None:
            raise NotFoundError("Not found")

        changes: dict[str, object] = {}
        if "content" in fields:
            if _blank(fields["content"]):
                raise ValidationError("content must not be empty", fields=["content"])
            changes["content"] = str(fields["content"])
        if "correctAnswer" in fields:
            changes["correct_answer"] = _check_correct_answer(fields["correctAnswer"])
        if "courseId" in fields:
            changes["course_id"] = _check_course_id(fields["courseId"])
        if "score" in fields:
            changes["score"] = _check_score(fields["score"])
        if "difficulty" in fields:
            changes["difficulty"] = _check_difficulty(fields["difficulty"])

        if any(name in fields for name in OPTION_FIELDS):
            changes["options"] = tuple(
                "" if fields.get(name) is None else str(fields[name])
                for name in OPTION_FIELDS
            )

        try:
            merged = dataclasses.replace(current, **changes)
        except ValueError as e:
            raise ValidationError(str(e)) from None

        updated = await self._repo.replace(merged)
        if updated is None:
            raise NotFoundError("Not found")
        logger.info(
            "Updated question id=%s fields=%s",
            question_id,
            sorted(changes),
            extra={"question_id": str(question_id)},
        )
        return updated

    async def get(self, question_id: UUID) -> Question:
        question = await self._repo.get_by_id(question_id)
        if question is None:
            raise NotFoundError("Not found")
        return question

    async def list_questions(self, course_id: UUID | None = None) -> list[Question]:
        return await self._repo.list_all(course_id)

    async def delete(self, question_id: UUID) -> None:
        if not await self._repo.remove(question_id):
            raise NotFoundError("Not found")
        logger.info(
            "Deleted question id=%s",
            question_id,
            extra={"question_id": str(question_id)},
        )
