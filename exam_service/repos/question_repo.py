from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID

from exam_service.models.question import Question


class QuestionRepo(Protocol):
    async def get_by_id(self, question_id: UUID) -> Question | None: ...
    async def get_many(self, question_ids: Iterable[UUID]) -> dict[UUID, Question]: ...
    async def add(self, question: Question) -> None: ...
    async def replace(self, question: Question) -> Question | None: ...
    async def remove(self, question_id: UUID) -> bool: ...
    async def list_all(self, course_id: UUID | None = None) -> list[Question]: ...


class InMemoryQuestionRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Question] = {}

    async def get_by_id(self, question_id: UUID) -> Question | None:
        return self._by_id.get(question_id)

    async def get_many(self, question_ids: Iterable[UUID]) -> dict[UUID, Question]:
        found: dict[UUID, Question] = {}
        for qid in question_ids:
            q = self._by_id.get(qid)
            if q is not None:
                found[qid] = q
        return found

    async def add(self, question: Question) -> None:
        if question.id in self._by_id:
            raise ValueError("question already exists")
        self._by_id[question.id] = question

    async def replace(self, question: Question) -> Question | None:
        if question.id not in self._by_id:
            return None
        self._by_id[question.id] = question
        return question

    async def remove(self, question_id: UUID) -> bool:
        return self._by_id.pop(question_id, None) is not None

    async def list_all(self, course_id: UUID | None = None) -> list[Question]:
        return [
            q
            for q in self._by_id.values()
            if course_id is None or q.course_id == course_id
        ]
