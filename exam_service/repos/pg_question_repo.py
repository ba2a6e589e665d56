"""PostgreSQL implementation of QuestionRepo."""

from __future__ import annotations

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from exam_service.db.tables import QuestionRow
from exam_service.models.question import Question


class PgQuestionRepo:
    """Satisfies the QuestionRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, question_id: UUID) -> Question | None:
        row = await self._session.get(QuestionRow, question_id)
        if row is None:
            return None
        return _row_to_question(row)

    async def get_many(self, question_ids: Iterable[UUID]) -> dict[UUID, Question]:
        ids = list(set(question_ids))
        if not ids:
            return {}
        stmt = select(QuestionRow).where(QuestionRow.id.in_(ids))
        rows = (await self._session.execute(stmt)).scalars().all()
        return {row.id: _row_to_question(row) for row in rows}

    async def add(self, question: Question) -> None:
        row = QuestionRow(
            id=question.id,
            content=question.content,
            type=question.type,
            options=list(question.options),
            correct_answer=question.correct_answer,
            score=question.score,
            difficulty=question.difficulty,
            course_id=question.course_id,
            created_at=question.created_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def replace(self, question: Question) -> Question | None:
        row = await self._session.get(QuestionRow, question.id)
        if row is None:
            return None
        row.content = question.content
        row.type = question.type
        row.options = list(question.options)
        row.correct_answer = question.correct_answer
        row.score = question.score
        row.difficulty = question.difficulty
        row.course_id = question.course_id
        await self._session.flush()
        return _row_to_question(row)

    async def remove(self, question_id: UUID) -> bool:
        stmt = delete(QuestionRow).where(QuestionRow.id == question_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def list_all(self, course_id: UUID | None = None) -> list[Question]:
        stmt = select(QuestionRow).order_by(QuestionRow.created_at)
        if course_id is not None:
            stmt = stmt.where(QuestionRow.course_id == course_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_question(row) for row in rows]


def _row_to_question(row: QuestionRow) -> Question:
    return Question(
        id=row.id,
        content=row.content,
        options=tuple(row.options) if row.options else (),
        correct_answer=row.correct_answer,
        type=row.type,
        score=row.score,
        difficulty=row.difficulty,
        course_id=row.course_id,
        created_at=row.created_at,
    )
