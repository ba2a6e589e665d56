"""PostgreSQL implementation of SubmissionRepo.

Uniqueness of (exam_id, student_id) is the table's UNIQUE constraint.
The insert runs inside a SAVEPOINT so a constraint violation rolls back
only that insert; the caller's transaction stays usable and sees a
DuplicateKeyError instead of a poisoned session.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import UUID

from sqlalchemy import delete, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from exam_service.db.tables import SubmissionRow
from exam_service.models.submission import Answer, GradingTotals, Submission
from exam_service.repos.submission_repo import DuplicateKeyError


class PgSubmissionRepo:
    """Satisfies the SubmissionRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, submission_id: UUID) -> Submission | None:
        stmt = select(SubmissionRow).where(SubmissionRow.id == submission_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_submission(row)

    async def get_by_pair(self, exam_id: UUID, student_id: UUID) -> Submission | None:
        stmt = select(SubmissionRow).where(
            SubmissionRow.exam_id == exam_id,
            SubmissionRow.student_id == student_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_submission(row)

    async def add(self, submission: Submission) -> None:
        row = SubmissionRow(
            id=submission.id,
            user_id=submission.user_id,
            student_id=submission.student_id,
            exam_id=submission.exam_id,
            answers_json=_answers_to_json(submission.answers),
            submitted_at=submission.submitted_at,
            score=submission.score,
            status=submission.status,
            is_graded=submission.is_graded,
            graded_at=submission.graded_at,
            totals_json=_totals_to_json(submission.totals),
        )
        try:
            async with self._session.begin_nested():
                self._session.add(row)
                await self._session.flush()
        except IntegrityError as e:
            raise DuplicateKeyError(
                "submission already exists for exam/student"
            ) from e

    async def save(self, submission: Submission) -> None:
        stmt = (
            update(SubmissionRow)
            .where(SubmissionRow.id == submission.id)
            .values(
                answers_json=_answers_to_json(submission.answers),
                score=submission.score,
                status=submission.status,
                is_graded=submission.is_graded,
                graded_at=submission.graded_at,
                totals_json=_totals_to_json(submission.totals),
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            raise KeyError("submission not found")

    async def remove(self, submission_id: UUID) -> bool:
        stmt = delete(SubmissionRow).where(SubmissionRow.id == submission_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def list_all(self) -> list[Submission]:
        stmt = select(SubmissionRow).order_by(SubmissionRow.submitted_at)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_submission(row) for row in rows]

    async def list_by_exam(self, exam_id: UUID) -> list[Submission]:
        stmt = (
            select(SubmissionRow)
            .where(SubmissionRow.exam_id == exam_id)
            .order_by(SubmissionRow.submitted_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_submission(row) for row in rows]

    async def list_by_student(self, student_id: UUID) -> list[Submission]:
        stmt = (
            select(SubmissionRow)
            .where(
                or_(
                    SubmissionRow.user_id == student_id,
                    SubmissionRow.student_id == student_id,
                )
            )
            .order_by(SubmissionRow.submitted_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_submission(row) for row in rows]

    @asynccontextmanager
    async def lock(self, submission_id: UUID) -> AsyncIterator[Submission | None]:
        """SELECT ... FOR UPDATE; the row lock lasts until the request commits."""
        stmt = (
            select(SubmissionRow)
            .where(SubmissionRow.id == submission_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        yield None if row is None else _row_to_submission(row)


def _answers_to_json(answers: tuple[Answer, ...]) -> list[dict]:
    return [
        {
            "question_id": str(a.question_id),
            "selected_option": a.selected_option,
            "score": a.score,
        }
        for a in answers
    ]


def _totals_to_json(totals: GradingTotals | None) -> dict | None:
    if totals is None:
        return None
    return {
        "total_questions": totals.total_questions,
        "correct": totals.correct,
        "incorrect": totals.incorrect,
        "skipped": totals.skipped,
    }


def _totals_from_json(data: dict | None) -> GradingTotals | None:
    if data is None:
        return None
    return GradingTotals(
        total_questions=int(data["total_questions"]),
        correct=int(data["correct"]),
        incorrect=int(data["incorrect"]),
        skipped=int(data["skipped"]),
    )


def _row_to_submission(row: SubmissionRow) -> Submission:
    return Submission(
        id=row.id,
        user_id=row.user_id,
        student_id=row.student_id,
        exam_id=row.exam_id,
        answers=tuple(
            Answer(
                question_id=UUID(a["question_id"]),
                selected_option=a.get("selected_option"),
                score=float(a.get("score") or 0.0),
            )
            for a in (row.answers_json or [])
        ),
        submitted_at=row.submitted_at,
        score=row.score,
        status=row.status,
        is_graded=row.is_graded,
        graded_at=row.graded_at,
        totals=_totals_from_json(row.totals_json),
    )
