"""PostgreSQL implementation of ScheduleRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from exam_service.db.tables import ExamScheduleRow
from exam_service.models.schedule import ExamSchedule


class PgScheduleRepo:
    """Satisfies the ScheduleRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, schedule_id: UUID) -> ExamSchedule | None:
        stmt = select(ExamScheduleRow).where(ExamScheduleRow.id == schedule_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_schedule(row)

    async def add(self, schedule: ExamSchedule) -> None:
        row = ExamScheduleRow(
            id=schedule.id,
            exam_id=schedule.exam_id,
            class_id=schedule.class_id,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            is_closed=schedule.is_closed,
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
        )
        self._session.add(row)
        await self._session.flush()

    async def replace(self, schedule: ExamSchedule) -> ExamSchedule | None:
        stmt = (
            update(ExamScheduleRow)
            .where(ExamScheduleRow.id == schedule.id)
            .values(
                exam_id=schedule.exam_id,
                class_id=schedule.class_id,
                start_time=schedule.start_time,
                end_time=schedule.end_time,
                is_closed=schedule.is_closed,
                updated_at=schedule.updated_at,
            )
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return schedule

    async def remove(self, schedule_id: UUID) -> bool:
        stmt = delete(ExamScheduleRow).where(ExamScheduleRow.id == schedule_id)
        result = await self._session.execute(stmt)
        return result.rowcount > 0

    async def find(
        self, *, exam_id: UUID | None = None, class_id: UUID | None = None
    ) -> list[ExamSchedule]:
        stmt = select(ExamScheduleRow).order_by(ExamScheduleRow.start_time)
        if exam_id is not None:
            stmt = stmt.where(ExamScheduleRow.exam_id == exam_id)
        if class_id is not None:
            stmt = stmt.where(ExamScheduleRow.class_id == class_id)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_schedule(row) for row in rows]


def _row_to_schedule(row: ExamScheduleRow) -> ExamSchedule:
    return ExamSchedule(
        id=row.id,
        exam_id=row.exam_id,
        class_id=row.class_id,
        start_time=row.start_time,
        end_time=row.end_time,
        is_closed=row.is_closed,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
