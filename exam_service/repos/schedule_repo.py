from __future__ import annotations

from typing import Protocol
from uuid import UUID

from exam_service.models.schedule import ExamSchedule


class ScheduleRepo(Protocol):
    async def get_by_id(self, schedule_id: UUID) -> ExamSchedule | None: ...
    async def add(self, schedule: ExamSchedule) -> None: ...
    async def replace(self, schedule: ExamSchedule) -> ExamSchedule | None: ...
    async def remove(self, schedule_id: UUID) -> bool: ...
    async def find(
        self, *, exam_id: UUID | None = None, class_id: UUID | None = None
    ) -> list[ExamSchedule]: ...


class InMemoryScheduleRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, ExamSchedule] = {}

    async def get_by_id(self, schedule_id: UUID) -> ExamSchedule | None:
        return self._by_id.get(schedule_id)

    async def add(self, schedule: ExamSchedule) -> None:
        if schedule.id in self._by_id:
            raise ValueError("schedule already exists")
        self._by_id[schedule.id] = schedule

    async def replace(self, schedule: ExamSchedule) -> ExamSchedule | None:
        if schedule.id not in self._by_id:
            return None
        self._by_id[schedule.id] = schedule
        return schedule

    async def remove(self, schedule_id: UUID) -> bool:
        return self._by_id.pop(schedule_id, None) is not None

    async def find(
        self, *, exam_id: UUID | None = None, class_id: UUID | None = None
    ) -> list[ExamSchedule]:
        return [
            s
            for s in self._by_id.values()
            if (exam_id is None or s.exam_id == exam_id)
            and (class_id is None or s.class_id == class_id)
        ]
