"""Schedule Manager: exam windows per class.

``is_open`` is the only rule that decides whether an exam can be taken
right now; the submission engine calls it and nothing else.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import UTC, datetime
from uuid import UUID

from exam_service.core.errors import (
    InvalidWindowError,
    MissingFieldError,
    NotFoundError,
    ValidationError,
)
from exam_service.core.identity import normalize_id
from exam_service.models.schedule import ExamSchedule
from exam_service.repos.schedule_repo import ScheduleRepo

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_REQUIRED = ("examId", "classId", "startTime", "endTime")
_UPDATABLE = {
    "examId": "exam_id",
    "classId": "class_id",
    "startTime": "start_time",
    "endTime": "end_time",
    "isClosed": "is_closed",
}


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_open(schedule: ExamSchedule, now: datetime) -> bool:
    """True iff the schedule is not force-closed and start <= now <= end."""
    now = as_utc(now)
    return (
        not schedule.is_closed
        and as_utc(schedule.start_time) <= now <= as_utc(schedule.end_time)
    )


def _check_window(start_time: datetime, end_time: datetime) -> None:
    if as_utc(end_time) <= as_utc(start_time):
        raise InvalidWindowError("endTime must be after startTime")


def _coerce_id(name: str, value: object) -> UUID:
    uid = normalize_id(value)
    if uid is None:
        raise ValidationError(f"{name} is not a valid id", fields=[name])
    return uid


def _closed_flag(value: object) -> bool:
    if not isinstance(value, bool):
        raise ValidationError("isClosed must be true or false", fields=["isClosed"])
    return value


class ScheduleService:
    def __init__(self, repo: ScheduleRepo, *, clock: Clock = utcnow) -> None:
        self._repo = repo
        self._clock = clock

    async def create_schedule(
        self,
        exam_id: object,
        class_id: object,
        start_time: datetime | None,
        end_time: datetime | None,
        is_closed: bool | None = False,
    ) -> ExamSchedule:
        supplied = dict(
            zip(_REQUIRED, (exam_id, class_id, start_time, end_time), strict=True)
        )
        missing = [name for name, value in supplied.items() if value in (None, "")]
        if missing:
            logger.warning("Rejected schedule: missing fields=%s", missing)
            raise MissingFieldError("Missing fields", fields=missing)

        _check_window(start_time, end_time)  # type: ignore[arg-type]

        schedule = ExamSchedule.new(
            exam_id=_coerce_id("examId", exam_id),
            class_id=_coerce_id("classId", class_id),
            start_time=as_utc(start_time),
            end_time=as_utc(end_time),
            is_closed=False if is_closed is None else _closed_flag(is_closed),
        )
        await self._repo.add(schedule)
        logger.info(
            "Created schedule id=%s exam=%s class=%s window=%s..%s",
            schedule.id,
            schedule.exam_id,
            schedule.class_id,
            schedule.start_time.isoformat(),
            schedule.end_time.isoformat(),
            extra={"schedule_id": str(schedule.id), "exam_id": str(schedule.exam_id)},
        )
        return schedule

    async def update_schedule(
        self, schedule_id: UUID, fields: Mapping[str, object]
    ) -> ExamSchedule:
        """Merge ``fields`` (camelCase keys, only the ones supplied) onto the
        stored schedule and re-validate the resulting window."""
        current = await self._repo.get_by_id(schedule_id)
        if current is None:
            raise NotFoundError("Not found")

        nulled = [
            name for name in _REQUIRED if name in fields and fields[name] in (None, "")
        ]
        if nulled:
            raise MissingFieldError("Missing fields", fields=nulled)

        changes: dict[str, object] = {}
        for name, attr in _UPDATABLE.items():
            if name not in fields:
                continue
            value = fields[name]
            if name in ("examId", "classId"):
                value = _coerce_id(name, value)
            elif name in ("startTime", "endTime"):
                value = as_utc(value)  # type: ignore[arg-type]
            elif name == "isClosed":
                value = _closed_flag(value)
            changes[attr] = value

        merged = dataclasses.replace(current, **changes, updated_at=self._clock())
        _check_window(merged.start_time, merged.end_time)

        updated = await self._repo.replace(merged)
        if updated is None:
            raise NotFoundError("Not found")
        logger.info(
            "Updated schedule id=%s fields=%s",
            schedule_id,
            sorted(changes),
            extra={"schedule_id": str(schedule_id)},
        )
        return updated

    async def get_schedule(self, schedule_id: UUID) -> ExamSchedule:
        schedule = await self._repo.get_by_id(schedule_id)
        if schedule is None:
            raise NotFoundError("Not found")
        return schedule

    async def list_schedules(
        self, *, exam_id: UUID | None = None, class_id: UUID | None = None
    ) -> list[ExamSchedule]:
        return await self._repo.find(exam_id=exam_id, class_id=class_id)

    async def delete_schedule(self, schedule_id: UUID) -> None:
        # Submissions made under this schedule stay; they are history.
        if not await self._repo.remove(schedule_id):
            raise NotFoundError("Not found")
        logger.info(
            "Deleted schedule id=%s",
            schedule_id,
            extra={"schedule_id": str(schedule_id)},
        )

    async def find_open(
        self,
        exam_id: UUID,
        class_ids: Iterable[UUID],
        now: datetime | None = None,
    ) -> list[ExamSchedule]:
        """Schedules of ``exam_id`` targeting any of ``class_ids`` that are open."""
        classes = frozenset(class_ids)
        if not classes:
            return []
        at = self._clock() if now is None else now
        return [
            s
            for s in await self._repo.find(exam_id=exam_id)
            if s.class_id in classes and is_open(s, at)
        ]
