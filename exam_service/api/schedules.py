"""Exam schedule endpoints.

Any authenticated caller may read schedules (students check ``isOpen``
before starting an exam); only staff may create, change or delete them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from exam_service.api.dependencies import (
    get_schedule_service,
    require_staff,
    require_user,
)
from exam_service.api.schemas import CamelModel
from exam_service.models.principal import Principal
from exam_service.models.schedule import ExamSchedule
from exam_service.services.schedule_service import ScheduleService, is_open, utcnow

router = APIRouter(prefix="/v1/schedules", tags=["schedules"])

ScheduleServiceDep = Annotated[ScheduleService, Depends(get_schedule_service)]


# --- Pydantic schemas ---


class ScheduleCreateIn(CamelModel):
    # Optional here so the service can report every missing field at once.
    exam_id: UUID | None = None
    class_id: UUID | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_closed: bool = False


class ScheduleUpdateIn(CamelModel):
    exam_id: UUID | None = None
    class_id: UUID | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    is_closed: bool | None = None


class ScheduleOut(CamelModel):
    id: UUID
    exam_id: UUID
    class_id: UUID
    start_time: datetime
    end_time: datetime
    is_closed: bool
    is_open: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_schedule(cls, schedule: ExamSchedule, now: datetime) -> ScheduleOut:
        return cls(
            id=schedule.id,
            exam_id=schedule.exam_id,
            class_id=schedule.class_id,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
            is_closed=schedule.is_closed,
            is_open=is_open(schedule, now),
            created_at=schedule.created_at,
            updated_at=schedule.updated_at,
        )


# --- Endpoints ---


@router.post("", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
async def create_schedule(
    body: ScheduleCreateIn,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: ScheduleServiceDep,
) -> ScheduleOut:
    schedule = await service.create_schedule(
        exam_id=body.exam_id,
        class_id=body.class_id,
        start_time=body.start_time,
        end_time=body.end_time,
        is_closed=body.is_closed,
    )
    return ScheduleOut.from_schedule(schedule, utcnow())


@router.get("", response_model=list[ScheduleOut])
async def list_schedules(
    _principal: Annotated[Principal, Depends(require_user)],
    service: ScheduleServiceDep,
    exam_id: Annotated[UUID | None, Query(alias="examId")] = None,
    class_id: Annotated[UUID | None, Query(alias="classId")] = None,
) -> list[ScheduleOut]:
    now = utcnow()
    schedules = await service.list_schedules(exam_id=exam_id, class_id=class_id)
    return [ScheduleOut.from_schedule(s, now) for s in schedules]


@router.get("/{schedule_id}", response_model=ScheduleOut)
async def get_schedule(
    schedule_id: UUID,
    _principal: Annotated[Principal, Depends(require_user)],
    service: ScheduleServiceDep,
) -> ScheduleOut:
    schedule = await service.get_schedule(schedule_id)
    return ScheduleOut.from_schedule(schedule, utcnow())


@router.put("/{schedule_id}", response_model=ScheduleOut)
async def update_schedule(
    schedule_id: UUID,
    body: ScheduleUpdateIn,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: ScheduleServiceDep,
) -> ScheduleOut:
    # Only keys the client actually sent; an explicit null is kept.
    fields = body.model_dump(by_alias=True, exclude_unset=True)
    schedule = await service.update_schedule(schedule_id, fields)
    return ScheduleOut.from_schedule(schedule, utcnow())


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_schedule(
    schedule_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: ScheduleServiceDep,
) -> Response:
    await service.delete_schedule(schedule_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
