"""Class membership sync endpoints.

Classes themselves are managed elsewhere; staff (or a sync job holding a
staff token) push the roster here so the exam core can tell which
schedules apply to a student.
"""

from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from exam_service.api.dependencies import (
    ensure_self_or_staff,
    get_class_registry,
    require_staff,
    require_user,
)
from exam_service.core.errors import NotFoundError
from exam_service.models.principal import Principal
from exam_service.repos.class_registry import ClassRegistry

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["classes"])

ClassRegistryDep = Annotated[ClassRegistry, Depends(get_class_registry)]


@router.put(
    "/classes/{class_id}/members/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def add_class_member(
    class_id: UUID,
    student_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    registry: ClassRegistryDep,
) -> Response:
    await registry.add_member(class_id, student_id)
    logger.info(
        "Added class member class=%s student=%s",
        class_id,
        student_id,
        extra={"class_id": str(class_id), "student_id": str(student_id)},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/classes/{class_id}/members/{student_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def remove_class_member(
    class_id: UUID,
    student_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    registry: ClassRegistryDep,
) -> Response:
    if not await registry.remove_member(class_id, student_id):
        raise NotFoundError("Not found")
    logger.info(
        "Removed class member class=%s student=%s",
        class_id,
        student_id,
        extra={"class_id": str(class_id), "student_id": str(student_id)},
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/students/{student_id}/classes", response_model=list[UUID])
async def list_student_classes(
    student_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    registry: ClassRegistryDep,
) -> list[UUID]:
    ensure_self_or_staff(principal, student_id)
    return sorted(await registry.classes_for_student(student_id), key=str)
