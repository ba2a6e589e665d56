"""Submission endpoints.

Students submit and read their own work; staff grade, review, list
by exam and read statistics.  ``/statistics``, ``/exam/...`` and
``/user/...`` are declared before ``/{submission_id}`` so they are
never captured by the id route.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from exam_service.api.dependencies import (
    ensure_self_or_staff,
    get_submission_repo,
    get_submission_service,
    require_staff,
    require_user,
)
from exam_service.api.schemas import CamelModel
from exam_service.models.principal import Principal
from exam_service.models.submission import Submission
from exam_service.repos.submission_repo import SubmissionRepo
from exam_service.services.statistics_service import get_statistics
from exam_service.services.submission_service import SubmissionService

router = APIRouter(prefix="/v1/submissions", tags=["submissions"])

SubmissionServiceDep = Annotated[SubmissionService, Depends(get_submission_service)]


# --- Pydantic schemas ---


class AnswerIn(CamelModel):
    question_id: UUID | None = None
    selected_option: str | None = None
    score: float | None = None


class SubmissionCreateIn(CamelModel):
    student_id: UUID | None = None
    user_id: UUID | None = None  # accepted for older clients
    exam_id: UUID | None = None
    answers: list[AnswerIn] = []


class SubmissionUpdateIn(CamelModel):
    answers: list[AnswerIn] | None = None
    score: float | None = None
    status: str | None = None
    is_graded: bool | None = None


class AnswerOut(CamelModel):
    question_id: UUID
    selected_option: str | None
    score: float


class TotalsOut(CamelModel):
    total_questions: int
    correct: int
    incorrect: int
    skipped: int
    accuracy: float  # percent correct


class SubmissionOut(CamelModel):
    id: UUID
    user_id: UUID
    student_id: UUID
    exam_id: UUID
    answers: list[AnswerOut]
    submitted_at: datetime
    score: float
    status: str
    is_graded: bool
    graded_at: datetime | None
    totals: TotalsOut | None = None


class StatisticsOut(CamelModel):
    total: int
    graded: int
    pending: int
    average_score: float
    status_distribution: dict[str, int]


def _out(submission: Submission) -> SubmissionOut:
    return SubmissionOut.model_validate(submission)


def _answers(items: list[AnswerIn] | None) -> list[dict[str, object]] | None:
    if items is None:
        return None
    return [a.model_dump(by_alias=True) for a in items]


# --- Endpoints ---


@router.post("", response_model=SubmissionOut, status_code=status.HTTP_201_CREATED)
async def create_submission(
    body: SubmissionCreateIn,
    principal: Annotated[Principal, Depends(require_user)],
    service: SubmissionServiceDep,
) -> SubmissionOut:
    student_id = body.student_id or body.user_id or principal.id
    if student_id is not None:
        ensure_self_or_staff(principal, student_id)
    submission = await service.submit(
        student_id=student_id,
        exam_id=body.exam_id,
        answers=_answers(body.answers),
    )
    return _out(submission)


@router.get("/statistics", response_model=StatisticsOut)
async def submission_statistics(
    _principal: Annotated[Principal, Depends(require_staff)],
    repo: Annotated[SubmissionRepo, Depends(get_submission_repo)],
    exam_id: Annotated[UUID | None, Query(alias="examId")] = None,
    user_id: Annotated[UUID | None, Query(alias="userId")] = None,
) -> StatisticsOut:
    stats = await get_statistics(repo, exam_id=exam_id, user_id=user_id)
    return StatisticsOut.model_validate(stats)


@router.get("/exam/{exam_id}", response_model=list[SubmissionOut])
async def list_exam_submissions(
    exam_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: SubmissionServiceDep,
) -> list[SubmissionOut]:
    return [_out(s) for s in await service.list_by_exam(exam_id)]


@router.get("/user/{user_id}", response_model=list[SubmissionOut])
async def list_user_submissions(
    user_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    service: SubmissionServiceDep,
) -> list[SubmissionOut]:
    ensure_self_or_staff(principal, user_id)
    return [_out(s) for s in await service.list_by_student(user_id)]


@router.get("", response_model=list[SubmissionOut])
async def list_submissions(
    _principal: Annotated[Principal, Depends(require_staff)],
    service: SubmissionServiceDep,
) -> list[SubmissionOut]:
    return [_out(s) for s in await service.list_all()]


@router.get("/{submission_id}", response_model=SubmissionOut)
async def get_submission(
    submission_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    service: SubmissionServiceDep,
) -> SubmissionOut:
    submission = await service.get(submission_id)
    ensure_self_or_staff(principal, submission.student_id)
    return _out(submission)


@router.put("/{submission_id}", response_model=SubmissionOut)
async def update_submission(
    submission_id: UUID,
    body: SubmissionUpdateIn,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: SubmissionServiceDep,
) -> SubmissionOut:
    submission = await service.apply_update(
        submission_id,
        answers=_answers(body.answers),
        score=body.score,
        status=body.status,
        is_graded=body.is_graded,
    )
    return _out(submission)


@router.delete("/{submission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_submission(
    submission_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: SubmissionServiceDep,
) -> Response:
    await service.delete(submission_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
