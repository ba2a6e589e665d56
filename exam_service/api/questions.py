"""Question bank endpoints (staff only: payloads carry the correct answer)."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from exam_service.api.dependencies import get_question_service, require_staff
from exam_service.api.schemas import CamelModel
from exam_service.models.principal import Principal
from exam_service.models.question import Question
from exam_service.services.question_service import QuestionService

router = APIRouter(prefix="/v1/questions", tags=["questions"])

QuestionServiceDep = Annotated[QuestionService, Depends(get_question_service)]


# --- Pydantic schemas ---


class QuestionIn(CamelModel):
    content: str | None = None
    answer_a: str | None = None
    answer_b: str | None = None
    answer_c: str | None = None
    answer_d: str | None = None
    correct_answer: str | None = None
    score: float | None = None
    difficulty: str | None = None
    course_id: UUID | None = None


class QuestionOut(CamelModel):
    id: UUID
    content: str
    text: str  # same as content, for older clients
    answer_a: str
    answer_b: str
    answer_c: str
    answer_d: str
    correct_answer: str | None
    type: str
    score: float
    difficulty: str
    course_id: UUID | None
    created_at: datetime

    @classmethod
    def from_question(cls, q: Question) -> QuestionOut:
        slots = list(q.options) + [""] * (4 - len(q.options))
        return cls(
            id=q.id,
            content=q.content,
            text=q.content,
            answer_a=slots[0],
            answer_b=slots[1],
            answer_c=slots[2],
            answer_d=slots[3],
            correct_answer=q.correct_answer,
            type=q.type,
            score=q.score,
            difficulty=q.difficulty,
            course_id=q.course_id,
            created_at=q.created_at,
        )


# --- Endpoints ---


@router.post("", response_model=QuestionOut, status_code=status.HTTP_201_CREATED)
async def create_question(
    body: QuestionIn,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: QuestionServiceDep,
) -> QuestionOut:
    question = await service.create(body.model_dump(by_alias=True, exclude_none=True))
    return QuestionOut.from_question(question)


@router.get("", response_model=list[QuestionOut])
async def list_questions(
    _principal: Annotated[Principal, Depends(require_staff)],
    service: QuestionServiceDep,
    course_id: Annotated[UUID | None, Query(alias="courseId")] = None,
) -> list[QuestionOut]:
    questions = await service.list_questions(course_id)
    return [QuestionOut.from_question(q) for q in questions]


@router.get("/{question_id}", response_model=QuestionOut)
async def get_question(
    question_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: QuestionServiceDep,
) -> QuestionOut:
    return QuestionOut.from_question(await service.get(question_id))


@router.put("/{question_id}", response_model=QuestionOut)
async def update_question(
    question_id: UUID,
    body: QuestionIn,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: QuestionServiceDep,
) -> QuestionOut:
    fields = body.model_dump(by_alias=True, exclude_unset=True)
    question = await service.update(question_id, fields)
    return QuestionOut.from_question(question)


@router.delete("/{question_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_question(
    question_id: UUID,
    _principal: Annotated[Principal, Depends(require_staff)],
    service: QuestionServiceDep,
) -> Response:
    await service.delete(question_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
