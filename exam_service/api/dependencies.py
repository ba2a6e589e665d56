from __future__ import annotations

import logging
from typing import Annotated

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from exam_service.core.config import SETTINGS
from exam_service.db.engine import get_async_session
from exam_service.models.principal import STAFF_ROLES, Principal
from exam_service.repos.class_registry import ClassRegistry, InMemoryClassRegistry
from exam_service.repos.pg_class_registry import PgClassRegistry
from exam_service.repos.pg_question_repo import PgQuestionRepo
from exam_service.repos.pg_schedule_repo import PgScheduleRepo
from exam_service.repos.pg_submission_repo import PgSubmissionRepo
from exam_service.repos.question_repo import InMemoryQuestionRepo, QuestionRepo
from exam_service.repos.schedule_repo import InMemoryScheduleRepo, ScheduleRepo
from exam_service.repos.submission_repo import InMemorySubmissionRepo, SubmissionRepo
from exam_service.services import token_service
from exam_service.services.question_service import QuestionService
from exam_service.services.schedule_service import ScheduleService
from exam_service.services.submission_service import SubmissionService

logger = logging.getLogger(__name__)

# Tokens are issued by the identity provider; this URL only feeds the docs UI.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal.

    Used as a FastAPI dependency on any protected endpoint.
    """
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug(
        "Token validated for user=%s roles=%s",
        principal.user_id,
        principal.roles,
    )
    return principal


def require_any_role(roles: set[str] | frozenset[str]):
    """Dependency factory: demand at least one of the given roles.

    Usage: Depends(require_any_role({"admin", "teacher"}))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(roles):
            logger.warning(
                "Access denied: user=%s has none of roles=%s",
                principal.user_id,
                sorted(roles),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


require_staff = require_any_role(STAFF_ROLES)


def ensure_self_or_staff(principal: Principal, student_id: object) -> None:
    """403 unless the caller is staff or is acting as ``student_id``."""
    if principal.is_staff() or (
        principal.id is not None and principal.id == student_id
    ):
        return
    logger.warning(
        "Access denied: user=%s acting for student=%s",
        principal.user_id,
        student_id,
    )
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="Insufficient permissions",
    )


# ---------------------------------------------------------------------------
# Repositories and services
# ---------------------------------------------------------------------------
# In-memory singletons back every request when DATABASE_URL is unset.
# With a database, each request gets Pg repos bound to its own session.

question_repo = InMemoryQuestionRepo()
schedule_repo = InMemoryScheduleRepo()
submission_repo = InMemorySubmissionRepo()
class_registry = InMemoryClassRegistry()

SessionDep = Annotated[AsyncSession | None, Depends(get_async_session)]


def get_question_repo(session: SessionDep) -> QuestionRepo:
    return question_repo if session is None else PgQuestionRepo(session)


def get_schedule_repo(session: SessionDep) -> ScheduleRepo:
    return schedule_repo if session is None else PgScheduleRepo(session)


def get_submission_repo(session: SessionDep) -> SubmissionRepo:
    return submission_repo if session is None else PgSubmissionRepo(session)


def get_class_registry(session: SessionDep) -> ClassRegistry:
    return class_registry if session is None else PgClassRegistry(session)


def get_question_service(
    repo: Annotated[QuestionRepo, Depends(get_question_repo)],
) -> QuestionService:
    return QuestionService(repo)


def get_schedule_service(
    repo: Annotated[ScheduleRepo, Depends(get_schedule_repo)],
) -> ScheduleService:
    return ScheduleService(repo)


def get_submission_service(
    submissions: Annotated[SubmissionRepo, Depends(get_submission_repo)],
    questions: Annotated[QuestionRepo, Depends(get_question_repo)],
    schedules: Annotated[ScheduleService, Depends(get_schedule_service)],
    classes: Annotated[ClassRegistry, Depends(get_class_registry)],
) -> SubmissionService:
    return SubmissionService(
        submissions,
        questions,
        schedules,
        classes,
        auto_grade=SETTINGS.auto_grade,
    )
