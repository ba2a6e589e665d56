"""Exception handlers: the one place domain errors become HTTP responses.

Every response body has the same shape, ``{"message", "kind", "fields"?}``.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from exam_service.core.errors import ExamServiceError

logger = logging.getLogger(__name__)


async def handle_exam_error(request: Request, exc: ExamServiceError) -> JSONResponse:
    logger.warning(
        "%s %s rejected: %s (%s)",
        request.method,
        request.url.path,
        exc.message,
        exc.kind,
        extra={"kind": exc.kind},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed bodies and params (bad UUIDs, wrong types) are plain 400s."""
    fields = []
    for error in exc.errors():
        loc = [
            str(part)
            for part in error.get("loc", ())
            if part not in ("body", "query", "path")
        ]
        if loc:
            fields.append(".".join(loc))
    logger.warning(
        "%s %s rejected: invalid request fields=%s",
        request.method,
        request.url.path,
        fields,
        extra={"kind": "validation_error"},
    )
    payload: dict[str, object] = {"message": "Invalid request", "kind": "validation_error"}
    if fields:
        payload["fields"] = fields
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload)


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error", "kind": "internal"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ExamServiceError, handle_exam_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(Exception, handle_unexpected)
