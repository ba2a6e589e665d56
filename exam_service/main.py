from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exam_service.api.classes import router as classes_router
from exam_service.api.errors import register_exception_handlers
from exam_service.api.health import router as health_router
from exam_service.api.metrics_endpoint import router as metrics_router
from exam_service.api.questions import router as questions_router
from exam_service.api.schedules import router as schedules_router
from exam_service.api.submissions import router as submissions_router
from exam_service.core.config import SETTINGS
from exam_service.core.logging import setup_logging
from exam_service.db.engine import lifespan_db
from exam_service.middleware.metrics import MetricsMiddleware
from exam_service.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    async with lifespan_db():
        yield


# only app setup + router registration

app = FastAPI(
    title="exam-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Middleware execution order: last-added runs first (outermost layer).
# RequestContext (outermost) → Metrics → CORS → route handler
# Every request gets a request ID before metrics are recorded.
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

register_exception_handlers(app)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(schedules_router)
app.include_router(submissions_router)
app.include_router(questions_router)
app.include_router(classes_router)

logger.info(
    "exam-service started  env=%s log_level=%s port=%d auto_grade=%s docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.auto_grade,
    "on" if SETTINGS.is_dev else "off",
)
