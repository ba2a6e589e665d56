"""Prometheus metrics endpoint.

Scraped by Prometheus; returns the text exposition format, not JSON.
Besides the HTTP metrics recorded by MetricsMiddleware it carries the
domain counters ``exam_submissions_total{outcome}`` and
``submission_gradings_total{result}``.

Restrict access to /metrics at the ingress in production.
"""

from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter(tags=["observability"])


@router.get("/metrics", include_in_schema=False)
async def metrics() -> Response:
    """Expose all Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )
