"""The exception handlers turn every failure into {"message", "kind", "fields"?}."""

from __future__ import annotations

import logging

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from exam_service.api.errors import register_exception_handlers
from exam_service.core.errors import DataIntegrityError, MissingFieldError


def _app() -> FastAPI:
    app = FastAPI()
    register_exception_handlers(app)

    @app.get("/missing")
    async def missing() -> None:
        raise MissingFieldError("Missing fields", fields=["examId", "classId"])

    @app.get("/integrity")
    async def integrity() -> None:
        raise DataIntegrityError("question gone")

    @app.get("/boom")
    async def boom() -> None:
        raise RuntimeError("kaboom")

    @app.get("/typed")
    async def typed(n: int) -> dict[str, int]:
        return {"n": n}

    return app


def test_domain_error_payload() -> None:
    resp = TestClient(_app()).get("/missing")
    assert resp.status_code == 400
    assert resp.json() == {
        "message": "Missing fields",
        "kind": "missing_field",
        "fields": ["examId", "classId"],
    }


def test_domain_error_logged_as_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="exam_service.api.errors"):
        resp = TestClient(_app()).get("/integrity")
    assert resp.status_code == 409
    assert any(
        r.levelno == logging.WARNING and "question gone" in r.getMessage()
        for r in caplog.records
    )


def test_request_validation_is_400() -> None:
    resp = TestClient(_app()).get("/typed", params={"n": "many"})
    assert resp.status_code == 400
    assert resp.json() == {
        "message": "Invalid request",
        "kind": "validation_error",
        "fields": ["n"],
    }


def test_unexpected_error_is_generic_500(caplog: pytest.LogCaptureFixture) -> None:
    client = TestClient(_app(), raise_server_exceptions=False)
    with caplog.at_level(logging.ERROR, logger="exam_service.api.errors"):
        resp = client.get("/boom")
    assert resp.status_code == 500
    assert resp.json() == {"message": "Internal server error", "kind": "internal"}
    assert any(r.exc_info for r in caplog.records if r.name == "exam_service.api.errors")
