"""Unit tests for logging setup and request-scoped log context."""

from __future__ import annotations

import io
import logging

import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from toolbench.api.middleware import REQUEST_ID_HEADER, RequestLoggingMiddleware
from toolbench.utils.logging import bind_request_context, clear_request_context, configure_logging, get_logger


def test_configure_sets_root_level_and_quiets_httpx() -> None:
    configure_logging(log_level="debug")

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING
    assert len(logging.getLogger().handlers) == 1


def test_get_logger_returns_usable_logger() -> None:
    logger = get_logger("toolbench.tests")

    logger.info("test_event", answer=42)


def test_bind_and_clear_request_context() -> None:
    clear_request_context()
    bind_request_context(request_id="abc123", user="ana@subtropicstudios.com")

    assert structlog.contextvars.get_contextvars() == {
        "request_id": "abc123",
        "user": "ana@subtropicstudios.com",
    }

    clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}


class TestRequestLoggingMiddleware:
    def _client(self) -> TestClient:
        app = FastAPI()
        app.add_middleware(RequestLoggingMiddleware)

        @app.get("/ping")
        async def ping() -> dict[str, str]:
            return {"request_id": structlog.contextvars.get_contextvars().get("request_id", "")}

        return TestClient(app)

    def test_generates_request_id(self) -> None:
        response = self._client().get("/ping")

        request_id = response.headers[REQUEST_ID_HEADER]
        assert len(request_id) == 12
        assert response.json() == {"request_id": request_id}

    def test_echoes_caller_request_id(self) -> None:
        response = self._client().get("/ping", headers={REQUEST_ID_HEADER: "from-proxy"})

        assert response.headers[REQUEST_ID_HEADER] == "from-proxy"
        assert response.json() == {"request_id": "from-proxy"}


def test_configure_writes_to_given_stream() -> None:
    stream = io.StringIO()
    configure_logging(log_level="warning", stream=stream)

    get_logger("toolbench.tests").info("hidden_event")
    get_logger("toolbench.tests").warning("shown_event", day="2026-02-11")

    output = stream.getvalue()
    assert "shown_event" in output
    assert "hidden_event" not in output
