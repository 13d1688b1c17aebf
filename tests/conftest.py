"""Shared test fixtures for all test modules."""

import logging
from collections.abc import Iterator
from typing import Any

import httpx
import pytest

from ranchwatch.adapters.storage.ring_buffer import RingBufferRecordStorage
from ranchwatch.core.config import LoggerConfig, Mode
from ranchwatch.core.context import clear_request_context
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.models import TRACE, LogLevel, LogRecord


@pytest.fixture(autouse=True)
def _isolate_ranchwatch_logging() -> Iterator[None]:
    """Restore the ranchwatch logger and ambient context after each test."""
    logger = logging.getLogger("ranchwatch")
    handlers = list(logger.handlers)
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
    clear_request_context()


@pytest.fixture
def record_storage() -> RingBufferRecordStorage:
    """Ring buffer that receives every record the logger processes."""
    return RingBufferRecordStorage(max_size=500)


@pytest.fixture
def cattle_logger(record_storage: RingBufferRecordStorage) -> CattleLogger:
    """Fresh production-mode logger with its own aggregator and sink."""
    return CattleLogger(LoggerConfig(mode=Mode.PRODUCTION), sinks=[record_storage])


@pytest.fixture
def dev_logger(record_storage: RingBufferRecordStorage) -> CattleLogger:
    """Fresh development-mode logger."""
    return CattleLogger(LoggerConfig(mode=Mode.DEVELOPMENT), sinks=[record_storage])


@pytest.fixture
def capture_ranchwatch(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """caplog capturing every level on the ranchwatch logger hierarchy."""
    caplog.set_level(TRACE, logger="ranchwatch")
    return caplog


@pytest.fixture
def make_record():
    """Factory fixture for LogRecord objects with sensible defaults."""

    def _record(**overrides: Any) -> LogRecord:
        fields: dict[str, Any] = {
            "timestamp": "2026-01-15T08:30:00.000Z",
            "level": LogLevel.INFO,
            "event_type": "http_request",
            "message": "test",
        }
        fields.update(overrides)
        return LogRecord(**fields)

    return _record


# === ASGI Test Fixtures ===


@pytest.fixture
def basic_asgi_app():
    """Basic ASGI app fixture that returns 200 OK."""
    from ranchwatch.adapters.frameworks.asgi import Receive, Scope, Send

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        """Simple ASGI app that returns 200 OK."""
        await send({"type": "http.response.start", "status": 200, "headers": []})
        await send({"type": "http.response.body", "body": b"OK"})

    return app


@pytest.fixture
def status_asgi_app():
    """Factory fixture for an ASGI app answering with a fixed status code."""
    from ranchwatch.adapters.frameworks.asgi import Receive, Scope, Send

    def _app(status: int, body: bytes = b"{}"):
        async def app(scope: Scope, receive: Receive, send: Send) -> None:
            # Drain the request body like a real framework would
            while True:
                message = await receive()
                if not message.get("more_body", False):
                    break
            await send({"type": "http.response.start", "status": status, "headers": []})
            await send({"type": "http.response.body", "body": body})

        return app

    return _app


@pytest.fixture
def asgi_scope():
    """Factory fixture for creating ASGI scope dicts."""
    from ranchwatch.adapters.frameworks.asgi import Scope

    def _scope(
        method: str = "GET",
        path: str = "/test",
        headers: dict[str, str] | None = None,
        query_string: bytes = b"",
        state: dict[str, Any] | None = None,
        path_params: dict[str, Any] | None = None,
    ) -> Scope:
        scope: Scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "headers": [
                (k.lower().encode(), v.encode()) for k, v in (headers or {}).items()
            ],
            "client": ("10.0.0.7", 52100),
        }
        if state is not None:
            scope["state"] = state
        if path_params is not None:
            scope["path_params"] = path_params
        return scope

    return _scope


@pytest.fixture
def asgi_receive():
    """Factory fixture for a receive callable delivering a request body."""

    def _receive(body: bytes = b""):
        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": body, "more_body": False}

        return receive

    return _receive


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture."""

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses


@pytest.fixture
def asgi_test_client():
    """Factory fixture that creates an httpx.AsyncClient for ASGI testing.

    Usage:
        async def test_something(asgi_test_client):
            async with asgi_test_client(app) as client:
                response = await client.get("/metrics")
    """
    def _get_client(app):
        """Return an AsyncClient context manager for the given app."""
        return httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app), base_url="http://test"
        )

    return _get_client
