"""ASGI instrumentation for ranch APIs.

Both middlewares intercept the ASGI ``send`` callable, so they work with any
ASGI framework (FastAPI, Starlette) or server without depending on one.
"""

import fnmatch
import json
import time
from collections.abc import Callable, Coroutine, Iterable
from typing import Any
from urllib.parse import parse_qs

from ranchwatch.core.context import (
    RequestContext,
    clear_request_context,
    set_request_context,
)
from ranchwatch.core.events import AuditOperation
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.models import CattleEventType, LogLevel, LogRecord, utc_timestamp

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _headers(scope: Scope) -> dict[str, str]:
    """Decode ASGI headers into a dict keyed by lowercase name."""
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    return {
        name.decode("latin-1").lower(): value.decode("utf-8", errors="replace")
        for name, value in headers
    }


def _parse_query_params(scope: Scope) -> dict[str, Any]:
    """Parse the query string, collapsing single-valued parameters."""
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in parse_qs(query_string).items()
    }


def _original_url(scope: Scope) -> str:
    root_path = scope.get("root_path", "")
    path = scope.get("path", "")
    # Some servers already include root_path in path.
    if not path.startswith(root_path):
        path = root_path + path
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return f"{path}?{query_string}" if query_string else path


def _parse_int(value: str | None) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


def _extract_request_id(scope: Scope, header_name: str = "X-Request-ID") -> str | None:
    """Return the request id header value (case-insensitive), if present."""
    return _headers(scope).get(header_name.lower()) or None


def _get_log_level_for_status(status_code: int) -> LogLevel:
    """WARN for 4xx/5xx responses, INFO otherwise."""
    if status_code >= 400:
        return LogLevel.WARN
    return LogLevel.INFO


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def context_from_scope(scope: Scope) -> RequestContext:
    """Build a RequestContext from an ASGI scope.

    User fields and the request id are read from ``scope["state"]``, which
    is where ``request.state`` values set by auth middleware end up.
    """
    headers = _headers(scope)
    state = scope.get("state") or {}
    client = scope.get("client")
    return RequestContext(
        user_id=_optional_str(state.get("user_id")),
        user_email=_optional_str(state.get("user_email")),
        user_role=_optional_str(state.get("user_role")),
        request_id=_optional_str(state.get("request_id")),
        method=scope.get("method"),
        path=_original_url(scope),
        ip=client[0] if client else None,
        user_agent=headers.get("user-agent"),
        query=_parse_query_params(scope),
        params=dict(scope.get("path_params") or {}),
        content_length=_parse_int(headers.get("content-length")),
    )


def _record_from_context(
    context: RequestContext,
    level: LogLevel,
    event_type: str,
    message: str,
    **fields: Any,
) -> LogRecord:
    return LogRecord(
        timestamp=utc_timestamp(),
        level=level,
        event_type=event_type,
        message=message,
        user_id=context.user_id,
        user_email=context.user_email,
        user_role=context.user_role,
        request_id=context.request_id,
        method=context.method,
        path=context.path,
        **fields,
    )


class RequestLoggingMiddleware:
    """ASGI middleware that logs every request on entry and on completion.

    The exit record is written exactly once per request, when the final
    body message is sent, and carries the status code and the elapsed time
    in milliseconds. If the wrapped app raises before responding, the exit
    record is written as an ERROR with status 500 and the exception is
    re-raised.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: CattleLogger,
        request_id_header: str = "X-Request-ID",
        exclude_paths: list[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application to wrap.
            logger: Logger the request records are written to.
            request_id_header: Header carrying a caller supplied request id.
                A new id is generated when it is absent.
            exclude_paths: Paths not logged. Supports exact matches and
                wildcard patterns (e.g. "/internal/*").
        """
        self.app = app
        self.logger = logger
        self.request_id_header = request_id_header
        self.exclude_paths = exclude_paths or []

    def _path_excluded(self, path: str) -> bool:
        """Check if path matches any pattern in exclude_paths."""
        return any(fnmatch.fnmatch(path, pattern) for pattern in self.exclude_paths)

    def _log_entry(self, context: RequestContext) -> None:
        self.logger.log(
            _record_from_context(
                context,
                LogLevel.INFO,
                CattleEventType.HTTP_REQUEST,
                f"Request received: {context.method} {context.path}",
                ip=context.ip,
                user_agent=context.user_agent,
                metadata={
                    "query": context.query,
                    "params": context.params,
                    "body_size": context.content_length,
                },
            )
        )

    def _log_exit(
        self,
        context: RequestContext,
        scope: Scope,
        status_code: int,
        response_time: float,
        response_size: int,
        exception: BaseException | None = None,
    ) -> None:
        # Auth running inside the app may have set the user since entry.
        state = context_from_scope(scope)
        context = context.with_updates(
            user_id=state.user_id,
            user_email=state.user_email,
            user_role=state.user_role,
        )
        metadata: dict[str, Any] = {"response_size": response_size}
        level = _get_log_level_for_status(status_code)
        if exception is not None:
            level = LogLevel.ERROR
            metadata["exception"] = f"{type(exception).__name__}: {exception!s}"
        self.logger.log(
            _record_from_context(
                context,
                level,
                CattleEventType.HTTP_RESPONSE,
                f"Response: {context.method} {context.path} - {status_code}",
                status_code=status_code,
                response_time=response_time,
                ip=context.ip,
                metadata=metadata,
            )
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI callable interface that processes requests through the wrapped app."""
        if scope["type"] != "http" or self._path_excluded(scope.get("path", "")):
            await self.app(scope, receive, send)
            return

        start_time = time.perf_counter()
        request_id = (
            _extract_request_id(scope, self.request_id_header)
            or self.logger.generate_request_id()
        )
        scope.setdefault("state", {})["request_id"] = request_id
        context = context_from_scope(scope)
        self._log_entry(context)

        captured: dict[str, Any] = {"status": None, "body_size": 0, "logged": False}

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            elif message["type"] == "http.response.body":
                captured["body_size"] += len(message.get("body", b""))
                if not message.get("more_body", False) and not captured["logged"]:
                    captured["logged"] = True
                    elapsed_ms = (time.perf_counter() - start_time) * 1000
                    self._log_exit(
                        context,
                        scope,
                        captured["status"] or 0,
                        elapsed_ms,
                        captured["body_size"],
                    )
            await send(message)

        token = set_request_context(context)
        try:
            await self.app(scope, receive, wrapped_send)
        except Exception as e:
            if not captured["logged"]:
                captured["logged"] = True
                elapsed_ms = (time.perf_counter() - start_time) * 1000
                self._log_exit(
                    context, scope, 500, elapsed_ms, captured["body_size"], e
                )
            raise
        finally:
            clear_request_context(token)


def _parse_json_body(body: bytes) -> Any:
    if not body:
        return None
    try:
        return json.loads(body)
    except ValueError:
        return None


class AuditTrailMiddleware:
    """Wraps an ASGI app and records successful CRUD operations.

    A record ``<resource>_<operation>`` is written once per request, only
    when the response status is 2xx. For UPDATE the parsed JSON request body
    is included as ``changes``.
    """

    def __init__(
        self,
        app: ASGIApp,
        logger: CattleLogger,
        operation: AuditOperation | str,
        resource: str,
        methods: Iterable[str] | None = None,
    ) -> None:
        """Initialize the middleware.

        Args:
            app: The ASGI application (or route) to wrap.
            logger: Logger the audit records are written to.
            operation: The CRUD operation the wrapped app performs.
            resource: Name of the resource, e.g. "Bovine".
            methods: Only audit these HTTP methods. All methods when None.
        """
        self.app = app
        self.logger = logger
        self.operation = AuditOperation(str(operation).upper())
        self.resource = resource
        self.methods = {m.upper() for m in methods} if methods is not None else None

    @property
    def event_type(self) -> str:
        return f"{self.resource.lower()}_{self.operation.lower()}"

    def _write_audit(self, scope: Scope, status_code: int, body: bytes) -> None:
        context = context_from_scope(scope)
        payload = _parse_json_body(body)
        resource_id = context.params.get("id")
        if resource_id is None and isinstance(payload, dict):
            resource_id = payload.get("id")
        self.logger.log(
            _record_from_context(
                context,
                LogLevel.INFO,
                self.event_type,
                f"{self.operation} on {self.resource}: {context.method} {context.path}",
                status_code=status_code,
                metadata={
                    "operation": str(self.operation),
                    "resource": self.resource,
                    "resource_id": resource_id,
                    "changes": (
                        payload if self.operation is AuditOperation.UPDATE else None
                    ),
                },
            )
        )

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or (
            self.methods is not None and scope.get("method") not in self.methods
        ):
            await self.app(scope, receive, send)
            return

        body_chunks: list[bytes] = []
        captured: dict[str, Any] = {"status": None, "done": False}

        async def wrapped_receive() -> dict[str, Any]:
            message = await receive()
            if message["type"] == "http.request":
                body_chunks.append(message.get("body", b""))
            return message

        async def wrapped_send(message: dict[str, Any]) -> None:
            if message["type"] == "http.response.start":
                captured["status"] = message["status"]
            elif message["type"] == "http.response.body":
                if not message.get("more_body", False) and not captured["done"]:
                    captured["done"] = True
                    status = captured["status"] or 0
                    if 200 <= status < 300:
                        self._write_audit(scope, status, b"".join(body_chunks))
            await send(message)

        await self.app(scope, wrapped_receive, wrapped_send)


def audit_trail(
    logger: CattleLogger,
    operation: AuditOperation | str,
    resource: str,
    methods: Iterable[str] | None = None,
) -> Callable[[ASGIApp], AuditTrailMiddleware]:
    """Decorator form of AuditTrailMiddleware.

    Example:
        ```python
        @audit_trail(logger, AuditOperation.CREATE, "Bovine")
        async def create_bovine(scope, receive, send): ...
        ```
    """

    def wrap(app: ASGIApp) -> AuditTrailMiddleware:
        return AuditTrailMiddleware(app, logger, operation, resource, methods)

    return wrap
