"""Request context carried into log records.

A RequestContext can be passed explicitly to every logging helper, or set
once per request as the ambient context (the request middleware does this)
so that helpers called deep inside a handler pick it up automatically.
"""

from contextvars import ContextVar, Token
from dataclasses import dataclass, field, replace
from typing import Any

_current_context: ContextVar["RequestContext | None"] = ContextVar(
    "ranchwatch_request_context", default=None
)


@dataclass(frozen=True)
class RequestContext:
    """Who made a request, and what it was. Every field is optional."""

    user_id: str | None = None
    user_email: str | None = None
    user_role: str | None = None
    request_id: str | None = None
    method: str | None = None
    path: str | None = None
    ip: str | None = None
    user_agent: str | None = None
    query: dict[str, Any] = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    content_length: int = 0

    def with_updates(self, **changes: Any) -> "RequestContext":
        return replace(self, **changes)


EMPTY_CONTEXT = RequestContext()


def set_request_context(context: RequestContext) -> Token["RequestContext | None"]:
    """Make context the ambient request context for the current task."""
    return _current_context.set(context)


def get_request_context() -> RequestContext:
    """Return the ambient request context, or an empty one."""
    return _current_context.get() or EMPTY_CONTEXT


def clear_request_context(token: Token["RequestContext | None"] | None = None) -> None:
    """Restore the previous context (when given a token) or clear it."""
    if token is not None:
        _current_context.reset(token)
    else:
        _current_context.set(None)


def resolve_context(context: RequestContext | None) -> RequestContext:
    return context if context is not None else get_request_context()
