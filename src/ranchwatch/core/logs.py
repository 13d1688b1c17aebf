"""Helper functions for logging ranch events.

Each helper builds a LogRecord for one category of domain event, fills in
the request context, and hands it to a CattleLogger. The context argument
defaults to the ambient request context set by the request middleware.
"""

import traceback
from collections.abc import Mapping
from typing import Any

from ranchwatch.core.context import RequestContext, resolve_context
from ranchwatch.core.events import AuthEvent, VeterinaryActivity
from ranchwatch.core.geo import haversine_distance
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.models import (
    CattleEventType,
    ErrorInfo,
    GeoPoint,
    LogLevel,
    LogRecord,
    MetricsSnapshot,
    utc_timestamp,
)

Location = GeoPoint | Mapping[str, Any]

SLOW_OPERATION_MS = 5000


def _as_geo_point(value: Any) -> GeoPoint | None:
    if isinstance(value, GeoPoint):
        return value
    if isinstance(value, Mapping):
        return GeoPoint.from_mapping(value)
    return None


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


def _user_fields(context: RequestContext) -> dict[str, Any]:
    return {
        "user_id": context.user_id,
        "user_email": context.user_email,
        "user_role": context.user_role,
        "request_id": context.request_id,
    }


def _error_info(error: BaseException) -> ErrorInfo:
    return ErrorInfo(
        name=type(error).__name__,
        message=str(error),
        code=_optional_str(getattr(error, "code", None)),
    )


def log_cattle_event(
    logger: CattleLogger,
    event_type: CattleEventType | str,
    message: str,
    context: RequestContext | None = None,
    metadata: dict[str, Any] | None = None,
) -> LogRecord:
    """Log an INFO event about an animal or ranch activity.

    Args:
        logger: The logger to write to.
        event_type: Event category.
        message: Human readable description.
        context: Request context (defaults to the ambient one).
        metadata: Free-form details. ``cattle_id``, ``cattle_ear_tag`` and
            ``location`` are also copied onto the record itself.

    Returns:
        The record that was logged.
    """
    ctx = resolve_context(context)
    data = metadata or {}
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.INFO,
        event_type=str(event_type),
        message=message,
        **_user_fields(ctx),
        cattle_id=_optional_str(data.get("cattle_id")),
        cattle_ear_tag=_optional_str(data.get("cattle_ear_tag")),
        location=_as_geo_point(data.get("location")),
        metadata=metadata,
    )
    logger.log(record)
    return record


def log_cattle_error(
    logger: CattleLogger,
    error: BaseException,
    context: RequestContext | None = None,
    extra: dict[str, Any] | None = None,
) -> LogRecord:
    """Log an exception as an ERROR record.

    The exception's type name, message, optional ``code`` attribute and
    formatted traceback are captured, along with the request method and
    path from the context.
    """
    ctx = resolve_context(context)
    data = extra or {}
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.ERROR,
        event_type=CattleEventType.SYSTEM_ERROR,
        message=str(error),
        **_user_fields(ctx),
        cattle_id=_optional_str(data.get("cattle_id")),
        cattle_ear_tag=_optional_str(data.get("cattle_ear_tag")),
        method=ctx.method,
        path=ctx.path,
        stack="".join(traceback.format_exception(error)),
        error=_error_info(error),
        metadata=extra,
    )
    logger.log(record)
    return record


def log_veterinary_activity(
    logger: CattleLogger,
    activity: VeterinaryActivity | str,
    ear_tag: str,
    details: str,
    context: RequestContext | None = None,
    location: Location | None = None,
) -> LogRecord:
    """Log a diagnosis, treatment, vaccination or checkup.

    Raises:
        ValueError: If activity is not one of the known activity kinds.
    """
    kind = VeterinaryActivity(activity)
    ctx = resolve_context(context)
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.INFO,
        event_type=kind.event_type,
        message=f"Veterinary activity: {kind} on cattle {ear_tag}",
        **_user_fields(ctx),
        cattle_ear_tag=ear_tag,
        location=_as_geo_point(location),
        metadata={
            "activity": str(kind),
            "details": details,
            "veterinarian": ctx.user_email,
        },
    )
    logger.log(record)
    return record


def log_location_change(
    logger: CattleLogger,
    ear_tag: str,
    from_location: Location,
    to_location: Location,
    context: RequestContext | None = None,
    reason: str | None = None,
) -> LogRecord:
    """Log an animal moving between two points, with the distance in km.

    The distance is NaN when either point lacks numeric coordinates.
    """
    origin = _as_geo_point(from_location) or GeoPoint.from_mapping({})
    destination = _as_geo_point(to_location) or GeoPoint.from_mapping({})
    ctx = resolve_context(context)
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.INFO,
        event_type=CattleEventType.CATTLE_MOVED,
        message=(
            f"Cattle {ear_tag} moved from {origin.address or 'unknown location'} "
            f"to {destination.address or 'new location'}"
        ),
        **_user_fields(ctx),
        cattle_ear_tag=ear_tag,
        location=destination,
        metadata={
            "from_location": origin.to_dict(),
            "to_location": destination.to_dict(),
            "reason": reason,
            "distance": haversine_distance(origin, destination),
        },
    )
    logger.log(record)
    return record


def log_auth_event(
    logger: CattleLogger,
    event: AuthEvent | str,
    context: RequestContext | None = None,
    metadata: dict[str, Any] | None = None,
) -> LogRecord:
    """Log a login, logout, failed login or expired token.

    Failed logins are logged at WARN, everything else at INFO.
    """
    kind = AuthEvent(event)
    ctx = resolve_context(context)
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=kind.level,
        event_type=kind.event_type,
        message=f"Authentication event: {kind}",
        **_user_fields(ctx),
        ip=ctx.ip,
        user_agent=ctx.user_agent,
        metadata={"event": str(kind), **(metadata or {})},
    )
    logger.log(record)
    return record


def log_user_activity(
    logger: CattleLogger,
    action: str,
    context: RequestContext | None = None,
    metadata: dict[str, Any] | None = None,
) -> LogRecord:
    """Log something a user did, e.g. exporting a herd report."""
    ctx = resolve_context(context)
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.INFO,
        event_type=CattleEventType.USER_ACTIVITY,
        message=f"User activity: {action}",
        **_user_fields(ctx),
        metadata={
            **(metadata or {}),
            "action": action,
            "user_agent": ctx.user_agent or "unknown",
        },
    )
    logger.log(record)
    return record


def log_performance(
    logger: CattleLogger,
    operation: str,
    duration: float,
    context: RequestContext | None = None,
    metadata: dict[str, Any] | None = None,
) -> LogRecord:
    """Log how long an operation took.

    Operations slower than SLOW_OPERATION_MS are logged at WARN, everything
    else at DEBUG. The duration is kept in metadata only, so it does not
    affect the average response time.

    Args:
        logger: The logger to write to.
        operation: Name of the timed operation.
        duration: Elapsed time in milliseconds.
        context: Request context (defaults to the ambient one).
        metadata: Extra details merged into the record metadata.
    """
    exceeded = duration > SLOW_OPERATION_MS
    ctx = resolve_context(context)
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.WARN if exceeded else LogLevel.DEBUG,
        event_type=CattleEventType.PERFORMANCE,
        message=f"Performance: {operation} completed in {duration}ms",
        **_user_fields(ctx),
        metadata={
            **(metadata or {}),
            "operation": operation,
            "duration": duration,
            "threshold": "exceeded" if exceeded else "normal",
        },
    )
    logger.log(record)
    return record


def log_database_error(
    logger: CattleLogger,
    operation: str,
    error: BaseException,
    query: str | None = None,
    params: list[Any] | tuple[Any, ...] | None = None,
    context: RequestContext | None = None,
) -> LogRecord:
    """Log a failed database operation as an ERROR record.

    The operation name, the query and its parameters go into metadata.
    """
    ctx = resolve_context(context)
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel.ERROR,
        event_type=CattleEventType.DATABASE_ERROR,
        message=f"Database error in operation: {operation}",
        **_user_fields(ctx),
        method=ctx.method,
        path=ctx.path,
        stack="".join(traceback.format_exception(error)),
        error=_error_info(error),
        metadata={
            "operation": operation,
            "query": query,
            "params": list(params) if params is not None else None,
        },
    )
    logger.log(record)
    return record


def log_message(
    logger: CattleLogger,
    level: LogLevel | str,
    event_type: CattleEventType | str,
    message: str,
    metadata: dict[str, Any] | None = None,
) -> LogRecord:
    """Log a bare record with no request context."""
    record = LogRecord(
        timestamp=utc_timestamp(),
        level=LogLevel(str(level).lower()),
        event_type=str(event_type),
        message=message,
        metadata=metadata,
    )
    logger.log(record)
    return record


def get_system_metrics(logger: CattleLogger) -> MetricsSnapshot:
    return logger.get_metrics()


def reset_system_metrics(logger: CattleLogger) -> None:
    logger.reset_metrics()


def set_log_level(logger: CattleLogger, level: LogLevel | str) -> None:
    logger.set_log_level(level)
