"""Observability for cattle ranch management APIs.

Structured ranch event records, in-memory request metrics, and ASGI
instrumentation.
"""

from ranchwatch.adapters.frameworks.asgi import (
    AuditTrailMiddleware,
    RequestLoggingMiddleware,
    audit_trail,
)
from ranchwatch.adapters.logging import CattleLogHandler, configure_logging
from ranchwatch.adapters.storage.ring_buffer import RingBufferRecordStorage
from ranchwatch.core.alerts import CriticalAlertNotifier
from ranchwatch.core.config import LoggerConfig, Mode
from ranchwatch.core.context import (
    RequestContext,
    clear_request_context,
    get_request_context,
    set_request_context,
)
from ranchwatch.core.events import AuditOperation, AuthEvent, VeterinaryActivity
from ranchwatch.core.exceptions import ConfigurationError, RanchwatchError
from ranchwatch.core.geo import haversine_distance
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.logs import (
    get_system_metrics,
    log_auth_event,
    log_cattle_error,
    log_cattle_event,
    log_database_error,
    log_location_change,
    log_message,
    log_performance,
    log_user_activity,
    log_veterinary_activity,
    reset_system_metrics,
    set_log_level,
)
from ranchwatch.core.metrics import MetricsAggregator
from ranchwatch.core.models import (
    CattleEventType,
    ErrorInfo,
    GeoPoint,
    LogLevel,
    LogRecord,
    MetricsSnapshot,
    SlowQuery,
)

__all__ = [
    "AuditOperation",
    "AuditTrailMiddleware",
    "AuthEvent",
    "CattleEventType",
    "CattleLogHandler",
    "CattleLogger",
    "ConfigurationError",
    "CriticalAlertNotifier",
    "ErrorInfo",
    "GeoPoint",
    "LogLevel",
    "LogRecord",
    "LoggerConfig",
    "MetricsAggregator",
    "MetricsSnapshot",
    "Mode",
    "RanchwatchError",
    "RequestContext",
    "RequestLoggingMiddleware",
    "RingBufferRecordStorage",
    "SlowQuery",
    "VeterinaryActivity",
    "audit_trail",
    "clear_request_context",
    "configure_logging",
    "get_request_context",
    "get_system_metrics",
    "haversine_distance",
    "log_auth_event",
    "log_cattle_error",
    "log_cattle_event",
    "log_database_error",
    "log_location_change",
    "log_message",
    "log_performance",
    "log_user_activity",
    "log_veterinary_activity",
    "reset_system_metrics",
    "set_log_level",
    "set_request_context",
]
