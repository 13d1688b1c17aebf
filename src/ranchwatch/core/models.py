"""Core domain models for ranch observability data."""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

TRACE = 5
logging.addLevelName(TRACE, "TRACE")


class LogLevel(StrEnum):
    """Severity of a log record, most severe first."""

    ERROR = "error"
    WARN = "warn"
    INFO = "info"
    DEBUG = "debug"
    TRACE = "trace"

    @property
    def severity(self) -> int:
        """Position in the severity order (0 is the most severe)."""
        return _SEVERITY_ORDER.index(self)

    @property
    def stdlib_level(self) -> int:
        """Equivalent numeric level for the standard library logging module."""
        return _STDLIB_LEVELS[self]

    @classmethod
    def parse(cls, value: str | None, default: "LogLevel") -> "LogLevel":
        """Parse a level name, accepting 'warning' and any casing."""
        if not value:
            return default
        normalized = value.strip().lower()
        if normalized == "warning":
            normalized = "warn"
        try:
            return cls(normalized)
        except ValueError:
            return default


_SEVERITY_ORDER = [
    LogLevel.ERROR,
    LogLevel.WARN,
    LogLevel.INFO,
    LogLevel.DEBUG,
    LogLevel.TRACE,
]

_STDLIB_LEVELS = {
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARN: logging.WARNING,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.TRACE: TRACE,
}


class CattleEventType(StrEnum):
    """Domain vocabulary of ranch events."""

    # Cattle
    CATTLE_CREATED = "cattle_created"
    CATTLE_UPDATED = "cattle_updated"
    CATTLE_DELETED = "cattle_deleted"
    CATTLE_MOVED = "cattle_moved"
    CATTLE_DECEASED = "cattle_deceased"

    # Health
    HEALTH_CHECKUP = "health_checkup"
    ILLNESS_DIAGNOSED = "illness_diagnosed"
    TREATMENT_STARTED = "treatment_started"
    TREATMENT_COMPLETED = "treatment_completed"
    RECOVERY_RECORDED = "recovery_recorded"

    # Vaccination
    VACCINATION_SCHEDULED = "vaccination_scheduled"
    VACCINATION_ADMINISTERED = "vaccination_administered"
    VACCINATION_MISSED = "vaccination_missed"
    VACCINE_REACTION = "vaccine_reaction"

    # Reproduction
    BREEDING_PLANNED = "breeding_planned"
    MATING_RECORDED = "mating_recorded"
    PREGNANCY_DETECTED = "pregnancy_detected"
    BIRTH_RECORDED = "birth_recorded"
    WEANING_RECORDED = "weaning_recorded"

    # Production
    MILK_PRODUCTION_RECORDED = "milk_production_recorded"
    WEIGHT_RECORDED = "weight_recorded"
    FEED_CONSUMPTION_RECORDED = "feed_consumption_recorded"

    # Inventory
    MEDICATION_USED = "medication_used"
    MEDICATION_EXPIRED = "medication_expired"
    INVENTORY_UPDATED = "inventory_updated"
    SUPPLY_ORDERED = "supply_ordered"

    # Security
    LOGIN_ATTEMPT = "login_attempt"
    LOGOUT = "logout"
    PASSWORD_CHANGED = "password_changed"
    PERMISSION_CHANGED = "permission_changed"

    # System
    BACKUP_CREATED = "backup_created"
    DATA_EXPORTED = "data_exported"
    DATA_IMPORTED = "data_imported"
    SYSTEM_ERROR = "system_error"
    DATABASE_ERROR = "database_error"
    PERFORMANCE = "performance"
    USER_ACTIVITY = "user_activity"
    LOG_LEVEL_CHANGED = "log_level_changed"

    # HTTP
    HTTP_REQUEST = "http_request"
    HTTP_RESPONSE = "http_response"


def _coerce_coordinate(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude position, optionally with a street address.

    Attributes:
        latitude: Degrees north.
        longitude: Degrees east.
        address: Human readable place name.
    """

    latitude: float
    longitude: float
    address: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "GeoPoint":
        """Build a point from a loose mapping (e.g. a JSON request body).

        Missing or non-numeric coordinates become NaN.
        """
        address = data.get("address")
        return cls(
            latitude=_coerce_coordinate(data.get("latitude")),
            longitude=_coerce_coordinate(data.get("longitude")),
            address=str(address) if address is not None else None,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "latitude": self.latitude,
            "longitude": self.longitude,
        }
        if self.address is not None:
            data["address"] = self.address
        return data


@dataclass(frozen=True)
class ErrorInfo:
    """Summary of an exception attached to an error record."""

    name: str
    message: str
    code: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "message": self.message}
        if self.code is not None:
            data["code"] = self.code
        return data


def utc_timestamp(at: float | None = None) -> str:
    """UTC time as ISO-8601 with millisecond precision and a Z suffix.

    Args:
        at: Unix timestamp to render. Defaults to now.
    """
    now = datetime.now(UTC) if at is None else datetime.fromtimestamp(at, UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# Field name -> JSON key, in output order.
_RECORD_KEYS = {
    "timestamp": "timestamp",
    "level": "level",
    "event_type": "eventType",
    "message": "message",
    "user_id": "userId",
    "user_email": "userEmail",
    "user_role": "userRole",
    "request_id": "requestId",
    "cattle_id": "cattleId",
    "cattle_ear_tag": "cattleEarTag",
    "location": "location",
    "method": "method",
    "path": "path",
    "status_code": "statusCode",
    "response_time": "responseTime",
    "ip": "ip",
    "user_agent": "userAgent",
    "metadata": "metadata",
    "stack": "stack",
    "error": "error",
}


@dataclass(frozen=True)
class LogRecord:
    """A structured observability event.

    Created once by a logging helper, handed to the logger, and never
    mutated afterwards.

    Attributes:
        timestamp: ISO-8601 UTC timestamp.
        level: Severity of the event.
        event_type: A CattleEventType value or any free-form tag.
        message: Human readable description.
        metadata: Arbitrary structured fields supplied by the call site.
        response_time: Elapsed request time in milliseconds.
    """

    timestamp: str
    level: LogLevel
    event_type: str
    message: str
    user_id: str | None = None
    user_email: str | None = None
    user_role: str | None = None
    request_id: str | None = None
    cattle_id: str | None = None
    cattle_ear_tag: str | None = None
    location: GeoPoint | None = None
    method: str | None = None
    path: str | None = None
    status_code: int | None = None
    response_time: float | None = None
    ip: str | None = None
    user_agent: str | None = None
    metadata: dict[str, Any] | None = None
    stack: str | None = None
    error: ErrorInfo | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping with camelCase keys, omitting None fields."""
        data: dict[str, Any] = {}
        for attr, key in _RECORD_KEYS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, (GeoPoint, ErrorInfo)):
                value = value.to_dict()
            elif isinstance(value, StrEnum):
                value = str(value)
            data[key] = value
        return data


@dataclass(frozen=True)
class SlowQuery:
    """A request whose response time exceeded the slow threshold."""

    query: str
    duration: float
    timestamp: str


@dataclass
class MetricsSnapshot:
    """Point-in-time copy of the aggregated metrics.

    Attributes:
        request_count: Number of records seen.
        error_count: Number of ERROR records seen.
        average_response_time: Running mean of response times in ms.
        active_users: Distinct user ids seen.
        popular_endpoints: Hit count per request path.
        slow_queries: Most recent slow requests, oldest first.
    """

    request_count: int = 0
    error_count: int = 0
    average_response_time: float = 0.0
    active_users: set[str] = field(default_factory=set)
    popular_endpoints: dict[str, int] = field(default_factory=dict)
    slow_queries: list[SlowQuery] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "requestCount": self.request_count,
            "errorCount": self.error_count,
            "averageResponseTime": self.average_response_time,
            "activeUsers": sorted(self.active_users),
            "popularEndpoints": dict(self.popular_endpoints),
            "slowQueries": [
                {
                    "query": q.query,
                    "duration": q.duration,
                    "timestamp": q.timestamp,
                }
                for q in self.slow_queries
            ],
        }
