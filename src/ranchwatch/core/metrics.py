"""In-memory aggregation of log records into request metrics."""

import math
import threading
from collections import deque

from ranchwatch.core.exceptions import ConfigurationError
from ranchwatch.core.models import LogLevel, LogRecord, MetricsSnapshot, SlowQuery

DEFAULT_SLOW_QUERY_THRESHOLD_MS = 1000.0
DEFAULT_MAX_SLOW_QUERIES = 100


def _as_number(value: object) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return float(value)


class MetricsAggregator:
    """Running rollup of every record passed to the logger.

    One instance is created by the application and shared by the logger and
    middleware. All operations hold a single lock, so record, read, and
    reset never interleave.

    Args:
        slow_query_threshold_ms: Response time above which a record is
            kept as a slow query.
        max_slow_queries: Capacity of the slow query buffer. The oldest
            entry is evicted when it is full.
    """

    def __init__(
        self,
        slow_query_threshold_ms: float = DEFAULT_SLOW_QUERY_THRESHOLD_MS,
        max_slow_queries: int = DEFAULT_MAX_SLOW_QUERIES,
    ) -> None:
        if max_slow_queries <= 0:
            raise ConfigurationError("max_slow_queries must be positive")
        self._lock = threading.Lock()
        self._slow_query_threshold_ms = slow_query_threshold_ms
        self._max_slow_queries = max_slow_queries
        self._reset()

    def _reset(self) -> None:
        self._request_count = 0
        self._error_count = 0
        self._average_response_time = 0.0
        self._active_users: set[str] = set()
        self._popular_endpoints: dict[str, int] = {}
        self._slow_queries: deque[SlowQuery] = deque(maxlen=self._max_slow_queries)

    def record(self, entry: LogRecord) -> None:
        """Fold one record into the running metrics."""
        with self._lock:
            self._request_count += 1

            if entry.user_id:
                self._active_users.add(str(entry.user_id))

            if entry.level is LogLevel.ERROR:
                self._error_count += 1

            if entry.path:
                self._popular_endpoints[entry.path] = (
                    self._popular_endpoints.get(entry.path, 0) + 1
                )

            # A zero response time is treated as absent.
            response_time = _as_number(entry.response_time)
            if not response_time:
                return

            # The sample size is the total record count, not the number of
            # timed records.
            count = self._request_count
            self._average_response_time = (
                self._average_response_time * (count - 1) + response_time
            ) / count

            if response_time > self._slow_query_threshold_ms:
                query = f"{entry.method or ''} {entry.path or ''}"
                self._slow_queries.append(
                    SlowQuery(
                        query=query,
                        duration=response_time,
                        timestamp=entry.timestamp,
                    )
                )

    def get_metrics(self) -> MetricsSnapshot:
        """Return a copy of the current metrics that callers may mutate freely."""
        with self._lock:
            return MetricsSnapshot(
                request_count=self._request_count,
                error_count=self._error_count,
                average_response_time=self._average_response_time,
                active_users=set(self._active_users),
                popular_endpoints=dict(self._popular_endpoints),
                slow_queries=list(self._slow_queries),
            )

    def reset_metrics(self) -> None:
        """Clear every counter and collection."""
        with self._lock:
            self._reset()
