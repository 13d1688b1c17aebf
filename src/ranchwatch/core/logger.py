"""The log pipeline: format, emit, aggregate, alert."""

import logging
import secrets
import string
import time
from collections.abc import Iterable
from dataclasses import replace

from ranchwatch.core.alerts import CriticalAlertNotifier
from ranchwatch.core.config import LoggerConfig
from ranchwatch.core.formatting import fallback_line, format_record
from ranchwatch.core.metrics import MetricsAggregator
from ranchwatch.core.models import (
    CattleEventType,
    LogLevel,
    LogRecord,
    MetricsSnapshot,
    utc_timestamp,
)
from ranchwatch.core.ports import RecordStoragePort

EVENTS_LOGGER_NAME = "ranchwatch.events"

_BASE36 = string.digits + string.ascii_lowercase

_log = logging.getLogger(__name__)


class CattleLogger:
    """Entry point every ranch log record goes through.

    For each record the logger writes the rendered line to the
    ``ranchwatch.events`` logger (if the level passes the configured gate),
    folds the record into the metrics, raises an alert for errors, and
    hands the record to any storage sinks.

    Example:
        ```python
        logger = CattleLogger(LoggerConfig(mode=Mode.DEVELOPMENT))
        log_message(logger, LogLevel.INFO, "backup_created", "Nightly backup")
        logger.get_metrics().request_count  # 1
        ```
    """

    def __init__(
        self,
        config: LoggerConfig | None = None,
        metrics: MetricsAggregator | None = None,
        notifier: CriticalAlertNotifier | None = None,
        sinks: Iterable[RecordStoragePort] | None = None,
        emitter: logging.Logger | None = None,
    ) -> None:
        """Initialize the logger.

        Args:
            config: Output settings. Defaults to LoggerConfig().
            metrics: Aggregator to update. A new one is created from the
                config when omitted.
            notifier: Alert channel for ERROR records.
            sinks: Storage adapters that receive every record.
            emitter: Standard library logger the rendered lines go to.
        """
        self.config = config or LoggerConfig()
        self.metrics = metrics or MetricsAggregator(
            slow_query_threshold_ms=self.config.slow_query_threshold_ms,
            max_slow_queries=self.config.max_slow_queries,
        )
        self.notifier = notifier or CriticalAlertNotifier()
        self.sinks = list(sinks or [])
        self.emitter = emitter or logging.getLogger(EVENTS_LOGGER_NAME)

    def _emit(self, record: LogRecord) -> None:
        if self.config.passes(record.level):
            line = format_record(record, self.config.mode)
            self.emitter.log(record.level.stdlib_level, line)

    def _alert(self, record: LogRecord) -> None:
        if record.level is LogLevel.ERROR:
            self.notifier.notify(record)

    def _store(self, record: LogRecord) -> None:
        for sink in self.sinks:
            sink.write(record)

    def log(self, record: LogRecord) -> None:
        """Process one record. Never raises.

        Each stage runs on its own, so a failure while writing output does
        not keep the record out of the metrics, the alert channel or the
        sinks.
        """
        for stage in (self._emit, self.metrics.record, self._alert, self._store):
            try:
                stage(record)
            except Exception:
                _log.error("Failed to process log record: %s", fallback_line(record))

    def set_log_level(self, level: LogLevel | str) -> None:
        """Change the console level threshold at runtime.

        The change itself is logged at INFO with the previous level.

        Raises:
            ValueError: If level is not a known level name.
        """
        new_level = LogLevel(str(level).strip().lower())
        previous = self.config.min_level
        self.config = replace(self.config, min_level=new_level)
        self.log(
            LogRecord(
                timestamp=utc_timestamp(),
                level=LogLevel.INFO,
                event_type=CattleEventType.LOG_LEVEL_CHANGED,
                message=f"Log level changed to: {new_level}",
                metadata={"previous_level": str(previous)},
            )
        )

    def get_metrics(self) -> MetricsSnapshot:
        return self.metrics.get_metrics()

    def reset_metrics(self) -> None:
        self.metrics.reset_metrics()

    @staticmethod
    def generate_request_id() -> str:
        """Return an id of the form ``req-<epoch ms>-<9 base36 chars>``."""
        suffix = "".join(secrets.choice(_BASE36) for _ in range(9))
        return f"req-{int(time.time() * 1000)}-{suffix}"
