"""Secondary, high-visibility output for error records."""

import logging

from ranchwatch.core.events import ERROR_GLYPH
from ranchwatch.core.models import LogLevel, LogRecord

ALERT_LOGGER_NAME = "ranchwatch.alerts"


class CriticalAlertNotifier:
    """Writes a separate CRITICAL line for every ERROR record.

    Emission is best effort: standard handlers report their own output
    errors, and anything else is contained by CattleLogger.log.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger(ALERT_LOGGER_NAME)
        self.alerts_sent = 0

    def notify(self, record: LogRecord) -> None:
        if record.level is not LogLevel.ERROR:
            return
        details = {
            "message": record.message,
            "event": record.event_type,
            "user": record.user_email,
            "cattle": record.cattle_ear_tag,
            "timestamp": record.timestamp,
        }
        self._logger.critical(
            "%s CRITICAL RANCH SYSTEM ALERT %s %s",
            ERROR_GLYPH,
            ERROR_GLYPH,
            details,
            extra={"alert": details},
        )
        self.alerts_sent += 1
