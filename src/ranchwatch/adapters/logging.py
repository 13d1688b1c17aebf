"""Standard library logging integration.

``configure_logging`` wires the ``ranchwatch`` loggers to stdout and an
optional rotating file. ``CattleLogHandler`` goes the other way: it feeds
records from any other stdlib logger into a CattleLogger so that ordinary
application logging is counted in the metrics.
"""

import logging
import sys
import traceback
from logging.handlers import RotatingFileHandler
from typing import Any

from ranchwatch.core.config import LoggerConfig
from ranchwatch.core.logger import CattleLogger
from ranchwatch.core.models import TRACE, LogLevel, LogRecord, utc_timestamp

ROOT_LOGGER_NAME = "ranchwatch"
APPLICATION_LOG_EVENT = "application_log"

# Standard LogRecord attributes that should not be treated as extra fields
_STANDARD_LOGRECORD_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "message",
        "module",
        "msecs",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "taskName",
        "thread",
        "threadName",
    }
)

_HANDLER_MARKER = "_ranchwatch_handler"


def configure_logging(config: LoggerConfig) -> logging.Logger:
    """Attach stdout (and optionally file) handlers to the ranchwatch logger.

    Records are rendered by CattleLogger before they reach these handlers,
    so the handlers only print the message. Calling this again replaces the
    handlers it added previously.

    Args:
        config: Supplies the level threshold and the optional log file path,
            size limit and number of rotated files.

    Returns:
        The configured ``ranchwatch`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter("%(message)s")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if config.log_file:
        handlers.append(
            RotatingFileHandler(
                config.log_file,
                maxBytes=config.max_file_bytes,
                backupCount=config.max_files,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARKER, True)
        logger.addHandler(handler)

    # CattleLogger applies the level gate itself, so let everything through.
    logger.setLevel(TRACE)
    logger.propagate = False
    return logger


def _level_from_stdlib(levelno: int) -> LogLevel:
    if levelno >= logging.ERROR:
        return LogLevel.ERROR
    if levelno >= logging.WARNING:
        return LogLevel.WARN
    if levelno >= logging.INFO:
        return LogLevel.INFO
    if levelno >= logging.DEBUG:
        return LogLevel.DEBUG
    return LogLevel.TRACE


class CattleLogHandler(logging.Handler):
    """Logging handler that forwards stdlib log records to a CattleLogger.

    Records from the ``ranchwatch`` logger hierarchy are ignored, since
    CattleLogger writes its own output there.

    Example:
        ```python
        handler = CattleLogHandler(cattle_logger)
        logging.getLogger("myapp").addHandler(handler)
        ```
    """

    def __init__(self, logger: CattleLogger, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self._logger = logger

    def emit(self, record: logging.LogRecord) -> None:
        """Convert a stdlib record into a LogRecord and log it."""
        if record.name == ROOT_LOGGER_NAME or record.name.startswith(
            ROOT_LOGGER_NAME + "."
        ):
            return
        try:
            metadata: dict[str, Any] = {
                "logger": record.name,
                "module": record.module,
                "funcName": record.funcName or "",
                "lineno": record.lineno,
            }

            # Add any extra attributes passed via logging call
            for key, value in record.__dict__.items():
                if key not in _STANDARD_LOGRECORD_ATTRS and isinstance(
                    value, (str, int, float, bool)
                ):
                    metadata[key] = value

            stack = None
            if record.exc_info:
                exc_type, exc_value, exc_tb = record.exc_info
                if exc_type is not None:
                    metadata["exc_type"] = exc_type.__name__
                if exc_value is not None:
                    metadata["exc_message"] = str(exc_value)
                stack = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))

            self._logger.log(
                LogRecord(
                    timestamp=utc_timestamp(record.created),
                    level=_level_from_stdlib(record.levelno),
                    event_type=APPLICATION_LOG_EVENT,
                    message=record.getMessage(),
                    metadata=metadata,
                    stack=stack,
                )
            )
        except Exception:
            self.handleError(record)
