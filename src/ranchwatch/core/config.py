"""Logger configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from ranchwatch.core.exceptions import ConfigurationError
from ranchwatch.core.models import LogLevel

ENV_MODE = "RANCHWATCH_ENV"
ENV_LOG_LEVEL = "RANCHWATCH_LOG_LEVEL"
ENV_LOG_FILE = "RANCHWATCH_LOG_FILE"

DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024
DEFAULT_MAX_FILES = 10


class Mode(StrEnum):
    """Output mode: annotated text for development, JSON lines otherwise."""

    DEVELOPMENT = "development"
    PRODUCTION = "production"

    @classmethod
    def parse(cls, value: str | None) -> "Mode":
        """Parse a mode name. Anything other than development is production."""
        if value and value.strip().lower() in ("development", "dev"):
            return cls.DEVELOPMENT
        return cls.PRODUCTION


@dataclass(frozen=True)
class LoggerConfig:
    """Settings for CattleLogger and its output handlers.

    Attributes:
        mode: DEVELOPMENT renders multi-line annotated output and lets DEBUG
            records through; PRODUCTION renders single-line JSON.
        min_level: Least severe level written to the console. TRACE records
            are only written when this is TRACE.
        log_file: Optional path of a rotating log file.
        max_file_bytes: Size at which the log file is rotated.
        max_files: Number of rotated files kept.
        slow_query_threshold_ms: Response time above which a request is
            recorded as a slow query.
        max_slow_queries: Capacity of the slow query buffer.
    """

    mode: Mode = Mode.PRODUCTION
    min_level: LogLevel = LogLevel.INFO
    log_file: str | None = None
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES
    max_files: int = DEFAULT_MAX_FILES
    slow_query_threshold_ms: float = 1000.0
    max_slow_queries: int = 100

    def __post_init__(self) -> None:
        if self.max_file_bytes <= 0:
            raise ConfigurationError("max_file_bytes must be positive")
        if self.max_files < 0:
            raise ConfigurationError("max_files must not be negative")
        if self.max_slow_queries <= 0:
            raise ConfigurationError("max_slow_queries must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "LoggerConfig":
        """Build a config from RANCHWATCH_* environment variables.

        Unknown or malformed values fall back to the defaults.
        """
        env = os.environ if environ is None else environ
        return cls(
            mode=Mode.parse(env.get(ENV_MODE)),
            min_level=LogLevel.parse(env.get(ENV_LOG_LEVEL), LogLevel.INFO),
            log_file=env.get(ENV_LOG_FILE) or None,
        )

    def passes(self, level: LogLevel) -> bool:
        """Return True if records at this level are written to the console."""
        threshold = self.min_level.severity
        if self.mode is Mode.DEVELOPMENT:
            threshold = max(threshold, LogLevel.DEBUG.severity)
        return level.severity <= threshold
