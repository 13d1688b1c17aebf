"""Ring buffer storage for recent log records.

Bounded in-memory storage that evicts the oldest record when full, so a
service can keep its recent history with predictable memory usage.
"""

import threading
from collections import deque

from ranchwatch.core.exceptions import ConfigurationError
from ranchwatch.core.models import LogLevel, LogRecord


class RingBufferRecordStorage:
    """Ring buffer implementation of RecordStoragePort.

    Args:
        max_size: Maximum number of records to keep.
    """

    def __init__(self, max_size: int) -> None:
        if max_size <= 0:
            raise ConfigurationError("max_size must be positive")
        self._lock = threading.Lock()
        self._buffer: deque[LogRecord] = deque(maxlen=max_size)

    def write(self, record: LogRecord) -> None:
        """Store a record, evicting the oldest one if the buffer is full."""
        with self._lock:
            self._buffer.append(record)

    def read(self, level: LogLevel | None = None) -> list[LogRecord]:
        """Return buffered records oldest first, optionally filtered by level."""
        with self._lock:
            records = list(self._buffer)
        if level is None:
            return records
        return [r for r in records if r.level is level]

    def __len__(self) -> int:
        return len(self._buffer)
