"""Port interfaces for record storage adapters.

The logger depends only on this protocol, not on concrete storage.
"""

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

from ranchwatch.core.models import LogLevel, LogRecord


@runtime_checkable
class RecordStoragePort(Protocol):
    """Port for storing log records after they have been logged.

    Examples: RingBufferRecordStorage.
    """

    def write(self, record: LogRecord) -> None:
        """Store a log record."""
        ...

    def read(self, level: LogLevel | None = None) -> Iterable[LogRecord]:
        """Read stored records, oldest first.

        Args:
            level: Only return records at this level. None returns all.
        """
        ...
