"""NDJSON encoder for log records."""

import json
from collections.abc import Iterable

from ranchwatch.core.models import LogRecord


def _encode_record(record: LogRecord) -> str:
    try:
        return json.dumps(record.to_dict(), default=str)
    except (ValueError, RecursionError):
        # Unserializable metadata (e.g. a reference cycle): keep the core fields.
        return json.dumps(
            {
                "timestamp": record.timestamp,
                "level": str(record.level),
                "eventType": str(record.event_type),
                "message": record.message,
            }
        )


def encode_records(records: Iterable[LogRecord]) -> str:
    """Encode log records to newline-delimited JSON.

    Args:
        records: An iterable of LogRecord objects.

    Returns:
        NDJSON string with one JSON object per line.
        Empty string if no records.
    """
    lines = [_encode_record(record) for record in records]

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
