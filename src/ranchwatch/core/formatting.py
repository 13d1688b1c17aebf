"""Rendering of log records for console and file output."""

import json
from typing import Any

from ranchwatch.core.config import Mode
from ranchwatch.core.events import event_glyph
from ranchwatch.core.models import LogRecord

_INDENT = "    "


def _dumps(data: Any, indent: int | None = None) -> str:
    return json.dumps(data, indent=indent, default=str, ensure_ascii=False)


def fallback_line(record: LogRecord) -> str:
    """Minimal single line used when a record cannot be fully rendered."""
    return (
        f"[{str(record.level).upper()}] {record.timestamp} "
        f"{record.event_type}: {record.message}"
    )


def _format_development(record: LogRecord) -> str:
    glyph = event_glyph(record.level, record.event_type)
    lines = [
        f"{glyph} [{str(record.level).upper()}] {record.timestamp} - {record.message}",
        f"{_INDENT}Event: {record.event_type}",
        f"{_INDENT}User: {record.user_email or 'System'} ({record.user_role or 'N/A'})",
    ]
    if record.cattle_ear_tag:
        lines.append(f"{_INDENT}Cattle: {record.cattle_ear_tag}")
    if record.path:
        endpoint = " ".join(part for part in (record.method, record.path) if part)
        lines.append(f"{_INDENT}Endpoint: {endpoint}")
    if record.response_time is not None:
        lines.append(f"{_INDENT}Time: {record.response_time:g}ms")
    if record.metadata:
        data = _dumps(record.metadata, indent=2).replace("\n", "\n" + _INDENT)
        lines.append(f"{_INDENT}Data: {data}")
    return "\n".join(lines)


def format_record(record: LogRecord, mode: Mode) -> str:
    """Render a record as annotated text (development) or one JSON line.

    Never raises: a record that cannot be serialized (for example metadata
    containing a reference cycle, or an object whose str() fails) is
    rendered with fallback_line.
    """
    try:
        if mode is Mode.DEVELOPMENT:
            return _format_development(record)
        return _dumps(record.to_dict())
    except Exception:
        return fallback_line(record)
