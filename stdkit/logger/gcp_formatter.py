"""Log formatting compatible with Google Cloud structured logging."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict

from stdkit.logger.config import Level


class GcpSeverity(str, Enum):
    """Severities understood by Google Cloud logging."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    ALERT = "ALERT"


_LEVEL_TO_SEVERITY = {
    Level.DEBUG: GcpSeverity.DEBUG,
    Level.INFO: GcpSeverity.INFO,
    Level.WARN: GcpSeverity.WARNING,
    Level.ERROR: GcpSeverity.ERROR,
    Level.FATAL: GcpSeverity.CRITICAL,
    Level.PANIC: GcpSeverity.ALERT,
}

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def to_gcp_severity(level: int) -> GcpSeverity:
    """Map a logger level to a severity; unknown levels map to DEBUG."""
    return _LEVEL_TO_SEVERITY.get(level, GcpSeverity.DEBUG)


@dataclass
class LogEntry:
    """One log entry to be formatted."""

    message: str
    level: int
    time: datetime
    data: Dict[str, Any] = field(default_factory=dict)


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    offset = moment.utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset is not None else 0
    if minutes == 0:
        return text + "Z"
    sign = "+" if minutes > 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{mins:02d}"


def _python_level(levelno: int) -> Level:
    if levelno > logging.CRITICAL:
        return Level.PANIC
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


class GcpFormatter(logging.Formatter):
    """Formats entries as single-line JSON objects for Google Cloud logging."""

    def format_entry(self, entry: LogEntry) -> str:
        """Return the entry as a JSON line ending in a newline.

        Raises ValueError if the entry's data cannot be serialised.
        """
        payload: Dict[str, Any] = {}
        if entry.data:
            payload["data"] = entry.data
        if entry.message:
            payload["message"] = entry.message
        payload["severity"] = to_gcp_severity(entry.level).value
        payload["timestamp"] = _rfc3339(entry.time)
        try:
            serialized = json.dumps(
                payload,
                sort_keys=True,
                separators=(",", ":"),
                ensure_ascii=False,
                allow_nan=False,
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Failed to marshal fields to JSON, {exc}") from exc
        for char, escaped in _HTML_ESCAPES.items():
            serialized = serialized.replace(char, escaped)
        return serialized + "\n"

    def format(self, record: logging.LogRecord) -> str:
        """Format a standard log record; fields come from its ``data`` attribute."""
        data = getattr(record, "data", None) or {}
        entry = LogEntry(
            message=record.getMessage(),
            level=_python_level(record.levelno),
            time=datetime.fromtimestamp(record.created, tz=timezone.utc),
            data=dict(data),
        )
        return self.format_entry(entry).rstrip("\n")