"""
Log record model and timestamp handling.

A ``LogRecord`` is immutable once built. Timestamps are integer milliseconds
since the Unix epoch, obtained by floor-dividing a nanosecond value by
1,000,000; sub-millisecond precision is truncated, never rounded.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

from .errors import SerializationError
from .levels import LogLevel

NANOS_PER_MILLI = 1_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_WIRE_FIELDS = ("timestamp", "line", "app", "env", "level")


def datetime_to_ns(value: datetime) -> int:
    """Convert ``value`` to integer nanoseconds since the epoch.

    Naive datetimes are interpreted as UTC. Integer arithmetic is used so no
    float rounding can leak into the result.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    seconds = delta.days * 86_400 + delta.seconds
    return seconds * 1_000_000_000 + delta.microseconds * 1_000


def timestamp_ms(value: datetime | int | None = None) -> int:
    """Return epoch milliseconds for ``value``.

    ``value`` may be a ``datetime`` or an ``int`` count of nanoseconds since
    the epoch. ``None`` means "now" (``time.time_ns()``).
    """
    if value is None:
        ns = time.time_ns()
    elif isinstance(value, datetime):
        ns = datetime_to_ns(value)
    elif isinstance(value, int) and not isinstance(value, bool):
        ns = value
    else:
        raise TypeError(
            "timestamp must be a datetime or integer nanoseconds, "
            f"got {type(value).__name__}"
        )
    return ns // NANOS_PER_MILLI


@dataclass(frozen=True)
class LogRecord:
    """One log line as shipped to the ingest API."""

    timestamp: int
    line: str
    app: str
    env: str
    level: LogLevel

    def to_wire(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "line": self.line,
            "app": self.app,
            "env": self.env,
            "level": self.level.value,
        }

    @classmethod
    def from_wire(cls, data: Mapping[str, Any]) -> LogRecord:
        """Rebuild a record from its wire mapping.

        Raises:
            SerializationError: If a field is missing or has the wrong type.
        """
        missing = [name for name in _WIRE_FIELDS if name not in data]
        if missing:
            raise SerializationError(
                "Log line is missing fields", missing=missing
            )
        ts = data["timestamp"]
        if not isinstance(ts, int) or isinstance(ts, bool):
            raise SerializationError("Log line timestamp must be an integer")
        for name in ("line", "app", "env"):
            if not isinstance(data[name], str):
                raise SerializationError(f"Log line field '{name}' must be a string")
        try:
            level = LogLevel.parse(data["level"])
        except ValueError as e:
            raise SerializationError("Log line has an unknown level", cause=e) from e
        return cls(
            timestamp=ts,
            line=data["line"],
            app=data["app"],
            env=data["env"],
            level=level,
        )
