"""Log level enumeration used on the wire.

The ingest API accepts exactly six level labels. ``LogLevel.parse`` accepts
the labels case-insensitively plus a few conventional aliases so that
callers bridging from other logging libraries do not need a lookup table.

Example:
    >>> LogLevel.parse("warning")
    <LogLevel.WARN: 'Warn'>
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class LogLevel(str, Enum):
    DEBUG = "Debug"
    TRACE = "Trace"
    INFO = "Info"
    WARN = "Warn"
    ERROR = "Error"
    FATAL = "Fatal"

    @classmethod
    def parse(cls, value: LogLevel | str) -> LogLevel:
        """Return the level for ``value``.

        Raises:
            ValueError: If ``value`` is not a known label or alias.
        """
        if isinstance(value, LogLevel):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown log level: {value!r}")
        key = value.strip().lower()
        level = _LOOKUP.get(key)
        if level is None:
            raise ValueError(f"Unknown log level: {value!r}")
        return level

    def __str__(self) -> str:
        return self.value


_ALIASES: Final[dict[str, LogLevel]] = {
    "warning": LogLevel.WARN,
    "critical": LogLevel.FATAL,
    "err": LogLevel.ERROR,
}

_LOOKUP: Final[dict[str, LogLevel]] = {
    **{level.value.lower(): level for level in LogLevel},
    **_ALIASES,
}


def get_all_levels() -> list[str]:
    """Return the wire labels in severity order."""
    return [level.value for level in LogLevel]
