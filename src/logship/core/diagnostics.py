"""
Internal diagnostics for non-fatal shipper errors.

Diagnostics are single JSON lines written to stderr. They are off by default
and enabled through ``LOGSHIP_CORE__INTERNAL_LOGGING_ENABLED`` (or the
``core.internal_logging_enabled`` setting). The enabled flag is read once and
cached; tests reset it with ``_reset_for_tests``.

Nothing in this module raises: diagnostics must never break the flush loop.
"""

from __future__ import annotations

import sys
import time
from typing import Any, Callable

import orjson

_internal_logging_enabled: bool | None = None
_writer: Callable[[dict[str, Any]], None] | None = None


def _default_writer(payload: dict[str, Any]) -> None:
    data = orjson.dumps(payload, default=str)
    sys.stderr.write(data.decode("utf-8") + "\n")


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _emit(
    level: str,
    component: str,
    message: str,
    *,
    force: bool,
    fields: dict[str, Any],
) -> None:
    if not force and not is_enabled():
        return
    payload: dict[str, Any] = {
        "ts": time.time(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    writer = _writer or _default_writer
    try:
        writer(payload)
    except Exception:
        pass


def warn(component: str, message: str, *, force: bool = False, **fields: Any) -> None:
    """Emit a WARN diagnostic for ``component``."""
    _emit("WARN", component, message, force=force, fields=fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, force=False, fields=fields)


def exception(
    component: str,
    message: str,
    exc: BaseException,
    *,
    force: bool = False,
    **fields: Any,
) -> None:
    """Emit an ERROR diagnostic describing ``exc``."""
    fields.setdefault("error_type", type(exc).__name__)
    fields.setdefault("error", str(exc))
    to_dict = getattr(exc, "to_dict", None)
    if callable(to_dict):
        try:
            fields.setdefault("error_id", to_dict()["context"]["error_id"])
        except Exception:
            pass
    _emit("ERROR", component, message, force=force, fields=fields)


def set_writer_for_tests(writer: Callable[[dict[str, Any]], None] | None) -> None:
    """Redirect diagnostics to ``writer``; ``None`` restores stderr."""
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _internal_logging_enabled, _writer
    _internal_logging_enabled = None
    _writer = None
