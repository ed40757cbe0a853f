"""Graceful shutdown handling for logship clients.

This module provides:
- Atexit handler to flush pending lines on normal exit
- Signal handlers for SIGTERM/SIGINT graceful shutdown
- WeakSet-based client registration to avoid memory leaks

Nothing here is installed on import; callers opt in with
``register_client`` and ``install_handlers``. The handlers are best-effort:
they attempt a final flush but will not block indefinitely.
"""

from __future__ import annotations

import atexit
import signal
import sys
import threading
import weakref
from typing import TYPE_CHECKING, Any

from . import diagnostics

if TYPE_CHECKING:
    from types import FrameType

    from ..client import Client


# Module-level state
_shutdown_in_progress: bool = False
_handlers_installed: bool = False
_registered_clients: weakref.WeakSet[Any] = weakref.WeakSet()
_original_sigterm_handler: Any = None
_original_sigint_handler: Any = None


def _get_shutdown_settings() -> dict[str, Any]:
    """Get shutdown settings from Settings, with fallback defaults."""
    try:
        from .settings import Settings

        settings = Settings()
        return {
            "atexit_drain_enabled": settings.core.atexit_drain_enabled,
            "atexit_drain_timeout_seconds": settings.core.atexit_drain_timeout_seconds,
            "signal_handler_enabled": settings.core.signal_handler_enabled,
        }
    except Exception:  # pragma: no cover - settings unavailable
        return {
            "atexit_drain_enabled": True,
            "atexit_drain_timeout_seconds": 2.0,
            "signal_handler_enabled": True,
        }


def register_client(client: Client) -> None:
    """Register a client for automatic drain on shutdown.

    Uses WeakSet to avoid preventing garbage collection.
    """
    _registered_clients.add(client)


def unregister_client(client: Client) -> None:
    """Unregister a client, typically after an explicit ``shutdown()``."""
    _registered_clients.discard(client)


def registered_clients() -> list[Any]:
    return list(_registered_clients)


def _drain_single_client(client: Any, timeout: float) -> None:
    """Stop and flush one client, giving up after ``timeout`` seconds."""

    def _run() -> None:
        try:
            result = client.shutdown()
            if result is not None and not result.ok:
                diagnostics.warn(
                    "shutdown",
                    "final flush failed",
                    force=True,
                    error=str(result.error),
                    dropped=result.dropped,
                )
        except Exception as exc:
            diagnostics.exception("shutdown", "client drain failed", exc)

    worker = threading.Thread(target=_run, name="logship-drain", daemon=True)
    worker.start()
    worker.join(timeout)
    if worker.is_alive():
        diagnostics.warn("shutdown", "drain timed out", force=True, timeout=timeout)


def drain_all(timeout: float | None = None) -> None:
    """Drain every registered client once; later calls are no-ops."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return
    _shutdown_in_progress = True
    if timeout is None:
        timeout = _get_shutdown_settings()["atexit_drain_timeout_seconds"]

    # Snapshot the clients (WeakSet iteration can fail if GC runs)
    try:
        clients = list(_registered_clients)
    except Exception:  # pragma: no cover - rare GC race
        return

    for client in clients:
        _drain_single_client(client, timeout)
        unregister_client(client)


def _atexit_handler() -> None:
    """Best-effort drain of all clients on normal exit. Never raises."""
    if not _get_shutdown_settings()["atexit_drain_enabled"]:
        return
    drain_all()


def _signal_handler(signum: int, _frame: FrameType | None) -> None:
    """Drain clients, then re-raise the signal with the default handler."""
    if _shutdown_in_progress:
        return

    drain_all()

    try:
        signal.signal(signum, signal.SIG_DFL)
        signal.raise_signal(signum)
    except Exception:  # pragma: no cover - rare signal error
        sys.exit(128 + signum)


def install_handlers(*, signals: bool | None = None) -> None:
    """Register the atexit drain and (if enabled) SIGINT/SIGTERM handlers.

    ``signals`` overrides the ``core.signal_handler_enabled`` setting; callers
    that manage their own signal handling pass ``False``.

    Signal handlers can only be installed from the main thread; elsewhere
    only the atexit hook is registered.
    """
    global _handlers_installed, _original_sigterm_handler, _original_sigint_handler

    if _handlers_installed:
        return
    _handlers_installed = True
    atexit.register(_atexit_handler)

    if signals is None:
        signals = bool(_get_shutdown_settings()["signal_handler_enabled"])
    if not signals:
        return
    if threading.current_thread() is not threading.main_thread():
        return

    _original_sigint_handler = signal.signal(signal.SIGINT, _signal_handler)
    # SIGTERM is not available on Windows
    if hasattr(signal, "SIGTERM"):
        _original_sigterm_handler = signal.signal(signal.SIGTERM, _signal_handler)


def _reset_for_tests() -> None:
    """Restore original handlers and clear module state (tests only)."""
    global _shutdown_in_progress, _handlers_installed
    global _original_sigterm_handler, _original_sigint_handler

    if _handlers_installed:
        atexit.unregister(_atexit_handler)
    if _original_sigint_handler is not None:
        signal.signal(signal.SIGINT, _original_sigint_handler)
    if _original_sigterm_handler is not None and hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _original_sigterm_handler)
    _original_sigint_handler = None
    _original_sigterm_handler = None
    _handlers_installed = False
    _shutdown_in_progress = False
    _registered_clients.clear()
