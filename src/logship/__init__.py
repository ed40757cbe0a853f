"""
Public entrypoints for logship.

A buffered client that ships pre-formatted log lines to an HTTP ingest
endpoint in periodic batches.
"""

from __future__ import annotations

from .client import Client
from .core.config import ClientConfig, parse_client_config
from .core.engine import DEFAULT_FLUSH_INTERVAL, EngineState, FlushEngine, FlushResult
from .core.errors import (
    ConfigurationError,
    LogshipError,
    SerializationError,
    TransportError,
)
from .core.levels import LogLevel
from .core.records import LogRecord
from .core.settings import Settings
from .transports.base import IngestTransport
from .transports.http import HttpIngestTransport

try:
    from ._version import __version__
except Exception:  # pragma: no cover - fallback
    __version__ = "0.0.0+local"

VERSION = __version__

__all__ = [
    "Client",
    "ClientConfig",
    "ConfigurationError",
    "DEFAULT_FLUSH_INTERVAL",
    "EngineState",
    "FlushEngine",
    "FlushResult",
    "HttpIngestTransport",
    "IngestTransport",
    "LogLevel",
    "LogRecord",
    "LogshipError",
    "SerializationError",
    "Settings",
    "TransportError",
    "VERSION",
    "__version__",
    "new_client",
    "parse_client_config",
]


def new_client(config: ClientConfig | dict, **kwargs: object) -> Client:
    """Return a ``Client`` for ``config``; keyword arguments go to ``Client``."""
    return Client(config, **kwargs)  # type: ignore[arg-type]
