"""
Caller-facing client.

``Client`` wraps a ``FlushEngine`` with level helpers and lifecycle sugar.
Clean shutdown needs both steps: ``stop()`` cancels the timer and
``close()`` performs the final flush; ``shutdown()`` does both and releases
the transport.

Example:
    from logship import Client, ClientConfig

    client = Client(ClientConfig(api_key="...", app="svc", env="prod"))
    client.start()
    client.info("service started")
    ...
    client.shutdown()
"""

from __future__ import annotations

import types
from datetime import datetime, timezone
from typing import Any, Mapping

from .core.config import ClientConfig, parse_client_config
from .core.engine import EngineState, ErrorHook, FlushEngine, FlushResult
from .core.levels import LogLevel
from .core.settings import Settings
from .metrics.metrics import MetricsCollector
from .transports.base import IngestTransport, close_transport
from .transports.http import HttpIngestTransport


class Client:
    """Buffered log shipper bound to one identity and one transport.

    Args:
        config: Identity as a ``ClientConfig`` or mapping. Validated here, so
            a missing API key fails before any flush is attempted.
        transport: Delivery collaborator; defaults to ``HttpIngestTransport``.
        flush_interval: Seconds between timer-driven flushes.
        on_error: Hook receiving the error of each failed background flush.
        metrics: Optional metrics collector.
        requeue_limit: Records of a failed batch to keep for the next cycle.

    Raises:
        ConfigurationError: If ``config`` is invalid.
    """

    def __init__(
        self,
        config: ClientConfig | Mapping[str, Any],
        *,
        transport: IngestTransport | None = None,
        flush_interval: float | None = None,
        on_error: ErrorHook | None = None,
        metrics: MetricsCollector | None = None,
        requeue_limit: int = 0,
    ) -> None:
        self._config = parse_client_config(config)
        self._transport: IngestTransport = (
            transport if transport is not None else HttpIngestTransport(self._config)
        )
        self._metrics = metrics
        self._engine = FlushEngine(
            self._config,
            self._transport,
            interval=flush_interval,
            on_error=on_error,
            metrics=metrics,
            requeue_limit=requeue_limit,
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        *,
        transport: IngestTransport | None = None,
        on_error: ErrorHook | None = None,
    ) -> Client:
        """Build a client from environment-driven ``Settings``."""
        settings = settings or Settings()
        config = settings.to_client_config()
        if transport is None:
            transport = HttpIngestTransport(
                config,
                ingest_url=settings.http.ingest_url,
                timeout_seconds=settings.http.timeout_seconds,
                retries=settings.http.retries,
                headers=settings.http.headers,
            )
        metrics = MetricsCollector(enabled=settings.core.enable_metrics)
        return cls(
            config,
            transport=transport,
            flush_interval=settings.core.flush_interval_seconds,
            on_error=on_error,
            metrics=metrics,
            requeue_limit=settings.core.requeue_limit,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def transport(self) -> IngestTransport:
        return self._transport

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    @property
    def state(self) -> EngineState:
        return self._engine.state

    def size(self) -> int:
        """Number of lines waiting to be sent."""
        return self._engine.size()

    def start(self, interval: float | None = None) -> None:
        self._engine.start(interval)

    def stop(self, timeout: float | None = None) -> None:
        self._engine.stop(timeout)

    def flush(self) -> FlushResult:
        """Send buffered lines now."""
        return self._engine.flush()

    def close(self) -> FlushResult:
        """Final flush. Does not stop the timer; pair with ``stop()``."""
        return self._engine.close()

    def shutdown(self, timeout: float | None = None) -> FlushResult:
        """Stop the timer, flush once more, and release the transport."""
        self._engine.stop(timeout)
        result = self._engine.close()
        close_transport(self._transport)
        return result

    def log(
        self,
        timestamp: datetime | int | None,
        level: LogLevel | str,
        message: str,
    ) -> None:
        self._engine.log(timestamp, level, message)

    def _log_now(self, level: LogLevel, message: str) -> None:
        self._engine.log(datetime.now(timezone.utc), level, message)

    def debug(self, message: str) -> None:
        self._log_now(LogLevel.DEBUG, message)

    def trace(self, message: str) -> None:
        self._log_now(LogLevel.TRACE, message)

    def info(self, message: str) -> None:
        self._log_now(LogLevel.INFO, message)

    def warn(self, message: str) -> None:
        self._log_now(LogLevel.WARN, message)

    def error(self, message: str) -> None:
        self._log_now(LogLevel.ERROR, message)

    def fatal(self, message: str) -> None:
        self._log_now(LogLevel.FATAL, message)

    # Short names matching the ingest service's classic client API
    dbg = debug
    tra = trace
    inf = info
    war = warn
    err = error
    ftl = fatal

    def __enter__(self) -> Client:
        self.start()
        return self

    def __exit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        self.shutdown()
