"""
Flush engine: owns the line buffer, drives periodic flushes, and defines the
delivery protocol with the ingest transport.

State machine::

    IDLE --start()--> RUNNING --stop()--> STOPPED
      \\______________stop()______________/

One flush cycle drains the whole buffer atomically, serializes the batch,
and hands it to the transport. Delivery is at-most-once: a batch that fails
to serialize or to send is dropped, unless a bounded ``requeue_limit`` is
configured, in which case up to that many records of a batch that failed in
the transport are put back at the head of the buffer for the next cycle.

Flush cycles are serialized by a dedicated lock. Appends never wait on that
lock, so records logged while a batch is in flight land in the next batch.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable

from ..metrics.metrics import MetricsCollector
from ..transports.base import IngestTransport, get_transport_name
from . import diagnostics
from .buffer import LineBuffer
from .config import ClientConfig
from .errors import LogshipError, SerializationError, TransportError
from .levels import LogLevel
from .records import LogRecord, timestamp_ms
from .serialization import serialize_batch

DEFAULT_FLUSH_INTERVAL = 5.0

ErrorHook = Callable[[LogshipError], None]


class EngineState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass(frozen=True)
class FlushResult:
    """Terminal outcome of one flush cycle."""

    sent: int = 0
    dropped: int = 0
    requeued: int = 0
    error: LogshipError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


class FlushEngine:
    """Buffer plus timer plus transport.

    Args:
        config: Immutable client identity; ``app`` and ``env`` are stamped on
            every record.
        transport: Object with ``send(payload: bytes) -> None`` that raises
            ``TransportError`` on failure.
        interval: Default seconds between timer-driven flushes.
        on_error: Called with the error of every failed timer-driven flush.
            When omitted, failures are written to stderr as diagnostics.
        metrics: Optional collector for counters and latencies.
        requeue_limit: Records of a failed batch to put back in the buffer.
            ``0`` keeps the at-most-once drop semantics.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: IngestTransport,
        *,
        interval: float | None = None,
        on_error: ErrorHook | None = None,
        metrics: MetricsCollector | None = None,
        requeue_limit: int = 0,
    ) -> None:
        if requeue_limit < 0:
            raise ValueError("requeue_limit must be >= 0")
        self._config = config
        self._transport = transport
        self._interval = _validate_interval(
            DEFAULT_FLUSH_INTERVAL if interval is None else interval
        )
        self._on_error = on_error
        self._metrics = metrics
        self._requeue_limit = requeue_limit
        self._buffer: LineBuffer[LogRecord] = LineBuffer()
        self._flush_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._state = EngineState.IDLE

    @property
    def config(self) -> ClientConfig:
        return self._config

    @property
    def state(self) -> EngineState:
        return self._state

    @property
    def interval(self) -> float:
        return self._interval

    def size(self) -> int:
        return self._buffer.size()

    def start(self, interval: float | None = None) -> None:
        """Start the background flush thread (IDLE -> RUNNING).

        Raises:
            RuntimeError: If the engine was already started or stopped.
            ValueError: If ``interval`` is not positive.
        """
        if interval is not None:
            interval = _validate_interval(interval)
        with self._state_lock:
            if self._state is not EngineState.IDLE:
                raise RuntimeError(
                    f"Flush engine cannot start from state '{self._state.value}'"
                )
            if interval is not None:
                self._interval = interval
            self._thread = threading.Thread(
                target=self._run,
                args=(self._interval,),
                name=f"logship-flush-{self._config.app}",
                daemon=True,
            )
            self._state = EngineState.RUNNING
            self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Cancel the timer (-> STOPPED). Pending records stay buffered."""
        with self._state_lock:
            if self._state is EngineState.STOPPED:
                return
            self._state = EngineState.STOPPED
            self._stop_event.set()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def log(
        self,
        timestamp: datetime | int | None,
        level: LogLevel | str,
        message: str,
    ) -> None:
        """Append one record; never performs I/O.

        ``timestamp`` is a ``datetime``, integer nanoseconds since the epoch,
        or ``None`` for the current time.
        """
        if not isinstance(message, str):
            raise TypeError(f"message must be str, got {type(message).__name__}")
        record = LogRecord(
            timestamp=timestamp_ms(timestamp),
            line=message,
            app=self._config.app,
            env=self._config.env,
            level=LogLevel.parse(level),
        )
        self._buffer.append(record)
        if self._metrics is not None:
            self._metrics.record_line_logged()

    def flush(self) -> FlushResult:
        """Run one flush cycle and return its outcome. Never raises."""
        with self._flush_lock:
            if self._buffer.size() == 0:
                return FlushResult()
            batch = self._buffer.drain_all()
            if not batch:
                return FlushResult()
            start = time.perf_counter()
            try:
                view = serialize_batch(batch)
            except SerializationError as exc:
                # Re-sending the same records would fail again
                return self._fail(batch, exc, requeue=False)
            try:
                self._transport.send(view.data)
            except TransportError as exc:
                return self._fail(batch, exc, requeue=True)
            except Exception as exc:  # noqa: BLE001
                wrapped = TransportError(
                    f"Transport raised {type(exc).__name__}: {exc}", cause=exc
                )
                return self._fail(batch, wrapped, requeue=True)
            if self._metrics is not None:
                self._metrics.record_flush(
                    batch_size=len(batch),
                    latency_seconds=time.perf_counter() - start,
                )
            return FlushResult(sent=len(batch))

    def close(self) -> FlushResult:
        """Final best-effort flush. Does not stop the timer; see ``stop``."""
        return self.flush()

    def _fail(
        self, batch: list[LogRecord], error: LogshipError, *, requeue: bool
    ) -> FlushResult:
        requeued = 0
        dropped = len(batch)
        if requeue and self._requeue_limit > 0:
            dropped = self._buffer.requeue(batch, self._requeue_limit)
            requeued = len(batch) - dropped
        if self._metrics is not None:
            self._metrics.record_flush_error(
                category=error.context.category.value,
                dropped=dropped,
                requeued=requeued,
            )
        return FlushResult(dropped=dropped, requeued=requeued, error=error)

    def _run(self, interval: float) -> None:
        while not self._stop_event.wait(interval):
            self._tick()

    def _tick(self) -> None:
        try:
            result = self.flush()
        except Exception as exc:  # pragma: no cover - flush() returns errors
            diagnostics.exception(
                "flush-engine", "flush cycle crashed", exc, force=True
            )
            return
        if result.error is not None:
            self._report(result)

    def _report(self, result: FlushResult) -> None:
        error = result.error
        assert error is not None
        if self._on_error is None:
            diagnostics.warn(
                "flush-engine",
                "flush failed",
                transport=get_transport_name(self._transport),
                force=True,
                error_type=type(error).__name__,
                error=str(error),
                error_id=error.context.error_id,
                dropped=result.dropped,
                requeued=result.requeued,
            )
            return
        try:
            self._on_error(error)
        except Exception as hook_exc:
            diagnostics.exception(
                "flush-engine", "error hook failed", hook_exc, force=True
            )


def _validate_interval(interval: float) -> float:
    interval = float(interval)
    if interval <= 0:
        raise ValueError("flush interval must be > 0")
    return interval
