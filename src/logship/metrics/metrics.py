"""
Shipper metrics collection.

Implements a small set of Prometheus-compatible counters and a histogram for
the flush engine.

Design goals:
- Thread-safe: producers and the flush thread record concurrently
- Zero global state; each collector owns an isolated registry
- Safe no-op export when metrics are disabled, while still tracking basic
  in-memory counters for tests
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class ShipperMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    lines_logged: int = 0
    lines_sent: int = 0
    lines_dropped: int = 0
    lines_requeued: int = 0
    flushes: int = 0
    flush_errors: int = 0


class MetricsCollector:
    """Per-client metrics collector."""

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = ShipperMetrics()

        self._c_logged: Any | None = None
        self._c_sent: Any | None = None
        self._c_dropped: Any | None = None
        self._c_flush_errors: Any | None = None
        self._h_flush_latency: Any | None = None
        self._h_batch_size: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry avoids duplicate registration across clients
            self._registry = CollectorRegistry()
            self._c_logged = Counter(
                "logship_lines_logged_total",
                "Total number of log lines accepted into the buffer",
                registry=self._registry,
            )
            self._c_sent = Counter(
                "logship_lines_sent_total",
                "Total number of log lines delivered to the ingest endpoint",
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "logship_lines_dropped_total",
                "Total number of log lines dropped after a failed flush",
                registry=self._registry,
            )
            self._c_flush_errors = Counter(
                "logship_flush_errors_total",
                "Total number of failed flush cycles",
                ["category"],
                registry=self._registry,
            )
            self._h_flush_latency = Histogram(
                "logship_flush_seconds",
                "Latency of one flush cycle including the transport call",
                buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
                registry=self._registry,
            )
            self._h_batch_size = Histogram(
                "logship_batch_size",
                "Number of lines per flushed batch",
                buckets=(1, 5, 10, 50, 100, 500, 1000, 5000),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_line_logged(self) -> None:
        with self._lock:
            self._state.lines_logged += 1
        if self._c_logged is not None:
            self._c_logged.inc()

    def record_flush(self, *, batch_size: int, latency_seconds: float) -> None:
        with self._lock:
            self._state.flushes += 1
            self._state.lines_sent += batch_size
        if not self._enabled:
            return
        if self._c_sent is not None:
            self._c_sent.inc(batch_size)
        if self._h_flush_latency is not None:
            self._h_flush_latency.observe(latency_seconds)
        if self._h_batch_size is not None:
            self._h_batch_size.observe(batch_size)

    def record_flush_error(
        self, *, category: str, dropped: int, requeued: int = 0
    ) -> None:
        with self._lock:
            self._state.flush_errors += 1
            self._state.lines_dropped += dropped
            self._state.lines_requeued += requeued
        if not self._enabled:
            return
        if self._c_flush_errors is not None:
            self._c_flush_errors.labels(category=category).inc()
        if self._c_dropped is not None and dropped:
            self._c_dropped.inc(dropped)

    def snapshot(self) -> ShipperMetrics:
        with self._lock:
            return ShipperMetrics(
                lines_logged=self._state.lines_logged,
                lines_sent=self._state.lines_sent,
                lines_dropped=self._state.lines_dropped,
                lines_requeued=self._state.lines_requeued,
                flushes=self._state.flushes,
                flush_errors=self._state.flush_errors,
            )
