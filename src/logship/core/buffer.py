"""
Thread-safe accumulation buffer for pending log records.

All mutation happens under one lock, so ``append`` and ``drain_all`` are
linearizable: an append either lands in a given drain or in a later one,
never in both and never in neither.
"""

from __future__ import annotations

import threading
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


class LineBuffer(Generic[T]):
    """Ordered, append-only sequence with an atomic drain."""

    __slots__ = ("_items", "_lock")

    def __init__(self) -> None:
        self._items: list[T] = []
        self._lock = threading.Lock()

    def append(self, item: T) -> None:
        with self._lock:
            self._items.append(item)

    def size(self) -> int:
        """Pending count. Advisory: may be stale as soon as it returns."""
        return len(self._items)

    def __len__(self) -> int:
        return self.size()

    def drain_all(self) -> list[T]:
        """Remove and return every pending item, leaving the buffer empty."""
        with self._lock:
            drained = self._items
            self._items = []
        return drained

    def requeue(self, items: Sequence[T], limit: int) -> int:
        """Put ``items`` back at the head of the buffer, oldest first.

        At most ``limit`` items are kept; when the batch is larger the oldest
        overflow is discarded. Returns the number of discarded items.
        """
        if limit <= 0 or not items:
            return len(items)
        kept = list(items[-limit:])
        with self._lock:
            self._items = kept + self._items
        return len(items) - len(kept)
