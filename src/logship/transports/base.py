"""
Ingest transport protocol.

A transport delivers one serialized batch per call. ``send`` returns on
success and raises ``TransportError`` on any failure; the flush engine treats
the call as a single blocking operation with a binary outcome.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IngestTransport(Protocol):
    def send(self, payload: bytes) -> None:  # pragma: no cover - structural protocol
        ...


def get_transport_name(transport: object) -> str:
    name = getattr(transport, "name", None)
    if isinstance(name, str) and name.strip():
        return name.strip()
    return type(transport).__name__


def close_transport(transport: object) -> None:
    """Call ``transport.close()`` when the transport has one."""
    close = getattr(transport, "close", None)
    if callable(close):
        close()
