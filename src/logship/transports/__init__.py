"""Ingest transports."""

from .base import IngestTransport, close_transport, get_transport_name
from .http import (
    INGEST_BASE_URL,
    HttpIngestTransport,
    HttpTransportConfig,
    build_ingest_url,
)

__all__ = [
    "INGEST_BASE_URL",
    "HttpIngestTransport",
    "HttpTransportConfig",
    "IngestTransport",
    "build_ingest_url",
    "close_transport",
    "get_transport_name",
]
