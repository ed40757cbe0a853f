"""
Testing utilities for logship.

Provides in-memory transports and a protocol validator for testing code that
ships logs, without a network.

Example:
    from logship import Client, ClientConfig
    from logship.testing import RecordingTransport

    def test_ships_error_line():
        transport = RecordingTransport()
        client = Client(ClientConfig(api_key="k"), transport=transport)
        client.error("boom")
        assert client.flush().ok
        assert transport.records()[0].line == "boom"
"""

from .mocks import FailingTransport, RecordingTransport, describe_payload
from .validators import ProtocolViolationError, ValidationResult, validate_transport

__all__ = [
    "FailingTransport",
    "ProtocolViolationError",
    "RecordingTransport",
    "ValidationResult",
    "describe_payload",
    "validate_transport",
]
