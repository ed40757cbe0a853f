"""
Wire-format serialization for log batches.

The ingest API takes one JSON document per request:

    {"lines": [{"timestamp": ..., "line": ..., "app": ..., "env": ...,
                "level": ...}, ...]}

Encoding uses orjson and returns bytes directly; the ``lines`` array keeps the
order in which records were appended.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence

import orjson

from .errors import ErrorSeverity, SerializationError, create_error_context
from .records import LogRecord


@dataclass
class SerializedView:
    """A lightweight container exposing the encoded payload."""

    data: bytes
    count: int = 0

    @property
    def view(self) -> memoryview:
        return memoryview(self.data)

    def __bytes__(self) -> bytes:  # convenience
        return self.data

    def __len__(self) -> int:
        return len(self.data)


def batch_to_payload(records: Iterable[LogRecord]) -> dict[str, Any]:
    return {"lines": [record.to_wire() for record in records]}


def serialize_batch(records: Sequence[LogRecord]) -> SerializedView:
    """Encode ``records`` to the ingest wire format.

    Raises:
        SerializationError: If any record cannot be encoded.
    """
    try:
        payload = batch_to_payload(records)
        data = orjson.dumps(payload)
    except (TypeError, AttributeError, orjson.JSONEncodeError) as e:
        context = create_error_context(
            SerializationError.default_category,
            ErrorSeverity.HIGH,
            batch_size=len(records),
        )
        raise SerializationError(
            "Batch serialization failed",
            error_context=context,
            cause=e,
        ) from e
    return SerializedView(data=data, count=len(records))


def decode_batch(data: bytes | bytearray | memoryview | str) -> list[LogRecord]:
    """Decode a wire payload back into records, preserving order.

    Raises:
        SerializationError: If the payload is not a valid batch document.
    """
    if isinstance(data, memoryview):
        data = data.tobytes()
    try:
        document = orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise SerializationError("Batch payload is not valid JSON", cause=e) from e
    if not isinstance(document, dict) or not isinstance(document.get("lines"), list):
        raise SerializationError("Batch payload must be an object with a 'lines' array")
    records: list[LogRecord] = []
    for item in document["lines"]:
        if not isinstance(item, dict):
            raise SerializationError("Batch line must be an object")
        records.append(LogRecord.from_wire(item))
    return records
