"""
Error hierarchy for logship.

Every error raised or reported by the shipper derives from ``LogshipError``
and carries an ``ErrorContext`` with a unique id, a timestamp, a category and
a severity so that reports from the background flush loop can be correlated.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    CONFIGURATION = "configuration"
    SERIALIZATION = "serialization"
    TRANSPORT = "transport"
    SYSTEM = "system"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ErrorContext:
    """Metadata captured when an error is created."""

    category: ErrorCategory = ErrorCategory.SYSTEM
    severity: ErrorSeverity = ErrorSeverity.MEDIUM
    error_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error_id": self.error_id,
            "timestamp": self.timestamp.isoformat(),
            "category": self.category.value,
            "severity": self.severity.value,
            "details": dict(self.details),
        }


def create_error_context(
    category: ErrorCategory,
    severity: ErrorSeverity = ErrorSeverity.MEDIUM,
    **details: Any,
) -> ErrorContext:
    return ErrorContext(category=category, severity=severity, details=details)


class LogshipError(Exception):
    """Base error for the shipper.

    Args:
        message: Human readable description.
        category: Error category, defaults to SYSTEM.
        severity: Error severity, defaults to MEDIUM.
        error_context: Pre-built context; overrides category/severity.
        cause: Underlying exception, stored as ``__cause__``.
        **details: Extra fields copied into the context.
    """

    default_category: ErrorCategory = ErrorCategory.SYSTEM
    default_severity: ErrorSeverity = ErrorSeverity.MEDIUM

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        severity: ErrorSeverity | None = None,
        error_context: ErrorContext | None = None,
        cause: BaseException | None = None,
        **details: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        if error_context is None:
            error_context = create_error_context(
                category or self.default_category,
                severity or self.default_severity,
                **details,
            )
        elif details:
            error_context.details.update(details)
        self.context = error_context
        if cause is not None:
            self.__cause__ = cause

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.to_dict(),
        }
        if self.__cause__ is not None:
            data["cause"] = f"{type(self.__cause__).__name__}: {self.__cause__}"
        return data


class ConfigurationError(LogshipError):
    """Missing or invalid client identity. Raised at construction time."""

    default_category = ErrorCategory.CONFIGURATION
    default_severity = ErrorSeverity.CRITICAL


class SerializationError(LogshipError):
    """A batch could not be encoded to, or decoded from, the wire format."""

    default_category = ErrorCategory.SERIALIZATION
    default_severity = ErrorSeverity.HIGH


class TransportError(LogshipError):
    """Delivery of a batch to the ingest endpoint failed."""

    default_category = ErrorCategory.TRANSPORT
    default_severity = ErrorSeverity.HIGH

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        if status_code is not None:
            kwargs.setdefault("status_code", status_code)
        super().__init__(message, **kwargs)
        self.status_code = status_code


__all__ = [
    "ConfigurationError",
    "ErrorCategory",
    "ErrorContext",
    "ErrorSeverity",
    "LogshipError",
    "SerializationError",
    "TransportError",
    "create_error_context",
]
