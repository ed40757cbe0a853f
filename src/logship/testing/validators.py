"""
Protocol validators for custom ingest transports.

Provides utilities to check that a transport correctly implements the
``IngestTransport`` protocol before wiring it into a client.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Any


@dataclass
class ValidationResult:
    """Result of protocol validation."""

    valid: bool
    plugin_type: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def raise_if_invalid(self) -> None:
        if not self.valid:
            raise ProtocolViolationError(
                f"Transport violates {self.plugin_type} protocol: "
                + "; ".join(self.errors)
            )


class ProtocolViolationError(Exception):
    """Raised when a transport violates its protocol."""

    pass


def validate_transport(transport: Any) -> ValidationResult:
    """Validate that ``transport`` implements ``IngestTransport``.

    Checks:
    - ``send`` exists, is synchronous, and accepts one payload argument
    - ``close`` and ``health_check``, when present, are synchronous
    - a ``name`` string is recommended for diagnostics
    """
    errors: list[str] = []
    warnings: list[str] = []

    if not isinstance(getattr(transport, "name", None), str):
        warnings.append("Missing 'name' attribute; class name will be used")

    send = getattr(transport, "send", None)
    if send is None:
        errors.append("Missing required method: send")
    elif not callable(send):
        errors.append("send must be callable")
    else:
        if inspect.iscoroutinefunction(send):
            errors.append("send must be synchronous")
        try:
            sig = inspect.signature(send)
        except (TypeError, ValueError):
            sig = None
        if sig is not None:
            params = [p for p in sig.parameters.values() if p.name != "self"]
            if not params:
                errors.append("send must accept a payload parameter")

    for optional in ("close", "health_check"):
        method = getattr(transport, optional, None)
        if method is not None and inspect.iscoroutinefunction(method):
            warnings.append(f"{optional} should be synchronous")

    return ValidationResult(
        valid=len(errors) == 0,
        plugin_type="IngestTransport",
        errors=errors,
        warnings=warnings,
    )
