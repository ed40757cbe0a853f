"""
Root pytest configuration.
"""

from __future__ import annotations

import os
from collections.abc import Generator

import pytest


def get_test_timeout(base: float, max_multiplier: float = 5.0) -> float:
    """Apply CI timeout multiplier to a base timeout value.

    Args:
        base: Base timeout in seconds
        max_multiplier: Maximum allowed multiplier (default 5x)

    Returns:
        Scaled timeout value

    Environment:
        CI_TIMEOUT_MULTIPLIER: Multiplier for CI environments (default: 1.0)
    """
    raw = os.getenv("CI_TIMEOUT_MULTIPLIER", "1.0")
    try:
        multiplier = float(raw) if raw else 1.0
        multiplier = min(multiplier, max_multiplier)
    except ValueError:
        multiplier = 1.0
    return base * multiplier


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests exercising several components together",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics() -> Generator[None, None, None]:
    """Reset the diagnostics cache and writer around each test.

    The diagnostics module caches the ``internal_logging_enabled`` setting at
    first access; resetting keeps tests from inheriting each other's state.
    """
    import logship.core.diagnostics as diag

    diag._reset_for_tests()
    yield
    diag._reset_for_tests()


@pytest.fixture
def captured_diagnostics() -> Generator[list[dict], None, None]:
    """Collect diagnostics payloads instead of writing them to stderr."""
    import logship.core.diagnostics as diag

    captured: list[dict] = []
    diag.set_writer_for_tests(captured.append)
    yield captured
    diag.set_writer_for_tests(None)


@pytest.fixture(autouse=True)
def _clear_logship_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep ambient LOGSHIP_* variables from leaking into settings tests."""
    for key in list(os.environ):
        if key.startswith("LOGSHIP_") or key == "LOGDNA_API_KEY":
            monkeypatch.delenv(key, raising=False)
