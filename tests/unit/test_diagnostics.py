from __future__ import annotations

import json

import pytest

from logship.core import diagnostics


def test_disabled_by_default(captured_diagnostics: list[dict]) -> None:
    diagnostics.warn("engine", "quiet")

    assert captured_diagnostics == []
    assert diagnostics.is_enabled() is False


def test_force_bypasses_toggle(captured_diagnostics: list[dict]) -> None:
    diagnostics.warn("engine", "loud", force=True, dropped=3)

    [payload] = captured_diagnostics
    assert payload["level"] == "WARN"
    assert payload["component"] == "engine"
    assert payload["message"] == "loud"
    assert payload["dropped"] == 3
    assert isinstance(payload["ts"], float)


def test_enabled_via_environment(
    monkeypatch: pytest.MonkeyPatch, captured_diagnostics: list[dict]
) -> None:
    monkeypatch.setenv("LOGSHIP_CORE__INTERNAL_LOGGING_ENABLED", "true")

    diagnostics.warn("engine", "visible")
    diagnostics.debug("engine", "details")

    assert [p["level"] for p in captured_diagnostics] == ["WARN", "DEBUG"]


def test_exception_includes_error_fields(captured_diagnostics: list[dict]) -> None:
    from logship.core.errors import TransportError

    err = TransportError("down")
    diagnostics.exception("engine", "failed", err, force=True)

    [payload] = captured_diagnostics
    assert payload["level"] == "ERROR"
    assert payload["error_type"] == "TransportError"
    assert payload["error"] == "down"
    assert payload["error_id"] == err.context.error_id


def test_writer_errors_are_swallowed() -> None:
    def _broken(_payload: dict) -> None:
        raise RuntimeError("writer down")

    diagnostics.set_writer_for_tests(_broken)

    diagnostics.warn("engine", "still fine", force=True)


def test_default_writer_emits_json_line(capsys: pytest.CaptureFixture[str]) -> None:
    diagnostics.warn("engine", "to stderr", force=True, count=1)

    err = capsys.readouterr().err
    assert err.endswith("\n")
    payload = json.loads(err.strip())
    assert payload["message"] == "to stderr"
    assert payload["count"] == 1
