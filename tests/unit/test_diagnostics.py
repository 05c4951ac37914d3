from __future__ import annotations

import pytest

from typedproof.core import diagnostics


@pytest.fixture
def captured():
    lines: list[dict] = []
    diagnostics.set_writer_for_tests(lines.append)
    yield lines
    diagnostics._reset_for_tests()


def test_disabled_by_default(captured: list[dict]) -> None:
    diagnostics.warn("worker", "ignored")
    assert captured == []


def test_env_enables(monkeypatch: pytest.MonkeyPatch, captured: list[dict]) -> None:
    monkeypatch.setenv("TYPEDPROOF_CORE__INTERNAL_LOGGING_ENABLED", "true")
    diagnostics.info("session", "hello", events=3)
    assert len(captured) == 1
    payload = captured[0]
    assert payload["level"] == "INFO"
    assert payload["component"] == "session"
    assert payload["message"] == "hello"
    assert payload["events"] == 3
    assert "timestamp" in payload


def test_levels(captured: list[dict]) -> None:
    diagnostics.set_enabled(True)
    diagnostics.debug("a", "d")
    diagnostics.warn("a", "w")
    assert [p["level"] for p in captured] == ["DEBUG", "WARN"]


def test_writer_errors_never_propagate() -> None:
    def broken(_payload: dict) -> None:
        raise RuntimeError("sink down")

    diagnostics.set_writer_for_tests(broken)
    diagnostics.set_enabled(True)
    try:
        diagnostics.warn("a", "still fine")
    finally:
        diagnostics._reset_for_tests()


def test_default_writer_emits_json_line(capsys: pytest.CaptureFixture[str]) -> None:
    diagnostics.set_enabled(True)
    diagnostics.warn("cli", "to stderr", path="x.json")
    err = capsys.readouterr().err
    assert '"component":"cli"' in err
    assert err.endswith("\n")
