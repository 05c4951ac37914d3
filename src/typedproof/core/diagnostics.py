"""
Internal diagnostics for typedproof.

Components report non-fatal conditions (worker retries, corrected
timestamps, unreadable state files) through ``warn``/``info``/``debug``.
Each call builds a flat payload and hands it to a writer that emits one
JSON line on stderr. Output is gated by ``core.internal_logging_enabled``,
read once from settings and cached. Diagnostics never raise.
"""

from __future__ import annotations

import sys
import time
from typing import Any, Callable

import orjson

Writer = Callable[[dict[str, Any]], None]

_internal_logging_enabled: bool | None = None


def _default_writer(payload: dict[str, Any]) -> None:
    line = orjson.dumps(payload, default=str) + b"\n"
    sys.stderr.buffer.write(line) if hasattr(sys.stderr, "buffer") else sys.stderr.write(
        line.decode("utf-8")
    )
    sys.stderr.flush()


_writer: Writer = _default_writer


def _enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import Settings

            _internal_logging_enabled = bool(
                Settings().core.internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def set_enabled(enabled: bool) -> None:
    """Override the cached gate (used by the CLI ``--verbose`` flag)."""
    global _internal_logging_enabled
    _internal_logging_enabled = bool(enabled)


def set_writer_for_tests(writer: Writer) -> None:
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _writer, _internal_logging_enabled
    _writer = _default_writer
    _internal_logging_enabled = None


def _emit(level: str, component: str, message: str, fields: dict[str, Any]) -> None:
    if not _enabled():
        return
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        _writer(payload)
    except Exception:
        # Diagnostics must never break the caller
        pass


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, fields)


def info(component: str, message: str, **fields: Any) -> None:
    _emit("INFO", component, message, fields)


def warn(component: str, message: str, **fields: Any) -> None:
    _emit("WARN", component, message, fields)
