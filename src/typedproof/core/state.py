"""
Session state persistence for restart recovery.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path
from typing import Any, Mapping

import orjson

from . import diagnostics
from .export import utc_timestamp

STATE_FORMAT_VERSION = 1


class SessionStatePersistence:
    """Persists serialized session state to disk."""

    def __init__(self, state_dir: str | Path, session_id: str) -> None:
        self._path = Path(state_dir) / f"{session_id}.proofstate"
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> dict[str, Any] | None:
        """Load saved state, or ``None`` when absent or unreadable."""
        if not self._path.exists():
            return None
        try:
            raw = await asyncio.to_thread(self._path.read_bytes)
            data = orjson.loads(raw)
            if not isinstance(data, dict) or data.get("stateVersion") != STATE_FORMAT_VERSION:
                raise ValueError("unrecognized state layout")
            return data
        except (OSError, ValueError) as exc:
            diagnostics.warn(
                "state", "session state corrupt, ignoring", path=str(self._path), error=str(exc)
            )
            return None

    async def save(self, state: Mapping[str, Any]) -> None:
        """Atomically persist state to disk."""
        data = dict(state)
        data["stateVersion"] = STATE_FORMAT_VERSION
        data["lastUpdated"] = utc_timestamp()
        serialized = orjson.dumps(data, option=orjson.OPT_SORT_KEYS)
        temp_path = self._path.with_suffix(".tmp")

        def _write_atomic() -> None:
            with open(temp_path, "wb") as f:
                f.write(serialized)
                f.flush()
                os.fsync(f.fileno())
            os.replace(temp_path, self._path)

        await asyncio.to_thread(_write_atomic)

    async def clear(self) -> None:
        await asyncio.to_thread(self._path.unlink, missing_ok=True)


__all__ = ["STATE_FORMAT_VERSION", "SessionStatePersistence"]
