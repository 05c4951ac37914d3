from __future__ import annotations

from pathlib import Path

import pytest

from typedproof.core import diagnostics
from typedproof.core.events import EventInput, EventType
from typedproof.core.state import STATE_FORMAT_VERSION, SessionStatePersistence
from typedproof.session import TypingProof


@pytest.mark.asyncio
async def test_load_missing_returns_none(tmp_path: Path) -> None:
    persistence = SessionStatePersistence(tmp_path / "state", "s1")
    assert persistence.path == tmp_path / "state" / "s1.proofstate"
    assert await persistence.load() is None


@pytest.mark.asyncio
async def test_save_then_load(tmp_path: Path) -> None:
    persistence = SessionStatePersistence(tmp_path, "s1")
    await persistence.save({"currentHash": "abc", "events": []})
    loaded = await persistence.load()
    assert loaded is not None
    assert loaded["currentHash"] == "abc"
    assert loaded["stateVersion"] == STATE_FORMAT_VERSION
    assert loaded["lastUpdated"].endswith("Z")
    assert not persistence.path.with_suffix(".tmp").exists()


@pytest.mark.asyncio
async def test_corrupt_state_is_ignored_with_warning(tmp_path: Path) -> None:
    persistence = SessionStatePersistence(tmp_path, "s1")
    persistence.path.write_bytes(b"{broken")
    seen: list[dict] = []
    diagnostics.set_writer_for_tests(seen.append)
    diagnostics.set_enabled(True)
    try:
        assert await persistence.load() is None
    finally:
        diagnostics._reset_for_tests()
    assert seen and seen[0]["component"] == "state"


@pytest.mark.asyncio
async def test_unversioned_state_is_ignored(tmp_path: Path) -> None:
    persistence = SessionStatePersistence(tmp_path, "s1")
    persistence.path.write_bytes(b'{"events": []}')
    assert await persistence.load() is None


@pytest.mark.asyncio
async def test_clear(tmp_path: Path) -> None:
    persistence = SessionStatePersistence(tmp_path, "s1")
    await persistence.save({})
    await persistence.clear()
    assert not persistence.path.exists()
    await persistence.clear()


@pytest.mark.asyncio
async def test_session_survives_restart(tmp_path: Path, fast_settings) -> None:
    persistence = SessionStatePersistence(tmp_path, "doc")
    first = TypingProof(settings=fast_settings)
    await first.initialize("fp")
    for ch in "hey":
        await first.record_event(
            EventInput(type=EventType.CONTENT_CHANGE, input_type="insertText", data=ch)
        )
    await persistence.save(first.serialize_state())
    head = first.current_hash
    await first.close()

    state = await persistence.load()
    second = await TypingProof.from_serialized_state(state, settings=fast_settings)
    try:
        assert second.current_hash == head
        await second.record_event(
            EventInput(type=EventType.CONTENT_CHANGE, input_type="insertText", data="!")
        )
        assert second.verify().valid is True
        assert len(second.events) == 4
    finally:
        await second.close()
