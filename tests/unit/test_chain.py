from __future__ import annotations

import asyncio

import pytest

from typedproof.core.canonical import canonicalize
from typedproof.core.chain import ChainState, HashChainBuilder, chain_hash, make_genesis
from typedproof.core.errors import ChainIntegrityError, ErrorKind, LifecycleError
from typedproof.core.events import Event
from typedproof.core.hashing import hash_text
from typedproof.core.posw import verify_posw
from typedproof.core.worker import PoswWorker


@pytest.fixture
async def builder():
    worker = PoswWorker()
    b = HashChainBuilder(worker=worker, iterations=2)
    yield b
    await worker.close()


def _event(seq: int, ts: float = 0.0, prev: str | None = None, data: str = "x") -> Event:
    return Event(
        sequence=seq,
        timestamp=ts,
        type="contentChange",
        input_type="insertText",
        data=data,
        previous_hash=prev,
    )


def test_genesis_is_random_per_session() -> None:
    a, b = make_genesis("fp"), make_genesis("fp")
    assert a != b
    assert len(a) == 64


def test_state_before_genesis_raises(builder: HashChainBuilder) -> None:
    assert builder.is_initialized is False
    with pytest.raises(LifecycleError) as exc_info:
        _ = builder.state
    assert exc_info.value.kind is ErrorKind.NOT_INITIALIZED


def test_genesis_twice_raises(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    with pytest.raises(LifecycleError) as exc_info:
        builder.genesis("fp")
    assert exc_info.value.kind is ErrorKind.ALREADY_INITIALIZED


@pytest.mark.asyncio
async def test_append_before_genesis_raises(builder: HashChainBuilder) -> None:
    with pytest.raises(LifecycleError):
        await builder.append(_event(0))


@pytest.mark.critical
@pytest.mark.asyncio
async def test_append_links_events(builder: HashChainBuilder) -> None:
    genesis = builder.genesis("fp")
    first = await builder.append(_event(0, 1.0))
    second = await builder.append(_event(1, 2.0, data="y"))

    assert first.previous_hash == genesis
    assert second.previous_hash == first.hash
    assert builder.state == ChainState(head=second.hash, length=2)
    assert builder.genesis_hash == genesis
    assert first.posw is not None and first.posw.iterations == 2


@pytest.mark.critical
@pytest.mark.asyncio
async def test_stored_hash_and_posw_are_reproducible(builder: HashChainBuilder) -> None:
    genesis = builder.genesis("fp")
    stored = await builder.append(_event(0, 5.0))

    payload = canonicalize(stored.hash_record())
    assert verify_posw(genesis, payload, stored.posw)
    assert stored.hash == chain_hash(genesis, stored.hash_record_with_posw())
    assert stored.hash == hash_text(genesis + canonicalize(stored.hash_record_with_posw()))


@pytest.mark.asyncio
async def test_sequence_mismatch_rejected(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    with pytest.raises(ChainIntegrityError) as exc_info:
        await builder.append(_event(3))
    assert exc_info.value.kind is ErrorKind.SEQUENCE_MISMATCH
    assert builder.state.length == 0


@pytest.mark.asyncio
async def test_wrong_previous_hash_rejected(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    with pytest.raises(ChainIntegrityError) as exc_info:
        await builder.append(_event(0, prev="f" * 64))
    assert exc_info.value.kind is ErrorKind.PREVIOUS_HASH_MISMATCH


@pytest.mark.asyncio
async def test_backwards_timestamp_rejected(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    await builder.append(_event(0, 10.0))
    with pytest.raises(ChainIntegrityError) as exc_info:
        await builder.append(_event(1, 9.0))
    assert exc_info.value.kind is ErrorKind.TIMESTAMP_VIOLATION
    assert builder.state.length == 1


@pytest.mark.asyncio
async def test_equal_timestamps_allowed(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    await builder.append(_event(0, 10.0))
    await builder.append(_event(1, 10.0))
    assert builder.state.length == 2


@pytest.mark.asyncio
async def test_annotations_not_hashed(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    stored = await builder.append(_event(0), description="typed x", insert_length=1)
    assert stored.description == "typed x"
    assert "description" not in stored.hash_record_with_posw()
    assert stored.to_dict()["description"] == "typed x"


@pytest.mark.asyncio
async def test_concurrent_appends_serialize(builder: HashChainBuilder) -> None:
    builder.genesis("fp")
    await asyncio.gather(*(builder.append(_event(i, float(i))) for i in range(5)))
    events = builder.events
    assert [e.sequence for e in events] == list(range(5))
    for prev, cur in zip(events, events[1:]):
        assert cur.previous_hash == prev.hash


@pytest.mark.asyncio
async def test_checkpoint_created_every_33_events(chain_factory) -> None:
    chain = await chain_factory(70)
    indices = [cp.event_index for cp in chain.checkpoint_manager.checkpoints]
    assert indices == [32, 65]
    assert chain.checkpoint_manager.checkpoints[0].hash == chain.events[32].hash


@pytest.mark.asyncio
async def test_restore_and_reset(chain_factory) -> None:
    source = await chain_factory(4)
    restored = HashChainBuilder(iterations=2)
    restored.restore(genesis_hash=source.genesis_hash, events=source.events)
    assert restored.state == source.state

    restored.reset()
    assert restored.is_initialized is False
    assert restored.events == []


def test_iterations_must_be_positive() -> None:
    with pytest.raises(ValueError):
        HashChainBuilder(iterations=0)
