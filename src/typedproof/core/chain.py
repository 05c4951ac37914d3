"""
Hash-chain builder.

The builder owns a single ``ChainState(head, length)`` value and is the only
thing that advances it. Each append:

1. checks the event against the state (sequence, previous hash, timestamp)
2. canonicalizes the event without PoSW and asks the worker for a PoSW record
   anchored at the current head
3. canonicalizes the event with its PoSW and hashes ``head + canonical``
4. stores the result and moves the head

Appends are serialized by an ``asyncio.Lock``. If an append is cancelled or
fails before step 4 the state is untouched.
"""

from __future__ import annotations

import asyncio
import dataclasses
import secrets
from dataclasses import dataclass
from typing import Any, Sequence

from . import diagnostics
from .canonical import canonicalize
from .checkpoints import CheckpointManager
from .errors import ChainIntegrityError, ErrorKind, LifecycleError
from .events import Event, StoredEvent
from .hashing import hash_text
from .posw import DEFAULT_ITERATIONS
from .worker import PoswWorker


@dataclass(frozen=True)
class ChainState:
    head: str
    length: int


def make_genesis(fingerprint_hash: str) -> str:
    """Anchor a new chain on the device fingerprint and 32 fresh random bytes."""
    return hash_text(fingerprint_hash + secrets.token_hex(32))


def chain_hash(previous_hash: str, record_with_posw: dict[str, Any]) -> str:
    return hash_text(previous_hash + canonicalize(record_with_posw))


class HashChainBuilder:
    def __init__(
        self,
        *,
        worker: PoswWorker | None = None,
        iterations: int = DEFAULT_ITERATIONS,
        checkpoints: CheckpointManager | None = None,
    ) -> None:
        if iterations < 1:
            raise ValueError("iterations must be >= 1")
        self._worker = worker or PoswWorker()
        self._iterations = iterations
        self._checkpoints = checkpoints or CheckpointManager()
        self._state: ChainState | None = None
        self._genesis: str | None = None
        self._events: list[StoredEvent] = []
        self._lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> ChainState:
        if self._state is None:
            raise LifecycleError("Hash chain is not initialized")
        return self._state

    @property
    def genesis_hash(self) -> str | None:
        return self._genesis

    @property
    def iterations(self) -> int:
        return self._iterations

    @property
    def events(self) -> list[StoredEvent]:
        return list(self._events)

    @property
    def checkpoint_manager(self) -> CheckpointManager:
        return self._checkpoints

    def genesis(self, fingerprint_hash: str) -> str:
        if self._state is not None:
            raise LifecycleError(
                "Hash chain already initialized", kind=ErrorKind.ALREADY_INITIALIZED
            )
        self._genesis = make_genesis(fingerprint_hash)
        self._state = ChainState(head=self._genesis, length=0)
        diagnostics.debug("chain", "genesis created", iterations=self._iterations)
        return self._genesis

    async def append(self, event: Event, **annotations: Any) -> StoredEvent:
        """Append ``event`` and return the stored form.

        ``event.previous_hash`` may be left as ``None`` to take the current
        head. Raises ``ChainIntegrityError`` when the event does not fit the
        current state.
        """
        async with self._lock:
            state = self.state
            if event.sequence != state.length:
                raise ChainIntegrityError(
                    f"Expected sequence {state.length}, got {event.sequence}",
                    kind=ErrorKind.SEQUENCE_MISMATCH,
                    event_index=event.sequence,
                )
            if event.previous_hash is None:
                event = dataclasses.replace(event, previous_hash=state.head)
            elif event.previous_hash != state.head:
                raise ChainIntegrityError(
                    "previousHash does not match chain head",
                    kind=ErrorKind.PREVIOUS_HASH_MISMATCH,
                    event_index=event.sequence,
                )
            if self._events and event.timestamp < self._events[-1].timestamp:
                raise ChainIntegrityError(
                    "Timestamp went backwards",
                    kind=ErrorKind.TIMESTAMP_VIOLATION,
                    event_index=event.sequence,
                )

            payload = canonicalize(event.hash_record())
            posw = await self._worker.compute(state.head, payload, self._iterations)

            stored = StoredEvent(
                **{f.name: getattr(event, f.name) for f in dataclasses.fields(Event)},
                posw=posw,
                **annotations,
            )
            new_head = chain_hash(state.head, stored.hash_record_with_posw())
            stored = dataclasses.replace(stored, hash=new_head)

            self._events.append(stored)
            self._state = ChainState(head=new_head, length=state.length + 1)
            if self._checkpoints.should_checkpoint(stored.sequence):
                self._checkpoints.create_checkpoint(stored.sequence, self._events)
            return stored

    def restore(
        self,
        *,
        genesis_hash: str,
        events: Sequence[StoredEvent],
        checkpoints: Sequence[Any] = (),
    ) -> None:
        """Load an already-built chain (state restore); no re-hashing."""
        self._genesis = genesis_hash
        self._events = list(events)
        head = self._events[-1].hash if self._events else genesis_hash
        self._state = ChainState(head=head, length=len(self._events))
        self._checkpoints.restore(checkpoints)

    def reset(self) -> None:
        self._state = None
        self._genesis = None
        self._events = []
        self._checkpoints.clear()


__all__ = ["ChainState", "HashChainBuilder", "chain_hash", "make_genesis"]
