"""
Periodic chain-head snapshots.

A checkpoint is taken after every ``CHECKPOINT_INTERVAL``-th event and lets
the sampled verifier replay short segments instead of the whole chain.
"""

from __future__ import annotations

from typing import Sequence

from .canonical import canonicalize
from .events import Checkpoint, StoredEvent
from .hashing import hash_text

CHECKPOINT_INTERVAL = 33


def content_hash_for(event: StoredEvent) -> str:
    data = event.data
    if not data:
        return hash_text("")
    return hash_text(data if isinstance(data, str) else canonicalize(data))


def is_aligned(event_index: int, interval: int = CHECKPOINT_INTERVAL) -> bool:
    return (event_index + 1) % interval == 0


class CheckpointManager:
    def __init__(self, interval: int = CHECKPOINT_INTERVAL) -> None:
        if interval < 1:
            raise ValueError("interval must be >= 1")
        self._interval = interval
        self._checkpoints: list[Checkpoint] = []

    @property
    def interval(self) -> int:
        return self._interval

    @property
    def checkpoints(self) -> list[Checkpoint]:
        return list(self._checkpoints)

    def should_checkpoint(self, event_index: int) -> bool:
        return is_aligned(event_index, self._interval)

    def create_checkpoint(
        self, event_index: int, events: Sequence[StoredEvent]
    ) -> Checkpoint | None:
        """Snapshot ``events[event_index]``; ``None`` when out of range."""
        if event_index < 0 or event_index >= len(events):
            return None
        event = events[event_index]
        checkpoint = Checkpoint(
            event_index=event_index,
            hash=event.hash,
            timestamp=event.timestamp,
            content_hash=content_hash_for(event),
        )
        self._checkpoints.append(checkpoint)
        return checkpoint

    def cleanup_for_export(self) -> list[Checkpoint]:
        """Drop checkpoints not on an interval boundary and return the rest."""
        self._checkpoints = [
            cp for cp in self._checkpoints if is_aligned(cp.event_index, self._interval)
        ]
        return list(self._checkpoints)

    def export_checkpoints(self, events: Sequence[StoredEvent]) -> list[Checkpoint]:
        """Aligned checkpoints plus one on the final event."""
        exported = self.cleanup_for_export()
        if not events:
            return exported
        last_index = len(events) - 1
        if not exported or exported[-1].event_index != last_index:
            event = events[last_index]
            exported.append(
                Checkpoint(
                    event_index=last_index,
                    hash=event.hash,
                    timestamp=event.timestamp,
                    content_hash=content_hash_for(event),
                )
            )
        return exported

    def last(self) -> Checkpoint | None:
        return self._checkpoints[-1] if self._checkpoints else None

    def restore(self, checkpoints: Sequence[Checkpoint]) -> None:
        self._checkpoints = list(checkpoints)

    def clear(self) -> None:
        self._checkpoints.clear()

    def __len__(self) -> int:
        return len(self._checkpoints)


__all__ = [
    "CHECKPOINT_INTERVAL",
    "CheckpointManager",
    "content_hash_for",
    "is_aligned",
]
