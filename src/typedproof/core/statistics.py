"""Typing statistics over a list of stored events."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Sequence

from .events import EventType, InputType, StoredEvent


@dataclass(frozen=True)
class TypingStatistics:
    total_events: int
    paste_events: int
    internal_paste_events: int
    drop_events: int
    insert_events: int
    delete_events: int
    template_events: int
    duration: float  # milliseconds
    average_wpm: float

    @property
    def is_pure_typing(self) -> bool:
        return self.paste_events == 0 and self.drop_events == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEvents": self.total_events,
            "pasteEvents": self.paste_events,
            "internalPasteEvents": self.internal_paste_events,
            "dropEvents": self.drop_events,
            "insertEvents": self.insert_events,
            "deleteEvents": self.delete_events,
            "templateEvents": self.template_events,
            "duration": self.duration,
            "averageWPM": self.average_wpm,
        }

    def proof_metadata(self) -> dict[str, Any]:
        """The metadata block embedded in exported proof data."""
        return {
            "totalEvents": self.total_events,
            "pasteEvents": self.paste_events,
            "internalPasteEvents": self.internal_paste_events,
            "dropEvents": self.drop_events,
            "insertEvents": self.insert_events,
            "deleteEvents": self.delete_events,
            "totalTypingTime": self.duration,
            "averageTypingSpeed": self.average_wpm,
        }


@dataclass(frozen=True)
class TypingStats:
    total_events: int
    duration: float  # seconds
    event_types: dict[str, int] = field(default_factory=dict)
    current_hash: str | None = None
    pending_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalEvents": self.total_events,
            "duration": self.duration,
            "eventTypes": dict(self.event_types),
            "currentHash": self.current_hash,
            "pendingCount": self.pending_count,
        }


def compute_typing_statistics(
    events: Sequence[StoredEvent], duration_ms: float
) -> TypingStatistics:
    paste = internal_paste = drop = insert = delete = template = 0
    for event in events:
        input_type = event.input_type
        if input_type == InputType.INSERT_FROM_PASTE.value:
            paste += 1
        elif input_type == InputType.INSERT_FROM_INTERNAL_PASTE.value:
            internal_paste += 1
        elif input_type == InputType.INSERT_FROM_DROP.value:
            drop += 1
        if event.type == EventType.CONTENT_CHANGE.value and event.data:
            insert += 1
        if isinstance(input_type, str) and input_type.startswith("delete"):
            delete += 1
        if event.type == EventType.TEMPLATE_INJECTION.value:
            template += 1

    # Insert events per minute, one decimal
    wpm = round(insert / (duration_ms / 60000.0), 1) if duration_ms > 0 else 0.0
    return TypingStatistics(
        total_events=len(events),
        paste_events=paste,
        internal_paste_events=internal_paste,
        drop_events=drop,
        insert_events=insert,
        delete_events=delete,
        template_events=template,
        duration=duration_ms,
        average_wpm=wpm,
    )


def compute_stats(
    events: Sequence[StoredEvent],
    duration_ms: float,
    *,
    current_hash: str | None,
    pending_count: int = 0,
) -> TypingStats:
    counts = Counter(str(event.type) for event in events)
    return TypingStats(
        total_events=len(events),
        duration=duration_ms / 1000.0,
        event_types=dict(counts),
        current_hash=current_hash,
        pending_count=pending_count,
    )


__all__ = [
    "TypingStatistics",
    "TypingStats",
    "compute_typing_statistics",
    "compute_stats",
]
