from __future__ import annotations

from typedproof.core.events import StoredEvent
from typedproof.core.statistics import compute_stats, compute_typing_statistics


def _ev(seq: int, type_: str, input_type: str | None = None, data: object = None) -> StoredEvent:
    return StoredEvent(sequence=seq, timestamp=float(seq), type=type_, input_type=input_type, data=data)


EVENTS = [
    _ev(0, "contentChange", "insertText", "a"),
    _ev(1, "contentChange", "insertText", "b"),
    _ev(2, "contentChange", "deleteContentBackward", ""),
    _ev(3, "externalInput", "insertFromPaste", "pasted"),
    _ev(4, "contentChange", "insertFromInternalPaste", "ab"),
    _ev(5, "externalInput", "insertFromDrop", "dropped"),
    _ev(6, "templateInjection", None, {"templateName": "t"}),
    _ev(7, "keyDown", None, {"key": "a", "code": "KeyA"}),
]


def test_counts() -> None:
    stats = compute_typing_statistics(EVENTS, 60_000.0)
    assert stats.total_events == 8
    assert stats.paste_events == 1
    assert stats.internal_paste_events == 1
    assert stats.drop_events == 1
    assert stats.insert_events == 3
    assert stats.delete_events == 1
    assert stats.template_events == 1
    assert stats.average_wpm == 3.0
    assert stats.is_pure_typing is False


def test_zero_duration_has_zero_speed() -> None:
    assert compute_typing_statistics(EVENTS[:2], 0).average_wpm == 0


def test_serialized_forms() -> None:
    stats = compute_typing_statistics(EVENTS[:2], 30_000.0)
    assert stats.to_dict()["averageWPM"] == 4.0
    assert stats.proof_metadata() == {
        "totalEvents": 2,
        "pasteEvents": 0,
        "internalPasteEvents": 0,
        "dropEvents": 0,
        "insertEvents": 2,
        "deleteEvents": 0,
        "totalTypingTime": 30_000.0,
        "averageTypingSpeed": 4.0,
    }


def test_summary_stats() -> None:
    stats = compute_stats(EVENTS, 2500.0, current_hash="h", pending_count=2)
    assert stats.duration == 2.5
    assert stats.event_types["contentChange"] == 4
    assert stats.event_types["externalInput"] == 2
    assert stats.to_dict()["pendingCount"] == 2
