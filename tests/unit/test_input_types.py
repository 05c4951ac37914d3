from __future__ import annotations

import pytest

from typedproof.core.events import EventType, InputType
from typedproof.core.input_types import (
    ALLOWED_INPUT_TYPES,
    PROHIBITED_INPUT_TYPES,
    InputClass,
    classify,
    is_allowed,
    is_prohibited,
    is_pure_typing,
    tag_event_type,
    validate_event_type,
    validate_input_type,
)
from typedproof.core.statistics import TypingStatistics


def test_sets_are_disjoint() -> None:
    assert ALLOWED_INPUT_TYPES.isdisjoint(PROHIBITED_INPUT_TYPES)


@pytest.mark.parametrize(
    "input_type",
    ["insertText", "insertLineBreak", "deleteContentBackward", "historyUndo",
     "insertCompositionText", "insertFromInternalPaste"],
)
def test_allowed(input_type: str) -> None:
    assert classify(input_type) is InputClass.ALLOWED
    assert is_allowed(input_type)
    assert not is_prohibited(input_type)


@pytest.mark.parametrize(
    "input_type",
    ["insertFromPaste", "insertFromDrop", "insertFromYank",
     "insertReplacementText", "insertFromPasteAsQuotation"],
)
def test_prohibited(input_type: str) -> None:
    assert classify(input_type) is InputClass.PROHIBITED
    assert is_prohibited(input_type)
    assert not is_allowed(input_type)


@pytest.mark.parametrize("input_type", [None, "", "somethingNew", "insertTab"])
def test_unknown_is_neither(input_type: str | None) -> None:
    assert classify(input_type) is InputClass.UNKNOWN
    assert not is_allowed(input_type)
    assert not is_prohibited(input_type)


def test_enum_members_are_accepted() -> None:
    assert is_allowed(InputType.INSERT_TEXT)
    assert is_prohibited(InputType.INSERT_FROM_PASTE)


def test_prohibited_input_forces_external_tag() -> None:
    assert tag_event_type(EventType.CONTENT_CHANGE, "insertFromPaste") == "externalInput"
    assert tag_event_type("contentChange", "insertText") == "contentChange"
    assert tag_event_type(EventType.KEY_DOWN, None) == "keyDown"


def test_validators() -> None:
    assert validate_event_type("contentChange")
    assert validate_event_type(EventType.FOCUS_CHANGE)
    assert not validate_event_type("madeUp")
    assert not validate_event_type(3)
    assert validate_input_type("insertText")
    assert not validate_input_type("nope")


def test_pure_typing_from_mapping_or_stats() -> None:
    assert is_pure_typing({"pasteEvents": 0, "dropEvents": 0})
    assert not is_pure_typing({"pasteEvents": 1, "dropEvents": 0})
    stats = TypingStatistics(
        total_events=3,
        paste_events=0,
        internal_paste_events=2,
        drop_events=1,
        insert_events=1,
        delete_events=0,
        template_events=0,
        duration=1000.0,
        average_wpm=60.0,
    )
    assert not is_pure_typing(stats)
