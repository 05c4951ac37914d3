"""
Input-type admissibility policy.

ALLOWED holds keystroke-equivalent operations, including internal paste of
content the registry recognizes as already typed. PROHIBITED holds external
insertions. Events with a prohibited input type are recorded as
``externalInput`` whatever their original kind.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from .events import EventType, InputType

ALLOWED_INPUT_TYPES: frozenset[str] = frozenset(
    item.value
    for item in (
        InputType.INSERT_TEXT,
        InputType.INSERT_LINE_BREAK,
        InputType.INSERT_PARAGRAPH,
        InputType.DELETE_CONTENT_BACKWARD,
        InputType.DELETE_CONTENT_FORWARD,
        InputType.DELETE_WORD_BACKWARD,
        InputType.DELETE_WORD_FORWARD,
        InputType.DELETE_SOFT_LINE_BACKWARD,
        InputType.DELETE_SOFT_LINE_FORWARD,
        InputType.DELETE_HARD_LINE_BACKWARD,
        InputType.DELETE_HARD_LINE_FORWARD,
        InputType.DELETE_BY_DRAG,
        InputType.HISTORY_UNDO,
        InputType.HISTORY_REDO,
        InputType.INSERT_COMPOSITION_TEXT,
        InputType.DELETE_COMPOSITION_TEXT,
        InputType.INSERT_FROM_COMPOSITION,
        InputType.INSERT_FROM_INTERNAL_PASTE,
    )
)

PROHIBITED_INPUT_TYPES: frozenset[str] = frozenset(
    item.value
    for item in (
        InputType.INSERT_FROM_PASTE,
        InputType.INSERT_FROM_DROP,
        InputType.INSERT_FROM_YANK,
        InputType.INSERT_REPLACEMENT_TEXT,
        InputType.INSERT_FROM_PASTE_AS_QUOTATION,
    )
)

_VALID_EVENT_TYPES = frozenset(item.value for item in EventType)
_VALID_INPUT_TYPES = frozenset(item.value for item in InputType)


class InputClass(str, Enum):
    ALLOWED = "allowed"
    PROHIBITED = "prohibited"
    UNKNOWN = "unknown"


def _key(input_type: InputType | str | None) -> str | None:
    return input_type.value if isinstance(input_type, InputType) else input_type


def classify(input_type: InputType | str | None) -> InputClass:
    key = _key(input_type)
    if key in ALLOWED_INPUT_TYPES:
        return InputClass.ALLOWED
    if key in PROHIBITED_INPUT_TYPES:
        return InputClass.PROHIBITED
    return InputClass.UNKNOWN


def is_allowed(input_type: InputType | str | None) -> bool:
    return classify(input_type) is InputClass.ALLOWED


def is_prohibited(input_type: InputType | str | None) -> bool:
    return classify(input_type) is InputClass.PROHIBITED


def validate_event_type(event_type: Any) -> bool:
    """True when ``event_type`` names a known event kind."""
    if isinstance(event_type, EventType):
        return True
    return isinstance(event_type, str) and event_type in _VALID_EVENT_TYPES


def validate_input_type(input_type: Any) -> bool:
    if isinstance(input_type, InputType):
        return True
    return isinstance(input_type, str) and input_type in _VALID_INPUT_TYPES


def tag_event_type(
    event_type: EventType | str, input_type: InputType | str | None
) -> str:
    """Event type to record; prohibited input forces ``externalInput``."""
    if is_prohibited(input_type):
        return EventType.EXTERNAL_INPUT.value
    return event_type.value if isinstance(event_type, EventType) else event_type


def is_pure_typing(stats: Mapping[str, Any] | Any) -> bool:
    """Headline provenance claim: no external paste and no external drop."""
    if isinstance(stats, Mapping):
        paste = stats.get("pasteEvents", 0)
        drop = stats.get("dropEvents", 0)
    else:
        paste = stats.paste_events
        drop = stats.drop_events
    return paste == 0 and drop == 0


__all__ = [
    "ALLOWED_INPUT_TYPES",
    "PROHIBITED_INPUT_TYPES",
    "InputClass",
    "classify",
    "is_allowed",
    "is_prohibited",
    "is_pure_typing",
    "tag_event_type",
    "validate_event_type",
    "validate_input_type",
]
