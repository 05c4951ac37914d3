"""
Event data model.

Events are kept as frozen dataclasses whose hashed fields hold exactly the
JSON values that were recorded (or parsed from a proof file). Nothing is
coerced on the way in, so re-serializing a parsed event reproduces the bytes
that were hashed when it was built. Wire names are camelCase; the Python
attribute names never reach a hash.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from .errors import ProofFormatError


class EventType(str, Enum):
    CONTENT_CHANGE = "contentChange"
    CONTENT_SNAPSHOT = "contentSnapshot"
    CURSOR_POSITION_CHANGE = "cursorPositionChange"
    SELECTION_CHANGE = "selectionChange"
    EXTERNAL_INPUT = "externalInput"
    EDITOR_INITIALIZED = "editorInitialized"
    MOUSE_POSITION_CHANGE = "mousePositionChange"
    VISIBILITY_CHANGE = "visibilityChange"
    FOCUS_CHANGE = "focusChange"
    KEY_DOWN = "keyDown"
    KEY_UP = "keyUp"
    WINDOW_RESIZE = "windowResize"
    NETWORK_STATUS_CHANGE = "networkStatusChange"
    HUMAN_ATTESTATION = "humanAttestation"
    PRE_EXPORT_ATTESTATION = "preExportAttestation"
    TERMS_ACCEPTED = "termsAccepted"
    CODE_EXECUTION = "codeExecution"
    TERMINAL_INPUT = "terminalInput"
    SCREENSHOT_CAPTURE = "screenshotCapture"
    SCREEN_SHARE_START = "screenShareStart"
    SCREEN_SHARE_STOP = "screenShareStop"
    SCREEN_SHARE_OPT_OUT = "screenShareOptOut"
    TEMPLATE_INJECTION = "templateInjection"
    SESSION_RESUMED = "sessionResumed"
    COPY_OPERATION = "copyOperation"


class InputType(str, Enum):
    # Insertion
    INSERT_TEXT = "insertText"
    INSERT_LINE_BREAK = "insertLineBreak"
    INSERT_PARAGRAPH = "insertParagraph"
    INSERT_TAB = "insertTab"
    INSERT_FROM_COMPOSITION = "insertFromComposition"
    INSERT_COMPOSITION_TEXT = "insertCompositionText"
    DELETE_COMPOSITION_TEXT = "deleteCompositionText"
    INSERT_FROM_INTERNAL_PASTE = "insertFromInternalPaste"
    # Deletion
    DELETE_CONTENT_BACKWARD = "deleteContentBackward"
    DELETE_CONTENT_FORWARD = "deleteContentForward"
    DELETE_WORD_BACKWARD = "deleteWordBackward"
    DELETE_WORD_FORWARD = "deleteWordForward"
    DELETE_SOFT_LINE_BACKWARD = "deleteSoftLineBackward"
    DELETE_SOFT_LINE_FORWARD = "deleteSoftLineForward"
    DELETE_HARD_LINE_BACKWARD = "deleteHardLineBackward"
    DELETE_HARD_LINE_FORWARD = "deleteHardLineForward"
    DELETE_BY_DRAG = "deleteByDrag"
    DELETE_BY_CUT = "deleteByCut"
    # History
    HISTORY_UNDO = "historyUndo"
    HISTORY_REDO = "historyRedo"
    # External (prohibited)
    INSERT_FROM_PASTE = "insertFromPaste"
    INSERT_FROM_DROP = "insertFromDrop"
    INSERT_FROM_YANK = "insertFromYank"
    INSERT_REPLACEMENT_TEXT = "insertReplacementText"
    INSERT_FROM_PASTE_AS_QUOTATION = "insertFromPasteAsQuotation"
    # Other
    REPLACE_CONTENT = "replaceContent"


class DeleteDirection(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


def _value(item: Any) -> Any:
    """Unwrap enum members to their plain wire value."""
    return item.value if isinstance(item, Enum) else item


@dataclass(frozen=True)
class TextRange:
    """Editor range, 1-based lines and columns."""

    start_line_number: int
    start_column: int
    end_line_number: int
    end_column: int

    def to_dict(self) -> dict[str, int]:
        return {
            "startLineNumber": self.start_line_number,
            "startColumn": self.start_column,
            "endLineNumber": self.end_line_number,
            "endColumn": self.end_column,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TextRange:
        return cls(
            start_line_number=data["startLineNumber"],
            start_column=data["startColumn"],
            end_line_number=data["endLineNumber"],
            end_column=data["endColumn"],
        )

    @property
    def is_multi_line(self) -> bool:
        return self.start_line_number != self.end_line_number


@dataclass(frozen=True)
class PoSWRecord:
    """Result of one sequential-work computation."""

    iterations: int
    nonce: str
    intermediate_hash: str
    compute_time_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "iterations": self.iterations,
            "nonce": self.nonce,
            "intermediateHash": self.intermediate_hash,
            "computeTimeMs": self.compute_time_ms,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PoSWRecord:
        return cls(
            iterations=data["iterations"],
            nonce=data["nonce"],
            intermediate_hash=data["intermediateHash"],
            compute_time_ms=data.get("computeTimeMs", 0),
        )


@dataclass(frozen=True)
class EventInput:
    """What a caller hands to the recorder; sequence and hashes come later."""

    type: EventType | str
    input_type: InputType | str | None = None
    data: Any = None
    range_offset: int | None = None
    range_length: int | None = None
    range: TextRange | Mapping[str, Any] | None = None
    description: str | None = None
    is_multi_line: bool | None = None
    deleted_length: int | None = None
    inserted_text: str | None = None
    insert_length: int | None = None
    delete_direction: DeleteDirection | str | None = None
    selected_text: str | None = None


_ANNOTATION_KEYS = (
    ("description", "description"),
    ("is_multi_line", "isMultiLine"),
    ("deleted_length", "deletedLength"),
    ("inserted_text", "insertedText"),
    ("insert_length", "insertLength"),
    ("delete_direction", "deleteDirection"),
    ("selected_text", "selectedText"),
)


@dataclass(frozen=True)
class Event:
    """The hashed portion of an event."""

    sequence: int
    timestamp: float
    type: str
    input_type: str | None = None
    data: Any = None
    range_offset: int | None = None
    range_length: int | None = None
    range: Mapping[str, Any] | None = None
    previous_hash: str | None = None

    def hash_record(self) -> dict[str, Any]:
        """camelCase record that feeds PoSW; absent values are ``None``."""
        return {
            "sequence": self.sequence,
            "timestamp": self.timestamp,
            "type": self.type,
            "inputType": self.input_type,
            "data": self.data,
            "rangeOffset": self.range_offset,
            "rangeLength": self.range_length,
            "range": self.range,
            "previousHash": self.previous_hash,
        }

    @classmethod
    def from_input(
        cls,
        item: EventInput,
        *,
        sequence: int,
        timestamp: float,
        previous_hash: str,
    ) -> Event:
        rng = item.range
        if isinstance(rng, TextRange):
            rng = rng.to_dict()
        return cls(
            sequence=sequence,
            timestamp=timestamp,
            type=_value(item.type),
            input_type=_value(item.input_type),
            data=item.data,
            range_offset=item.range_offset,
            range_length=item.range_length,
            range=dict(rng) if rng is not None else None,
            previous_hash=previous_hash,
        )


@dataclass(frozen=True)
class StoredEvent(Event):
    """An appended event: hashed fields, its PoSW, its hash and annotations."""

    posw: PoSWRecord | None = None
    hash: str = ""
    description: str | None = None
    is_multi_line: bool | None = None
    deleted_length: int | None = None
    inserted_text: str | None = None
    insert_length: int | None = None
    delete_direction: str | None = None
    selected_text: str | None = None

    def hash_record_with_posw(self) -> dict[str, Any]:
        record = self.hash_record()
        record["posw"] = self.posw.to_dict() if self.posw is not None else None
        return record

    @property
    def text(self) -> str | None:
        return self.data if isinstance(self.data, str) else None

    def to_dict(self) -> dict[str, Any]:
        """Wire form; null annotations are omitted, hashed fields always kept."""
        out = self.hash_record_with_posw()
        out["hash"] = self.hash
        for attr, key in _ANNOTATION_KEYS:
            value = getattr(self, attr)
            if value is not None:
                out[key] = value
        return out

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StoredEvent:
        if not isinstance(data, Mapping):
            raise ProofFormatError("Event entry must be an object")
        try:
            posw_raw = data.get("posw")
            posw = PoSWRecord.from_dict(posw_raw) if posw_raw is not None else None
            kwargs: dict[str, Any] = {
                attr: data.get(key) for attr, key in _ANNOTATION_KEYS
            }
            return cls(
                sequence=data["sequence"],
                timestamp=data["timestamp"],
                type=data["type"],
                input_type=data.get("inputType"),
                data=data.get("data"),
                range_offset=data.get("rangeOffset"),
                range_length=data.get("rangeLength"),
                range=data.get("range"),
                previous_hash=data.get("previousHash"),
                posw=posw,
                hash=data.get("hash", ""),
                **kwargs,
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ProofFormatError(
                f"Malformed event entry: {e}",
                cause=e,
                sequence=data.get("sequence"),
            ) from e


def annotations_from_input(item: EventInput) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for attr, _key in _ANNOTATION_KEYS:
        out[attr] = _value(getattr(item, attr))
    return out


@dataclass(frozen=True)
class Checkpoint:
    """Chain head snapshot at an event index."""

    event_index: int
    hash: str
    timestamp: float
    content_hash: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "eventIndex": self.event_index,
            "hash": self.hash,
            "timestamp": self.timestamp,
            "contentHash": self.content_hash,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Checkpoint:
        try:
            return cls(
                event_index=data["eventIndex"],
                hash=data["hash"],
                timestamp=data.get("timestamp", 0),
                content_hash=data.get("contentHash", ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ProofFormatError(f"Malformed checkpoint: {e}", cause=e) from e


__all__ = [
    "EventType",
    "InputType",
    "DeleteDirection",
    "TextRange",
    "PoSWRecord",
    "EventInput",
    "Event",
    "StoredEvent",
    "Checkpoint",
    "annotations_from_input",
]
