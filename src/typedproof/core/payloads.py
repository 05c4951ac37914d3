"""
Typed views over event ``data`` payloads.

The chain hashes the raw JSON value; these models are read-only
interpretations of it, selected by the event's ``type``. ``parse_payload``
never raises: payloads that do not match their kind's schema come back as
``OpaquePayload`` so a verifier can still walk the whole chain.
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .events import EventType


class _Payload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)


class TextPayload(_Payload):
    kind: Literal["text"] = "text"
    text: str


class CursorPositionPayload(_Payload):
    kind: Literal["cursor"] = "cursor"
    line_number: int = Field(alias="lineNumber")
    column: int


class SelectionPayload(_Payload):
    kind: Literal["selection"] = "selection"
    start_line_number: int = Field(alias="startLineNumber")
    start_column: int = Field(alias="startColumn")
    end_line_number: int = Field(alias="endLineNumber")
    end_column: int = Field(alias="endColumn")


class MousePositionPayload(_Payload):
    kind: Literal["mouse"] = "mouse"
    x: float
    y: float
    client_x: Optional[float] = Field(default=None, alias="clientX")
    client_y: Optional[float] = Field(default=None, alias="clientY")


class VisibilityPayload(_Payload):
    kind: Literal["visibility"] = "visibility"
    visible: bool
    visibility_state: Optional[str] = Field(default=None, alias="visibilityState")


class FocusPayload(_Payload):
    kind: Literal["focus"] = "focus"
    focused: bool


class Modifiers(_Payload):
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    meta: bool = False


class KeystrokePayload(_Payload):
    kind: Literal["keystroke"] = "keystroke"
    key: str
    code: str
    key_down_time: Optional[float] = Field(default=None, alias="keyDownTime")
    dwell_time: Optional[float] = Field(default=None, alias="dwellTime")
    flight_time: Optional[float] = Field(default=None, alias="flightTime")
    modifiers: Modifiers = Field(default_factory=Modifiers)


class WindowSizePayload(_Payload):
    kind: Literal["window"] = "window"
    width: float
    height: float
    inner_width: Optional[float] = Field(default=None, alias="innerWidth")
    inner_height: Optional[float] = Field(default=None, alias="innerHeight")
    device_pixel_ratio: Optional[float] = Field(default=None, alias="devicePixelRatio")


class NetworkStatusPayload(_Payload):
    kind: Literal["network"] = "network"
    online: bool


class HumanAttestationPayload(_Payload):
    kind: Literal["attestation"] = "attestation"
    verified: bool
    score: float
    action: str
    timestamp: str
    hostname: str
    signature: str
    success: bool = True
    failure_reason: Optional[str] = Field(default=None, alias="failureReason")


class TermsAcceptedPayload(_Payload):
    kind: Literal["terms"] = "terms"
    version: str
    timestamp: float
    agreed_at: Optional[str] = Field(default=None, alias="agreedAt")


class DisplayInfo(_Payload):
    width: float
    height: float
    device_pixel_ratio: Optional[float] = Field(default=None, alias="devicePixelRatio")
    display_surface: Optional[str] = Field(default=None, alias="displaySurface")


class ScreenshotCapturePayload(_Payload):
    kind: Literal["screenshot"] = "screenshot"
    image_hash: str = Field(alias="imageHash")
    capture_type: str = Field(alias="captureType")
    timestamp: Optional[float] = None
    display_info: Optional[DisplayInfo] = Field(default=None, alias="displayInfo")
    storage_key: Optional[str] = Field(default=None, alias="storageKey")
    file_size_bytes: Optional[int] = Field(default=None, alias="fileSizeBytes")


class TemplateInjectionPayload(_Payload):
    kind: Literal["template"] = "template"
    template_name: str = Field(alias="templateName")
    template_hash: Optional[str] = Field(default=None, alias="templateHash")
    filename: str
    content: str
    content_hash: Optional[str] = Field(default=None, alias="contentHash")
    content_length: Optional[int] = Field(default=None, alias="contentLength")
    total_files_in_template: Optional[int] = Field(
        default=None, alias="totalFilesInTemplate"
    )
    injection_source: str = Field(default="file_import", alias="injectionSource")


class SessionResumedPayload(_Payload):
    kind: Literal["resumed"] = "resumed"
    timestamp: float
    previous_event_count: int = Field(alias="previousEventCount")
    recovered_from_storage: Optional[bool] = Field(
        default=None, alias="recoveredFromIndexedDB"
    )


class OpaquePayload(_Payload):
    kind: Literal["opaque"] = "opaque"
    raw: Any = None


Payload = Union[
    TextPayload,
    CursorPositionPayload,
    SelectionPayload,
    MousePositionPayload,
    VisibilityPayload,
    FocusPayload,
    KeystrokePayload,
    WindowSizePayload,
    NetworkStatusPayload,
    HumanAttestationPayload,
    TermsAcceptedPayload,
    ScreenshotCapturePayload,
    TemplateInjectionPayload,
    SessionResumedPayload,
    OpaquePayload,
]

_TEXT_KINDS = frozenset(
    {
        EventType.CONTENT_CHANGE.value,
        EventType.CONTENT_SNAPSHOT.value,
        EventType.EXTERNAL_INPUT.value,
        EventType.TERMINAL_INPUT.value,
        EventType.COPY_OPERATION.value,
        EventType.CODE_EXECUTION.value,
    }
)

_MODEL_BY_TYPE: dict[str, type[_Payload]] = {
    EventType.CURSOR_POSITION_CHANGE.value: CursorPositionPayload,
    EventType.SELECTION_CHANGE.value: SelectionPayload,
    EventType.MOUSE_POSITION_CHANGE.value: MousePositionPayload,
    EventType.VISIBILITY_CHANGE.value: VisibilityPayload,
    EventType.FOCUS_CHANGE.value: FocusPayload,
    EventType.KEY_DOWN.value: KeystrokePayload,
    EventType.KEY_UP.value: KeystrokePayload,
    EventType.WINDOW_RESIZE.value: WindowSizePayload,
    EventType.NETWORK_STATUS_CHANGE.value: NetworkStatusPayload,
    EventType.HUMAN_ATTESTATION.value: HumanAttestationPayload,
    EventType.PRE_EXPORT_ATTESTATION.value: HumanAttestationPayload,
    EventType.TERMS_ACCEPTED.value: TermsAcceptedPayload,
    EventType.SCREENSHOT_CAPTURE.value: ScreenshotCapturePayload,
    EventType.TEMPLATE_INJECTION.value: TemplateInjectionPayload,
    EventType.SESSION_RESUMED.value: SessionResumedPayload,
}


def parse_payload(event_type: str | EventType, data: Any) -> Payload:
    """Interpret ``data`` according to ``event_type``."""
    key = event_type.value if isinstance(event_type, EventType) else event_type
    if key in _TEXT_KINDS and isinstance(data, str):
        return TextPayload(text=data)
    model = _MODEL_BY_TYPE.get(key)
    if model is None or not isinstance(data, dict):
        return OpaquePayload(raw=data)
    try:
        return model.model_validate(data)  # type: ignore[return-value]
    except ValidationError:
        return OpaquePayload(raw=data)


__all__ = [
    "Payload",
    "parse_payload",
    "TextPayload",
    "CursorPositionPayload",
    "SelectionPayload",
    "MousePositionPayload",
    "VisibilityPayload",
    "FocusPayload",
    "KeystrokePayload",
    "WindowSizePayload",
    "NetworkStatusPayload",
    "HumanAttestationPayload",
    "TermsAcceptedPayload",
    "ScreenshotCapturePayload",
    "TemplateInjectionPayload",
    "SessionResumedPayload",
    "OpaquePayload",
]
