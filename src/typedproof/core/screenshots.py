"""
Screenshot manifest cross-check.

A proof archive may carry ``screenshots/manifest.json`` plus the image files.
Each ``screenshotCapture`` event declares an ``imageHash``; the manifest
entry with the same ``eventSequence`` must declare the same hash, and when
the image bytes are present they must hash to it. The outcome is advisory
and never changes the proof verdict.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Mapping, Sequence

from .errors import ProofFormatError
from .events import EventType, StoredEvent
from .hashing import hash_bytes
from .payloads import ScreenshotCapturePayload, parse_payload

MANIFEST_PATH = "screenshots/manifest.json"


@dataclass(frozen=True)
class ScreenshotEntry:
    index: int
    filename: str
    image_hash: str
    capture_type: str | None
    event_sequence: int
    timestamp: float | None = None
    display_info: Mapping[str, Any] | None = None
    file_size_bytes: int | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ScreenshotEntry:
        try:
            return cls(
                index=data.get("index", 0),
                filename=data["filename"],
                image_hash=data["imageHash"],
                capture_type=data.get("captureType"),
                event_sequence=data["eventSequence"],
                timestamp=data.get("timestamp"),
                display_info=data.get("displayInfo"),
                file_size_bytes=data.get("fileSizeBytes"),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise ProofFormatError(f"Malformed screenshot entry: {e}", cause=e) from e


def parse_manifest(data: Any) -> list[ScreenshotEntry]:
    """Accept the legacy bare array or ``{"screenshots": [...]}``."""
    if isinstance(data, Mapping):
        data = data.get("screenshots", [])
    if not isinstance(data, list):
        raise ProofFormatError("Screenshot manifest must be a list")
    return [ScreenshotEntry.from_dict(item) for item in data]


@dataclass
class ScreenshotCheck:
    event_sequence: int
    filename: str | None
    declared_hash: str | None
    manifest_hash: str | None
    computed_hash: str | None = None
    valid: bool = False
    message: str = ""


@dataclass
class ScreenshotReport:
    checks: list[ScreenshotCheck] = field(default_factory=list)
    orphan_entries: list[int] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return all(c.valid for c in self.checks) and not self.orphan_entries

    @property
    def verified_count(self) -> int:
        return sum(1 for c in self.checks if c.valid)

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "verifiedCount": self.verified_count,
            "checks": [asdict(c) for c in self.checks],
            "orphanEntries": list(self.orphan_entries),
        }


def cross_check(
    events: Sequence[StoredEvent],
    entries: Sequence[ScreenshotEntry],
    images: Mapping[str, bytes] | None = None,
) -> ScreenshotReport:
    by_sequence = {entry.event_sequence: entry for entry in entries}
    report = ScreenshotReport()
    seen: set[int] = set()

    for event in events:
        if event.type != EventType.SCREENSHOT_CAPTURE.value:
            continue
        payload = parse_payload(event.type, event.data)
        declared = (
            payload.image_hash if isinstance(payload, ScreenshotCapturePayload) else None
        )
        entry = by_sequence.get(event.sequence)
        check = ScreenshotCheck(
            event_sequence=event.sequence,
            filename=entry.filename if entry else None,
            declared_hash=declared,
            manifest_hash=entry.image_hash if entry else None,
        )
        if entry is None:
            check.message = "no manifest entry"
        elif declared is None:
            check.message = "event carries no imageHash"
        elif entry.image_hash != declared:
            check.message = "manifest hash differs from event"
        else:
            blob = images.get(entry.filename) if images is not None else None
            if blob is None:
                check.valid = True
                check.message = "hash matches; image not present"
            else:
                check.computed_hash = hash_bytes(blob)
                check.valid = check.computed_hash == declared
                check.message = (
                    "image verified" if check.valid else "image bytes do not match"
                )
        if entry is not None:
            seen.add(event.sequence)
        report.checks.append(check)

    report.orphan_entries = sorted(
        entry.event_sequence for entry in entries if entry.event_sequence not in seen
    )
    return report


__all__ = [
    "MANIFEST_PATH",
    "ScreenshotEntry",
    "ScreenshotCheck",
    "ScreenshotReport",
    "cross_check",
    "parse_manifest",
]
