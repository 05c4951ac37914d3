"""
Proof document format.

Builders produce plain dicts in the camelCase wire layout; ``parse_*``
functions turn a loaded document back into typed events and checkpoints
without re-encoding any hashed value. Structural problems raise
``ProofFormatError``; integrity is left to the verifier.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Sequence

import orjson

from .canonical import loads
from .errors import ProofFormatError
from .events import Checkpoint, StoredEvent

PROOF_FORMAT_VERSION = "1.0.0"
MIN_SUPPORTED_VERSION = "1.0.0"
MULTI_FILE_TYPE = "multi-file"


def parse_version(version: str) -> tuple[int, int, int]:
    try:
        parts = [int(p) for p in str(version).split(".")]
    except ValueError as e:
        raise ProofFormatError(f"Invalid version string: {version!r}", cause=e) from e
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def is_version_supported(version: str | None) -> bool:
    """Same major version as the current format and not older than the minimum."""
    if not isinstance(version, str):
        return False
    try:
        parsed = parse_version(version)
    except ProofFormatError:
        return False
    current = parse_version(PROOF_FORMAT_VERSION)
    return parsed[0] == current[0] and parsed >= parse_version(MIN_SUPPORTED_VERSION)


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def build_proof_document(
    *,
    typing_proof_hash: str,
    typing_proof_data: Mapping[str, Any],
    signature: Mapping[str, Any],
    fingerprint_hash: str,
    fingerprint_components: Mapping[str, Any] | None,
    user_agent: str,
    is_pure_typing: bool,
    checkpoints: Sequence[Checkpoint],
    content: str | None = None,
    language: str | None = None,
) -> dict[str, Any]:
    document: dict[str, Any] = {
        "version": PROOF_FORMAT_VERSION,
        "typingProofHash": typing_proof_hash,
        "typingProofData": dict(typing_proof_data),
        "proof": dict(signature),
        "fingerprint": {
            "hash": fingerprint_hash,
            "components": dict(fingerprint_components or {}),
        },
        "metadata": {
            "userAgent": user_agent,
            "timestamp": utc_timestamp(),
            "isPureTyping": is_pure_typing,
        },
        "checkpoints": [cp.to_dict() for cp in checkpoints],
    }
    if content is not None:
        document["content"] = content
    if language is not None:
        document["language"] = language
    return document


def build_multi_file_document(
    files: Mapping[str, Mapping[str, Any]],
    *,
    fingerprint_hash: str,
    fingerprint_components: Mapping[str, Any] | None,
    tab_switches: Sequence[Mapping[str, Any]] = (),
    user_agent: str,
) -> dict[str, Any]:
    """Combine single-file documents into the multi-file layout."""
    entries: dict[str, Any] = {}
    overall_pure = True
    for name, doc in files.items():
        entry = {
            "content": doc.get("content", ""),
            "language": doc.get("language", ""),
            "typingProofHash": doc["typingProofHash"],
            "typingProofData": doc["typingProofData"],
            "proof": doc["proof"],
        }
        if doc.get("checkpoints"):
            entry["checkpoints"] = doc["checkpoints"]
        entries[name] = entry
        overall_pure = overall_pure and bool(
            doc.get("metadata", {}).get("isPureTyping", False)
        )
    return {
        "version": PROOF_FORMAT_VERSION,
        "type": MULTI_FILE_TYPE,
        "fingerprint": {
            "hash": fingerprint_hash,
            "components": dict(fingerprint_components or {}),
        },
        "files": entries,
        "tabSwitches": [dict(s) for s in tab_switches],
        "metadata": {
            "userAgent": user_agent,
            "timestamp": utc_timestamp(),
            "totalFiles": len(entries),
            "overallPureTyping": overall_pure,
        },
    }


def dumps_document(document: Mapping[str, Any]) -> bytes:
    return orjson.dumps(document, option=orjson.OPT_INDENT_2)


def load_document(data: bytes | str) -> dict[str, Any]:
    parsed = loads(data)
    if not isinstance(parsed, dict):
        raise ProofFormatError("Proof document must be a JSON object")
    return parsed


def is_multi_file(document: Mapping[str, Any]) -> bool:
    return document.get("type") == MULTI_FILE_TYPE


@dataclass
class ParsedProof:
    """A single-file proof with its chain parsed into typed events."""

    version: str | None
    typing_proof_hash: str | None
    typing_proof_data: Mapping[str, Any] | None
    events: list[StoredEvent]
    checkpoints: list[Checkpoint]
    content: str | None
    language: str | None
    signature: Mapping[str, Any] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)


def parse_proof(document: Mapping[str, Any], *, version: str | None = None) -> ParsedProof:
    proof = document.get("proof")
    if not isinstance(proof, Mapping):
        raise ProofFormatError("Missing 'proof' section")
    raw_events = proof.get("events")
    if not isinstance(raw_events, list):
        raise ProofFormatError("Missing 'proof.events' list")
    raw_checkpoints = document.get("checkpoints") or []
    if not isinstance(raw_checkpoints, list):
        raise ProofFormatError("'checkpoints' must be a list")
    proof_data = document.get("typingProofData")
    return ParsedProof(
        version=document.get("version", version),
        typing_proof_hash=document.get("typingProofHash"),
        typing_proof_data=proof_data if isinstance(proof_data, Mapping) else None,
        events=[StoredEvent.from_dict(item) for item in raw_events],
        checkpoints=[Checkpoint.from_dict(item) for item in raw_checkpoints],
        content=document.get("content"),
        language=document.get("language"),
        signature={k: v for k, v in proof.items() if k != "events"},
        metadata=document.get("metadata") or {},
    )


__all__ = [
    "PROOF_FORMAT_VERSION",
    "MIN_SUPPORTED_VERSION",
    "MULTI_FILE_TYPE",
    "ParsedProof",
    "build_multi_file_document",
    "build_proof_document",
    "dumps_document",
    "is_multi_file",
    "is_version_supported",
    "load_document",
    "parse_proof",
    "parse_version",
]
