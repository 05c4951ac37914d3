"""
Verification engine for typing proofs.

Two chain modes:

- full replay walks every event from 0 and stops at the first divergence
- sampled replay re-computes only checkpoint-bounded segments

Chain-integrity failures are returned as ``VerificationResult`` values with
the offending event index and an ``ErrorKind``; they are never raised.
Metadata verification (final content hash and the typing-proof hash) is
separate from the chain walk, and a proof is valid only when both pass.
"""

from __future__ import annotations

import asyncio
import random
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from pydantic import ValidationError

from . import diagnostics
from .canonical import canonicalize
from .chain import chain_hash
from .errors import ErrorKind, ProofFormatError, TypedProofError
from .events import Checkpoint, EventType, StoredEvent
from .export import (
    ParsedProof,
    is_multi_file,
    is_version_supported,
    load_document,
    parse_proof,
)
from .hashing import hash_text
from .payloads import HumanAttestationPayload
from .posw import verify_posw
from .screenshots import ScreenshotReport

ProgressCallback = Callable[[int, int], None]
SampledProgressCallback = Callable[[str, int, int], None]


@dataclass
class SampledSegmentInfo:
    start_index: int
    end_index: int
    event_count: int
    start_hash: str
    end_hash: str
    verified: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "startIndex": self.start_index,
            "endIndex": self.end_index,
            "eventCount": self.event_count,
            "startHash": self.start_hash,
            "endHash": self.end_hash,
            "verified": self.verified,
        }


@dataclass
class SampledVerificationResult:
    sampled_segments: list[SampledSegmentInfo]
    total_segments: int
    total_events_verified: int
    total_events: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "sampledSegments": [s.to_dict() for s in self.sampled_segments],
            "totalSegments": self.total_segments,
            "totalEventsVerified": self.total_events_verified,
            "totalEvents": self.total_events,
        }


@dataclass
class VerificationResult:
    valid: bool
    message: str
    error_at: int | None = None
    reason: ErrorKind | None = None
    event: StoredEvent | None = None
    expected_hash: str | None = None
    computed_hash: str | None = None
    previous_timestamp: float | None = None
    current_timestamp: float | None = None
    sampled_result: SampledVerificationResult | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"valid": self.valid, "message": self.message}
        if self.error_at is not None:
            out["errorAt"] = self.error_at
        if self.reason is not None:
            out["reason"] = self.reason.value
        if self.expected_hash is not None:
            out["expectedHash"] = self.expected_hash
        if self.computed_hash is not None:
            out["computedHash"] = self.computed_hash
        if self.sampled_result is not None:
            out["sampledResult"] = self.sampled_result.to_dict()
        return out


@dataclass
class _Segment:
    start_index: int
    end_index: int
    start_hash: str
    expected_end_hash: str


def _failure(
    index: int,
    reason: ErrorKind,
    message: str,
    event: StoredEvent | None = None,
    **extra: Any,
) -> VerificationResult:
    return VerificationResult(
        valid=False,
        message=message,
        error_at=index,
        reason=reason,
        event=event,
        **extra,
    )


class ChainVerifier:
    """Replays hash chains. Holds no state, so one instance can be shared."""

    def _verify_event(
        self,
        event: StoredEvent,
        index: int,
        expected_previous_hash: str | None,
        last_timestamp: float,
    ) -> VerificationResult | str:
        """Check one event; return its recomputed hash or a failure."""
        if event.sequence != index:
            return _failure(
                index,
                ErrorKind.SEQUENCE_MISMATCH,
                f"Sequence mismatch at event {index}: expected {index}, "
                f"got {event.sequence}",
                event,
            )
        if not isinstance(event.timestamp, (int, float)) or (
            event.timestamp < last_timestamp
        ):
            return _failure(
                index,
                ErrorKind.TIMESTAMP_VIOLATION,
                f"Timestamp violation at event {index}: time moved backward "
                f"from {last_timestamp} to {event.timestamp}",
                event,
                previous_timestamp=last_timestamp,
                current_timestamp=event.timestamp,
            )
        if event.previous_hash != expected_previous_hash:
            return _failure(
                index,
                ErrorKind.PREVIOUS_HASH_MISMATCH,
                f"Previous hash mismatch at event {index}",
                event,
                expected_hash=expected_previous_hash,
                computed_hash=event.previous_hash,
            )
        anchor = expected_previous_hash or ""
        try:
            payload = canonicalize(event.hash_record())
        except TypedProofError:
            return _failure(
                index,
                ErrorKind.HASH_MISMATCH,
                f"Event {index} cannot be serialized",
                event,
            )
        if event.posw is None or not verify_posw(anchor, payload, event.posw):
            return _failure(
                index,
                ErrorKind.POSW_VERIFICATION_FAILED,
                f"PoSW verification failed at event {index}",
                event,
            )
        computed = chain_hash(anchor, event.hash_record_with_posw())
        if computed != event.hash:
            return _failure(
                index,
                ErrorKind.HASH_MISMATCH,
                f"Hash mismatch at event {index}",
                event,
                expected_hash=event.hash,
                computed_hash=computed,
            )
        return computed

    def _replay(
        self,
        events: Sequence[StoredEvent],
        start: int,
        end: int,
        start_hash: str | None,
        on_event: Callable[[int], None] | None = None,
    ) -> VerificationResult | str | None:
        """Replay ``events[start..end]``; return the final head or a failure."""
        head = start_hash
        last_ts: float = float("-inf")
        if start > 0 and isinstance(events[start - 1].timestamp, (int, float)):
            last_ts = events[start - 1].timestamp
        for index in range(start, end + 1):
            outcome = self._verify_event(events[index], index, head, last_ts)
            if isinstance(outcome, VerificationResult):
                return outcome
            head = outcome
            last_ts = events[index].timestamp
            if on_event is not None:
                on_event(index)
        return head

    def verify(
        self,
        events: Sequence[StoredEvent],
        on_progress: ProgressCallback | None = None,
    ) -> VerificationResult:
        """Full replay from event 0; fail-fast at the first divergence.

        The genesis hash is taken from event 0's ``previousHash``.
        """
        total = len(events)
        if total == 0:
            return VerificationResult(valid=True, message="Empty chain")

        def _progress(index: int) -> None:
            if on_progress is not None:
                on_progress(index + 1, total)

        outcome = self._replay(events, 0, total - 1, events[0].previous_hash, _progress)
        if isinstance(outcome, VerificationResult):
            diagnostics.info(
                "verifier",
                "chain verification failed",
                error_at=outcome.error_at,
                reason=outcome.reason.value if outcome.reason else None,
            )
            return outcome
        return VerificationResult(
            valid=True,
            message="All hashes verified successfully (including PoSW)",
        )

    @staticmethod
    def build_segments(
        checkpoints: Sequence[Checkpoint], events: Sequence[StoredEvent]
    ) -> list[_Segment]:
        """Segments bounded by consecutive checkpoints and the chain ends."""
        ordered: list[Checkpoint] = []
        for cp in sorted(checkpoints, key=lambda c: c.event_index):
            if not ordered or ordered[-1].event_index != cp.event_index:
                ordered.append(cp)
        if not ordered:
            return []
        segments = [
            _Segment(
                start_index=0,
                end_index=ordered[0].event_index,
                start_hash=(events[0].previous_hash or "") if events else "",
                expected_end_hash=ordered[0].hash,
            )
        ]
        for current, nxt in zip(ordered, ordered[1:]):
            segments.append(
                _Segment(
                    start_index=current.event_index + 1,
                    end_index=nxt.event_index,
                    start_hash=current.hash,
                    expected_end_hash=nxt.hash,
                )
            )
        last = ordered[-1]
        if last.event_index < len(events) - 1:
            segments.append(
                _Segment(
                    start_index=last.event_index + 1,
                    end_index=len(events) - 1,
                    start_hash=last.hash,
                    expected_end_hash=events[-1].hash,
                )
            )
        return segments

    @staticmethod
    def select_segments(
        segments: Sequence[_Segment],
        sample_count: int,
        rng: random.Random | None = None,
    ) -> list[_Segment]:
        """Sampling policy: first and last segment always, the rest drawn
        uniformly without replacement from the middle, up to ``sample_count``.
        """
        if len(segments) <= sample_count:
            return list(segments)
        rng = rng or random.Random()
        selected = [segments[0], segments[-1]]
        middle = list(segments[1:-1])
        remaining = max(sample_count - len(selected), 0)
        selected.extend(rng.sample(middle, min(remaining, len(middle))))
        return sorted(selected, key=lambda s: s.start_index)

    def verify_sampled(
        self,
        events: Sequence[StoredEvent],
        checkpoints: Sequence[Checkpoint],
        sample_count: int = 3,
        on_progress: SampledProgressCallback | None = None,
        rng: random.Random | None = None,
    ) -> VerificationResult:
        """Replay a sample of checkpoint-bounded segments.

        Each selected segment starts from its start hash (which must equal the
        first event's ``previousHash``) and its recomputed end hash must equal
        the checkpoint hash. All selected segments are replayed and reported;
        the first failure determines ``error_at``. Falls back to a full replay
        when there are no checkpoints.
        """
        if not checkpoints:
            if on_progress is not None:
                on_progress("fallback", 0, len(events))

            def _full(current: int, total: int) -> None:
                if on_progress is not None:
                    on_progress("full", current, total)

            return self.verify(events, _full)

        all_segments = self.build_segments(checkpoints, events)
        selected = self.select_segments(all_segments, sample_count, rng)
        planned = sum(s.end_index - s.start_index + 1 for s in selected)
        infos: list[SampledSegmentInfo] = []
        first_failure: VerificationResult | None = None
        verified_events = 0

        if on_progress is not None:
            on_progress("checkpoint", 0, len(selected))

        for seg_number, segment in enumerate(selected, start=1):
            outcome: VerificationResult | str | None
            if segment.end_index >= len(events) or segment.start_index > segment.end_index:
                outcome = _failure(
                    min(segment.end_index, max(len(events) - 1, 0)),
                    ErrorKind.SEGMENT_END_HASH_MISMATCH,
                    f"Checkpoint at event {segment.end_index} lies outside the chain",
                )
            else:
                counter = {"n": 0}

                def _tick(_index: int) -> None:
                    counter["n"] += 1
                    if on_progress is not None:
                        on_progress(
                            "segment", verified_events + counter["n"], planned
                        )

                outcome = self._replay(
                    events,
                    segment.start_index,
                    segment.end_index,
                    segment.start_hash,
                    _tick,
                )
                if not isinstance(outcome, VerificationResult):
                    if outcome != segment.expected_end_hash:
                        outcome = _failure(
                            segment.end_index,
                            ErrorKind.SEGMENT_END_HASH_MISMATCH,
                            f"Segment end hash mismatch at event {segment.end_index}",
                            expected_hash=segment.expected_end_hash,
                            computed_hash=outcome,
                        )
                verified_events += counter["n"]

            ok = not isinstance(outcome, VerificationResult)
            infos.append(
                SampledSegmentInfo(
                    start_index=segment.start_index,
                    end_index=segment.end_index,
                    event_count=segment.end_index - segment.start_index + 1,
                    start_hash=segment.start_hash,
                    end_hash=segment.expected_end_hash,
                    verified=ok,
                )
            )
            if not ok and first_failure is None:
                first_failure = outcome  # type: ignore[assignment]
            if on_progress is not None:
                on_progress("checkpoint", seg_number, len(selected))

        sampled = SampledVerificationResult(
            sampled_segments=infos,
            total_segments=len(all_segments),
            total_events_verified=verified_events,
            total_events=len(events),
        )
        if first_failure is not None:
            first_failure.sampled_result = sampled
            return first_failure
        return VerificationResult(
            valid=True,
            message=(
                f"Sampling verification passed ({len(selected)} segments, "
                f"{verified_events} events verified out of {len(events)} total)"
            ),
            sampled_result=sampled,
        )


@dataclass
class TypingProofVerification:
    valid: bool
    reason: str | None = None
    is_pure_typing: bool = False
    device_id: str | None = None
    metadata: Mapping[str, Any] | None = None


def _metadata_count(metadata: Mapping[str, Any], key: str) -> int | None:
    """Integer counter from proof metadata, ``None`` when absent or not an int."""
    value = metadata.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def compute_typing_proof_hash(proof_data: Mapping[str, Any]) -> str:
    return hash_text(canonicalize(proof_data))


def verify_typing_proof_hash(
    typing_proof_hash: str | None,
    proof_data: Mapping[str, Any] | None,
    final_content: str | None,
) -> TypingProofVerification:
    """Check the final content hash, then the hash over the proof data."""
    if not typing_proof_hash or not isinstance(proof_data, Mapping):
        return TypingProofVerification(False, "Missing typing proof data")
    if not isinstance(final_content, str):
        return TypingProofVerification(False, "Missing final content")
    if hash_text(final_content) != proof_data.get("finalContentHash"):
        return TypingProofVerification(False, "Final content does not match the proof")
    try:
        computed = compute_typing_proof_hash(proof_data)
    except TypedProofError:
        return TypingProofVerification(False, "Proof data cannot be serialized")
    if computed != typing_proof_hash:
        return TypingProofVerification(False, "Proof hash does not match")
    metadata = proof_data.get("metadata")
    if metadata is None:
        metadata = {}
    if not isinstance(metadata, Mapping):
        return TypingProofVerification(False, "Proof metadata must be an object")
    for key in ("pasteEvents", "dropEvents"):
        if key in metadata and _metadata_count(metadata, key) is None:
            return TypingProofVerification(
                False, f"Proof metadata '{key}' must be an integer"
            )
    return TypingProofVerification(
        valid=True,
        is_pure_typing=_metadata_count(metadata, "pasteEvents") == 0
        and _metadata_count(metadata, "dropEvents") == 0,
        device_id=proof_data.get("deviceId"),
        metadata=metadata,
    )


@dataclass(frozen=True)
class PoswStats:
    """Compute-time summary over the PoSW records of a chain."""

    iterations: int
    events: int
    total_time_ms: float
    average_time_ms: float
    max_time_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "iterations": self.iterations,
            "events": self.events,
            "totalTimeMs": self.total_time_ms,
            "avgTimeMs": self.average_time_ms,
            "maxTimeMs": self.max_time_ms,
        }


def calculate_posw_stats(events: Sequence[StoredEvent]) -> PoswStats | None:
    """Summarize recorded PoSW compute times; ``None`` when no event has PoSW.

    Non-numeric compute times count as zero.
    """
    records = [e.posw for e in events if e.posw is not None]
    if not records:
        return None
    times = [
        float(r.compute_time_ms)
        if isinstance(r.compute_time_ms, (int, float))
        and not isinstance(r.compute_time_ms, bool)
        else 0.0
        for r in records
    ]
    iterations = next(
        (
            r.iterations
            for r in records
            if isinstance(r.iterations, int) and not isinstance(r.iterations, bool)
        ),
        0,
    )
    total = sum(times)
    return PoswStats(
        iterations=iterations,
        events=len(records),
        total_time_ms=total,
        average_time_ms=total / len(records),
        max_time_ms=max(times),
    )


def _attestation_from_event(event: StoredEvent | None) -> HumanAttestationPayload | None:
    if event is None or event.type not in (
        EventType.HUMAN_ATTESTATION.value,
        EventType.PRE_EXPORT_ATTESTATION.value,
    ):
        return None
    if not isinstance(event.data, Mapping):
        return None
    try:
        return HumanAttestationPayload.model_validate(dict(event.data), strict=True)
    except ValidationError:
        return None


@dataclass(frozen=True)
class AttestationInfo:
    """Human attestations carried by a chain.

    ``create`` comes only from event #0; ``export`` is the last
    pre-export attestation. Entries whose fields have the wrong types are
    reported as absent.
    """

    create: HumanAttestationPayload | None = None
    export: HumanAttestationPayload | None = None

    @staticmethod
    def _dump(payload: HumanAttestationPayload | None) -> dict[str, Any] | None:
        if payload is None:
            return None
        return payload.model_dump(mode="json", by_alias=True, exclude_unset=True)

    def to_dict(self) -> dict[str, Any]:
        return {
            "createAttestation": self._dump(self.create),
            "exportAttestation": self._dump(self.export),
        }


def extract_attestations(events: Sequence[StoredEvent]) -> AttestationInfo:
    create = None
    if events and events[0].type == EventType.HUMAN_ATTESTATION.value:
        create = _attestation_from_event(events[0])
    export = next(
        (
            _attestation_from_event(e)
            for e in reversed(events)
            if e.type == EventType.PRE_EXPORT_ATTESTATION.value
        ),
        None,
    )
    return AttestationInfo(create=create, export=export)


@dataclass
class ProofVerificationReport:
    valid: bool
    metadata_valid: bool
    chain_valid: bool
    is_pure_typing: bool
    event_count: int = 0
    paste_events: int = 0
    drop_events: int = 0
    posw_iterations: int | None = None
    posw_stats: PoswStats | None = None
    attestation_info: AttestationInfo = field(default_factory=AttestationInfo)
    error_at: int | None = None
    error_message: str | None = None
    reason: ErrorKind | None = None
    metadata_reason: str | None = None
    language: str | None = None
    version: str | None = None
    chain: VerificationResult | None = None
    screenshots: ScreenshotReport | None = None
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "valid": self.valid,
            "metadataValid": self.metadata_valid,
            "chainValid": self.chain_valid,
            "isPureTyping": self.is_pure_typing,
            "eventCount": self.event_count,
            "pasteEvents": self.paste_events,
            "dropEvents": self.drop_events,
            "poswIterations": self.posw_iterations,
            "poswStats": self.posw_stats.to_dict() if self.posw_stats else None,
            "attestationInfo": self.attestation_info.to_dict(),
            "errorAt": self.error_at,
            "errorMessage": self.error_message,
            "reason": self.reason.value if self.reason else None,
            "metadataReason": self.metadata_reason,
            "language": self.language,
            "version": self.version,
            "durationMs": self.duration_ms,
        }
        if self.chain is not None and self.chain.sampled_result is not None:
            out["sampledResult"] = self.chain.sampled_result.to_dict()
        if self.screenshots is not None:
            out["screenshots"] = self.screenshots.to_dict()
        return out


@dataclass
class MultiFileVerificationReport:
    valid: bool
    files: dict[str, ProofVerificationReport] = field(default_factory=dict)
    overall_pure_typing: bool = False
    tab_switches: int = 0
    duration_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "overallPureTyping": self.overall_pure_typing,
            "tabSwitches": self.tab_switches,
            "files": {name: r.to_dict() for name, r in self.files.items()},
            "durationMs": self.duration_ms,
        }


def _format_failure(message: str, *, version: str | None = None) -> ProofVerificationReport:
    return ProofVerificationReport(
        valid=False,
        metadata_valid=False,
        chain_valid=False,
        is_pure_typing=False,
        error_message=message,
        reason=ErrorKind.INVALID_PROOF_FORMAT,
        version=version,
    )


def _verify_parsed(
    parsed: ParsedProof,
    *,
    mode: str,
    sample_count: int,
    rng: random.Random | None,
    on_progress: Callable[..., None] | None,
    verifier: ChainVerifier,
) -> ProofVerificationReport:
    meta = verify_typing_proof_hash(
        parsed.typing_proof_hash, parsed.typing_proof_data, parsed.content
    )
    if mode == "sampled":
        chain = verifier.verify_sampled(
            parsed.events, parsed.checkpoints, sample_count, on_progress, rng
        )
    else:
        chain = verifier.verify(parsed.events, on_progress)

    chain_valid = chain.valid
    error_message = chain.message if not chain.valid else None
    reason = chain.reason
    # The proof data must describe this chain
    final_hash = parsed.events[-1].hash if parsed.events else None
    if chain_valid and meta.valid and parsed.typing_proof_data is not None:
        declared = parsed.typing_proof_data.get("finalEventChainHash")
        if final_hash is not None and declared != final_hash:
            chain_valid = False
            error_message = "Final event chain hash does not match proof data"
            reason = ErrorKind.VERIFICATION_FAILED

    metadata_reason = meta.reason
    if not meta.valid and error_message is None:
        error_message = meta.reason
        reason = ErrorKind.VERIFICATION_FAILED

    stats = (parsed.typing_proof_data or {}).get("metadata")
    if not isinstance(stats, Mapping):
        stats = {}
    posw_stats = calculate_posw_stats(parsed.events)
    return ProofVerificationReport(
        valid=meta.valid and chain_valid,
        metadata_valid=meta.valid,
        chain_valid=chain_valid,
        is_pure_typing=meta.is_pure_typing,
        event_count=len(parsed.events),
        paste_events=_metadata_count(stats, "pasteEvents") or 0,
        drop_events=_metadata_count(stats, "dropEvents") or 0,
        posw_iterations=posw_stats.iterations if posw_stats else None,
        posw_stats=posw_stats,
        attestation_info=extract_attestations(parsed.events),
        error_at=chain.error_at,
        error_message=error_message,
        reason=reason,
        metadata_reason=metadata_reason,
        language=parsed.language,
        version=parsed.version,
        chain=chain,
    )


def verify_proof(
    document: Mapping[str, Any],
    *,
    mode: str = "full",
    sample_count: int = 3,
    rng: random.Random | None = None,
    on_progress: Callable[..., None] | None = None,
    verifier: ChainVerifier | None = None,
) -> ProofVerificationReport:
    """Verify a single-file proof document (metadata and chain)."""
    if mode not in ("full", "sampled"):
        raise ValueError(f"Unknown verification mode: {mode!r}")
    start = time.perf_counter()
    version = document.get("version")
    if not is_version_supported(version):
        report = _format_failure(f"Unsupported proof version: {version!r}", version=version)
    else:
        try:
            parsed = parse_proof(document)
        except ProofFormatError as e:
            report = _format_failure(e.message, version=version)
        else:
            report = _verify_parsed(
                parsed,
                mode=mode,
                sample_count=sample_count,
                rng=rng,
                on_progress=on_progress,
                verifier=verifier or ChainVerifier(),
            )
    report.duration_ms = (time.perf_counter() - start) * 1000.0
    return report


def verify_multi_file(
    document: Mapping[str, Any],
    *,
    mode: str = "full",
    sample_count: int = 3,
    rng: random.Random | None = None,
    verifier: ChainVerifier | None = None,
) -> MultiFileVerificationReport:
    """Verify every file entry of a multi-file document independently."""
    start = time.perf_counter()
    version = document.get("version")
    files = document.get("files")
    if not is_version_supported(version) or not isinstance(files, Mapping) or not files:
        return MultiFileVerificationReport(valid=False)
    verifier = verifier or ChainVerifier()
    reports: dict[str, ProofVerificationReport] = {}
    for name, entry in files.items():
        if not isinstance(entry, Mapping):
            reports[name] = _format_failure("File entry must be an object", version=version)
            continue
        reports[name] = verify_proof(
            {**entry, "version": version},
            mode=mode,
            sample_count=sample_count,
            rng=rng,
            verifier=verifier,
        )
    tab_switches = document.get("tabSwitches") or []
    return MultiFileVerificationReport(
        valid=all(r.valid for r in reports.values()),
        files=reports,
        overall_pure_typing=all(r.is_pure_typing for r in reports.values()),
        tab_switches=len(tab_switches) if isinstance(tab_switches, list) else 0,
        duration_ms=(time.perf_counter() - start) * 1000.0,
    )


def verify_document(
    document: Mapping[str, Any], **kwargs: Any
) -> ProofVerificationReport | MultiFileVerificationReport:
    if is_multi_file(document):
        kwargs.pop("on_progress", None)
        return verify_multi_file(document, **kwargs)
    return verify_proof(document, **kwargs)


async def verify_file_async(
    path: Path, *, metrics: Any | None = None, **kwargs: Any
) -> ProofVerificationReport | MultiFileVerificationReport:
    """Load a JSON proof off the event loop and verify it."""
    raw = await asyncio.to_thread(Path(path).read_bytes)
    document = load_document(raw)
    report = await asyncio.to_thread(lambda: verify_document(document, **kwargs))
    if metrics is not None:
        await metrics.record_verification(
            valid=report.valid, duration_seconds=report.duration_ms / 1000.0
        )
    return report


__all__ = [
    "AttestationInfo",
    "ChainVerifier",
    "MultiFileVerificationReport",
    "PoswStats",
    "ProofVerificationReport",
    "SampledSegmentInfo",
    "SampledVerificationResult",
    "TypingProofVerification",
    "VerificationResult",
    "calculate_posw_stats",
    "compute_typing_proof_hash",
    "extract_attestations",
    "verify_document",
    "verify_file_async",
    "verify_multi_file",
    "verify_proof",
    "verify_typing_proof_hash",
]
