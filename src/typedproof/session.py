"""
Recording session facade.

``TypingProof`` owns one hash chain and everything around it: the PoSW
worker, checkpoints, the typed-content registry, statistics and export.

Recording is two-phase. ``record_event`` timestamps the input, puts it in a
backlog and returns a future immediately. A single drain task commits
backlog items in order: it assigns the sequence number, clamps the
timestamp so it never goes backwards, and appends through the builder. A
failed commit fails only its own future; the chain stays at its last
committed length and later events keep building on it.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Sequence

from .core import diagnostics
from .core.canonical import canonicalize
from .core.chain import HashChainBuilder
from .core.checkpoints import CheckpointManager
from .core.errors import (
    AttestationError,
    ErrorKind,
    LifecycleError,
    ProofFormatError,
    RecordEventError,
    TypedProofError,
)
from .core.events import (
    Checkpoint,
    Event,
    EventInput,
    EventType,
    InputType,
    StoredEvent,
    annotations_from_input,
)
from .core.export import build_proof_document, utc_timestamp
from .core.hashing import hash_text
from .core.input_types import is_allowed, tag_event_type
from .core.settings import Settings
from .core.statistics import (
    TypingStatistics,
    TypingStats,
    compute_stats,
    compute_typing_statistics,
)
from .core.verify import ChainVerifier, VerificationResult, compute_typing_proof_hash
from .core.worker import PoswWorker
from .metrics.metrics import MetricsCollector
from .registry import TypedContentRegistry

_INPUT_FIELDS = {
    "type": "type",
    "inputType": "input_type",
    "data": "data",
    "rangeOffset": "range_offset",
    "rangeLength": "range_length",
    "range": "range",
    "description": "description",
    "isMultiLine": "is_multi_line",
    "deletedLength": "deleted_length",
    "insertedText": "inserted_text",
    "insertLength": "insert_length",
    "deleteDirection": "delete_direction",
    "selectedText": "selected_text",
}


def _coerce_input(item: EventInput | Mapping[str, Any]) -> EventInput:
    if isinstance(item, EventInput):
        return item
    kwargs = {_INPUT_FIELDS[k]: v for k, v in item.items() if k in _INPUT_FIELDS}
    kwargs.update({k: v for k, v in item.items() if k in _INPUT_FIELDS.values()})
    if "type" not in kwargs:
        raise RecordEventError("Event input requires a 'type'")
    return EventInput(**kwargs)


def _input_to_dict(item: EventInput) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for wire, attr in _INPUT_FIELDS.items():
        value = getattr(item, attr)
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        elif hasattr(value, "value"):
            value = value.value
        if value is not None:
            out[wire] = value
    return out


@dataclass(frozen=True)
class RecordEventResult:
    hash: str
    index: int


@dataclass(frozen=True)
class TypingProofHashResult:
    typing_proof_hash: str
    proof_data: dict[str, Any]
    is_pure_typing: bool
    device_id: str
    total_events: int
    content: str


@dataclass
class _PendingRecord:
    item: EventInput
    timestamp: float
    future: asyncio.Future[RecordEventResult]
    created_at: float = field(default_factory=time.time)


class TypingProof:
    def __init__(
        self,
        *,
        settings: Settings | None = None,
        registry: TypedContentRegistry | None = None,
        metrics: MetricsCollector | None = None,
        worker: PoswWorker | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._settings = settings or Settings()
        core = self._settings.core
        self._metrics = metrics or MetricsCollector(enabled=core.enable_metrics)
        self._worker = worker or PoswWorker(
            max_queue_size=core.worker_queue_size,
            request_timeout=core.worker_request_timeout_seconds,
            metrics=self._metrics,
        )
        self._builder = HashChainBuilder(
            worker=self._worker,
            iterations=core.posw_iterations,
            checkpoints=CheckpointManager(),
        )
        self._registry = registry or TypedContentRegistry.from_settings(self._settings)
        self._verifier = ChainVerifier()
        self._clock = clock
        self._start = clock()
        self._start_wall_ms = time.time() * 1000.0
        self._fingerprint: str | None = None
        self._fingerprint_components: dict[str, Any] = {}
        self._backlog: asyncio.Queue[_PendingRecord | None] = asyncio.Queue()
        self._pending: list[_PendingRecord] = []
        self._drain_task: asyncio.Task[None] | None = None
        self._closed = False

    # Lifecycle ---------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self._builder.is_initialized

    @property
    def registry(self) -> TypedContentRegistry:
        return self._registry

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def events(self) -> list[StoredEvent]:
        return self._builder.events

    @property
    def current_hash(self) -> str | None:
        return self._builder.state.head if self._builder.is_initialized else None

    @property
    def fingerprint(self) -> str | None:
        return self._fingerprint

    @property
    def posw_iterations(self) -> int:
        return self._builder.iterations

    async def initialize(
        self,
        fingerprint_hash: str,
        fingerprint_components: Mapping[str, Any] | None = None,
    ) -> str:
        """Anchor the chain on ``fingerprint_hash`` and start the drain task."""
        genesis = self._builder.genesis(fingerprint_hash)
        self._fingerprint = fingerprint_hash
        self._fingerprint_components = dict(fingerprint_components or {})
        self._start = self._clock()
        self._start_wall_ms = time.time() * 1000.0
        await self._start_drain()
        diagnostics.info(
            "session", "initialized", posw_iterations=self._builder.iterations
        )
        return genesis

    async def _start_drain(self) -> None:
        if self._closed:
            raise LifecycleError("Session is closed")
        await self._worker.start()
        if self._drain_task is None or self._drain_task.done():
            self._drain_task = asyncio.create_task(self._drain())

    def _require_initialized(self) -> None:
        if not self._builder.is_initialized:
            raise LifecycleError(
                "TypingProof not initialized; call initialize() first",
                kind=ErrorKind.NOT_INITIALIZED,
            )

    def _elapsed_ms(self) -> float:
        return (self._clock() - self._start) * 1000.0

    # Recording ---------------------------------------------------------

    def record_event(
        self, item: EventInput | Mapping[str, Any]
    ) -> asyncio.Future[RecordEventResult]:
        """Timestamp ``item`` now and queue it for hashing.

        Returns a future resolving to the committed hash and index. Raises
        ``LifecycleError`` when the session is not initialized.
        """
        self._require_initialized()
        if self._closed:
            raise LifecycleError("Session is closed")
        event_input = _coerce_input(item)
        tagged = tag_event_type(event_input.type, event_input.input_type)
        if tagged != getattr(event_input.type, "value", event_input.type):
            event_input = replace(event_input, type=tagged)
        loop = asyncio.get_running_loop()
        pending = _PendingRecord(
            item=event_input,
            timestamp=self._elapsed_ms(),
            future=loop.create_future(),
        )
        self._pending.append(pending)
        self._backlog.put_nowait(pending)
        return pending.future

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def wait_until_idle(self) -> None:
        """Wait until every queued record has been committed or failed."""
        await self._backlog.join()

    async def _drain(self) -> None:
        while True:
            pending = await self._backlog.get()
            try:
                if pending is None:
                    return
                if pending.future.cancelled():
                    continue
                commit = asyncio.ensure_future(self._commit(pending))

                def _propagate_cancel(
                    fut: asyncio.Future[RecordEventResult],
                    task: asyncio.Future[RecordEventResult] = commit,
                ) -> None:
                    if fut.cancelled():
                        task.cancel()

                pending.future.add_done_callback(_propagate_cancel)
                try:
                    result = await commit
                except asyncio.CancelledError:
                    if pending.future.cancelled():
                        diagnostics.debug("session", "record cancelled before commit")
                        continue
                    commit.cancel()
                    raise
                except TypedProofError as e:
                    await self._metrics.record_event_failed()
                    diagnostics.warn(
                        "session", "event recording failed", error=str(e)
                    )
                    if not pending.future.done():
                        pending.future.set_exception(
                            e
                            if isinstance(e, RecordEventError)
                            else RecordEventError(
                                f"Event recording failed: {e.message}",
                                cause=e,
                                failed_kind=e.kind.value,
                            )
                        )
                except Exception as e:
                    await self._metrics.record_event_failed()
                    diagnostics.warn(
                        "session", "event recording failed", error=str(e)
                    )
                    if not pending.future.done():
                        pending.future.set_exception(
                            RecordEventError(f"Event recording failed: {e}", cause=e)
                        )
                else:
                    if not pending.future.done():
                        pending.future.set_result(result)
            finally:
                if pending is not None and pending in self._pending:
                    self._pending.remove(pending)
                self._backlog.task_done()

    async def _commit(self, pending: _PendingRecord) -> RecordEventResult:
        state = self._builder.state
        events = self._builder.events
        timestamp = pending.timestamp
        if events and timestamp < events[-1].timestamp:
            diagnostics.debug(
                "session",
                "timestamp clamped",
                requested=timestamp,
                clamped_to=events[-1].timestamp,
            )
            timestamp = events[-1].timestamp
        item = pending.item
        event = Event.from_input(
            item,
            sequence=state.length,
            timestamp=timestamp,
            previous_hash=state.head,
        )
        stored = await self._builder.append(event, **annotations_from_input(item))
        await self._metrics.record_event_recorded(event_type=stored.type)
        if (
            stored.type == EventType.CONTENT_CHANGE.value
            and isinstance(stored.data, str)
            and is_allowed(stored.input_type)
        ):
            self._registry.register(stored.data)
        return RecordEventResult(hash=stored.hash, index=stored.sequence)

    async def record_paste(
        self,
        text: str,
        *,
        range_offset: int | None = None,
        range_length: int | None = None,
        range: Any = None,
    ) -> RecordEventResult:
        """Record a paste; internal when the registry recognizes ``text``."""
        internal = self._registry.is_internal(text)
        item = EventInput(
            type=EventType.CONTENT_CHANGE if internal else EventType.EXTERNAL_INPUT,
            input_type=(
                InputType.INSERT_FROM_INTERNAL_PASTE
                if internal
                else InputType.INSERT_FROM_PASTE
            ),
            data=text,
            range_offset=range_offset,
            range_length=range_length,
            range=range,
            description="Internal paste" if internal else "External paste",
            inserted_text=text,
            insert_length=len(text),
        )
        return await self.record_event(item)

    async def record_drop(
        self,
        text: str,
        *,
        range_offset: int | None = None,
        range_length: int | None = None,
        range: Any = None,
    ) -> RecordEventResult:
        item = EventInput(
            type=EventType.EXTERNAL_INPUT,
            input_type=InputType.INSERT_FROM_DROP,
            data=text,
            range_offset=range_offset,
            range_length=range_length,
            range=range,
            description="External drop",
            inserted_text=text,
            insert_length=len(text),
        )
        return await self.record_event(item)

    async def record_copy(self, text: str) -> RecordEventResult:
        """Record an in-editor copy and make ``text`` pasteable as internal."""
        self._registry.register_copied(text)
        return await self.record_event(
            EventInput(type=EventType.COPY_OPERATION, data=text, description="Copy")
        )

    async def record_human_attestation(
        self, attestation: Mapping[str, Any]
    ) -> RecordEventResult:
        """Record the human-verification result; only valid as event #0."""
        self._require_initialized()
        if self._builder.state.length > 0 or self._pending:
            raise AttestationError(
                "Human attestation must be event #0 (no events should exist yet)"
            )
        return await self.record_event(
            EventInput(
                type=EventType.HUMAN_ATTESTATION,
                data=dict(attestation),
                description=_attestation_description("Human verified", attestation),
            )
        )

    def has_human_attestation(self) -> bool:
        events = self._builder.events if self._builder.is_initialized else []
        return bool(events) and events[0].type == EventType.HUMAN_ATTESTATION.value

    def get_human_attestation(self) -> Mapping[str, Any] | None:
        if not self.has_human_attestation():
            return None
        data = self._builder.events[0].data
        return data if isinstance(data, Mapping) else None

    async def record_pre_export_attestation(
        self, attestation: Mapping[str, Any]
    ) -> RecordEventResult:
        return await self.record_event(
            EventInput(
                type=EventType.PRE_EXPORT_ATTESTATION,
                data=dict(attestation),
                description=_attestation_description(
                    "Pre-export verification", attestation
                ),
            )
        )

    async def record_terms_accepted(self, version: str) -> RecordEventResult:
        return await self.record_event(
            EventInput(
                type=EventType.TERMS_ACCEPTED,
                data={
                    "version": version,
                    "timestamp": int(time.time() * 1000),
                    "agreedAt": utc_timestamp(),
                },
                description=f"Terms accepted (v{version})",
            )
        )

    async def record_template_injection(
        self, injection: Mapping[str, Any]
    ) -> RecordEventResult:
        """Record template content; counted separately from paste and drop."""
        name = injection.get("templateName", "")
        filename = injection.get("filename", "")
        length = injection.get("contentLength", len(injection.get("content", "")))
        content = injection.get("content")
        if isinstance(content, str):
            self._registry.register(content)
        return await self.record_event(
            EventInput(
                type=EventType.TEMPLATE_INJECTION,
                data=dict(injection),
                description=f'Template "{name}" - {filename} ({length} chars)',
            )
        )

    async def record_content_snapshot(self, content: str) -> RecordEventResult:
        self._registry.register(content)
        return await self.record_event(
            EventInput(
                type=EventType.CONTENT_SNAPSHOT,
                data=content,
                description=f"Snapshot (event {self._builder.state.length})",
            )
        )

    # Statistics and export --------------------------------------------

    def get_stats(self) -> TypingStats:
        return compute_stats(
            self._builder.events,
            self._elapsed_ms(),
            current_hash=self.current_hash,
            pending_count=self.pending_count,
        )

    def get_typing_statistics(self) -> TypingStatistics:
        return compute_typing_statistics(self._builder.events, self._elapsed_ms())

    def generate_signature(self) -> dict[str, Any]:
        """Summary of the chain signed by a hash over its canonical form."""
        events = self._builder.events
        final = {
            "totalEvents": len(events),
            "finalHash": self.current_hash,
            "startTime": self._start_wall_ms,
            "endTime": self._start_wall_ms + self._elapsed_ms(),
        }
        return {
            **final,
            "signature": hash_text(canonicalize(final)),
            "events": [event.to_dict() for event in events],
        }

    def generate_typing_proof_hash(self, final_content: str) -> TypingProofHashResult:
        self._require_initialized()
        stats = self.get_typing_statistics()
        proof_data = {
            "finalContentHash": hash_text(final_content),
            "finalEventChainHash": self.current_hash,
            "deviceId": self._fingerprint,
            "metadata": stats.proof_metadata(),
        }
        return TypingProofHashResult(
            typing_proof_hash=compute_typing_proof_hash(proof_data),
            proof_data=proof_data,
            is_pure_typing=stats.is_pure_typing,
            device_id=self._fingerprint or "",
            total_events=stats.total_events,
            content=final_content,
        )

    async def export_proof(
        self,
        final_content: str,
        *,
        language: str | None = None,
        user_agent: str | None = None,
    ) -> dict[str, Any]:
        """Drain the backlog and build the exported proof document."""
        self._require_initialized()
        await self.wait_until_idle()
        signature = self.generate_signature()
        typing_proof = self.generate_typing_proof_hash(final_content)
        checkpoints = self._builder.checkpoint_manager.export_checkpoints(
            self._builder.events
        )
        return build_proof_document(
            typing_proof_hash=typing_proof.typing_proof_hash,
            typing_proof_data=typing_proof.proof_data,
            signature=signature,
            fingerprint_hash=self._fingerprint or "",
            fingerprint_components=self._fingerprint_components,
            user_agent=user_agent or self._settings.core.device_label,
            is_pure_typing=typing_proof.is_pure_typing,
            checkpoints=checkpoints,
            content=final_content,
            language=language,
        )

    # Verification ------------------------------------------------------

    def verify(
        self, on_progress: Callable[[int, int], None] | None = None
    ) -> VerificationResult:
        return self._verifier.verify(self._builder.events, on_progress)

    def verify_sampled(
        self,
        checkpoints: Sequence[Checkpoint] | None = None,
        sample_count: int | None = None,
        on_progress: Callable[[str, int, int], None] | None = None,
        rng: Any = None,
    ) -> VerificationResult:
        events = self._builder.events
        if checkpoints is None:
            checkpoints = self._builder.checkpoint_manager.checkpoints
        return self._verifier.verify_sampled(
            events,
            checkpoints,
            sample_count or self._settings.core.sample_count,
            on_progress,
            rng,
        )

    # State ---------------------------------------------------------------

    async def reset(self) -> None:
        """Drop all events and start a fresh chain on the same fingerprint."""
        self._require_initialized()
        await self.wait_until_idle()
        fingerprint = self._fingerprint or ""
        self._builder.reset()
        self._builder.genesis(fingerprint)
        self._registry.clear()
        self._start = self._clock()
        self._start_wall_ms = time.time() * 1000.0

    def serialize_state(self) -> dict[str, Any]:
        self._require_initialized()
        return {
            "genesisHash": self._builder.genesis_hash,
            "currentHash": self.current_hash,
            "fingerprint": {
                "hash": self._fingerprint,
                "components": dict(self._fingerprint_components),
            },
            "startTime": self._start_wall_ms,
            "elapsedMs": self._elapsed_ms(),
            "poswIterations": self._builder.iterations,
            "events": [event.to_dict() for event in self._builder.events],
            "checkpoints": [
                cp.to_dict() for cp in self._builder.checkpoint_manager.checkpoints
            ],
            "pendingEvents": [
                {"input": _input_to_dict(p.item), "timestamp": p.timestamp}
                for p in self._pending
            ],
        }

    async def restore_state(self, state: Mapping[str, Any]) -> list[asyncio.Future[RecordEventResult]]:
        """Load a serialized session and re-queue its unhashed events.

        Returns the futures of the re-queued events.
        """
        if self._builder.is_initialized:
            raise LifecycleError(
                "Cannot restore into an initialized session",
                kind=ErrorKind.ALREADY_INITIALIZED,
            )
        try:
            fingerprint = state["fingerprint"]
            if not isinstance(fingerprint, Mapping):
                raise TypeError("'fingerprint' must be an object")
            events = [StoredEvent.from_dict(e) for e in state.get("events", [])]
            checkpoints = [Checkpoint.from_dict(c) for c in state.get("checkpoints", [])]
            genesis = state["genesisHash"]
            components = dict(fingerprint.get("components") or {})
            elapsed = float(state.get("elapsedMs", 0.0))
            start_wall_ms = float(state.get("startTime", time.time() * 1000.0))
            pending_inputs = [
                (_coerce_input(raw["input"]), float(raw.get("timestamp", elapsed)))
                for raw in state.get("pendingEvents", [])
            ]
        except (KeyError, TypeError, ValueError, AttributeError, RecordEventError) as e:
            raise ProofFormatError(f"Malformed session state: {e}", cause=e) from e
        head = events[-1].hash if events else genesis
        if state.get("currentHash") not in (None, head):
            raise ProofFormatError("Session state head does not match its events")

        self._fingerprint = fingerprint.get("hash")
        self._fingerprint_components = components
        self._builder.restore(genesis_hash=genesis, events=events, checkpoints=checkpoints)
        self._start = self._clock() - elapsed / 1000.0
        self._start_wall_ms = start_wall_ms
        for event in events:
            if event.type == EventType.CONTENT_CHANGE.value and isinstance(event.data, str):
                self._registry.register(event.data)
        await self._start_drain()

        futures: list[asyncio.Future[RecordEventResult]] = []
        loop = asyncio.get_running_loop()
        for item, timestamp in pending_inputs:
            pending = _PendingRecord(
                item=item,
                timestamp=timestamp,
                future=loop.create_future(),
            )
            self._pending.append(pending)
            self._backlog.put_nowait(pending)
            futures.append(pending.future)
        diagnostics.info(
            "session",
            "state restored",
            events=len(events),
            pending=len(futures),
        )
        return futures

    @classmethod
    async def from_serialized_state(
        cls, state: Mapping[str, Any], **kwargs: Any
    ) -> TypingProof:
        proof = cls(**kwargs)
        await proof.restore_state(state)
        return proof

    async def close(self) -> None:
        """Commit what is queued, then stop the drain task and the worker."""
        if self._closed:
            return
        if self._drain_task is not None:
            self._backlog.put_nowait(None)
            await self._drain_task
            self._drain_task = None
        self._closed = True
        await self._worker.close()

    async def __aenter__(self) -> TypingProof:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.close()


def _attestation_description(prefix: str, attestation: Mapping[str, Any]) -> str:
    score = attestation.get("score")
    action = attestation.get("action", "")
    if isinstance(score, (int, float)):
        return f"{prefix} (score: {score:.2f}, action: {action})"
    return f"{prefix} (action: {action})"


__all__ = ["TypingProof", "RecordEventResult", "TypingProofHashResult"]
