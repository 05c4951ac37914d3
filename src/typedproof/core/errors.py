"""
Error hierarchy for typedproof.

Construction-side failures (lifecycle misuse, worker failures, rejected
records) are raised as ``TypedProofError`` subclasses. Chain-integrity
failures found during verification are never raised; the verifier reports
them as result values carrying an ``ErrorKind``.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Named failure reasons shared by construction and verification."""

    # Lifecycle misuse
    NOT_INITIALIZED = "NOT_INITIALIZED"
    ALREADY_INITIALIZED = "ALREADY_INITIALIZED"
    # Chain integrity (each tied to an event index)
    SEQUENCE_MISMATCH = "SEQUENCE_MISMATCH"
    TIMESTAMP_VIOLATION = "TIMESTAMP_VIOLATION"
    PREVIOUS_HASH_MISMATCH = "PREVIOUS_HASH_MISMATCH"
    HASH_MISMATCH = "HASH_MISMATCH"
    POSW_VERIFICATION_FAILED = "POSW_VERIFICATION_FAILED"
    SEGMENT_END_HASH_MISMATCH = "SEGMENT_END_HASH_MISMATCH"
    # Metadata level
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    # Execution context
    WORKER_ERROR = "WORKER_ERROR"
    WORKER_TIMEOUT = "WORKER_TIMEOUT"
    BACKPRESSURE = "BACKPRESSURE"
    # Construction side
    RECORD_EVENT_FAILED = "RECORD_EVENT_FAILED"
    ATTESTATION_FAILED = "ATTESTATION_FAILED"
    # Input documents
    INVALID_PROOF_FORMAT = "INVALID_PROOF_FORMAT"
    SERIALIZATION = "SERIALIZATION"


class ErrorCategory(str, Enum):
    LIFECYCLE = "lifecycle"
    INTEGRITY = "integrity"
    WORKER = "worker"
    CONSTRUCTION = "construction"
    FORMAT = "format"


class ErrorSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


_KIND_CATEGORY: dict[ErrorKind, ErrorCategory] = {
    ErrorKind.NOT_INITIALIZED: ErrorCategory.LIFECYCLE,
    ErrorKind.ALREADY_INITIALIZED: ErrorCategory.LIFECYCLE,
    ErrorKind.SEQUENCE_MISMATCH: ErrorCategory.INTEGRITY,
    ErrorKind.TIMESTAMP_VIOLATION: ErrorCategory.INTEGRITY,
    ErrorKind.PREVIOUS_HASH_MISMATCH: ErrorCategory.INTEGRITY,
    ErrorKind.HASH_MISMATCH: ErrorCategory.INTEGRITY,
    ErrorKind.POSW_VERIFICATION_FAILED: ErrorCategory.INTEGRITY,
    ErrorKind.SEGMENT_END_HASH_MISMATCH: ErrorCategory.INTEGRITY,
    ErrorKind.VERIFICATION_FAILED: ErrorCategory.INTEGRITY,
    ErrorKind.WORKER_ERROR: ErrorCategory.WORKER,
    ErrorKind.WORKER_TIMEOUT: ErrorCategory.WORKER,
    ErrorKind.BACKPRESSURE: ErrorCategory.WORKER,
    ErrorKind.RECORD_EVENT_FAILED: ErrorCategory.CONSTRUCTION,
    ErrorKind.ATTESTATION_FAILED: ErrorCategory.CONSTRUCTION,
    ErrorKind.INVALID_PROOF_FORMAT: ErrorCategory.FORMAT,
    ErrorKind.SERIALIZATION: ErrorCategory.FORMAT,
}


@dataclass
class ErrorContext:
    """Context captured when an error is created."""

    kind: ErrorKind
    category: ErrorCategory
    severity: ErrorSeverity
    error_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = field(default_factory=time.time)
    event_index: int | None = None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "category": self.category.value,
            "severity": self.severity.value,
            "error_id": self.error_id,
            "timestamp": self.timestamp,
            "event_index": self.event_index,
            "details": dict(self.details),
        }


def create_error_context(
    kind: ErrorKind,
    severity: ErrorSeverity = ErrorSeverity.HIGH,
    *,
    event_index: int | None = None,
    **details: Any,
) -> ErrorContext:
    return ErrorContext(
        kind=kind,
        category=_KIND_CATEGORY[kind],
        severity=severity,
        event_index=event_index,
        details=details,
    )


class TypedProofError(Exception):
    """Base error carrying a named kind and structured context."""

    default_kind: ErrorKind = ErrorKind.RECORD_EVENT_FAILED
    default_severity: ErrorSeverity = ErrorSeverity.HIGH

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        severity: ErrorSeverity | None = None,
        event_index: int | None = None,
        cause: BaseException | None = None,
        error_context: ErrorContext | None = None,
        **details: Any,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.context = error_context or create_error_context(
            kind or self.default_kind,
            severity or self.default_severity,
            event_index=event_index,
            **details,
        )
        if cause is not None:
            self.__cause__ = cause

    @property
    def kind(self) -> ErrorKind:
        return self.context.kind

    @property
    def event_index(self) -> int | None:
        return self.context.event_index

    def to_dict(self) -> dict[str, Any]:
        """Serializable view for diagnostics and CLI JSON output."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "context": self.context.to_dict(),
        }
        if self.__cause__ is not None:
            data["cause"] = repr(self.__cause__)
        return data

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


class LifecycleError(TypedProofError):
    """Builder or session used outside its lifecycle (before init, twice)."""

    default_kind = ErrorKind.NOT_INITIALIZED


class ChainIntegrityError(TypedProofError):
    """An append would break a chain invariant."""

    default_kind = ErrorKind.SEQUENCE_MISMATCH
    default_severity = ErrorSeverity.CRITICAL


class WorkerError(TypedProofError):
    """PoSW execution context failed or timed out."""

    default_kind = ErrorKind.WORKER_ERROR


class BackpressureError(WorkerError):
    """Worker queue is full and the submission policy rejects."""

    default_kind = ErrorKind.BACKPRESSURE
    default_severity = ErrorSeverity.MEDIUM


class RecordEventError(TypedProofError):
    default_kind = ErrorKind.RECORD_EVENT_FAILED


class AttestationError(TypedProofError):
    default_kind = ErrorKind.ATTESTATION_FAILED


class ProofFormatError(TypedProofError):
    """Proof document or archive is structurally unusable."""

    default_kind = ErrorKind.INVALID_PROOF_FORMAT
    default_severity = ErrorSeverity.MEDIUM


__all__ = [
    "ErrorKind",
    "ErrorCategory",
    "ErrorSeverity",
    "ErrorContext",
    "create_error_context",
    "TypedProofError",
    "LifecycleError",
    "ChainIntegrityError",
    "WorkerError",
    "BackpressureError",
    "RecordEventError",
    "AttestationError",
    "ProofFormatError",
]
