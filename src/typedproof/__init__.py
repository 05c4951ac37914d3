"""
typedproof: tamper-evident proofs that a document was typed.

``TypingProof`` records editor events into a SHA-256 hash chain where every
event carries a proof of sequential work; ``verify_proof`` replays an exported
proof in full or over sampled checkpoint segments.
"""

from __future__ import annotations

from ._version import __version__
from .core.errors import (
    AttestationError,
    ChainIntegrityError,
    ErrorKind,
    LifecycleError,
    ProofFormatError,
    RecordEventError,
    TypedProofError,
    WorkerError,
)
from .core.events import Checkpoint, EventInput, EventType, InputType, StoredEvent
from .core.settings import Settings
from .core.verify import ChainVerifier, VerificationResult, verify_document, verify_proof
from .registry import TypedContentRegistry
from .session import RecordEventResult, TypingProof

__all__ = [
    "AttestationError",
    "ChainIntegrityError",
    "ChainVerifier",
    "Checkpoint",
    "ErrorKind",
    "EventInput",
    "EventType",
    "InputType",
    "LifecycleError",
    "ProofFormatError",
    "RecordEventError",
    "Settings",
    "StoredEvent",
    "TypedContentRegistry",
    "TypedProofError",
    "TypingProof",
    "RecordEventResult",
    "VerificationResult",
    "WorkerError",
    "verify_document",
    "verify_proof",
    "__version__",
    "VERSION",
]

VERSION = __version__
