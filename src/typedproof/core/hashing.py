"""
SHA-256 primitive wrapper.

All chain, PoSW and metadata hashes are SHA-256 rendered as 64 lowercase
hex characters.
"""

from __future__ import annotations

import hashlib

from .errors import ErrorKind, ErrorSeverity, TypedProofError


def _check_backend() -> None:
    if "sha256" not in hashlib.algorithms_available:
        raise TypedProofError(
            "SHA-256 backend is unavailable",
            kind=ErrorKind.WORKER_ERROR,
            severity=ErrorSeverity.CRITICAL,
        )


_check_backend()


def digest(data: bytes) -> bytes:
    """Return the 32-byte SHA-256 digest of ``data``."""
    return hashlib.sha256(data).digest()


def to_hex(data: bytes) -> str:
    return data.hex()


def hash_text(text: str) -> str:
    """Hex SHA-256 of the UTF-8 encoding of ``text``."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


__all__ = ["digest", "to_hex", "hash_text", "hash_bytes"]
