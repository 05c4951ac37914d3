"""
Deterministic serialization for hashing.

Every hash in a proof is computed over the canonical form produced here:
object keys sorted at every nesting level, arrays in their given order,
compact separators, UTF-8 with non-ASCII characters kept literally. The same
value always yields byte-identical output, which is what lets a verifier on
another machine reproduce the hashes.
"""

from __future__ import annotations

from typing import Any

import orjson

from .errors import ErrorKind, TypedProofError


def _default(obj: Any) -> Any:
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    if hasattr(obj, "model_dump"):
        return obj.model_dump(exclude_none=True)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonical_bytes(value: Any) -> bytes:
    """Serialize ``value`` to canonical JSON bytes."""
    try:
        return orjson.dumps(value, default=_default, option=orjson.OPT_SORT_KEYS)
    except TypeError as e:
        raise TypedProofError(
            "Canonical serialization failed",
            kind=ErrorKind.SERIALIZATION,
            cause=e,
        ) from e


def canonicalize(value: Any) -> str:
    """Serialize ``value`` to its canonical JSON text."""
    return canonical_bytes(value).decode("utf-8")


def loads(data: bytes | str) -> Any:
    """Parse JSON text or bytes, mapping decode errors to ``SERIALIZATION``."""
    try:
        return orjson.loads(data)
    except orjson.JSONDecodeError as e:
        raise TypedProofError(
            f"Invalid JSON: {e}",
            kind=ErrorKind.SERIALIZATION,
            cause=e,
        ) from e


__all__ = ["canonical_bytes", "canonicalize", "loads"]
