"""
Proof of sequential work.

``compute_posw`` seeds a SHA-256 chain with ``previous_hash + payload +
nonce`` and re-hashes the hex digest ``iterations - 1`` more times. The cost
is linear in ``iterations`` and cannot be parallelized, which bounds how fast
an alternate chain can be fabricated. Verification replays the same number of
iterations, so it is as expensive as construction.
"""

from __future__ import annotations

import hashlib
import secrets
import time
from typing import Any

from .events import PoSWRecord

DEFAULT_ITERATIONS = 1000
NONCE_BYTES = 16


def _iterate(previous_hash: str, payload: str, nonce: str, iterations: int) -> str:
    current = hashlib.sha256(
        (previous_hash + payload + nonce).encode("utf-8")
    ).hexdigest()
    for _ in range(1, iterations):
        current = hashlib.sha256(current.encode("ascii")).hexdigest()
    return current


def compute_posw(
    previous_hash: str,
    payload: str,
    iterations: int = DEFAULT_ITERATIONS,
) -> PoSWRecord:
    """Run the sequential hash chain and return its record.

    Raises ``ValueError`` when ``iterations`` is below one.
    """
    if iterations < 1:
        raise ValueError("iterations must be >= 1")
    nonce = secrets.token_hex(NONCE_BYTES)
    start = time.perf_counter()
    final = _iterate(previous_hash, payload, nonce, iterations)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    return PoSWRecord(
        iterations=iterations,
        nonce=nonce,
        intermediate_hash=final,
        compute_time_ms=round(elapsed_ms, 3),
    )


def verify_posw(previous_hash: str, payload: str, record: Any) -> bool:
    """Replay the chain described by ``record``; never raises."""
    try:
        iterations = record.iterations
        nonce = record.nonce
        expected = record.intermediate_hash
        if (
            isinstance(iterations, bool)
            or not isinstance(iterations, int)
            or iterations <= 0
            or not isinstance(nonce, str)
            or not isinstance(expected, str)
        ):
            return False
        return _iterate(previous_hash, payload, nonce, iterations) == expected
    except (AttributeError, TypeError, ValueError):
        return False


__all__ = ["DEFAULT_ITERATIONS", "compute_posw", "verify_posw"]
