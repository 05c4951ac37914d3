"""
Async metrics collection for typedproof.

Prometheus counters and histograms for chain construction and verification:

- events appended to a chain
- PoSW compute latency
- verification runs by outcome

Instances are session-scoped with an isolated registry; when metrics are
disabled every method is a no-op apart from the in-memory counters that
tests assert on.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class ProofMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    events_recorded: int = 0
    events_failed: int = 0
    posw_computed: int = 0
    verifications_passed: int = 0
    verifications_failed: int = 0


class MetricsCollector:
    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = asyncio.Lock()
        self._state = ProofMetrics()

        self._c_events: Any | None = None
        self._c_event_failures: Any | None = None
        self._h_posw_latency: Any | None = None
        self._c_verifications: Any | None = None
        self._h_verify_latency: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry to avoid global duplication in tests
            self._registry = CollectorRegistry()
            self._c_events = Counter(
                "typedproof_events_recorded_total",
                "Total number of events appended to a hash chain",
                ["event_type"],
                registry=self._registry,
            )
            self._c_event_failures = Counter(
                "typedproof_event_failures_total",
                "Total number of events whose append failed",
                registry=self._registry,
            )
            self._h_posw_latency = Histogram(
                "typedproof_posw_compute_seconds",
                "Latency of a single PoSW computation",
                buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
                registry=self._registry,
            )
            self._c_verifications = Counter(
                "typedproof_verifications_total",
                "Total number of proof verifications by outcome",
                ["outcome"],
                registry=self._registry,
            )
            self._h_verify_latency = Histogram(
                "typedproof_verification_seconds",
                "Latency of a proof verification",
                buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0, 60.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    async def record_event_recorded(self, *, event_type: str | None = None) -> None:
        async with self._lock:
            self._state.events_recorded += 1
        if self._c_events is not None:
            self._c_events.labels(event_type=event_type or "unknown").inc()

    async def record_event_failed(self) -> None:
        async with self._lock:
            self._state.events_failed += 1
        if self._c_event_failures is not None:
            self._c_event_failures.inc()

    async def record_posw_computed(self, *, duration_seconds: float | None = None) -> None:
        async with self._lock:
            self._state.posw_computed += 1
        if duration_seconds is not None and self._h_posw_latency is not None:
            self._h_posw_latency.observe(duration_seconds)

    async def record_verification(
        self, *, valid: bool, duration_seconds: float | None = None
    ) -> None:
        async with self._lock:
            if valid:
                self._state.verifications_passed += 1
            else:
                self._state.verifications_failed += 1
        if self._c_verifications is not None:
            self._c_verifications.labels(outcome="valid" if valid else "invalid").inc()
        if duration_seconds is not None and self._h_verify_latency is not None:
            self._h_verify_latency.observe(duration_seconds)

    async def snapshot(self) -> ProofMetrics:
        async with self._lock:
            return ProofMetrics(
                events_recorded=self._state.events_recorded,
                events_failed=self._state.events_failed,
                posw_computed=self._state.posw_computed,
                verifications_passed=self._state.verifications_passed,
                verifications_failed=self._state.verifications_failed,
            )
