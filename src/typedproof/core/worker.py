"""
PoSW worker boundary.

Requests ``(previous_hash, payload, iterations)`` travel through a bounded
FIFO executor with a single consumer; each one is computed in a thread so the
event loop keeps accepting input while hashing runs. Failures come back as
``WorkerError`` with kind ``WORKER_TIMEOUT`` or ``WORKER_ERROR``.
"""

from __future__ import annotations

import asyncio
import time
from typing import Callable

from . import diagnostics
from .concurrency import AsyncBoundedExecutor, BackpressurePolicy
from .errors import ErrorKind, WorkerError
from .events import PoSWRecord
from .posw import compute_posw

ComputeFn = Callable[[str, str, int], PoSWRecord]


class PoswWorker:
    """Single-consumer PoSW request queue."""

    def __init__(
        self,
        *,
        max_queue_size: int = 1024,
        request_timeout: float = 30.0,
        backpressure_policy: BackpressurePolicy = BackpressurePolicy.WAIT,
        compute: ComputeFn = compute_posw,
        metrics: object | None = None,
    ) -> None:
        self._executor: AsyncBoundedExecutor[PoSWRecord] = AsyncBoundedExecutor(
            max_concurrency=1,
            max_queue_size=max_queue_size,
            backpressure_policy=backpressure_policy,
        )
        self._timeout = request_timeout
        self._compute = compute
        self._metrics = metrics
        self._started = False

    @property
    def pending(self) -> int:
        return self._executor.pending

    async def start(self) -> None:
        if not self._started and not self._executor.closed:
            await self._executor.start()
            self._started = True

    async def compute(
        self, previous_hash: str, payload: str, iterations: int
    ) -> PoSWRecord:
        """Queue one request and wait for its record."""
        await self.start()
        if self._executor.closed:
            raise WorkerError("PoSW worker is closed")

        async def _run() -> PoSWRecord:
            start = time.perf_counter()
            try:
                # Request timeout (core.worker_request_timeout_seconds) bounds
                # how long a caller waits, not the PoSW work. A timed-out
                # computation keeps running in its thread and its result is
                # discarded.
                record = await asyncio.wait_for(
                    asyncio.to_thread(
                        self._compute, previous_hash, payload, iterations
                    ),
                    timeout=self._timeout,
                )
            except asyncio.TimeoutError as e:
                diagnostics.warn(
                    "posw-worker",
                    "request timed out",
                    timeout_seconds=self._timeout,
                    iterations=iterations,
                )
                raise WorkerError(
                    f"PoSW request exceeded {self._timeout}s",
                    kind=ErrorKind.WORKER_TIMEOUT,
                    cause=e,
                ) from e
            except WorkerError:
                raise
            except Exception as e:
                diagnostics.warn("posw-worker", "request failed", error=str(e))
                raise WorkerError(
                    f"PoSW computation failed: {e}", cause=e
                ) from e
            if self._metrics is not None:
                await self._metrics.record_posw_computed(  # type: ignore[attr-defined]
                    duration_seconds=time.perf_counter() - start
                )
            return record

        future = await self._executor.submit(_run)
        return await future

    async def close(self) -> None:
        await self._executor.shutdown()
        self._started = False


__all__ = ["PoswWorker"]
