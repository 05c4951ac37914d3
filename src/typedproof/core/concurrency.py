"""
Bounded async executor used at the PoSW worker boundary.

- BackpressurePolicy: WAIT or REJECT when the request queue is full
- AsyncBoundedExecutor: fixed number of consumer tasks pulling coroutine
  factories from a FIFO queue whose capacity is enforced by a semaphore

With ``max_concurrency=1`` results are produced strictly in submission
order, which is what the chain builder relies on.
"""

from __future__ import annotations

import asyncio
import types
from enum import Enum
from typing import Awaitable, Callable, Generic, TypeVar

from .errors import BackpressureError

T = TypeVar("T")


class BackpressurePolicy(str, Enum):
    WAIT = "wait"  # Wait until space is available (potentially with timeout)
    REJECT = "reject"  # Raise BackpressureError immediately when full


class AsyncBoundedExecutor(Generic[T]):
    """Bounded-concurrency executor with backpressure.

    Usage:
        async with AsyncBoundedExecutor(max_concurrency=1, max_queue_size=64) as ex:
            fut = await ex.submit(lambda: work())
            result = await fut
    """

    def __init__(
        self,
        *,
        max_concurrency: int,
        max_queue_size: int,
        backpressure_policy: BackpressurePolicy = BackpressurePolicy.WAIT,
    ) -> None:
        if max_concurrency <= 0:
            raise ValueError("max_concurrency must be > 0")
        if max_queue_size <= 0:
            raise ValueError("max_queue_size must be > 0")
        self._max_concurrency = max_concurrency
        # Capacity accounts for both running and queued requests
        self._capacity_sem = asyncio.Semaphore(max_concurrency + max_queue_size)
        self._queue: asyncio.Queue[
            tuple[Callable[[], Awaitable[T]], asyncio.Future[T]]
        ] = asyncio.Queue()
        self._policy = backpressure_policy
        self._workers: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        if self._workers:
            return
        for _ in range(self._max_concurrency):
            self._workers.append(asyncio.create_task(self._worker_loop()))

    async def __aenter__(self) -> AsyncBoundedExecutor[T]:
        await self.start()
        return self

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc: BaseException | None,
        _tb: types.TracebackType | None,
    ) -> None:
        await self.shutdown()

    async def submit(
        self,
        factory: Callable[[], Awaitable[T]],
        *,
        timeout: float | None = None,
    ) -> asyncio.Future[T]:
        """Queue a coroutine factory and return a Future for its result.

        When the queue is full, WAIT blocks (bounded by ``timeout``) and
        REJECT raises ``BackpressureError`` immediately.
        """
        if self._closed:
            raise RuntimeError("Executor is closed")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[T] = loop.create_future()

        try:
            if self._policy is BackpressurePolicy.REJECT:
                if self._capacity_sem.locked():
                    raise BackpressureError("Queue is full; submission rejected")
                await self._capacity_sem.acquire()
            elif timeout is not None:
                await asyncio.wait_for(self._capacity_sem.acquire(), timeout=timeout)
            else:
                await self._capacity_sem.acquire()
        except asyncio.TimeoutError as e:
            raise BackpressureError("Timed out waiting for queue space") from e

        self._queue.put_nowait((factory, future))
        return future

    async def _worker_loop(self) -> None:
        try:
            while True:
                factory, future = await self._queue.get()
                try:
                    if future.cancelled():
                        continue
                    try:
                        result = await factory()
                    except Exception as e:  # noqa: BLE001
                        if not future.done():
                            future.set_exception(e)
                    else:
                        if not future.done():
                            future.set_result(result)
                finally:
                    self._queue.task_done()
                    self._capacity_sem.release()
        except asyncio.CancelledError:
            return

    async def shutdown(self) -> None:
        """Drain queued work, then stop the consumer tasks."""
        if self._closed:
            return
        self._closed = True
        if self._workers:
            await self._queue.join()
        for w in self._workers:
            w.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers.clear()


__all__ = ["BackpressurePolicy", "AsyncBoundedExecutor"]
