"""Bounded pool of asyncio workers draining a job queue.

The pool holds a fixed number of slots. Jobs beyond the limit wait in
the queue, which is the backpressure mechanism. Cancelling the pool
stops the dispatch of queued jobs while jobs already running drain.
A cancelled pool stays cancelled; callers create one pool per batch.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from typing import Generic, TypeVar

from pairwise_evaluator.logging_config import get_logger

__all__ = ["WorkerPool"]

logger = get_logger(__name__)

T = TypeVar("T")


class WorkerPool(Generic[T]):
    """Runs an async handler over jobs with at most N in flight.

    Attributes:
        max_concurrency: Number of concurrent slots.

    """

    def __init__(self, max_concurrency: int) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {max_concurrency}")
        self.max_concurrency = max_concurrency
        self._cancel_requested = False
        self._in_flight = 0
        self._peak_in_flight = 0

    @property
    def cancelled(self) -> bool:
        return self._cancel_requested

    @property
    def peak_in_flight(self) -> int:
        """Highest number of jobs observed running at once."""
        return self._peak_in_flight

    def cancel(self) -> None:
        """Stop dispatching queued jobs; running jobs finish normally."""
        if not self._cancel_requested:
            logger.info("worker_pool_cancel_requested", in_flight=self._in_flight)
        self._cancel_requested = True

    async def run(
        self,
        jobs: Iterable[T],
        handler: Callable[[T], Awaitable[None]],
    ) -> list[T]:
        """Process every job unless cancelled.

        Args:
            jobs: Jobs to process, dispatched in order.
            handler: Coroutine invoked once per job. It is expected to
                record its own failures; an exception escaping it aborts
                the run.

        Returns:
            Jobs that were never started because of cancellation.

        """
        queue: asyncio.Queue[T] = asyncio.Queue()
        for job in jobs:
            queue.put_nowait(job)

        async def _worker() -> None:
            while not self._cancel_requested:
                try:
                    job = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                self._in_flight += 1
                self._peak_in_flight = max(self._peak_in_flight, self._in_flight)
                try:
                    await handler(job)
                finally:
                    self._in_flight -= 1
                    queue.task_done()

        worker_count = min(self.max_concurrency, queue.qsize())
        if worker_count:
            await asyncio.gather(*(_worker() for _ in range(worker_count)))

        not_started: list[T] = []
        while not queue.empty():
            not_started.append(queue.get_nowait())
        return not_started
