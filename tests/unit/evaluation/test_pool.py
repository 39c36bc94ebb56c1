"""Unit tests for the bounded worker pool."""

import asyncio

import pytest

from pairwise_evaluator.evaluation.pool import WorkerPool


class TestWorkerPool:
    """Tests for concurrency bounds and cancellation."""

    def test_rejects_non_positive_concurrency(self) -> None:
        """Test the pool needs at least one slot."""
        with pytest.raises(ValueError):
            WorkerPool(0)

    @pytest.mark.asyncio
    async def test_processes_every_job(self) -> None:
        """Test each job is handled exactly once."""
        handled: list[int] = []

        async def handler(job: int) -> None:
            await asyncio.sleep(0)
            handled.append(job)

        not_started = await WorkerPool(3).run(range(10), handler)

        assert not_started == []
        assert sorted(handled) == list(range(10))

    @pytest.mark.asyncio
    async def test_never_exceeds_max_concurrency(self) -> None:
        """Test at most N jobs run at once."""
        running = 0
        peak = 0

        async def handler(job: int) -> None:
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.01)
            running -= 1

        pool: WorkerPool[int] = WorkerPool(2)
        await pool.run(range(8), handler)

        assert peak == 2
        assert pool.peak_in_flight == 2

    @pytest.mark.asyncio
    async def test_cancel_returns_unstarted_jobs(self) -> None:
        """Test cancelling drains running jobs and reports queued ones."""
        pool: WorkerPool[int] = WorkerPool(1)
        handled: list[int] = []

        async def handler(job: int) -> None:
            handled.append(job)
            if job == 1:
                pool.cancel()

        not_started = await pool.run(range(5), handler)

        assert handled == [0, 1]
        assert not_started == [2, 3, 4]
        assert pool.cancelled

    @pytest.mark.asyncio
    async def test_empty_jobs(self) -> None:
        """Test an empty batch completes immediately."""

        async def handler(job: int) -> None:
            raise AssertionError("not called")

        assert await WorkerPool(4).run([], handler) == []
