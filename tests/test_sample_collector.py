"""
Tests for SampleCollector: concurrent writers, freezing and failure tallies.
"""

from __future__ import annotations

import asyncio
import threading

import pytest

from rangebench.core.executor.types import Failure, FailureKind, Success
from rangebench.core.sample_collector import SampleCollector


def _failure(kind: FailureKind, message: str = "", index: int = 0) -> Failure:
    return Failure(index=index, kind=kind, attempts_made=1, message=message)


class TestConcurrentRecording:
    """Tests for record() under concurrent writers."""

    def test_threads_do_not_lose_samples(self) -> None:
        collector = SampleCollector()
        barrier = threading.Barrier(8)

        def writer(offset: int) -> None:
            barrier.wait()
            for i in range(1000):
                collector.record(float(offset * 1000 + i))

        threads = [threading.Thread(target=writer, args=(t,)) for t in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snapshot = collector.snapshot()
        assert len(snapshot) == 8000
        assert sorted(snapshot) == [float(v) for v in range(8000)]

    @pytest.mark.asyncio
    async def test_tasks_record_outcomes(self) -> None:
        collector = SampleCollector(capacity=100)

        async def worker(i: int) -> None:
            await asyncio.sleep(0)
            if i % 4 == 0:
                collector.record_outcome(_failure(FailureKind.THROTTLED, index=i))
            else:
                collector.record_outcome(Success(index=i, latency_ms=float(i)))

        await asyncio.gather(*(worker(i) for i in range(100)))

        assert collector.success_count == 75
        assert collector.failure_count == 25
        assert len(collector) == 75
        assert collector.failures_by_kind() == {"throttled": 25}


class TestFreezeAndCapacity:
    """Tests for the frozen/capacity guards."""

    def test_record_after_freeze_rejected(self) -> None:
        collector = SampleCollector()
        collector.record(1.0)
        collector.freeze()

        assert collector.frozen
        with pytest.raises(RuntimeError):
            collector.record(2.0)
        with pytest.raises(RuntimeError):
            collector.record_failure(_failure(FailureKind.OTHER))
        assert collector.snapshot() == (1.0,)

    def test_capacity_counts_successes_and_failures(self) -> None:
        collector = SampleCollector(capacity=2)
        collector.record(1.0)
        collector.record_failure(_failure(FailureKind.TIMEOUT))

        with pytest.raises(RuntimeError):
            collector.record(3.0)

    def test_snapshot_is_a_copy(self) -> None:
        collector = SampleCollector()
        collector.record(5.0)
        snap = collector.snapshot()
        collector.record(6.0)

        assert snap == (5.0,)
        assert collector.snapshot() == (5.0, 6.0)


class TestFailureTallies:
    """Tests for failures_by_kind() and sample_errors."""

    def test_counts_by_kind(self) -> None:
        collector = SampleCollector()
        for kind in (
            FailureKind.THROTTLED,
            FailureKind.THROTTLED,
            FailureKind.UNAUTHORIZED,
        ):
            collector.record_failure(_failure(kind))

        assert collector.failures_by_kind() == {"throttled": 2, "unauthorized": 1}

    def test_sample_errors_are_distinct_and_capped(self) -> None:
        collector = SampleCollector(max_sample_errors=2)
        for message in ("a", "a", "b", "c", ""):
            collector.record_failure(_failure(FailureKind.OTHER, message))

        assert collector.sample_errors == ["a", "b"]
        assert collector.failure_count == 5
