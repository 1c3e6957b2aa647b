"""
Benchmark Orchestrator

Drives a benchmark run through its phases:

    idle -> warmup -> measuring -> reducing -> done
                 \\-> fatal (executor setup failed)

Warmup and measurement share one dispatch pipeline
(rate limiter -> concurrency gate -> retry/timeout wrapper -> executor);
they differ only in how many logical queries run and whether outcomes are
recorded.
"""

import asyncio
import logging
import time
from enum import Enum
from typing import Callable, List, Optional

from rangebench.core.concurrency_gate import ConcurrencyGate
from rangebench.core.errors import BenchmarkSetupError
from rangebench.core.executor.retry import RetryingExecutor
from rangebench.core.executor.types import QueryExecutor
from rangebench.core.rate_limiter import RateLimiter
from rangebench.core.sample_collector import SampleCollector
from rangebench.core.statistics import reduce_samples
from rangebench.models import QuerySpec, Report, RunConfig

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


class BenchmarkPhase(str, Enum):
    """Benchmark lifecycle phase."""

    IDLE = "idle"
    WARMUP = "warmup"
    MEASURING = "measuring"
    REDUCING = "reducing"
    DONE = "done"
    FATAL = "fatal"


class BenchmarkOrchestrator:
    """
    Runs warmup plus the measured benchmark and builds the final Report.

    Manages:
    - Executor lifecycle (setup, close)
    - A fixed pool of worker tasks, one per gate permit, claiming query
      indices in order
    - Best-effort progress reporting
    - Reduction of the frozen sample set
    """

    def __init__(
        self,
        executor: QueryExecutor,
        query_spec: QuerySpec,
        run_config: RunConfig,
        *,
        rate_limiter: Optional[RateLimiter] = None,
        gate: Optional[ConcurrencyGate] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            executor: Backend performing the individual queries
            query_spec: Query issued by every logical query
            run_config: Counts, pacing and retry policy
            rate_limiter: Override the limiter built from ``run_config.qps``
            gate: Override the gate built from ``run_config.parallelism``
            progress_callback: Called with (completed, total) at progress boundaries
        """
        self.executor = executor
        self.query_spec = query_spec
        self.run_config = run_config
        self.rate_limiter = rate_limiter or RateLimiter(run_config.qps)
        self.gate = gate or ConcurrencyGate(run_config.parallelism)
        self.retrying_executor = RetryingExecutor(
            executor,
            timeout_ms=run_config.timeout_ms,
            max_retries=run_config.max_retries,
        )
        self.progress_callback = progress_callback

        self.phase = BenchmarkPhase.IDLE
        self.collector: Optional[SampleCollector] = None
        self.report: Optional[Report] = None
        self._completed = 0
        self._next_index = 0

    def _set_phase(self, phase: BenchmarkPhase) -> None:
        logger.debug("Benchmark phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase

    @property
    def executor_name(self) -> str:
        return str(getattr(self.executor, "name", type(self.executor).__name__))

    async def run(self) -> Report:
        """
        Execute the benchmark.

        Returns:
            Report: Final report (possibly with every query failed)

        Raises:
            BenchmarkSetupError: The executor could not be set up
        """
        if self.phase != BenchmarkPhase.IDLE:
            raise RuntimeError(f"Benchmark already ran (phase={self.phase.value})")

        cfg = self.run_config
        qps = f"{cfg.qps:g}" if cfg.rate_limited else "unlimited"
        logger.info(
            f"🚀 Starting benchmark with {cfg.num_queries} queries at {qps} QPS "
            f"with parallelism of {cfg.parallelism}"
        )
        logger.info(f"📋 Query: {self.query_spec.describe()}")

        try:
            await self._setup()

            warmup_duration_s = await self._warmup()

            collector = SampleCollector(capacity=cfg.num_queries)
            self.collector = collector
            self._set_phase(BenchmarkPhase.MEASURING)
            self.rate_limiter.reset()
            start = time.monotonic()
            await self._run_phase(cfg.num_queries, collector)
            duration_s = time.monotonic() - start

            self._set_phase(BenchmarkPhase.REDUCING)
            collector.freeze()
            self.report = self._build_report(collector, duration_s, warmup_duration_s)
            self._set_phase(BenchmarkPhase.DONE)

            logger.info(
                f"✅ Benchmark complete: {self.report.successful_queries} succeeded, "
                f"{self.report.failed_queries} failed in {duration_s:.3f}s"
            )
            return self.report
        finally:
            await self._close_executor()

    async def _setup(self) -> None:
        try:
            await self.executor.setup()
        except Exception as e:
            self._set_phase(BenchmarkPhase.FATAL)
            logger.error("Query executor setup failed: %s", e)
            raise BenchmarkSetupError(f"Query executor setup failed: {e}") from e

    async def _close_executor(self) -> None:
        try:
            await self.executor.close()
        except Exception as e:
            logger.warning("Error closing query executor: %s", e)

    async def _warmup(self) -> float:
        """Run the warmup queries, discarding every outcome."""
        count = self.run_config.warmup_queries
        if count <= 0:
            return 0.0

        self._set_phase(BenchmarkPhase.WARMUP)
        logger.info(f"Running {count} warmup queries...")
        start = time.monotonic()
        await self._run_phase(count, None)
        elapsed = time.monotonic() - start
        logger.info(f"Completed warmups in {elapsed:.3f}s, starting benchmark...")
        return elapsed

    async def _run_phase(
        self, count: int, collector: Optional[SampleCollector]
    ) -> None:
        """
        Dispatch ``count`` logical queries through the pipeline.

        Args:
            count: Number of logical queries (indices 0..count-1)
            collector: Where outcomes go; None discards them (warmup)
        """
        if count <= 0:
            return

        self._completed = 0
        self._next_index = 0
        workers: List[asyncio.Task] = [
            asyncio.create_task(self._worker(count, collector))
            for _ in range(min(self.gate.capacity, count))
        ]
        try:
            await asyncio.gather(*workers)
        except asyncio.CancelledError:
            for t in workers:
                t.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

    async def _worker(
        self, total: int, collector: Optional[SampleCollector]
    ) -> None:
        """Pull logical query indices in order until all have been claimed."""
        while self._next_index < total:
            index = self._next_index
            self._next_index += 1
            await self._logical_query(index, total, collector)

    async def _logical_query(
        self,
        index: int,
        total: int,
        collector: Optional[SampleCollector],
    ) -> None:
        # Rate before concurrency: never hold a gate permit while waiting on the clock.
        await self.rate_limiter.acquire()
        async with self.gate:
            outcome = await self.retrying_executor.run(index, self.query_spec)

        if collector is None:
            if not outcome.ok:
                logger.debug("Warmup query %d failed: %s", index, outcome)
            return

        collector.record_outcome(outcome)
        self._report_progress(total)

    def _report_progress(self, total: int) -> None:
        """Count a completion and emit progress at batch boundaries."""
        self._completed += 1
        completed = self._completed
        every = self.run_config.progress_every
        if every <= 0:
            return
        if completed % every != 0 and completed != total:
            return

        logger.info(f"Completed {completed}/{total} queries")
        if self.progress_callback is not None:
            try:
                self.progress_callback(completed, total)
            except Exception as e:
                logger.warning("Progress callback error: %s", e)

    def _build_report(
        self,
        collector: SampleCollector,
        duration_s: float,
        warmup_duration_s: float,
    ) -> Report:
        samples = collector.snapshot()
        latency = reduce_samples(samples)
        successes = len(samples)
        throughput = successes / duration_s if duration_s > 0 else 0.0

        return Report(
            run_config=self.run_config,
            query_spec=self.query_spec,
            executor_name=self.executor_name,
            latency=latency,
            successful_queries=successes,
            failed_queries=collector.failure_count,
            failures_by_kind=collector.failures_by_kind(),
            sample_errors=collector.sample_errors,
            duration_s=duration_s,
            warmup_duration_s=warmup_duration_s,
            throughput_qps=throughput,
        )
