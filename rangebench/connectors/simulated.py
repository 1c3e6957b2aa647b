"""
Simulated query executor.

Sleeps for a configurable latency instead of calling a real backend and
reports the measured time of that sleep, so event loop delay shows up in the
results. Used for dry runs of the pipeline (``--simulate``) and in tests.
"""

import asyncio
import logging
import random
import time
from typing import Optional

from rangebench.core.errors import QueryExecutionError
from rangebench.core.executor.types import FailureKind
from rangebench.models import Consistency, QuerySpec

logger = logging.getLogger(__name__)


class SimulatedQueryExecutor:
    """In-process stand-in for a remote range query service."""

    name = "simulated"

    def __init__(
        self,
        latency_ms: float = 25.0,
        *,
        jitter_ms: float = 0.0,
        failure_rate: float = 0.0,
        failure_kind: FailureKind = FailureKind.TRANSIENT_NETWORK,
        seed: Optional[int] = None,
    ):
        if latency_ms < 0 or jitter_ms < 0:
            raise ValueError("latency_ms and jitter_ms must be >= 0")
        if not 0.0 <= failure_rate <= 1.0:
            raise ValueError("failure_rate must be within [0, 1]")
        self.latency_ms = float(latency_ms)
        self.jitter_ms = float(jitter_ms)
        self.failure_rate = float(failure_rate)
        self.failure_kind = failure_kind
        self._rng = random.Random(seed)
        self.calls = 0

    async def setup(self) -> None:
        logger.info(
            "Simulated executor: latency=%.1fms jitter=%.1fms failure_rate=%.2f",
            self.latency_ms,
            self.jitter_ms,
            self.failure_rate,
        )

    async def execute(
        self,
        spec: QuerySpec,
        consistency: Consistency,
        deadline: Optional[float],
    ) -> float:
        self.calls += 1
        latency_ms = self.latency_ms
        if self.jitter_ms:
            latency_ms = max(0.0, latency_ms + self._rng.uniform(-self.jitter_ms, self.jitter_ms))
        start = time.perf_counter()
        await asyncio.sleep(latency_ms / 1000.0)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if self.failure_rate and self._rng.random() < self.failure_rate:
            raise QueryExecutionError(
                self.failure_kind, f"simulated {self.failure_kind.value} failure"
            )
        return elapsed_ms

    async def close(self) -> None:
        return None
