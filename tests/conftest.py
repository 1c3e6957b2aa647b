"""
Shared pytest fixtures and test doubles for rangebench tests.

Provides:
- A ScriptedExecutor that replays a fixed script of attempt results
- A FakeClock for deterministic rate limiter tests
- Standard QuerySpec / RunConfig fixtures
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Sequence

import pytest

from rangebench.core.errors import QueryExecutionError
from rangebench.core.executor.types import FailureKind
from rangebench.models import Consistency, QuerySpec, RunConfig

HANG = "hang"


class ScriptedExecutor:
    """
    Query executor that replays ``script`` one item per attempt.

    Items:
    - float/int: succeed with that latency
    - FailureKind: raise QueryExecutionError of that kind
    - BaseException instance: raise it
    - HANG: never complete

    The last item repeats once the script is exhausted.
    """

    name = "scripted"

    def __init__(self, script: Sequence[Any], *, delay_s: float = 0.0):
        self.script = list(script)
        self.delay_s = delay_s
        self.calls = 0
        self.deadlines: list[Optional[float]] = []
        self.consistencies: list[Consistency] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self.setup_calls = 0
        self.closed = False

    async def setup(self) -> None:
        self.setup_calls += 1

    async def execute(
        self,
        spec: QuerySpec,
        consistency: Consistency,
        deadline: Optional[float],
    ) -> float:
        item = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        self.deadlines.append(deadline)
        self.consistencies.append(consistency)

        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay_s:
                await asyncio.sleep(self.delay_s)
            if isinstance(item, FailureKind):
                raise QueryExecutionError(item, f"scripted {item.value}")
            if isinstance(item, BaseException):
                raise item
            if item == HANG:
                await asyncio.Event().wait()
            return float(item)
        finally:
            self.in_flight -= 1

    async def close(self) -> None:
        self.closed = True


class FailingSetupExecutor(ScriptedExecutor):
    """Executor whose setup always fails."""

    async def setup(self) -> None:
        self.setup_calls += 1
        raise RuntimeError("cannot construct client")


class FakeClock:
    """Manually advanced monotonic clock with an instantaneous sleep."""

    def __init__(self, start: float = 100.0, oversleep: float = 0.0):
        self.now = start
        self.oversleep = oversleep
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, delay: float) -> None:
        self.sleeps.append(delay)
        self.now += delay + self.oversleep


@pytest.fixture
def query_spec() -> QuerySpec:
    return QuerySpec(
        table_name="orders",
        partition_key="customer_id",
        partition_value="c-42",
        sort_key="order_date",
        sort_start="2024-01-01",
        sort_end="2024-12-31",
    )


@pytest.fixture
def fast_config() -> RunConfig:
    """Unlimited rate, no warmup, no progress output."""
    return RunConfig(
        num_queries=20,
        warmup_queries=0,
        qps=0,
        parallelism=4,
        max_retries=0,
        timeout_ms=0,
        progress_every=0,
    )
