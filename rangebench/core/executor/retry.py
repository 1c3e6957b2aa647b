"""
Retry/timeout wrapper around a QueryExecutor.

One call to ``RetryingExecutor.run`` is one logical query: up to
``1 + max_retries`` back-to-back attempts, each optionally bounded by a
timeout, resolving to exactly one Outcome.
"""

import asyncio
import logging
import time
from typing import Optional

from rangebench.core.errors import QueryExecutionError
from rangebench.core.executor.helpers import classify_exception, describe_exception
from rangebench.core.executor.types import (
    Failure,
    FailureKind,
    Outcome,
    QueryExecutor,
    Success,
)
from rangebench.models import QuerySpec

logger = logging.getLogger(__name__)


def _discard_result(task: "asyncio.Future[float]") -> None:
    # Abandoned attempts may still finish or fail later; mark the result retrieved.
    if not task.cancelled():
        task.exception()


class RetryingExecutor:
    """
    Applies the per-attempt timeout and bounded retry policy.

    Only the latency of the successful attempt is reported; failed attempts
    contribute to the attempt count only.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        *,
        timeout_ms: float = 0,
        max_retries: int = 0,
    ):
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if timeout_ms < 0:
            raise ValueError("timeout_ms must be >= 0")
        self.executor = executor
        self.timeout_ms = float(timeout_ms)
        self.max_retries = int(max_retries)

    @property
    def max_attempts(self) -> int:
        return 1 + self.max_retries

    @property
    def timeout_seconds(self) -> Optional[float]:
        if self.timeout_ms <= 0:
            return None
        return self.timeout_ms / 1000.0

    async def run(self, index: int, spec: QuerySpec) -> Outcome:
        """
        Execute logical query ``index`` and return its terminal outcome.

        Never raises for query failures; only task cancellation propagates.
        """
        last_kind = FailureKind.OTHER
        last_message = ""
        attempts = 0

        while attempts < self.max_attempts:
            attempts += 1
            try:
                latency_ms = await self._attempt(spec)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                last_kind = classify_exception(e)
                last_message = describe_exception(e)
                logger.debug(
                    "Query %d attempt %d/%d failed (%s): %s",
                    index,
                    attempts,
                    self.max_attempts,
                    last_kind.value,
                    last_message,
                )
                if not last_kind.is_retryable:
                    break
                continue

            return Success(index=index, latency_ms=latency_ms, attempts=attempts)

        return Failure(
            index=index,
            kind=last_kind,
            attempts_made=attempts,
            message=last_message,
        )

    async def _attempt(self, spec: QuerySpec) -> float:
        """Run a single attempt, abandoning it once the timeout expires."""
        timeout = self.timeout_seconds
        if timeout is None:
            return float(await self.executor.execute(spec, spec.consistency, None))

        deadline = time.monotonic() + timeout
        task = asyncio.ensure_future(
            self.executor.execute(spec, spec.consistency, deadline)
        )
        try:
            done, _ = await asyncio.wait({task}, timeout=timeout)
        except asyncio.CancelledError:
            task.cancel()
            raise

        if not done:
            # Stop waiting without awaiting the cancellation itself.
            task.cancel()
            task.add_done_callback(_discard_result)
            raise QueryExecutionError(
                FailureKind.TIMEOUT, f"attempt exceeded {self.timeout_ms:g} ms"
            )
        return float(task.result())
