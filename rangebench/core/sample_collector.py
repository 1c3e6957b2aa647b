"""
Sample Collector

Accumulates successful latencies and failure tallies written concurrently by
many workers, then hands a frozen snapshot to the statistics reducer.
"""

import logging
import threading
from collections import Counter
from typing import Dict, List, Tuple

from rangebench.core.executor.types import Failure, Outcome, Success

logger = logging.getLogger(__name__)


class SampleCollector:
    """
    Append-only, thread-safe sample set.

    Features:
    - ``record`` is safe under arbitrary interleaving (event loop tasks or threads)
    - ``freeze`` rejects further writes before reduction
    - failure counts by kind plus a handful of distinct error messages
    """

    def __init__(self, capacity: int | None = None, max_sample_errors: int = 5):
        """
        Initialize sample collector.

        Args:
            capacity: Upper bound on recorded outcomes (None = unbounded)
            max_sample_errors: Distinct failure messages kept for the report
        """
        self.capacity = capacity
        self.max_sample_errors = max_sample_errors

        self._lock = threading.Lock()
        self._samples: List[float] = []
        self._failures: Counter[str] = Counter()
        self._sample_errors: List[str] = []
        self._frozen = False

    def _check_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("SampleCollector is frozen")
        if self.capacity is not None and self._recorded() >= self.capacity:
            raise RuntimeError(
                f"SampleCollector capacity exceeded ({self.capacity} outcomes)"
            )

    def _recorded(self) -> int:
        return len(self._samples) + sum(self._failures.values())

    def record(self, latency_ms: float) -> None:
        """Append one successful latency in milliseconds."""
        with self._lock:
            self._check_writable()
            self._samples.append(float(latency_ms))

    def record_failure(self, failure: Failure) -> None:
        """Count one exhausted or non-retryable logical query."""
        with self._lock:
            self._check_writable()
            self._failures[failure.kind.value] += 1
            message = failure.message
            if (
                message
                and message not in self._sample_errors
                and len(self._sample_errors) < self.max_sample_errors
            ):
                self._sample_errors.append(message)

    def record_outcome(self, outcome: Outcome) -> None:
        if isinstance(outcome, Success):
            self.record(outcome.latency_ms)
        else:
            self.record_failure(outcome)

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def snapshot(self) -> Tuple[float, ...]:
        """Return a materialized copy of all recorded latencies."""
        with self._lock:
            return tuple(self._samples)

    def failures_by_kind(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._failures)

    @property
    def sample_errors(self) -> List[str]:
        with self._lock:
            return list(self._sample_errors)

    @property
    def success_count(self) -> int:
        with self._lock:
            return len(self._samples)

    @property
    def failure_count(self) -> int:
        with self._lock:
            return sum(self._failures.values())

    def __len__(self) -> int:
        return self.success_count
