"""
Type definitions for query execution.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Union

from rangebench.models import Consistency, QuerySpec


class FailureKind(str, Enum):
    """Stable, low-cardinality category for a failed query attempt."""

    THROTTLED = "throttled"
    TIMEOUT = "timeout"
    TRANSIENT_NETWORK = "transient_network"
    INVALID_REQUEST = "invalid_request"
    UNAUTHORIZED = "unauthorized"
    OTHER = "other"

    @property
    def is_retryable(self) -> bool:
        return self in _RETRYABLE_KINDS


_RETRYABLE_KINDS = frozenset(
    {FailureKind.THROTTLED, FailureKind.TRANSIENT_NETWORK, FailureKind.TIMEOUT}
)


@dataclass(frozen=True)
class Success:
    """Terminal outcome of a logical query that eventually succeeded."""

    index: int
    latency_ms: float
    attempts: int = 1

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """Terminal outcome of a logical query that never succeeded."""

    index: int
    kind: FailureKind
    attempts_made: int
    message: str = ""

    @property
    def ok(self) -> bool:
        return False


Outcome = Union[Success, Failure]


class QueryExecutor(Protocol):
    """
    Backend that performs one remote range query per call.

    ``execute`` returns the attempt latency in milliseconds or raises
    QueryExecutionError. ``deadline`` is a ``time.monotonic()`` instant after
    which the caller stops waiting, or None when unbounded.
    """

    name: str

    async def setup(self) -> None: ...

    async def execute(
        self,
        spec: QuerySpec,
        consistency: Consistency,
        deadline: Optional[float],
    ) -> float: ...

    async def close(self) -> None: ...
