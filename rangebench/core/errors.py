"""
Exception types raised by the benchmark core.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rangebench.core.executor.types import FailureKind


class RangeBenchError(Exception):
    """Base class for fatal benchmark errors."""


class ConfigurationError(RangeBenchError):
    """Invalid run or query configuration."""


class BenchmarkSetupError(RangeBenchError):
    """The query executor could not be constructed or initialised."""


class QueryExecutionError(Exception):
    """
    A single query attempt failed.

    Raised by query executors; the retry wrapper turns it into an Outcome.
    """

    def __init__(self, kind: "FailureKind", message: str = ""):
        super().__init__(message or kind.value)
        self.kind = kind
        self.message = message or kind.value

    def __repr__(self) -> str:
        return f"QueryExecutionError(kind={self.kind.value!r}, message={self.message!r})"
