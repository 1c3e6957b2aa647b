"""
Static helper functions for query execution.
"""

import asyncio
from typing import Any

from rangebench.core.errors import QueryExecutionError
from rangebench.core.executor.types import FailureKind


def classify_exception(exc: BaseException) -> FailureKind:
    """
    Return the failure category for an exception raised by an executor.

    Executors are expected to raise QueryExecutionError with an explicit kind;
    anything else is mapped by type so a misbehaving backend cannot crash the run.
    """
    if isinstance(exc, QueryExecutionError):
        return exc.kind
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return FailureKind.TIMEOUT
    # PermissionError and TimeoutError are OSError subclasses; check them first.
    if isinstance(exc, PermissionError):
        return FailureKind.UNAUTHORIZED
    if isinstance(exc, OSError):
        return FailureKind.TRANSIENT_NETWORK
    if isinstance(exc, (ValueError, TypeError)):
        return FailureKind.INVALID_REQUEST
    return FailureKind.OTHER


def describe_exception(exc: BaseException, *, max_chars: int = 300) -> str:
    """Short, single-line description of an exception for reports and logs."""
    if isinstance(exc, QueryExecutionError):
        text = exc.message
    else:
        text = str(exc) or type(exc).__name__
        if type(exc).__name__ not in text:
            text = f"{type(exc).__name__}: {text}"
    return truncate_str_for_log(" ".join(text.split()), max_chars=max_chars)


def truncate_str_for_log(value: Any, *, max_chars: int = 800) -> str:
    """Truncate a string value for logging."""
    text = str(value if value is not None else "")
    if len(text) > max_chars:
        return text[:max_chars] + "…[truncated]"
    return text
