"""
Data models for rangebench.

This package contains Pydantic models for:
- Query and run configuration
- The final benchmark report
"""

from rangebench.models.run_config import (
    Consistency,
    QuerySpec,
    RunConfig,
)

from rangebench.models.report import (
    PERCENTILES,
    LatencyStats,
    Report,
)

__all__ = [
    # run_config
    "Consistency",
    "QuerySpec",
    "RunConfig",
    # report
    "PERCENTILES",
    "LatencyStats",
    "Report",
]
