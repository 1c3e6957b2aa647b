"""
Benchmark Configuration Models

Defines Pydantic models for a benchmark run:
- QuerySpec: the range query issued on every logical query
- RunConfig: counts, pacing, concurrency and retry policy
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Consistency(str, Enum):
    """Read consistency mode requested from the backend."""

    STRONG = "strong"
    EVENTUAL = "eventual"


class QuerySpec(BaseModel):
    """
    Immutable descriptor of the range query under test.

    The partition key is always matched by equality. The sort key condition is
    derived from whichever bounds are set (both, lower only, upper only, none).
    """

    table_name: str = Field(..., min_length=1, description="Table / resource name")
    partition_key: str = Field(..., min_length=1, description="Partition key name")
    partition_value: str = Field(..., description="Partition key value")
    sort_key: Optional[str] = Field(None, description="Sort key name")
    sort_start: Optional[str] = Field(None, description="Inclusive lower bound")
    sort_end: Optional[str] = Field(None, description="Inclusive upper bound")
    consistency: Consistency = Field(
        Consistency.EVENTUAL, description="Read consistency mode"
    )

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_sort_bounds(self):
        """Sort bounds are meaningless without a sort key name."""
        has_bound = self.sort_start is not None or self.sort_end is not None
        if has_bound and not self.sort_key:
            raise ValueError("sort_start/sort_end require sort_key")
        return self

    @property
    def is_range_query(self) -> bool:
        return bool(self.sort_key) and (
            self.sort_start is not None or self.sort_end is not None
        )

    def describe(self) -> str:
        """One-line human readable summary used in banners and reports."""
        text = f"{self.table_name}: {self.partition_key} = {self.partition_value}"
        if self.is_range_query:
            lower = self.sort_start if self.sort_start is not None else "-inf"
            upper = self.sort_end if self.sort_end is not None else "+inf"
            text += f", {self.sort_key} in [{lower}, {upper}]"
        return text


class RunConfig(BaseModel):
    """
    Immutable run parameters shared read-only by every worker.
    """

    num_queries: int = Field(100, ge=0, description="Measured logical queries")
    warmup_queries: int = Field(10, ge=0, description="Discarded warmup queries")
    qps: float = Field(10.0, ge=0, description="Target start rate (0=unlimited)")
    parallelism: int = Field(1, ge=1, description="Max in-flight queries")
    max_retries: int = Field(0, ge=0, description="Retries per logical query")
    timeout_ms: float = Field(
        0, ge=0, description="Per-attempt timeout in ms (0=unbounded)"
    )
    pool_size: int = Field(10, ge=1, description="Connection pool size")
    progress_every: int = Field(
        10, ge=0, description="Log progress every N completions (0=off)"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def timeout_seconds(self) -> Optional[float]:
        if self.timeout_ms <= 0:
            return None
        return self.timeout_ms / 1000.0

    @property
    def rate_limited(self) -> bool:
        return self.qps > 0
