"""
Report Models

Immutable snapshot of a completed benchmark run. Built once by the
orchestrator from the frozen sample set and never mutated afterwards.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rangebench.models.run_config import QuerySpec, RunConfig

# Label -> fraction. Order is the rendering order.
PERCENTILES: Dict[str, float] = {
    "p50": 0.50,
    "p75": 0.75,
    "p90": 0.90,
    "p95": 0.95,
    "p99": 0.99,
    "p99.9": 0.999,
    "p99.99": 0.9999,
}


class LatencyStats(BaseModel):
    """Descriptive latency statistics in milliseconds."""

    count: int = Field(..., ge=1, description="Successful samples")
    min_ms: float = Field(..., description="Minimum latency")
    max_ms: float = Field(..., description="Maximum latency")
    mean_ms: float = Field(..., description="Arithmetic mean")
    stddev_ms: float = Field(..., description="Population standard deviation")
    percentiles: Dict[str, float] = Field(
        ..., description="Nearest-rank percentiles keyed by label (p50, p99.9, ...)"
    )
    p99_p50_ratio: Optional[float] = Field(
        None, description="p99 / p50 (None when p50 is zero)"
    )
    p999_p50_ratio: Optional[float] = Field(
        None, description="p99.9 / p50 (None when p50 is zero)"
    )

    model_config = ConfigDict(frozen=True)

    def percentile(self, label: str) -> float:
        return self.percentiles[label]


class Report(BaseModel):
    """
    Final benchmark report.

    ``latency`` is None when no logical query succeeded; in that case no
    percentile or ratio is reported at all.
    """

    run_config: RunConfig
    query_spec: QuerySpec
    executor_name: str = Field(..., description="Backend that served the queries")

    latency: Optional[LatencyStats] = Field(
        None, description="Latency statistics (None = no successful samples)"
    )

    successful_queries: int = Field(0, ge=0)
    failed_queries: int = Field(0, ge=0)
    failures_by_kind: Dict[str, int] = Field(default_factory=dict)
    sample_errors: List[str] = Field(
        default_factory=list, description="A few distinct failure messages"
    )

    duration_s: float = Field(0.0, ge=0, description="Measuring phase wall time")
    warmup_duration_s: float = Field(0.0, ge=0, description="Warmup wall time")
    throughput_qps: float = Field(
        0.0, ge=0, description="Successful queries per second of wall time"
    )

    model_config = ConfigDict(frozen=True)

    @property
    def has_latency_data(self) -> bool:
        return self.latency is not None

    @property
    def total_queries(self) -> int:
        return self.successful_queries + self.failed_queries
