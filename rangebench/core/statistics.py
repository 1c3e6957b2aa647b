"""
Latency statistics reducer.

Pure functions turning a set of latency samples into a LatencyStats block.

Percentiles use the nearest-rank definition on the ascending-sorted samples:

    index = ceil(f * n) - 1, clamped to [0, n - 1]

so every reported percentile is an observed sample and the result is
reproducible regardless of input order. The standard deviation is the
population standard deviation (divide by n, not n - 1).
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Sequence

from rangebench.models import PERCENTILES, LatencyStats


def nearest_rank_index(n: int, fraction: float) -> int:
    """
    Index into an ascending-sorted sequence of length ``n`` for ``fraction``.

    Example:
        >>> nearest_rank_index(5, 0.5)
        2
        >>> nearest_rank_index(5, 0.0)
        0
    """
    if n <= 0:
        raise ValueError("n must be positive")
    idx = math.ceil(fraction * n) - 1
    return max(0, min(n - 1, idx))


def nearest_rank(sorted_values: Sequence[float], fraction: float) -> Optional[float]:
    """
    Nearest-rank percentile of pre-sorted values, or None if input is empty.

    Example:
        >>> nearest_rank([10, 20, 30, 40, 50], 0.5)
        30.0
    """
    if not sorted_values:
        return None
    return float(sorted_values[nearest_rank_index(len(sorted_values), fraction)])


def _ratio(numerator: float, denominator: float) -> Optional[float]:
    if denominator == 0:
        return None
    return numerator / denominator


def reduce_samples(samples: Iterable[float]) -> Optional[LatencyStats]:
    """
    Compute descriptive and percentile statistics for latency samples (ms).

    Returns None when there are no samples; callers treat that as
    "no latency data" and must not report percentiles or ratios.
    """
    ordered = sorted(float(s) for s in samples)
    n = len(ordered)
    if n == 0:
        return None

    mean = math.fsum(ordered) / n
    variance = math.fsum((x - mean) ** 2 for x in ordered) / n
    stddev = math.sqrt(variance)

    percentiles = {
        label: ordered[nearest_rank_index(n, fraction)]
        for label, fraction in PERCENTILES.items()
    }
    p50 = percentiles["p50"]

    return LatencyStats(
        count=n,
        min_ms=ordered[0],
        max_ms=ordered[-1],
        mean_ms=mean,
        stddev_ms=stddev,
        percentiles=percentiles,
        p99_p50_ratio=_ratio(percentiles["p99"], p50),
        p999_p50_ratio=_ratio(percentiles["p99.9"], p50),
    )
