"""
Tests for the latency statistics reducer.

Percentiles use nearest rank: index = ceil(f * n) - 1 clamped to [0, n - 1].
"""

from __future__ import annotations

import itertools
import math
import random

import pytest

from rangebench.core.statistics import nearest_rank, nearest_rank_index, reduce_samples
from rangebench.models import PERCENTILES


class TestNearestRank:
    """Tests for the rank formula."""

    def test_median_of_five(self) -> None:
        assert nearest_rank_index(5, 0.5) == 2
        assert nearest_rank([10, 20, 30, 40, 50], 0.5) == 30.0

    def test_index_is_clamped(self) -> None:
        assert nearest_rank_index(5, 0.0) == 0
        assert nearest_rank_index(5, 1.0) == 4
        assert nearest_rank_index(5, 1.5) == 4
        assert nearest_rank_index(1, 0.9999) == 0

    def test_upper_percentiles_of_five(self) -> None:
        values = [10, 20, 30, 40, 50]
        assert nearest_rank(values, 0.75) == 40.0  # ceil(3.75) - 1 = 3
        assert nearest_rank(values, 0.90) == 50.0  # ceil(4.5) - 1 = 4
        assert nearest_rank(values, 0.99) == 50.0

    def test_empty_input(self) -> None:
        assert nearest_rank([], 0.5) is None
        with pytest.raises(ValueError):
            nearest_rank_index(0, 0.5)


class TestReduceSamples:
    """Tests for reduce_samples()."""

    def test_basic_example(self) -> None:
        stats = reduce_samples([10, 20, 30, 40, 50])

        assert stats is not None
        assert stats.count == 5
        assert stats.min_ms == 10.0
        assert stats.max_ms == 50.0
        assert stats.mean_ms == 30.0
        assert stats.percentile("p50") == 30.0
        assert stats.percentile("p75") == 40.0
        assert stats.percentile("p99.99") == 50.0
        # Population stddev: sqrt(200)
        assert stats.stddev_ms == pytest.approx(math.sqrt(200.0))

    def test_population_stddev(self) -> None:
        stats = reduce_samples([2, 4, 4, 4, 5, 5, 7, 9])

        assert stats is not None
        assert stats.mean_ms == 5.0
        assert stats.stddev_ms == pytest.approx(2.0)

    def test_all_percentile_labels_present(self) -> None:
        stats = reduce_samples([1.0, 2.0, 3.0])

        assert stats is not None
        assert list(stats.percentiles) == list(PERCENTILES)
        assert list(PERCENTILES) == [
            "p50",
            "p75",
            "p90",
            "p95",
            "p99",
            "p99.9",
            "p99.99",
        ]

    def test_order_independent(self) -> None:
        samples = [10.0, 20.0, 30.0, 40.0, 50.0]
        expected = reduce_samples(samples)

        for perm in itertools.permutations(samples):
            assert reduce_samples(perm) == expected

    def test_shuffled_large_input_is_deterministic(self) -> None:
        rng = random.Random(1234)
        samples = [rng.uniform(1.0, 500.0) for _ in range(2000)]
        shuffled = list(samples)
        rng.shuffle(shuffled)

        assert reduce_samples(samples) == reduce_samples(shuffled)

    def test_does_not_mutate_input(self) -> None:
        samples = [30.0, 10.0, 20.0]
        reduce_samples(samples)
        assert samples == [30.0, 10.0, 20.0]

    def test_tail_ratios(self) -> None:
        # 100 samples: rank 49 (p50) is 40, ranks 98-99 (p99+) are 120.
        samples = [40.0] * 50 + [100.0] * 48 + [120.0] * 2

        stats = reduce_samples(samples)

        assert stats is not None
        assert stats.percentile("p50") == 40.0
        assert stats.percentile("p99") == 120.0
        assert stats.p99_p50_ratio == pytest.approx(3.0)
        assert stats.p999_p50_ratio == pytest.approx(3.0)

    def test_zero_p50_ratio_is_undefined(self) -> None:
        stats = reduce_samples([0.0, 0.0, 0.0, 5.0])

        assert stats is not None
        assert stats.percentile("p50") == 0.0
        assert stats.p99_p50_ratio is None
        assert stats.p999_p50_ratio is None

    def test_constant_samples(self) -> None:
        stats = reduce_samples([25.0] * 20)

        assert stats is not None
        assert stats.min_ms == stats.max_ms == stats.mean_ms == 25.0
        assert stats.stddev_ms == 0.0
        assert set(stats.percentiles.values()) == {25.0}
        assert stats.p99_p50_ratio == 1.0

    def test_empty_input_means_no_data(self) -> None:
        assert reduce_samples([]) is None
        assert reduce_samples(iter(())) is None
