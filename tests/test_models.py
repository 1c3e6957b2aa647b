"""
Tests for the configuration and report models.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rangebench.models import Consistency, QuerySpec, RunConfig


class TestQuerySpec:
    """Tests for QuerySpec validation and helpers."""

    def test_defaults_to_eventual_consistency(self) -> None:
        spec = QuerySpec(table_name="t", partition_key="pk", partition_value="v")

        assert spec.consistency == Consistency.EVENTUAL
        assert not spec.is_range_query
        assert spec.describe() == "t: pk = v"

    def test_open_ended_range(self) -> None:
        spec = QuerySpec(
            table_name="t",
            partition_key="pk",
            partition_value="v",
            sort_key="sk",
            sort_start="a",
        )

        assert spec.is_range_query
        assert spec.describe() == "t: pk = v, sk in [a, +inf]"

    def test_bounds_require_sort_key(self) -> None:
        with pytest.raises(ValidationError):
            QuerySpec(
                table_name="t",
                partition_key="pk",
                partition_value="v",
                sort_end="z",
            )

    def test_is_immutable(self, query_spec: QuerySpec) -> None:
        with pytest.raises(ValidationError):
            query_spec.partition_value = "other"


class TestRunConfig:
    """Tests for RunConfig bounds and derived values."""

    def test_defaults(self) -> None:
        config = RunConfig()

        assert config.num_queries == 100
        assert config.warmup_queries == 10
        assert config.parallelism == 1
        assert config.timeout_seconds is None
        assert config.rate_limited

    def test_timeout_seconds(self) -> None:
        assert RunConfig(timeout_ms=250).timeout_seconds == pytest.approx(0.25)

    def test_unlimited_rate(self) -> None:
        assert not RunConfig(qps=0).rate_limited

    @pytest.mark.parametrize(
        "field, value",
        [
            ("num_queries", -1),
            ("warmup_queries", -1),
            ("qps", -5),
            ("parallelism", 0),
            ("max_retries", -1),
            ("timeout_ms", -1),
            ("pool_size", 0),
        ],
    )
    def test_rejects_out_of_range(self, field: str, value: float) -> None:
        with pytest.raises(ValidationError):
            RunConfig(**{field: value})

    def test_is_immutable(self) -> None:
        config = RunConfig()
        with pytest.raises(ValidationError):
            config.parallelism = 10
