"""
rangebench - command line entry point.

Builds the run/query configuration from flags, constructs the query executor,
runs the benchmark and prints the report.

Exit codes: 0 report printed (even with failed queries), 1 setup or
configuration failure, 2 usage error, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from rangebench.config import settings
from rangebench.connectors import DynamoDBQueryExecutor, SimulatedQueryExecutor
from rangebench.core.errors import ConfigurationError, RangeBenchError
from rangebench.core.executor.types import QueryExecutor
from rangebench.core.orchestrator import BenchmarkOrchestrator
from rangebench.core.report import render_report
from rangebench.models import Consistency, QuerySpec, Report, RunConfig

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rangebench",
        description="Range query latency benchmark",
    )
    target = parser.add_argument_group("query target")
    target.add_argument("-t", "--table", required=True, help="Table name.")
    target.add_argument("-p", "--partition-key", required=True, help="Partition key name.")
    target.add_argument("-P", "--partition-value", required=True, help="Partition key value.")
    target.add_argument("-s", "--sort-key", default=None, help="Sort key name.")
    target.add_argument("-S", "--sort-start", default=None, help="Sort key start value (inclusive).")
    target.add_argument("-E", "--sort-end", default=None, help="Sort key end value (inclusive).")
    target.add_argument(
        "--consistent-read",
        action="store_true",
        help="Use strongly consistent reads (default: eventual).",
    )
    target.add_argument("-r", "--region", default=settings.AWS_REGION, help="AWS region.")
    target.add_argument("--profile", default=settings.AWS_PROFILE, help="AWS profile name.")
    target.add_argument(
        "--endpoint-url",
        default=settings.DYNAMODB_ENDPOINT_URL,
        help="DynamoDB endpoint override (e.g. DynamoDB Local).",
    )

    run = parser.add_argument_group("run")
    run.add_argument(
        "-n",
        "--num-queries",
        type=int,
        default=settings.DEFAULT_NUM_QUERIES,
        help="Number of measured queries.",
    )
    run.add_argument(
        "-w",
        "--warmup-queries",
        type=int,
        default=settings.DEFAULT_WARMUP_QUERIES,
        help="Warmup queries run (and discarded) before measuring.",
    )
    run.add_argument(
        "--qps",
        type=float,
        default=settings.DEFAULT_QPS,
        help="Query start rate limit (0 = unlimited).",
    )
    run.add_argument(
        "-k",
        "--parallelism",
        type=int,
        default=settings.DEFAULT_PARALLELISM,
        help="Maximum concurrent in-flight queries.",
    )
    run.add_argument("--max-retries", type=int, default=0, help="Retries per query.")
    run.add_argument(
        "--timeout-ms",
        type=float,
        default=0,
        help="Per-attempt timeout in milliseconds (0 = none).",
    )
    run.add_argument(
        "--pool-size",
        type=int,
        default=settings.DEFAULT_POOL_SIZE,
        help="HTTP connection pool size.",
    )
    run.add_argument(
        "--progress-every",
        type=int,
        default=settings.DEFAULT_PROGRESS_EVERY,
        help="Log progress every N completed queries (0 = off).",
    )

    output = parser.add_argument_group("output")
    output.add_argument("--format", choices=("text", "json"), default="text")
    output.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        type=str.upper,
    )

    sim = parser.add_argument_group("simulation")
    sim.add_argument(
        "--simulate",
        action="store_true",
        help="Use an in-process simulated backend instead of DynamoDB.",
    )
    sim.add_argument("--simulate-latency-ms", type=float, default=25.0)
    sim.add_argument("--simulate-jitter-ms", type=float, default=0.0)
    sim.add_argument("--simulate-failure-rate", type=float, default=0.0)
    return parser


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level),
        format=settings.LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(settings.LOG_FILE)
            if settings.LOG_FILE
            else logging.NullHandler(),
        ],
    )
    # Suppress verbose AWS SDK internals
    for name in ("botocore", "boto3", "urllib3"):
        logging.getLogger(name).setLevel(logging.WARNING)


def build_configs(args: argparse.Namespace) -> tuple[QuerySpec, RunConfig]:
    """Build validated QuerySpec and RunConfig from parsed arguments."""
    try:
        spec = QuerySpec(
            table_name=args.table,
            partition_key=args.partition_key,
            partition_value=args.partition_value,
            sort_key=args.sort_key,
            sort_start=args.sort_start,
            sort_end=args.sort_end,
            consistency=Consistency.STRONG if args.consistent_read else Consistency.EVENTUAL,
        )
        run_config = RunConfig(
            num_queries=args.num_queries,
            warmup_queries=args.warmup_queries,
            qps=args.qps,
            parallelism=args.parallelism,
            max_retries=args.max_retries,
            timeout_ms=args.timeout_ms,
            pool_size=args.pool_size,
            progress_every=args.progress_every,
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
    return spec, run_config


def build_executor(args: argparse.Namespace, run_config: RunConfig) -> QueryExecutor:
    if args.simulate:
        try:
            return SimulatedQueryExecutor(
                args.simulate_latency_ms,
                jitter_ms=args.simulate_jitter_ms,
                failure_rate=args.simulate_failure_rate,
            )
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
    # A socket read never outlives the attempt that issued it.
    read_timeout = settings.DYNAMODB_READ_TIMEOUT_SECONDS
    if run_config.timeout_seconds is not None:
        read_timeout = min(read_timeout, run_config.timeout_seconds)
    return DynamoDBQueryExecutor(
        region=args.region,
        profile=args.profile,
        endpoint_url=args.endpoint_url,
        pool_size=run_config.pool_size,
        max_in_flight=run_config.parallelism,
        read_timeout=read_timeout,
    )


async def run_benchmark(args: argparse.Namespace) -> Report:
    spec, run_config = build_configs(args)
    executor = build_executor(args, run_config)
    orchestrator = BenchmarkOrchestrator(executor, spec, run_config)
    return await orchestrator.run()


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)
    try:
        report = asyncio.run(run_benchmark(args))
    except RangeBenchError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("interrupted", file=sys.stderr)
        return 130

    print(render_report(report, args.format))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
