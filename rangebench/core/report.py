"""
Report rendering.

Text and JSON renditions of a benchmark Report. The layout is for humans;
only the numeric values are meaningful.
"""

import json
from typing import List, Optional

from rangebench.models import PERCENTILES, Report

NO_DATA_MESSAGE = "No successful samples: latency statistics unavailable"
UNDEFINED = "undefined"


def _fmt_ms(value: float) -> str:
    return f"{value:.3f}"


def _fmt_ratio(value: Optional[float]) -> str:
    if value is None:
        return UNDEFINED
    return f"{value:.2f}x"


def render_text(report: Report) -> str:
    """Render a report as a human readable text block."""
    cfg = report.run_config
    spec = report.query_spec
    qps = f"{cfg.qps:g}" if cfg.rate_limited else "unlimited"
    timeout = f"{cfg.timeout_ms:g} ms" if cfg.timeout_seconds else "none"

    lines: List[str] = [
        "",
        "Benchmark Configuration:",
        f"  Executor: {report.executor_name}",
        f"  Query: {spec.describe()}",
        f"  Consistency: {spec.consistency.value}",
        f"  Parallelism: {cfg.parallelism}, QPS: {qps}",
        f"  Max retries: {cfg.max_retries}, Timeout: {timeout}",
        "",
        f"Queries: {report.total_queries} "
        f"({report.successful_queries} succeeded, {report.failed_queries} failed)",
    ]

    if report.failures_by_kind:
        lines.append("Failures by kind:")
        for kind, count in sorted(report.failures_by_kind.items()):
            lines.append(f"  {kind}: {count}")
    if report.sample_errors:
        lines.append("Sample errors:")
        for message in report.sample_errors:
            lines.append(f"  {message}")

    lines.append("")
    stats = report.latency
    if stats is None:
        lines.append(NO_DATA_MESSAGE)
    else:
        lines.extend(
            [
                "Latency Statistics (milliseconds):",
                f"Min: {_fmt_ms(stats.min_ms)}",
                f"Max: {_fmt_ms(stats.max_ms)}",
                f"Mean: {_fmt_ms(stats.mean_ms)}",
                f"Stddev: {_fmt_ms(stats.stddev_ms)}",
                "",
                "Percentiles:",
            ]
        )
        for label in PERCENTILES:
            lines.append(f"{label}: {_fmt_ms(stats.percentile(label))}")
        lines.extend(
            [
                "",
                "Tail ratios:",
                f"p99/p50: {_fmt_ratio(stats.p99_p50_ratio)}",
                f"p99.9/p50: {_fmt_ratio(stats.p999_p50_ratio)}",
            ]
        )

    lines.extend(
        [
            "",
            f"Warmup duration: {report.warmup_duration_s:.3f} s",
            f"Total duration: {report.duration_s:.3f} s",
            f"Throughput: {report.throughput_qps:.1f} queries/second",
        ]
    )
    return "\n".join(lines)


def render_json(report: Report) -> str:
    """Render a report as JSON (model dump plus derived fields)."""
    payload = report.model_dump(mode="json")
    payload["has_latency_data"] = report.has_latency_data
    payload["total_queries"] = report.total_queries
    return json.dumps(payload, indent=2)


def render_report(report: Report, output_format: str = "text") -> str:
    if output_format == "json":
        return render_json(report)
    if output_format == "text":
        return render_text(report)
    raise ValueError(f"Unknown report format: {output_format!r}")
