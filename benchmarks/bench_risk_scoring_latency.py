"""Benchmark: risk scoring latency, per-call p99.

Measures the per-call latency of RiskScorer.score() on a cloud tool that
trips every factor, capturing the latency distribution.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from byoai_compliance.registry.tool import ApprovalStatus, DeploymentModel, Tool
from byoai_compliance.risk.scorer import RiskScorer

_WARMUP: int = 100
_ITERATIONS: int = 5_000


def _make_tool() -> Tool:
    """Build a tool that exercises every scoring branch."""
    return Tool(
        name="bench-tool",
        vendor="Unverified",
        deployment=DeploymentModel.CLOUD,
        processes_personal_info=True,
        processes_sensitive_info=True,
        cross_border_disclosure=True,
        data_residency="US",
        vendor_compliance_verified=False,
        approval_status=ApprovalStatus.UNDER_REVIEW,
    )


def bench_risk_scoring_latency() -> dict[str, object]:
    """Benchmark RiskScorer.score() per-call latency.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    scorer = RiskScorer()
    tool = _make_tool()

    for _ in range(_WARMUP):
        scorer.score(tool)

    latencies_ms: list[float] = []
    for _ in range(_ITERATIONS):
        t0 = time.perf_counter()
        scorer.score(tool)
        latencies_ms.append((time.perf_counter() - t0) * 1000)

    sorted_lats = sorted(latencies_ms)
    n = len(sorted_lats)
    total = sum(latencies_ms) / 1000

    result: dict[str, object] = {
        "operation": "risk_scoring_latency",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(sum(latencies_ms) / n, 4),
        "p99_latency_ms": round(sorted_lats[min(int(n * 0.99), n - 1)], 4),
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_risk_scoring_latency] {result['operation']}: "
        f"p99={result['p99_latency_ms']:.4f}ms  "
        f"mean={result['avg_latency_ms']:.4f}ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_risk_scoring_latency()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "scoring_latency_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
