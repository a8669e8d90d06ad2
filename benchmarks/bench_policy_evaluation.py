"""Benchmark: policy evaluation throughput, evaluations per second.

Measures how many PolicyEvaluator.evaluate() calls can be completed per
second against the Privacy Act baseline policy set plus usage limits.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from byoai_compliance.detection.classifier import DataClassification
from byoai_compliance.policies.engine import PolicyEvaluator
from byoai_compliance.policies.parser import PolicyParser
from byoai_compliance.registry.tool import ApprovalStatus
from byoai_compliance.registry.usage import UsageEvent
from byoai_compliance.templates.policy_templates import get_template

_ITERATIONS: int = 10_000


def bench_policy_evaluation_throughput() -> dict[str, object]:
    """Benchmark PolicyEvaluator.evaluate() throughput.

    Returns
    -------
    dict with keys: operation, iterations, total_seconds, ops_per_second,
    avg_latency_ms, p99_latency_ms, memory_peak_mb.
    """
    parser = PolicyParser()
    policies = parser.parse_string(get_template("privacy_act_baseline"))
    policies += parser.parse_string(get_template("usage_limits"))
    evaluator = PolicyEvaluator()
    usage = UsageEvent(
        tool_id="tool-bench",
        data_classification=DataClassification.INTERNAL,
        tool_approval_status=ApprovalStatus.APPROVED,
        contains_personal_info=True,
        prompt_token_count=9_000,
    )

    start = time.perf_counter()
    for _ in range(_ITERATIONS):
        evaluator.evaluate(policies, usage)
    total = time.perf_counter() - start

    result: dict[str, object] = {
        "operation": "policy_evaluation_throughput",
        "iterations": _ITERATIONS,
        "total_seconds": round(total, 4),
        "ops_per_second": round(_ITERATIONS / total, 1),
        "avg_latency_ms": round(total / _ITERATIONS * 1000, 4),
        "p99_latency_ms": 0.0,
        "memory_peak_mb": 0.0,
    }
    print(
        f"[bench_policy_evaluation] {result['operation']}: "
        f"{result['ops_per_second']:,.0f} ops/sec  "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    """Entry point returning the benchmark result dict."""
    return bench_policy_evaluation_throughput()


if __name__ == "__main__":
    result = run_benchmark()
    results_dir = Path(__file__).parent / "results"
    results_dir.mkdir(exist_ok=True)
    output_path = results_dir / "policy_evaluation_baseline.json"
    with open(output_path, "w", encoding="utf-8") as fh:
        json.dump(result, fh, indent=2)
    print(f"Results saved to {output_path}")
