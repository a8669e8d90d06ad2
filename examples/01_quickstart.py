#!/usr/bin/env python3
"""Example: Quickstart: byoai-compliance

Minimal working example: classify a prompt, score an AI tool, and evaluate
a usage event against a policy.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install byoai-compliance
"""
from __future__ import annotations

import byoai_compliance as bc


def main() -> None:
    print(f"byoai-compliance version: {bc.__version__}")

    # Step 1: Classify prompt text
    prompts = [
        "Draft a welcome email for new starters",
        "Summarise the salary review for the finance team",
        "Client TFN is 123 456 782, please lodge the return",
    ]
    print("\nClassification:")
    for prompt in prompts:
        result = bc.classify(prompt)
        print(f"  [{result.classification.value:<12}] {prompt}")

    # Step 2: Score a tool
    tool = bc.Tool(
        name="ChatGPT",
        vendor="OpenAI",
        deployment=bc.DeploymentModel.CLOUD,
        processes_personal_info=True,
        cross_border_disclosure=True,
        data_residency="US",
    )
    risk = bc.score(tool)
    print(f"\nRisk score for {tool.name}: {risk.overall_risk} ({risk.risk_tier.value})")
    for factor in risk.factors:
        print(f"  {factor.category:<24} {factor.score:>3} x {factor.weight:.2f}")

    # Step 3: Evaluate usage against a policy
    policies = bc.PolicyParser().parse_string(bc.get_template("restricted_data"))
    usage = bc.UsageEvent.from_prompt(
        prompts[2],
        tool_id=tool.tool_id,
        classifier=bc.SensitivityClassifier(),
        tool_approval_status=bc.ApprovalStatus.APPROVED,
    )
    result = bc.evaluate(policies, usage)
    print(f"\nDecision: {result.decision.value}")
    for violation in result.violations:
        print(f"  {violation.policy_name}: {violation.message}")


if __name__ == "__main__":
    main()
