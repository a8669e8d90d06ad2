#!/usr/bin/env python3
"""Example: Violation Lifecycle

Runs the full service flow: register and approve a tool, log usage that
breaches policy, remediate the resulting violations, and produce a policy
effectiveness report.

Usage:
    python examples/02_violation_lifecycle.py

Requirements:
    pip install byoai-compliance
"""
from __future__ import annotations

import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import byoai_compliance as bc


def main() -> None:
    org = "org-demo"
    workdir = Path(tempfile.mkdtemp())
    service = bc.ComplianceService(audit=bc.AuditTrail(workdir / "audit.jsonl"))
    service.add_policies(
        bc.PolicyParser().parse_dict(
            {
                "policies": [
                    {**p, "organization_id": org}
                    for p in _template_policies("privacy_act_baseline")
                ]
            }
        )
    )

    admin = bc.Caller("u-admin", bc.Role.ADMIN)
    officer = bc.Caller("u-officer", bc.Role.COMPLIANCE_OFFICER)

    # Step 1: Register and approve a tool
    registered = service.register_tool(
        bc.Tool(name="Copilot", organization_id=org, deployment=bc.DeploymentModel.CLOUD),
        admin,
    )
    tool_id = registered.tool.tool_id
    service.review_tool(tool_id, officer, bc.ApprovalStatus.APPROVED)

    # Step 2: Log usage
    outcome = service.log_usage(
        "Patient diagnosis notes for Medicare 2123 45670 1",
        tool_id=tool_id,
        user_id="u-staff",
    )
    print(f"Decision: {outcome.decision.value}  blocked={outcome.blocked}")
    if outcome.block_reason:
        print(f"  {outcome.block_reason}")

    # Step 3: Remediate each violation
    for violation in outcome.violations:
        service.update_violation(
            violation.violation_id, officer, bc.RemediationStatus.UNDER_INVESTIGATION
        )
        result = service.update_violation(
            violation.violation_id, officer, bc.RemediationStatus.REMEDIATED, notes="Staff briefed"
        )
        print(f"  {violation.violation_type}: {result.violation.remediation_status.value}")

    # Step 4: Assess and report
    report = service.run_assessment("au_privacy_act", org, officer)
    print(f"\nPrivacy Act score: {report.score}/100")
    for item in report.recommendations:
        print(f"  [{item.priority.value}] {item.recommendation}")

    now = datetime.now(tz=timezone.utc)
    policy_report = service.policy_report(org, now - timedelta(days=30), now)
    summary = policy_report.summary
    print(f"\nBlocked {summary.blocked_requests} of {summary.total_usage} usage events")
    print(f"Audit records: {service.audit.count() if service.audit else 0}")


def _template_policies(name: str) -> list[dict[str, object]]:
    import yaml

    return list(yaml.safe_load(bc.get_template(name))["policies"])


if __name__ == "__main__":
    main()
