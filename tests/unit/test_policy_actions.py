"""Unit tests for policies/actions.py: enforcement and auto-remediation."""
from __future__ import annotations

from pathlib import Path

import pytest

from byoai_compliance.audit.trail import AuditTrail
from byoai_compliance.policies.actions import (
    EnforcementActionType,
    PolicyActionHandler,
    PolicyBlockedError,
    enforce,
    remediation_actions_for,
)
from byoai_compliance.policies.engine import EvaluationResult, PolicyEvaluator
from byoai_compliance.policies.model import Decision, EnforcementLevel, Policy
from byoai_compliance.policies.rules import BlockTarget, BooleanBlockRule
from byoai_compliance.registry.tool import ApprovalStatus
from byoai_compliance.registry.usage import UsageEvent


@pytest.fixture()
def trail(tmp_path: Path) -> AuditTrail:
    return AuditTrail(tmp_path / "audit.jsonl")


@pytest.fixture()
def handler(trail: AuditTrail) -> PolicyActionHandler:
    return PolicyActionHandler(trail)


def _evaluate(
    level: EnforcementLevel, auto_remediation: bool = False
) -> tuple[EvaluationResult, UsageEvent]:
    policy = Policy(
        name=f"{level.value} sensitive",
        rules=(BooleanBlockRule(BlockTarget.SENSITIVE_INFO),),
        enforcement_level=level,
        auto_remediation=auto_remediation,
    )
    usage = UsageEvent(
        tool_id="tool-1",
        user_id="u-1",
        contains_sensitive_info=True,
        tool_approval_status=ApprovalStatus.APPROVED,
    )
    return PolicyEvaluator().evaluate([policy], usage), usage


# ---------------------------------------------------------------------------
# enforce()
# ---------------------------------------------------------------------------


class TestEnforce:
    def test_allow(self) -> None:
        action = enforce(EvaluationResult(decision=Decision.ALLOW))
        assert action.action is EnforcementActionType.ALLOW
        assert action.message == "Request allowed"
        assert action.details == {}

    def test_warn_carries_warnings(self) -> None:
        result, _ = _evaluate(EnforcementLevel.ALERT)
        action = enforce(result)
        assert action.action is EnforcementActionType.WARN
        assert action.details["warnings"] == ["Policy violation: alert sensitive"]

    def test_block_carries_reasons(self) -> None:
        result, _ = _evaluate(EnforcementLevel.BLOCK)
        action = enforce(result)
        assert action.action is EnforcementActionType.BLOCK
        assert action.details["reasons"] == [
            "Sensitive information processing is blocked by this policy"
        ]


# ---------------------------------------------------------------------------
# PolicyActionHandler
# ---------------------------------------------------------------------------


class TestPolicyActionHandler:
    def test_block_raises_with_policy_names(
        self, handler: PolicyActionHandler, trail: AuditTrail
    ) -> None:
        result, usage = _evaluate(EnforcementLevel.BLOCK)
        with pytest.raises(PolicyBlockedError) as exc_info:
            handler.execute(result, usage)
        assert exc_info.value.policy_names == ["block sensitive"]
        assert str(exc_info.value) == (
            "Usage blocked by policy block sensitive: "
            "Sensitive information processing is blocked by this policy"
        )
        records = trail.by_action("policy_block")
        assert len(records) == 1
        assert records[0]["success"] is False
        assert records[0]["resource_id"] == usage.event_id
        assert records[0]["user_id"] == "u-1"

    def test_warn_is_audited(self, handler: PolicyActionHandler, trail: AuditTrail) -> None:
        result, usage = _evaluate(EnforcementLevel.ALERT)
        action = handler.execute(result, usage)
        assert action.action is EnforcementActionType.WARN
        [record] = trail.by_action("policy_warn")
        assert record["success"] is True
        new_values = record["new_values"]
        assert isinstance(new_values, dict)
        assert new_values["rules_violated"] == ["sensitive_info_blocked"]

    def test_monitored_breach_is_audited(
        self, handler: PolicyActionHandler, trail: AuditTrail
    ) -> None:
        result, usage = _evaluate(EnforcementLevel.MONITOR)
        assert handler.execute(result, usage).action is EnforcementActionType.ALLOW
        assert len(trail.by_action("policy_monitored")) == 1

    def test_clean_allow_writes_nothing(
        self, handler: PolicyActionHandler, trail: AuditTrail
    ) -> None:
        handler.execute(EvaluationResult(decision=Decision.ALLOW), UsageEvent(tool_id="t"))
        assert trail.count() == 0

    def test_without_trail(self) -> None:
        result, usage = _evaluate(EnforcementLevel.ALERT, auto_remediation=True)
        action = PolicyActionHandler().execute(result, usage)
        assert action.action is EnforcementActionType.WARN

    def test_auto_remediation_runs_before_block(
        self, handler: PolicyActionHandler, trail: AuditTrail
    ) -> None:
        result, usage = _evaluate(EnforcementLevel.BLOCK, auto_remediation=True)
        with pytest.raises(PolicyBlockedError):
            handler.execute(result, usage)
        actions = [r["action"] for r in trail.read_all()]
        assert actions == ["auto_remediation", "policy_block"]
        new_values = trail.by_action("auto_remediation")[0]["new_values"]
        assert isinstance(new_values, dict)
        assert new_values["actions_taken"] == [
            "Blocked request immediately",
            "Created security incident",
            "Notified security team",
        ]


class TestRemediation:
    def test_known_violation_type(self) -> None:
        assert remediation_actions_for("unapproved_tool") == (
            "Blocked tool usage",
            "Created approval request",
        )

    def test_unknown_violation_type(self) -> None:
        assert remediation_actions_for("token_limit_exceeded") == (
            "Logged violation for review",
        )

    def test_remediate_returns_steps(self, handler: PolicyActionHandler) -> None:
        result, usage = _evaluate(EnforcementLevel.ALERT, auto_remediation=True)
        steps = handler.remediate(result, usage)
        assert steps == list(remediation_actions_for("sensitive_info_blocked"))

    def test_manual_policy_is_not_remediated(self, handler: PolicyActionHandler) -> None:
        result, usage = _evaluate(EnforcementLevel.ALERT)
        assert handler.remediate(result, usage) == []

    def test_only_auto_policies_are_remediated(
        self, handler: PolicyActionHandler, trail: AuditTrail
    ) -> None:
        auto = Policy(
            name="Auto personal",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            enforcement_level=EnforcementLevel.ALERT,
            auto_remediation=True,
        )
        manual = Policy(
            name="Manual cross-border",
            rules=(BooleanBlockRule(BlockTarget.CROSS_BORDER),),
            enforcement_level=EnforcementLevel.ALERT,
        )
        usage = UsageEvent(
            tool_id="tool-1",
            contains_personal_info=True,
            cross_border=True,
            tool_approval_status=ApprovalStatus.APPROVED,
        )
        result = PolicyEvaluator().evaluate([auto, manual], usage)
        assert len(result.violations) == 2

        steps = handler.remediate(result, usage)

        assert steps == list(remediation_actions_for("personal_info_blocked"))
        [record] = trail.by_action("auto_remediation")
        new_values = record["new_values"]
        assert isinstance(new_values, dict)
        assert new_values["policy_id"] == auto.policy_id
