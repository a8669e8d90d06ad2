"""Unit tests for policies/rules.py and policies/engine.py: PolicyEvaluator."""
from __future__ import annotations

import itertools

import pytest

from byoai_compliance.detection.classifier import DataClassification
from byoai_compliance.policies.engine import PolicyEvaluator, evaluate
from byoai_compliance.policies.model import Decision, EnforcementLevel, Policy, Severity
from byoai_compliance.policies.rules import (
    BlockTarget,
    BooleanBlockRule,
    ClassificationMode,
    ClassificationRule,
    ThresholdMetric,
    ThresholdRule,
)
from byoai_compliance.registry.tool import ApprovalStatus
from byoai_compliance.registry.usage import UsageEvent


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def evaluator() -> PolicyEvaluator:
    return PolicyEvaluator()


def _forbid(*levels: DataClassification) -> ClassificationRule:
    return ClassificationRule(ClassificationMode.FORBIDDEN, frozenset(levels))


def _allow(*levels: DataClassification) -> ClassificationRule:
    return ClassificationRule(ClassificationMode.ALLOWED, frozenset(levels))


def _usage(**fields: object) -> UsageEvent:
    fields.setdefault("data_classification", DataClassification.PUBLIC)
    fields.setdefault("tool_approval_status", ApprovalStatus.APPROVED)
    return UsageEvent(tool_id="tool-1", **fields)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Individual rules
# ---------------------------------------------------------------------------


class TestClassificationRule:
    def test_forbidden_under_block_is_high(self) -> None:
        breach = _forbid(DataClassification.RESTRICTED).check(
            _usage(data_classification=DataClassification.RESTRICTED), EnforcementLevel.BLOCK
        )
        assert breach is not None
        assert breach.rule_name == "forbidden_data_type"
        assert breach.severity is Severity.HIGH

    @pytest.mark.parametrize("level", [EnforcementLevel.ALERT, EnforcementLevel.MONITOR])
    def test_forbidden_otherwise_is_warning(self, level: EnforcementLevel) -> None:
        breach = _forbid(DataClassification.RESTRICTED).check(
            _usage(data_classification=DataClassification.RESTRICTED), level
        )
        assert breach is not None
        assert breach.severity is Severity.WARNING

    def test_forbidden_other_level_passes(self) -> None:
        rule = _forbid(DataClassification.RESTRICTED)
        assert rule.check(_usage(), EnforcementLevel.BLOCK) is None

    def test_not_in_allowed_list(self) -> None:
        breach = _allow(DataClassification.PUBLIC).check(
            _usage(data_classification=DataClassification.INTERNAL), EnforcementLevel.BLOCK
        )
        assert breach is not None
        assert breach.rule_name == "data_type_not_allowed"
        assert breach.severity is Severity.WARNING

    def test_in_allowed_list_passes(self) -> None:
        assert _allow(DataClassification.PUBLIC).check(_usage(), EnforcementLevel.BLOCK) is None


class TestBooleanBlockRule:
    @pytest.mark.parametrize(
        "target, field, rule_name, severity",
        [
            (BlockTarget.PERSONAL_INFO, "contains_personal_info", "personal_info_blocked",
             Severity.HIGH),
            (BlockTarget.SENSITIVE_INFO, "contains_sensitive_info", "sensitive_info_blocked",
             Severity.CRITICAL),
            (BlockTarget.CROSS_BORDER, "cross_border", "cross_border_blocked", Severity.CRITICAL),
        ],
    )
    def test_flagged_usage_breaches(
        self, target: BlockTarget, field: str, rule_name: str, severity: Severity
    ) -> None:
        rule = BooleanBlockRule(target)
        breach = rule.check(_usage(**{field: True}), EnforcementLevel.MONITOR)
        assert breach is not None
        assert breach.rule_name == rule_name == rule.rule_name
        assert breach.severity is severity
        assert rule.check(_usage(), EnforcementLevel.BLOCK) is None

    @pytest.mark.parametrize(
        "status",
        [None, ApprovalStatus.PENDING, ApprovalStatus.CONDITIONAL, ApprovalStatus.BANNED],
    )
    def test_anything_but_approved_is_unapproved(self, status: ApprovalStatus | None) -> None:
        breach = BooleanBlockRule(BlockTarget.UNAPPROVED_TOOL).check(
            _usage(tool_approval_status=status), EnforcementLevel.BLOCK
        )
        assert breach is not None
        assert breach.rule_name == "unapproved_tool"
        assert breach.severity is Severity.HIGH

    def test_approved_tool_passes(self) -> None:
        rule = BooleanBlockRule(BlockTarget.UNAPPROVED_TOOL)
        assert rule.check(_usage(), EnforcementLevel.BLOCK) is None


class TestThresholdRule:
    def test_token_limit_is_strict(self) -> None:
        rule = ThresholdRule(ThresholdMetric.TOKENS, 1000)
        assert rule.check(_usage(prompt_token_count=1000), EnforcementLevel.ALERT) is None
        breach = rule.check(_usage(prompt_token_count=1001), EnforcementLevel.ALERT)
        assert breach is not None
        assert breach.rule_name == "token_limit_exceeded"
        assert breach.severity is Severity.WARNING

    def test_token_count_includes_response(self) -> None:
        rule = ThresholdRule(ThresholdMetric.TOKENS, 1000)
        usage = _usage(prompt_token_count=600, response_token_count=401)
        assert rule.check(usage, EnforcementLevel.ALERT) is not None

    def test_missing_tokens_never_breach(self) -> None:
        rule = ThresholdRule(ThresholdMetric.TOKENS, 0)
        assert rule.check(_usage(), EnforcementLevel.BLOCK) is None

    def test_cost_threshold(self) -> None:
        rule = ThresholdRule(ThresholdMetric.COST, 5.0)
        assert rule.check(_usage(estimated_cost_usd=5.0), EnforcementLevel.ALERT) is None
        breach = rule.check(_usage(estimated_cost_usd=5.01), EnforcementLevel.ALERT)
        assert breach is not None
        assert breach.rule_name == "cost_approval_required"
        assert rule.check(_usage(), EnforcementLevel.ALERT) is None


# ---------------------------------------------------------------------------
# Decision aggregation
# ---------------------------------------------------------------------------


class TestEvaluateDecision:
    def test_no_policies_allows(self, evaluator: PolicyEvaluator) -> None:
        result = evaluator.evaluate([], _usage())
        assert result.decision is Decision.ALLOW
        assert result.allowed is True
        assert result.violations == ()

    def test_restricted_forbidden_blocks_with_one_high_violation(
        self, evaluator: PolicyEvaluator
    ) -> None:
        policy = Policy(
            name="No restricted data",
            rules=(_forbid(DataClassification.RESTRICTED),),
            enforcement_level=EnforcementLevel.BLOCK,
        )
        result = evaluator.evaluate(
            [policy], _usage(data_classification=DataClassification.RESTRICTED)
        )
        assert result.decision is Decision.BLOCK
        assert result.allowed is False
        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.severity is Severity.HIGH
        assert violation.rule_violated == "forbidden_data_type"
        assert violation.policy_name == "No restricted data"
        assert result.warnings == ()

    def test_alert_warns(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Alert on confidential",
            rules=(_forbid(DataClassification.CONFIDENTIAL),),
            enforcement_level=EnforcementLevel.ALERT,
        )
        result = evaluator.evaluate(
            [policy], _usage(data_classification=DataClassification.CONFIDENTIAL)
        )
        assert result.decision is Decision.WARN
        assert result.allowed is True
        assert result.warnings == ("Policy violation: Alert on confidential",)
        assert result.violations[0].severity is Severity.WARNING

    def test_monitor_allows_but_records(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Watch personal info",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            enforcement_level=EnforcementLevel.MONITOR,
        )
        result = evaluator.evaluate([policy], _usage(contains_personal_info=True))
        assert result.decision is Decision.ALLOW
        assert len(result.violations) == 1
        assert result.warnings == ("Monitored: Watch personal info",)

    def test_unviolated_block_policy_allows(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Block sensitive",
            rules=(BooleanBlockRule(BlockTarget.SENSITIVE_INFO),),
            enforcement_level=EnforcementLevel.BLOCK,
        )
        result = evaluator.evaluate([policy], _usage())
        assert result.decision is Decision.ALLOW
        assert result.evaluated_policies == (policy.policy_id,)

    def test_module_level_evaluate(self) -> None:
        policy = Policy(
            name="Cross border",
            rules=(BooleanBlockRule(BlockTarget.CROSS_BORDER),),
            enforcement_level=EnforcementLevel.BLOCK,
        )
        assert evaluate([policy], _usage(cross_border=True)).decision is Decision.BLOCK


class TestStrictnessWins:
    @pytest.fixture()
    def mixed_policies(self) -> list[Policy]:
        personal = (BooleanBlockRule(BlockTarget.PERSONAL_INFO),)
        return [
            Policy(name="m1", rules=personal, enforcement_level=EnforcementLevel.MONITOR,
                   priority=1, policy_id="a"),
            Policy(name="a1", rules=personal, enforcement_level=EnforcementLevel.ALERT,
                   priority=2, policy_id="b"),
            Policy(name="b1", rules=personal, enforcement_level=EnforcementLevel.BLOCK,
                   priority=99, policy_id="c"),
            Policy(name="m2", rules=personal, enforcement_level=EnforcementLevel.MONITOR,
                   priority=3, policy_id="d"),
        ]

    def test_block_dominates_in_every_order(
        self, evaluator: PolicyEvaluator, mixed_policies: list[Policy]
    ) -> None:
        usage = _usage(contains_personal_info=True)
        orders = itertools.permutations(mixed_policies)
        results = [evaluator.evaluate(list(p), usage) for p in orders]
        assert {r.decision for r in results} == {Decision.BLOCK}
        assert len({r.violations for r in results}) == 1
        assert len({r.warnings for r in results}) == 1

    def test_violations_ordered_by_priority(
        self, evaluator: PolicyEvaluator, mixed_policies: list[Policy]
    ) -> None:
        result = evaluator.evaluate(
            list(reversed(mixed_policies)), _usage(contains_personal_info=True)
        )
        assert [v.policy_name for v in result.violations] == ["m1", "a1", "m2", "b1"]
        assert result.warnings == (
            "Monitored: m1",
            "Policy violation: a1",
            "Monitored: m2",
        )

    def test_priority_ties_broken_by_policy_id(self, evaluator: PolicyEvaluator) -> None:
        rules = (BooleanBlockRule(BlockTarget.PERSONAL_INFO),)
        second = Policy(name="second", rules=rules, priority=5, policy_id="z")
        first = Policy(name="first", rules=rules, priority=5, policy_id="m")
        result = evaluator.evaluate([second, first], _usage(contains_personal_info=True))
        assert [v.policy_name for v in result.violations] == ["first", "second"]

    def test_alert_beats_monitor(self, evaluator: PolicyEvaluator) -> None:
        rules = (BooleanBlockRule(BlockTarget.PERSONAL_INFO),)
        policies = [
            Policy(name="m", rules=rules, enforcement_level=EnforcementLevel.MONITOR),
            Policy(name="a", rules=rules, enforcement_level=EnforcementLevel.ALERT),
        ]
        result = evaluator.evaluate(policies, _usage(contains_personal_info=True))
        assert result.decision is Decision.WARN


class TestMultipleRules:
    def test_allowed_and_forbidden_lists_are_independent(
        self, evaluator: PolicyEvaluator
    ) -> None:
        policy = Policy(
            name="Public only",
            rules=(_forbid(DataClassification.RESTRICTED), _allow(DataClassification.PUBLIC)),
            enforcement_level=EnforcementLevel.BLOCK,
        )
        internal = evaluator.evaluate(
            [policy], _usage(data_classification=DataClassification.INTERNAL)
        )
        assert [v.rule_violated for v in internal.violations] == ["data_type_not_allowed"]

        restricted = evaluator.evaluate(
            [policy], _usage(data_classification=DataClassification.RESTRICTED)
        )
        assert [v.rule_violated for v in restricted.violations] == [
            "forbidden_data_type",
            "data_type_not_allowed",
        ]

    def test_every_breached_rule_reported(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Strict",
            rules=(
                BooleanBlockRule(BlockTarget.PERSONAL_INFO),
                BooleanBlockRule(BlockTarget.SENSITIVE_INFO),
                BooleanBlockRule(BlockTarget.UNAPPROVED_TOOL),
            ),
            enforcement_level=EnforcementLevel.BLOCK,
        )
        usage = _usage(
            contains_personal_info=True,
            contains_sensitive_info=True,
            tool_approval_status=ApprovalStatus.PENDING,
        )
        result = evaluator.evaluate([policy], usage)
        assert [v.rule_violated for v in result.violations] == [
            "personal_info_blocked",
            "sensitive_info_blocked",
            "unapproved_tool",
        ]
        assert result.violated_policy_ids == (policy.policy_id,)


# ---------------------------------------------------------------------------
# Scope and activity
# ---------------------------------------------------------------------------


class TestScope:
    def test_inactive_policy_skipped(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Off",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            enforcement_level=EnforcementLevel.BLOCK,
            is_active=False,
        )
        result = evaluator.evaluate([policy], _usage(contains_personal_info=True))
        assert result.decision is Decision.ALLOW
        assert result.evaluated_policies == ()

    def test_role_scope(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Interns",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            enforcement_level=EnforcementLevel.BLOCK,
            applicable_roles=("intern",),
        )
        intern = _usage(contains_personal_info=True, user_role="intern")
        manager = _usage(contains_personal_info=True, user_role="manager")
        assert evaluator.evaluate([policy], intern).decision is Decision.BLOCK
        assert evaluator.evaluate([policy], manager).decision is Decision.ALLOW

    def test_missing_department_never_matches_scoped_policy(
        self, evaluator: PolicyEvaluator
    ) -> None:
        policy = Policy(
            name="Finance",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            enforcement_level=EnforcementLevel.BLOCK,
            applicable_departments=("finance",),
        )
        result = evaluator.evaluate([policy], _usage(contains_personal_info=True))
        assert result.decision is Decision.ALLOW

    def test_tool_scope(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Other tool",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            enforcement_level=EnforcementLevel.BLOCK,
            applicable_tools=("tool-2",),
        )
        result = evaluator.evaluate([policy], _usage(contains_personal_info=True))
        assert result.evaluated_policies == ()

    def test_check_policy_ignores_scope(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Other tool",
            rules=(BooleanBlockRule(BlockTarget.PERSONAL_INFO),),
            applicable_tools=("tool-2",),
        )
        assert len(evaluator.check_policy(policy, _usage(contains_personal_info=True))) == 1


class TestAutoRemediationFlag:
    def test_flag_set_only_when_violated(self, evaluator: PolicyEvaluator) -> None:
        policy = Policy(
            name="Auto",
            rules=(BooleanBlockRule(BlockTarget.SENSITIVE_INFO),),
            enforcement_level=EnforcementLevel.BLOCK,
            auto_remediation=True,
        )
        assert evaluator.evaluate([policy], _usage()).auto_remediation_triggered is False
        hit = evaluator.evaluate([policy], _usage(contains_sensitive_info=True))
        assert hit.auto_remediation_triggered is True
        assert [v.auto_remediation for v in hit.violations] == [True]
