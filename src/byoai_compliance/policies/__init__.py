"""Organisation policies and the usage evaluator."""
from __future__ import annotations

from byoai_compliance.policies.actions import (
    EnforcementAction,
    EnforcementActionType,
    PolicyActionHandler,
    PolicyBlockedError,
    enforce,
    remediation_actions_for,
)
from byoai_compliance.policies.engine import (
    EvaluationResult,
    PolicyEvaluator,
    PolicyViolation,
    evaluate,
)
from byoai_compliance.policies.model import (
    Decision,
    EnforcementLevel,
    Policy,
    PolicyType,
    Severity,
)
from byoai_compliance.policies.parser import PolicyParseError, PolicyParser
from byoai_compliance.policies.report import PolicyReport, generate_policy_report
from byoai_compliance.policies.rules import (
    BlockTarget,
    BooleanBlockRule,
    ClassificationMode,
    ClassificationRule,
    Rule,
    RuleBreach,
    ThresholdMetric,
    ThresholdRule,
)

__all__ = [
    "BlockTarget",
    "BooleanBlockRule",
    "ClassificationMode",
    "ClassificationRule",
    "Decision",
    "EnforcementAction",
    "EnforcementActionType",
    "EnforcementLevel",
    "EvaluationResult",
    "Policy",
    "PolicyActionHandler",
    "PolicyBlockedError",
    "PolicyEvaluator",
    "PolicyParseError",
    "PolicyParser",
    "PolicyReport",
    "PolicyType",
    "PolicyViolation",
    "Rule",
    "RuleBreach",
    "Severity",
    "ThresholdMetric",
    "ThresholdRule",
    "enforce",
    "evaluate",
    "generate_policy_report",
    "remediation_actions_for",
]
