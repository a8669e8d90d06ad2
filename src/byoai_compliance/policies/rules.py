"""Typed policy rules.

A policy's rule set is a closed union of three rule kinds:

- :class:`ClassificationRule` - forbidden-list or allowed-list membership of
  the usage's data classification.
- :class:`BooleanBlockRule` - blocks personal info, sensitive info,
  cross-border transfer or use of an unapproved tool.
- :class:`ThresholdRule` - strict ``>`` limit on token count or cost.

Each rule exposes ``rule_name`` (the violation type it reports) and
``check(usage, level)`` which returns a :class:`RuleBreach` or ``None``.
Rules are immutable and hold no state between checks.

Example
-------
>>> rule = BooleanBlockRule(BlockTarget.SENSITIVE_INFO)
>>> usage = UsageEvent(tool_id="t", contains_sensitive_info=True)
>>> rule.check(usage, EnforcementLevel.BLOCK).severity
<Severity.CRITICAL: 'critical'>
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from byoai_compliance.detection.classifier import DataClassification
from byoai_compliance.policies.model import EnforcementLevel, Severity
from byoai_compliance.registry.tool import ApprovalStatus
from byoai_compliance.registry.usage import UsageEvent


@dataclass(frozen=True)
class RuleBreach:
    """A single rule breached by a usage event."""

    rule_name: str
    severity: Severity
    message: str


class ClassificationMode(str, Enum):
    FORBIDDEN = "forbidden"
    ALLOWED = "allowed"


class BlockTarget(str, Enum):
    PERSONAL_INFO = "personal_info"
    SENSITIVE_INFO = "sensitive_info"
    CROSS_BORDER = "cross_border"
    UNAPPROVED_TOOL = "unapproved_tool"


class ThresholdMetric(str, Enum):
    TOKENS = "tokens"
    COST = "cost"


@dataclass(frozen=True)
class ClassificationRule:
    """Forbidden-list or allowed-list check on the data classification.

    The two modes are independent rules: a policy may carry both, and a
    classification can breach the allowed list without being forbidden.
    """

    mode: ClassificationMode
    classifications: frozenset[DataClassification]

    @property
    def rule_name(self) -> str:
        if self.mode == ClassificationMode.FORBIDDEN:
            return "forbidden_data_type"
        return "data_type_not_allowed"

    def check(self, usage: UsageEvent, level: EnforcementLevel) -> RuleBreach | None:
        classification = usage.data_classification
        if self.mode == ClassificationMode.FORBIDDEN:
            if classification not in self.classifications:
                return None
            return RuleBreach(
                rule_name=self.rule_name,
                severity=Severity.HIGH if level == EnforcementLevel.BLOCK else Severity.WARNING,
                message=f"Data classification '{classification.value}' is forbidden by this policy",
            )

        if classification in self.classifications:
            return None
        return RuleBreach(
            rule_name=self.rule_name,
            severity=Severity.WARNING,
            message=f"Data classification '{classification.value}' is not in allowed list",
        )


_BLOCK_BREACHES: dict[BlockTarget, tuple[str, Severity, str]] = {
    BlockTarget.PERSONAL_INFO: (
        "personal_info_blocked",
        Severity.HIGH,
        "Personal information processing is blocked by this policy",
    ),
    BlockTarget.SENSITIVE_INFO: (
        "sensitive_info_blocked",
        Severity.CRITICAL,
        "Sensitive information processing is blocked by this policy",
    ),
    BlockTarget.CROSS_BORDER: (
        "cross_border_blocked",
        Severity.CRITICAL,
        "Cross-border data transfer is blocked by this policy",
    ),
    BlockTarget.UNAPPROVED_TOOL: (
        "unapproved_tool",
        Severity.HIGH,
        "Only approved tools are allowed by this policy",
    ),
}


@dataclass(frozen=True)
class BooleanBlockRule:
    """Blocks usage that carries the targeted property."""

    target: BlockTarget

    @property
    def rule_name(self) -> str:
        return _BLOCK_BREACHES[self.target][0]

    def check(self, usage: UsageEvent, level: EnforcementLevel) -> RuleBreach | None:
        match self.target:
            case BlockTarget.PERSONAL_INFO:
                breached = usage.contains_personal_info
            case BlockTarget.SENSITIVE_INFO:
                breached = usage.contains_sensitive_info
            case BlockTarget.CROSS_BORDER:
                breached = usage.cross_border
            case BlockTarget.UNAPPROVED_TOOL:
                # An unknown approval status counts as unapproved.
                breached = usage.tool_approval_status is not ApprovalStatus.APPROVED
        if not breached:
            return None
        rule_name, severity, message = _BLOCK_BREACHES[self.target]
        return RuleBreach(rule_name=rule_name, severity=severity, message=message)


@dataclass(frozen=True)
class ThresholdRule:
    """Strict upper limit on the usage's token count or estimated cost.

    A usage event without the measured value never breaches the limit.
    """

    metric: ThresholdMetric
    limit: float

    @property
    def rule_name(self) -> str:
        if self.metric == ThresholdMetric.TOKENS:
            return "token_limit_exceeded"
        return "cost_approval_required"

    def check(self, usage: UsageEvent, level: EnforcementLevel) -> RuleBreach | None:
        if self.metric == ThresholdMetric.TOKENS:
            tokens = usage.token_count
            if tokens is None or not tokens > self.limit:
                return None
            return RuleBreach(
                rule_name=self.rule_name,
                severity=Severity.WARNING,
                message=f"Token count {tokens} exceeds limit of {self.limit:g}",
            )

        cost = usage.estimated_cost_usd
        if cost is None or not cost > self.limit:
            return None
        return RuleBreach(
            rule_name=self.rule_name,
            severity=Severity.WARNING,
            message=f"Estimated cost ${cost:g} requires approval (threshold: ${self.limit:g})",
        )


Rule = Union[ClassificationRule, BooleanBlockRule, ThresholdRule]
