"""Core policy evaluator for AI usage events.

The evaluator checks a usage event against an organisation's policies and
aggregates the outcome into a single enforcement decision.

Decision aggregation is "strictness wins": the decision reflects the
strictest enforcement level among all violated, applicable, active
policies, so it does not depend on the order of the input list.  Policy
``priority`` only orders the reported violations and warnings.

Example
-------
>>> policy = Policy(
...     name="No restricted data",
...     rules=(ClassificationRule(ClassificationMode.FORBIDDEN,
...                               frozenset({DataClassification.RESTRICTED})),),
...     enforcement_level=EnforcementLevel.BLOCK,
... )
>>> result = PolicyEvaluator().evaluate([policy], UsageEvent(tool_id="t"))
>>> result.decision
<Decision.BLOCK: 'block'>
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

from byoai_compliance.policies.model import (
    Decision,
    EnforcementLevel,
    Policy,
    PolicyType,
    Severity,
)
from byoai_compliance.registry.usage import UsageEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyViolation:
    """One rule breached by a usage event, tagged with its owning policy."""

    policy_id: str
    policy_name: str
    policy_type: PolicyType
    priority: int
    rule_violated: str
    enforcement_level: EnforcementLevel
    severity: Severity
    message: str
    auto_remediation: bool = False


@dataclass(frozen=True)
class EvaluationResult:
    """Aggregate result of evaluating a usage event against all policies.

    Attributes
    ----------
    decision:
        ``block`` if any violated policy blocks, ``warn`` if any alerts,
        otherwise ``allow``.
    violations:
        Every rule breach, ordered by ``(priority, policy_id, rule order)``.
    warnings:
        One message per violated alert or monitor policy, in the same order.
    evaluated_policies:
        IDs of the active, in-scope policies that were checked.
    auto_remediation_triggered:
        ``True`` when a violated policy has auto-remediation enabled.
    """

    decision: Decision
    violations: tuple[PolicyViolation, ...] = ()
    warnings: tuple[str, ...] = ()
    evaluated_policies: tuple[str, ...] = ()
    auto_remediation_triggered: bool = False

    @property
    def allowed(self) -> bool:
        return self.decision != Decision.BLOCK

    @property
    def violated_policy_ids(self) -> tuple[str, ...]:
        """Distinct IDs of violated policies in reporting order."""
        return tuple(dict.fromkeys(v.policy_id for v in self.violations))


class PolicyEvaluator:
    """Evaluates usage events against organisation policies.

    The evaluator is stateless; a single instance may be shared freely.
    """

    def evaluate(self, policies: Iterable[Policy], usage: UsageEvent) -> EvaluationResult:
        """Evaluate ``usage`` against ``policies``.

        Parameters
        ----------
        policies:
            The organisation's policies, in any order.  Inactive and
            out-of-scope policies are skipped.
        usage:
            The (possibly classifier-augmented) usage event.

        Returns
        -------
        EvaluationResult
            The aggregate decision and every breach found.
        """
        applicable = sorted(
            (p for p in policies if p.is_active and p.applies_to(usage)),
            key=lambda p: (p.priority, p.policy_id),
        )

        violations: list[PolicyViolation] = []
        warnings: list[str] = []
        strictest: EnforcementLevel | None = None
        auto_remediation = False

        for policy in applicable:
            breaches = self.check_policy(policy, usage)
            if not breaches:
                continue

            violations.extend(breaches)
            level = policy.enforcement_level
            if strictest is None or level.rank > strictest.rank:
                strictest = level
            auto_remediation = auto_remediation or policy.auto_remediation

            match level:
                case EnforcementLevel.ALERT:
                    warnings.append(f"Policy violation: {policy.name}")
                case EnforcementLevel.MONITOR:
                    warnings.append(f"Monitored: {policy.name}")
                case EnforcementLevel.BLOCK:
                    pass

        decision = Decision.for_level(strictest)
        if violations:
            logger.info(
                "Usage %s violated %d rule(s); decision=%s",
                usage.event_id,
                len(violations),
                decision.value,
            )

        return EvaluationResult(
            decision=decision,
            violations=tuple(violations),
            warnings=tuple(warnings),
            evaluated_policies=tuple(p.policy_id for p in applicable),
            auto_remediation_triggered=auto_remediation,
        )

    def check_policy(self, policy: Policy, usage: UsageEvent) -> list[PolicyViolation]:
        """Run every rule of ``policy`` against ``usage``, ignoring scope."""
        found: list[PolicyViolation] = []
        for rule in policy.rules:
            breach = rule.check(usage, policy.enforcement_level)
            if breach is None:
                continue
            logger.debug("Policy %s rule %s breached", policy.policy_id, breach.rule_name)
            found.append(
                PolicyViolation(
                    policy_id=policy.policy_id,
                    policy_name=policy.name,
                    policy_type=policy.policy_type,
                    priority=policy.priority,
                    rule_violated=breach.rule_name,
                    enforcement_level=policy.enforcement_level,
                    severity=breach.severity,
                    message=breach.message,
                    auto_remediation=policy.auto_remediation,
                )
            )
        return found


_DEFAULT_EVALUATOR = PolicyEvaluator()


def evaluate(policies: Iterable[Policy], usage: UsageEvent) -> EvaluationResult:
    """Evaluate ``usage`` against ``policies`` with the default evaluator."""
    return _DEFAULT_EVALUATOR.evaluate(policies, usage)
