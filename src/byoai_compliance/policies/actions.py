"""Policy enforcement actions.

Turns an :class:`EvaluationResult` into the action the caller should take,
and executes the side-effects of that action:

- ``block`` -> raises :class:`PolicyBlockedError`
- ``warn``  -> logs a warning and writes an audit record
- ``allow`` -> no-op (monitor-level breaches are still audited)

Example
-------
>>> handler = PolicyActionHandler()
>>> action = handler.execute(result, usage)
>>> action.action
<EnforcementActionType.WARN: 'warn'>
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from byoai_compliance.policies.engine import EvaluationResult, PolicyViolation
from byoai_compliance.policies.model import Decision, EnforcementLevel
from byoai_compliance.registry.usage import UsageEvent

if TYPE_CHECKING:
    from byoai_compliance.audit.trail import AuditTrail

logger = logging.getLogger(__name__)


class EnforcementActionType(str, Enum):
    ALLOW = "allow"
    WARN = "warn"
    BLOCK = "block"


@dataclass(frozen=True)
class EnforcementAction:
    """What the caller should do with a usage request."""

    action: EnforcementActionType
    message: str
    details: dict[str, object] = field(default_factory=dict)


class PolicyBlockedError(Exception):
    """Raised when a usage request is blocked by policy.

    Attributes
    ----------
    policy_names:
        Names of the block-level policies that were violated.
    reasons:
        Messages of every breach on the request.
    """

    def __init__(self, policy_names: list[str], reasons: list[str]) -> None:
        self.policy_names = policy_names
        self.reasons = reasons
        joined = ", ".join(policy_names) or "unknown"
        super().__init__(f"Usage blocked by policy {joined}: {'; '.join(reasons)}")


def enforce(result: EvaluationResult) -> EnforcementAction:
    """Map an evaluation result to an :class:`EnforcementAction`."""
    match result.decision:
        case Decision.BLOCK:
            return EnforcementAction(
                action=EnforcementActionType.BLOCK,
                message="Request blocked due to policy violation",
                details={
                    "violated_policies": list(result.violations),
                    "reasons": [v.message for v in result.violations],
                },
            )
        case Decision.WARN:
            return EnforcementAction(
                action=EnforcementActionType.WARN,
                message="Request allowed with warnings",
                details={
                    "warnings": list(result.warnings),
                    "violated_policies": list(result.violations),
                },
            )
        case _:
            return EnforcementAction(
                action=EnforcementActionType.ALLOW,
                message="Request allowed",
            )


_REMEDIATION_ACTIONS: dict[str, tuple[str, ...]] = {
    "personal_info_blocked": (
        "Logged violation to compliance team",
        "Sent notification to user",
    ),
    "unapproved_tool": (
        "Blocked tool usage",
        "Created approval request",
    ),
    "cross_border_blocked": (
        "Blocked cross-border transfer",
        "Notified compliance officer",
    ),
    "sensitive_info_blocked": (
        "Blocked request immediately",
        "Created security incident",
        "Notified security team",
    ),
}


def remediation_actions_for(violation_type: str) -> tuple[str, ...]:
    """Return the automatic remediation steps for a violation type."""
    return _REMEDIATION_ACTIONS.get(violation_type, ("Logged violation for review",))


class PolicyActionHandler:
    """Executes side-effects for evaluation results.

    Parameters
    ----------
    audit_trail:
        Optional audit trail.  When provided, every breached policy and
        every automatic remediation step is recorded.
    """

    def __init__(self, audit_trail: "AuditTrail | None" = None) -> None:
        self._audit_trail = audit_trail

    def execute(self, result: EvaluationResult, usage: UsageEvent) -> EnforcementAction:
        """Execute the side-effects for ``result``.

        Raises
        ------
        PolicyBlockedError
            When the decision is ``block``.
        """
        action = enforce(result)

        if result.auto_remediation_triggered:
            self.remediate(result, usage)

        match action.action:
            case EnforcementActionType.BLOCK:
                self._handle_block(result, usage)
            case EnforcementActionType.WARN:
                self._handle_warn(result, usage)
            case EnforcementActionType.ALLOW:
                if result.violations:
                    self._audit("policy_monitored", result, usage)
        return action

    def remediate(self, result: EvaluationResult, usage: UsageEvent) -> list[str]:
        """Remediate breaches of auto-remediating policies and return the steps taken.

        Breaches of policies without ``auto_remediation`` are left for manual review.
        """
        taken: list[str] = []
        for violation in result.violations:
            if not violation.auto_remediation:
                continue
            steps = remediation_actions_for(violation.rule_violated)
            taken.extend(steps)
            logger.info(
                "Auto-remediation for %s on usage %s: %s",
                violation.rule_violated,
                usage.event_id,
                ", ".join(steps),
            )
            if self._audit_trail is not None:
                self._audit_trail.record(
                    "auto_remediation",
                    "usage_event",
                    usage.event_id,
                    user_id=usage.user_id,
                    new_values={
                        "policy_id": violation.policy_id,
                        "rule_violated": violation.rule_violated,
                        "actions_taken": list(steps),
                    },
                )
        return taken

    # ------------------------------------------------------------------
    # Private handlers
    # ------------------------------------------------------------------

    def _handle_block(self, result: EvaluationResult, usage: UsageEvent) -> None:
        blocking = _blocking_policy_names(result.violations)
        logger.warning(
            "POLICY BLOCK: usage=%s tool=%s policies=%s",
            usage.event_id,
            usage.tool_id,
            blocking,
        )
        self._audit("policy_block", result, usage)
        raise PolicyBlockedError(blocking, [v.message for v in result.violations])

    def _handle_warn(self, result: EvaluationResult, usage: UsageEvent) -> None:
        logger.warning(
            "POLICY WARN: usage=%s warnings=%s",
            usage.event_id,
            list(result.warnings),
        )
        self._audit("policy_warn", result, usage)

    def _audit(self, action: str, result: EvaluationResult, usage: UsageEvent) -> None:
        if self._audit_trail is None:
            return
        self._audit_trail.record(
            action,
            "usage_event",
            usage.event_id,
            user_id=usage.user_id,
            success=result.allowed,
            new_values={
                "tool_id": usage.tool_id,
                "decision": result.decision.value,
                "violated_policies": list(result.violated_policy_ids),
                "rules_violated": [v.rule_violated for v in result.violations],
            },
        )


def _blocking_policy_names(violations: tuple[PolicyViolation, ...]) -> list[str]:
    names = (v.policy_name for v in violations if v.enforcement_level == EnforcementLevel.BLOCK)
    return list(dict.fromkeys(names))
