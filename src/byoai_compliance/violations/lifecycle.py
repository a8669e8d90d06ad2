"""Violation lifecycle manager.

Creates violation records from evaluator output and advances their
remediation state::

    pending             -> acknowledged | under_investigation
    acknowledged        -> under_investigation | remediated | false_positive | accepted_risk
    under_investigation -> remediated | false_positive | accepted_risk

Terminal states have no exits through :meth:`ViolationLifecycle.transition`.
Returning a closed violation to ``pending`` is a separate
:meth:`ViolationLifecycle.reopen` operation with a stricter role
requirement.

Operations never raise for rejected requests and never mutate their input:
they return a :class:`TransitionResult` carrying either the updated copy or
a :class:`TransitionError`.

Example
-------
>>> lifecycle = ViolationLifecycle()
>>> officer = Caller("u-1", Role.COMPLIANCE_OFFICER)
>>> outcome = lifecycle.transition(violation, RemediationStatus.ACKNOWLEDGED, officer)
>>> outcome.success
True
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from byoai_compliance.config.loader import LifecycleConfig
from byoai_compliance.permissions.roles import Caller, can_remediate, can_reopen
from byoai_compliance.policies.engine import EvaluationResult
from byoai_compliance.policies.model import EnforcementLevel, Severity
from byoai_compliance.registry.usage import UsageEvent
from byoai_compliance.violations.model import RemediationStatus, StatusChange, Violation
from byoai_compliance.violations.reportability import assess_reportability, is_reportable

logger = logging.getLogger(__name__)


ALLOWED_TRANSITIONS: dict[RemediationStatus, frozenset[RemediationStatus]] = {
    RemediationStatus.PENDING: frozenset(
        {RemediationStatus.ACKNOWLEDGED, RemediationStatus.UNDER_INVESTIGATION}
    ),
    RemediationStatus.ACKNOWLEDGED: frozenset(
        {
            RemediationStatus.UNDER_INVESTIGATION,
            RemediationStatus.REMEDIATED,
            RemediationStatus.FALSE_POSITIVE,
            RemediationStatus.ACCEPTED_RISK,
        }
    ),
    RemediationStatus.UNDER_INVESTIGATION: frozenset(
        {
            RemediationStatus.REMEDIATED,
            RemediationStatus.FALSE_POSITIVE,
            RemediationStatus.ACCEPTED_RISK,
        }
    ),
    RemediationStatus.REMEDIATED: frozenset(),
    RemediationStatus.FALSE_POSITIVE: frozenset(),
    RemediationStatus.ACCEPTED_RISK: frozenset(),
}


class TransitionError(str, Enum):
    """Why a lifecycle operation was rejected."""

    UNAUTHORIZED = "unauthorized"
    INVALID_TRANSITION = "invalid_transition"


@dataclass(frozen=True)
class TransitionResult:
    """Outcome of a lifecycle operation.

    On success ``violation`` is the updated copy; on failure it is the
    unchanged input and ``error`` says why.
    """

    success: bool
    violation: Violation
    error: TransitionError | None = None
    message: str = ""


def allowed_transitions(status: RemediationStatus) -> frozenset[RemediationStatus]:
    """Statuses reachable from ``status`` through a normal transition."""
    return ALLOWED_TRANSITIONS[status]


class ViolationLifecycle:
    """Creates violations and advances their remediation status.

    Parameters
    ----------
    config:
        Role requirements and the reportability subject threshold.
    """

    def __init__(self, config: LifecycleConfig | None = None) -> None:
        self._config = config or LifecycleConfig()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_from_evaluation(
        self,
        result: EvaluationResult,
        usage: UsageEvent,
        organization_id: str | None = None,
        affected_subjects_count: int | None = None,
        now: datetime | None = None,
    ) -> list[Violation]:
        """Create one pending violation per breach in ``result``.

        A breach of severity high or critical on usage carrying personal or
        sensitive information is flagged as a potential privacy breach.
        Reportability is assessed at creation.
        """
        created_at = now or datetime.now(tz=timezone.utc)
        handles_personal_data = usage.contains_personal_info or usage.contains_sensitive_info
        violations: list[Violation] = []

        for breach in result.violations:
            potential_breach = handles_personal_data and breach.severity in (
                Severity.HIGH,
                Severity.CRITICAL,
            )
            reportable = assess_reportability(
                severity=breach.severity,
                potential_privacy_breach=potential_breach,
                affected_subjects=affected_subjects_count,
                involves_sensitive_info=usage.contains_sensitive_info,
                subject_threshold=self._config.reportable_subject_threshold,
            )
            violations.append(
                Violation(
                    policy_id=breach.policy_id,
                    policy_name=breach.policy_name,
                    violation_type=breach.rule_violated,
                    severity=breach.severity,
                    organization_id=organization_id or usage.organization_id,
                    tool_id=usage.tool_id,
                    user_id=usage.user_id,
                    usage_event_id=usage.event_id,
                    enforcement_level=breach.enforcement_level,
                    message=breach.message,
                    details={
                        "rule_violated": breach.rule_violated,
                        "policy_type": breach.policy_type.value,
                        "data_classification": usage.data_classification.value,
                        "blocked": breach.enforcement_level == EnforcementLevel.BLOCK,
                    },
                    affected_subjects_count=affected_subjects_count,
                    potential_privacy_breach=potential_breach,
                    involves_sensitive_info=usage.contains_sensitive_info,
                    reportable_to_regulator=reportable,
                    created_at=created_at,
                )
            )

        if violations:
            logger.info(
                "Created %d violation(s) for usage %s (%d reportable)",
                len(violations),
                usage.event_id,
                sum(1 for v in violations if v.reportable_to_regulator),
            )
        return violations

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transition(
        self,
        violation: Violation,
        new_status: RemediationStatus | str,
        caller: Caller,
        notes: str | None = None,
        steps: dict[str, object] | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        """Move ``violation`` to ``new_status`` on behalf of ``caller``.

        Parameters
        ----------
        violation:
            The current record.  It is never modified.
        new_status:
            Target status.  An unrecognised label is an invalid transition.
        caller:
            The acting user; must hold ``remediation_min_role`` or higher.
        notes, steps:
            Optional remediation notes and steps to record.
        now:
            Timestamp to stamp; defaults to the current UTC time.

        Returns
        -------
        TransitionResult
            ``UNAUTHORIZED`` when the caller lacks the role,
            ``INVALID_TRANSITION`` when the edge is not allowed.
        """
        if not can_remediate(caller, self._config.remediation_min_role):
            return self._reject(
                violation,
                TransitionError.UNAUTHORIZED,
                "Insufficient permissions to remediate violations",
                caller,
            )

        target = _parse_status(new_status)
        current = violation.remediation_status
        if target is None or target not in ALLOWED_TRANSITIONS[current]:
            label = target.value if target is not None else str(new_status)
            return self._reject(
                violation,
                TransitionError.INVALID_TRANSITION,
                f"Cannot move violation from '{current.value}' to '{label}'",
                caller,
            )

        stamped_at = now or datetime.now(tz=timezone.utc)
        updated = dataclasses.replace(
            violation,
            remediation_status=target,
            remediated_by=caller.user_id,
            remediated_at=stamped_at,
            remediation_notes=notes if notes is not None else violation.remediation_notes,
            remediation_steps=dict(steps) if steps is not None else violation.remediation_steps,
            history=violation.history
            + (StatusChange(current, target, caller.user_id, stamped_at, notes),),
        )
        logger.info(
            "Violation %s moved %s -> %s by %s",
            violation.violation_id,
            current.value,
            target.value,
            caller.user_id,
        )
        return TransitionResult(success=True, violation=updated)

    def reopen(
        self,
        violation: Violation,
        caller: Caller,
        reason: str,
        now: datetime | None = None,
    ) -> TransitionResult:
        """Return a closed violation to ``pending``.

        Only terminal violations can be reopened, and only by callers
        holding ``reopen_min_role`` or higher.
        """
        if not can_reopen(caller, self._config.reopen_min_role):
            return self._reject(
                violation,
                TransitionError.UNAUTHORIZED,
                "Insufficient permissions to reopen violations",
                caller,
            )

        current = violation.remediation_status
        if not current.is_terminal:
            return self._reject(
                violation,
                TransitionError.INVALID_TRANSITION,
                f"Only closed violations can be reopened; status is '{current.value}'",
                caller,
            )

        stamped_at = now or datetime.now(tz=timezone.utc)
        updated = dataclasses.replace(
            violation,
            remediation_status=RemediationStatus.PENDING,
            remediated_by=None,
            remediated_at=None,
            history=violation.history
            + (
                StatusChange(
                    current, RemediationStatus.PENDING, caller.user_id, stamped_at, reason
                ),
            ),
        )
        logger.info(
            "Violation %s reopened from %s by %s",
            violation.violation_id,
            current.value,
            caller.user_id,
        )
        return TransitionResult(success=True, violation=updated)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def requires_notification(self, violation: Violation) -> bool:
        """High and critical violations, and reportable ones, notify officers."""
        return (
            violation.severity in (Severity.HIGH, Severity.CRITICAL)
            or violation.reportable_to_regulator
            or is_reportable(violation, self._config.reportable_subject_threshold)
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reject(
        self,
        violation: Violation,
        error: TransitionError,
        message: str,
        caller: Caller,
    ) -> TransitionResult:
        logger.warning(
            "Rejected change to violation %s by %s: %s",
            violation.violation_id,
            caller.user_id,
            message,
        )
        return TransitionResult(success=False, violation=violation, error=error, message=message)


def _parse_status(value: RemediationStatus | str) -> RemediationStatus | None:
    if isinstance(value, RemediationStatus):
        return value
    try:
        return RemediationStatus(str(value).strip().lower())
    except ValueError:
        return None
