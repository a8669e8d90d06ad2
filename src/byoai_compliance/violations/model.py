"""Violation records.

A :class:`Violation` is created once per rule breach on a usage event and is
never deleted.  After creation its remediation fields change only through
:class:`~byoai_compliance.violations.lifecycle.ViolationLifecycle`, which
returns updated copies and leaves the original untouched.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from byoai_compliance.policies.model import EnforcementLevel, Severity


class RemediationStatus(str, Enum):
    """Remediation state of a violation."""

    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    UNDER_INVESTIGATION = "under_investigation"
    REMEDIATED = "remediated"
    FALSE_POSITIVE = "false_positive"
    ACCEPTED_RISK = "accepted_risk"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES: frozenset[RemediationStatus] = frozenset(
    {
        RemediationStatus.REMEDIATED,
        RemediationStatus.FALSE_POSITIVE,
        RemediationStatus.ACCEPTED_RISK,
    }
)


@dataclass(frozen=True)
class StatusChange:
    """One entry in a violation's remediation history."""

    from_status: RemediationStatus
    to_status: RemediationStatus
    changed_by: str
    changed_at: datetime
    notes: str | None = None


@dataclass(frozen=True)
class Violation:
    """A recorded breach of one policy rule by one usage event."""

    policy_id: str
    violation_type: str
    severity: Severity
    violation_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    organization_id: str | None = None
    policy_name: str | None = None
    tool_id: str | None = None
    user_id: str | None = None
    usage_event_id: str | None = None
    enforcement_level: EnforcementLevel = EnforcementLevel.MONITOR
    message: str = ""
    details: dict[str, object] = field(default_factory=dict)
    affected_subjects_count: int | None = None
    potential_privacy_breach: bool = False
    involves_sensitive_info: bool = False
    reportable_to_regulator: bool = False
    remediation_status: RemediationStatus = RemediationStatus.PENDING
    remediation_notes: str | None = None
    remediation_steps: dict[str, object] = field(default_factory=dict)
    remediated_by: str | None = None
    remediated_at: datetime | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))
    history: tuple[StatusChange, ...] = ()

    @property
    def rule_violated(self) -> str:
        return self.violation_type

    @property
    def is_open(self) -> bool:
        return not self.remediation_status.is_terminal

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "violation_id": self.violation_id,
            "organization_id": self.organization_id,
            "policy_id": self.policy_id,
            "policy_name": self.policy_name,
            "tool_id": self.tool_id,
            "user_id": self.user_id,
            "usage_event_id": self.usage_event_id,
            "violation_type": self.violation_type,
            "severity": self.severity.value,
            "enforcement_level": self.enforcement_level.value,
            "message": self.message,
            "details": dict(self.details),
            "affected_subjects_count": self.affected_subjects_count,
            "potential_privacy_breach": self.potential_privacy_breach,
            "involves_sensitive_info": self.involves_sensitive_info,
            "reportable_to_regulator": self.reportable_to_regulator,
            "remediation_status": self.remediation_status.value,
            "remediation_notes": self.remediation_notes,
            "remediated_by": self.remediated_by,
            "remediated_at": self.remediated_at.isoformat() if self.remediated_at else None,
            "created_at": self.created_at.isoformat(),
        }
