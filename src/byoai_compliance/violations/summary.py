"""Violation listing helpers: visibility, filtering and summary statistics."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from byoai_compliance.permissions.roles import Caller, Role, has_role_at_least
from byoai_compliance.policies.model import Severity
from byoai_compliance.violations.model import RemediationStatus, Violation


@dataclass(frozen=True)
class ViolationSummary:
    """Counts over a set of violations."""

    total: int
    by_severity: dict[str, int]
    by_status: dict[str, int]
    reportable_to_regulator: int
    potential_privacy_breaches: int
    total_affected_individuals: int


def summarize(violations: Iterable[Violation]) -> ViolationSummary:
    """Summarise ``violations`` by severity and remediation status."""
    items = list(violations)
    by_severity = {s.value: 0 for s in reversed(list(Severity))}
    by_status = {s.value: 0 for s in RemediationStatus}
    for violation in items:
        by_severity[violation.severity.value] += 1
        by_status[violation.remediation_status.value] += 1
    return ViolationSummary(
        total=len(items),
        by_severity=by_severity,
        by_status=by_status,
        reportable_to_regulator=sum(1 for v in items if v.reportable_to_regulator),
        potential_privacy_breaches=sum(1 for v in items if v.potential_privacy_breach),
        total_affected_individuals=sum(v.affected_subjects_count or 0 for v in items),
    )


def visible_violations(violations: Iterable[Violation], caller: Caller) -> list[Violation]:
    """Compliance officers and above see everything; members see only their own."""
    if has_role_at_least(caller, Role.COMPLIANCE_OFFICER):
        return list(violations)
    return [v for v in violations if v.user_id == caller.user_id]


def filter_violations(
    violations: Iterable[Violation],
    severity: Severity | None = None,
    status: RemediationStatus | None = None,
    reportable_only: bool = False,
    since: datetime | None = None,
) -> list[Violation]:
    """Filter violations and return them newest first."""
    selected = [
        v
        for v in violations
        if (severity is None or v.severity == severity)
        and (status is None or v.remediation_status == status)
        and (not reportable_only or v.reportable_to_regulator)
        and (since is None or v.created_at >= since)
    ]
    return sorted(selected, key=lambda v: v.created_at, reverse=True)
