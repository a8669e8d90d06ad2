"""Framework requirement checks.

Each requirement is a pure function of an :class:`OrganizationSnapshot`
(and the assessment configuration) returning a :class:`Finding`.  No
check reads another check's outcome, so any subset can be re-evaluated
on its own.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Callable

from byoai_compliance.compliance.snapshot import OrganizationSnapshot
from byoai_compliance.config.loader import AssessmentConfig
from byoai_compliance.policies.model import EnforcementLevel
from byoai_compliance.registry.tool import ApprovalStatus
from byoai_compliance.violations.model import RemediationStatus


class FindingSeverity(str, Enum):
    """Priority of a compliance finding."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return list(FindingSeverity).index(self)


@dataclass(frozen=True)
class Finding:
    """Outcome of one requirement check."""

    requirement_id: str
    requirement: str
    compliant: bool
    details: str
    severity: FindingSeverity
    recommendation: str


CheckFn = Callable[[OrganizationSnapshot, AssessmentConfig], tuple[bool, str]]


@dataclass(frozen=True)
class Requirement:
    """A named checklist item and the function that evaluates it."""

    requirement_id: str
    title: str
    severity: FindingSeverity
    recommendation: str
    check: CheckFn

    def evaluate(
        self,
        snapshot: OrganizationSnapshot,
        config: AssessmentConfig | None = None,
    ) -> Finding:
        compliant, details = self.check(snapshot, config or AssessmentConfig())
        return Finding(
            requirement_id=self.requirement_id,
            requirement=self.title,
            compliant=compliant,
            details=details,
            severity=self.severity,
            recommendation=self.recommendation,
        )


# ------------------------------------------------------------------
# Privacy Act 1988
# ------------------------------------------------------------------


def check_active_policy(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    count = len(snapshot.active_policies)
    return count > 0, f"Found {count} active policies"


def check_personal_info_controls(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    personal_tools = [t for t in snapshot.active_tools if t.processes_personal_info]
    personal_usage = any(u.contains_personal_info for u in snapshot.usage_events)
    covered = any(p.has_rule("personal_info_blocked") for p in snapshot.active_policies)

    if not personal_tools and not personal_usage:
        return True, "No personal information handled by AI tools"
    if covered:
        return True, "Policies exist for personal information handling"
    return False, "Personal information used without specific policy"


def check_personal_info_tools_approved(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    tools = [t for t in snapshot.active_tools if t.processes_personal_info]
    approved = [t for t in tools if t.approval_status is ApprovalStatus.APPROVED]
    return (
        len(approved) == len(tools),
        f"{len(approved)}/{len(tools)} tools processing personal info are approved",
    )


def check_cross_border_controls(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    cross_border = [t for t in snapshot.active_tools if t.cross_border_disclosure]
    if not cross_border:
        return True, "No cross-border data transfers detected"
    blocking = any(
        p.enforcement_level == EnforcementLevel.BLOCK and p.has_rule("cross_border_blocked")
        for p in snapshot.active_policies
    )
    details = f"{len(cross_border)} tools transfer data cross-border"
    if not blocking:
        details += " without a blocking cross-border policy"
    return blocking, details


def check_recent_privacy_breaches(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    window_start = snapshot.as_of - timedelta(days=config.breach_window_days)
    breaches = [
        v
        for v in snapshot.violations
        if v.potential_privacy_breach
        and v.is_open
        and window_start <= v.created_at <= snapshot.as_of
    ]
    return (
        not breaches,
        f"{len(breaches)} unresolved potential privacy breaches in last "
        f"{config.breach_window_days} days",
    )


def check_reportable_breaches(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    pending = [
        v
        for v in snapshot.violations
        if v.reportable_to_regulator and v.remediation_status == RemediationStatus.PENDING
    ]
    return not pending, f"{len(pending)} reportable breaches pending remediation"


# ------------------------------------------------------------------
# Australian Consumer Law
# ------------------------------------------------------------------


def check_usage_disclosure(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    if snapshot.compliance_framework:
        return True, f"Compliance framework: {snapshot.compliance_framework}"
    return False, "No compliance framework configured"


def check_terms_of_service(
    snapshot: OrganizationSnapshot, config: AssessmentConfig
) -> tuple[bool, str]:
    tools = snapshot.active_tools
    with_terms = [t for t in tools if t.terms_of_service_url]
    return (
        len(with_terms) == len(tools),
        f"{len(with_terms)}/{len(tools)} tools have terms of service documented",
    )


REQUIREMENTS: dict[str, Requirement] = {
    r.requirement_id: r
    for r in (
        Requirement(
            "APP1",
            "APP 1: Privacy policy exists",
            FindingSeverity.HIGH,
            "Create privacy policies for AI tool usage",
            check_active_policy,
        ),
        Requirement(
            "APP3",
            "APP 3: Personal information collection controls",
            FindingSeverity.CRITICAL,
            "Implement policies to control personal information collection in AI tools",
            check_personal_info_controls,
        ),
        Requirement(
            "APP6",
            "APP 6: Personal information tools approved",
            FindingSeverity.HIGH,
            "Ensure all tools processing personal information are properly approved",
            check_personal_info_tools_approved,
        ),
        Requirement(
            "APP8",
            "APP 8: Cross-border data transfer controls",
            FindingSeverity.CRITICAL,
            "Implement controls for cross-border AI tool usage",
            check_cross_border_controls,
        ),
        Requirement(
            "APP11",
            "APP 11: No recent security incidents",
            FindingSeverity.CRITICAL,
            "Review and remediate all security incidents",
            check_recent_privacy_breaches,
        ),
        Requirement(
            "NDB",
            "NDB: All reportable breaches addressed",
            FindingSeverity.CRITICAL,
            "Immediately address all OAIC-reportable breaches",
            check_reportable_breaches,
        ),
        Requirement(
            "ACL_TRANSPARENCY",
            "ACL: Transparent AI tool usage disclosure",
            FindingSeverity.MEDIUM,
            "Document and disclose AI tool usage to stakeholders",
            check_usage_disclosure,
        ),
        Requirement(
            "ACL_TERMS",
            "ACL: AI tools have clear terms of service",
            FindingSeverity.MEDIUM,
            "Ensure all AI tools have documented terms of service",
            check_terms_of_service,
        ),
    )
}
