"""Australian Privacy Act checks for tools and individual usage.

These complement the weighted score with the named APP obligations a
tool or usage event triggers.  Both functions are pure.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from byoai_compliance.detection.classifier import DataClassification
from byoai_compliance.registry.tool import ApprovalStatus, RiskTier, Tool
from byoai_compliance.registry.usage import UsageEvent

logger = logging.getLogger(__name__)

HOME_JURISDICTION = "AU"
HIGH_RISK_JURISDICTIONS: frozenset[str] = frozenset({"CN", "RU", "UNKNOWN"})


@dataclass(frozen=True)
class BorderRisk:
    """Cross-border disclosure risk of a tool (APP 8)."""

    risk_level: RiskTier
    requires_notification: bool
    affected_jurisdictions: tuple[str, ...]
    implications: tuple[str, ...] = ()


@dataclass(frozen=True)
class PrivacyActStatus:
    """Outcome of checking one usage event against the APPs.

    Attributes
    ----------
    violations:
        Breaches that make the usage non-compliant.
    warnings:
        Advisory findings that do not affect ``compliant``.
    issues:
        The APP references behind the findings.
    """

    violations: tuple[str, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)
    issues: tuple[str, ...] = field(default_factory=tuple)

    @property
    def compliant(self) -> bool:
        return not self.violations


def evaluate_cross_border_risk(tool: Tool) -> BorderRisk:
    """Assess the APP 8 exposure of ``tool``.

    A tool without cross-border disclosure is low risk and stays in the
    home jurisdiction.  Otherwise the level starts at medium and is raised
    by personal information (high), sensitive information (critical) and
    a high-risk or unknown residency (critical).

    Example
    -------
    >>> evaluate_cross_border_risk(Tool(name="x", cross_border_disclosure=True)).risk_level
    <RiskTier.CRITICAL: 'critical'>
    """
    if not tool.cross_border_disclosure:
        return BorderRisk(
            risk_level=RiskTier.LOW,
            requires_notification=False,
            affected_jurisdictions=(HOME_JURISDICTION,),
        )

    level = RiskTier.MEDIUM
    implications = ["APP 8: Must ensure recipient complies with APPs or is subject to similar law"]

    if tool.processes_personal_info:
        level = RiskTier.HIGH
        implications.append(
            "Personal information crosses borders - heightened compliance requirements"
        )

    if tool.processes_sensitive_info:
        level = RiskTier.CRITICAL
        implications.append(
            "Sensitive information crosses borders - explicit consent may be required"
        )
        implications.append("Document reasonable steps to ensure overseas recipient complies")

    residency = (tool.data_residency or "").strip() or "Unknown"
    if residency.upper() in HIGH_RISK_JURISDICTIONS:
        level = RiskTier.CRITICAL
        implications.append("Data transferred to high-risk jurisdiction")

    return BorderRisk(
        risk_level=level,
        requires_notification=tool.processes_personal_info,
        affected_jurisdictions=(residency,),
        implications=tuple(implications),
    )


def check_privacy_act_usage(tool: Tool, usage: UsageEvent) -> PrivacyActStatus:
    """Check one usage event of ``tool`` against APP 1, 3, 6, 8 and 11.

    Unverified vendor compliance (``None``) is treated the same as a
    vendor known to be non-compliant.
    """
    violations: list[str] = []
    warnings: list[str] = []
    issues: list[str] = []
    verified = tool.vendor_compliance_verified is True

    # APP 1
    if not verified:
        warnings.append("Tool privacy policy not verified")

    # APP 3
    if usage.contains_personal_info and not verified:
        issues.append("APP 3: Personal information collection without verified compliance")

    # APP 6
    if usage.contains_personal_info and tool.approval_status is not ApprovalStatus.APPROVED:
        violations.append("Personal information used in unapproved tool")
        issues.append("APP 6: Use of personal information in unauthorized system")

    # APP 8
    if tool.cross_border_disclosure and usage.contains_personal_info:
        if not verified:
            violations.append(
                "Cross-border transfer of personal info without adequate safeguards"
            )
            issues.append("APP 8: Cross-border disclosure without compliance verification")
        else:
            warnings.append("Cross-border transfer - ensure APP 8 requirements met")

    # APP 11
    if (
        usage.contains_sensitive_info
        and usage.data_classification != DataClassification.RESTRICTED
    ):
        violations.append("Sensitive information not classified as restricted")
        issues.append("APP 11: Inadequate security for sensitive information")

    if violations:
        logger.debug("Usage %s breaches the Privacy Act: %s", usage.event_id, violations)

    return PrivacyActStatus(
        violations=tuple(violations),
        warnings=tuple(warnings),
        issues=tuple(issues),
    )
