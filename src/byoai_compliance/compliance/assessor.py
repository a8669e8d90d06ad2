"""Compliance framework assessor.

Runs a framework's fixed checklist against an organisation snapshot and
produces a 0-100 compliance score with prioritised recommendations.

Example
-------
>>> assessor = ComplianceAssessor()
>>> report = assessor.assess("au_privacy_act", OrganizationSnapshot("org-1"))
>>> report.score < 100
True
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable

from byoai_compliance.compliance.frameworks import get_framework
from byoai_compliance.compliance.requirements import (
    REQUIREMENTS,
    Finding,
    FindingSeverity,
)
from byoai_compliance.compliance.snapshot import OrganizationSnapshot
from byoai_compliance.config.loader import AssessmentConfig
from byoai_compliance.risk.scorer import round_half_up

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Recommendation:
    """Remediation advice for one non-compliant finding."""

    finding: str
    recommendation: str
    priority: FindingSeverity


@dataclass(frozen=True)
class ComplianceReport:
    """Result of assessing one framework.

    Attributes
    ----------
    score:
        ``round(100 * compliant / total)``; 0 when the framework has no checks.
    max_score:
        ``100 * total`` checks.
    findings:
        One finding per check, in checklist order.
    recommendations:
        Non-compliant findings only, most severe first.
    """

    framework_code: str
    framework_name: str
    score: int
    max_score: int
    findings: tuple[Finding, ...]
    recommendations: tuple[Recommendation, ...]
    assessed_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def compliant(self) -> bool:
        return bool(self.findings) and all(f.compliant for f in self.findings)

    def finding(self, requirement_id: str) -> Finding:
        for item in self.findings:
            if item.requirement_id == requirement_id:
                return item
        raise KeyError(requirement_id)


class ComplianceAssessor:
    """Assesses organisation snapshots against registered frameworks.

    Parameters
    ----------
    config:
        Assessment settings such as the breach look-back window.
    """

    def __init__(self, config: AssessmentConfig | None = None) -> None:
        self._config = config or AssessmentConfig()

    def assess(
        self,
        framework_code: str,
        snapshot: OrganizationSnapshot,
        requirement_ids: Iterable[str] | None = None,
    ) -> ComplianceReport:
        """Run the checklist of ``framework_code`` against ``snapshot``.

        Parameters
        ----------
        framework_code:
            Registered framework code, e.g. ``"au_privacy_act"``.
        snapshot:
            The organisation state to assess.
        requirement_ids:
            Optional subset of the framework's checks to run.  Ids not in
            the framework are skipped with a warning.

        Raises
        ------
        UnknownFrameworkError
            If ``framework_code`` is not registered.
        """
        framework = get_framework(framework_code)
        selected = list(framework.requirement_ids)
        if requirement_ids is not None:
            wanted = set(requirement_ids)
            unknown = wanted - set(selected)
            if unknown:
                logger.warning(
                    "Ignoring requirement ids not in %s: %s",
                    framework.code,
                    ", ".join(sorted(unknown)),
                )
            selected = [r for r in selected if r in wanted]

        findings = tuple(REQUIREMENTS[r].evaluate(snapshot, self._config) for r in selected)
        total = len(findings)
        passed = sum(1 for f in findings if f.compliant)
        score = round_half_up(100 * passed / total) if total else 0

        failing = [(i, f) for i, f in enumerate(findings) if not f.compliant]
        ordered = sorted(failing, key=lambda pair: (-pair[1].severity.rank, pair[0]))
        recommendations = tuple(
            Recommendation(
                finding=f.requirement,
                recommendation=f.recommendation,
                priority=f.severity,
            )
            for _, f in ordered
        )

        logger.info(
            "Assessed %s for %s: score=%d (%d/%d compliant)",
            framework.code,
            snapshot.organization_id,
            score,
            passed,
            total,
        )
        return ComplianceReport(
            framework_code=framework.code,
            framework_name=framework.name,
            score=score,
            max_score=total * 100,
            findings=findings,
            recommendations=recommendations,
            assessed_at=snapshot.as_of,
        )


def assess(
    framework_code: str,
    snapshot: OrganizationSnapshot,
    config: AssessmentConfig | None = None,
) -> ComplianceReport:
    """Assess ``snapshot`` against ``framework_code``."""
    return ComplianceAssessor(config).assess(framework_code, snapshot)
