"""Weighted regulatory risk scoring for AI tools.

Five independently computed factor scores (each 0-100) are combined by
fixed weights into a single 0-100 risk score and a discrete tier:

======================  ======  =============================================
Factor                  Weight  Rule
======================  ======  =============================================
Data sensitivity        0.35    +40 personal info, +60 sensitive info (cap 100)
Deployment              0.20    on-premise 10, hybrid 50, cloud 70, unknown 80
Cross-border transfer   0.25    0 without transfer; else 60 +20 personal
                                +20 sensitive +10 outside trusted regions
Compliance / vendor     0.15    50, -30 verified, +50 not verified,
                                +20 untrusted vendor (clamped 0-100)
Approval status         0.05    approved 0 ... banned 100
======================  ======  =============================================

Missing or unrecognised inputs always take the highest-risk branch of each
lookup.  All numbers come from :class:`ScoringConfig` and can be overridden.

Example
-------
>>> scorer = RiskScorer()
>>> result = scorer.score(Tool(name="Internal LLM", deployment=DeploymentModel.ON_PREMISE,
...                            vendor_compliance_verified=True,
...                            approval_status=ApprovalStatus.APPROVED, data_residency="AU",
...                            vendor="Acme"))
>>> result.risk_tier
<RiskTier.LOW: 'low'>
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from byoai_compliance.config.loader import ScoringConfig
from byoai_compliance.registry.tool import ApprovalStatus, DeploymentModel, RiskTier, Tool

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for non-negatives."""
    return int(math.floor(value + 0.5))


class AssessmentType(str, Enum):
    """Why a risk assessment was produced."""

    INITIAL = "initial"
    PERIODIC = "periodic"
    INCIDENT_TRIGGERED = "incident_triggered"
    MANUAL = "manual"


@dataclass(frozen=True)
class RiskFactor:
    """One weighted contribution to the overall risk score."""

    category: str
    score: int
    weight: float
    description: str

    @property
    def contribution(self) -> float:
        return self.score * self.weight


@dataclass(frozen=True)
class RiskScore:
    """Result of scoring a tool.

    Attributes
    ----------
    overall_risk:
        Weighted score in ``[0, 100]``.
    risk_tier:
        Tier derived from ``overall_risk`` with inclusive lower bounds.
    factors:
        Per-factor breakdown in scoring order.
    recommendations:
        Remediation advice for every triggered condition.
    """

    overall_risk: int
    risk_tier: RiskTier
    factors: tuple[RiskFactor, ...]
    recommendations: tuple[str, ...]

    def factor(self, category: str) -> RiskFactor:
        """Return the factor with the given category name."""
        for item in self.factors:
            if item.category == category:
                return item
        raise KeyError(category)


@dataclass(frozen=True)
class RiskAssessment:
    """Immutable point-in-time risk snapshot of a tool.

    Reassessment appends a new record; existing ones are never edited.
    """

    tool_id: str
    assessment_type: AssessmentType
    overall_risk: int
    risk_tier: RiskTier
    factors: tuple[RiskFactor, ...]
    recommendations: tuple[str, ...]
    assessed_at: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))


DATA_SENSITIVITY = "Data Sensitivity"
DEPLOYMENT = "Deployment"
CROSS_BORDER = "Cross-Border Transfer"
COMPLIANCE = "Compliance"
APPROVAL_STATUS = "Approval Status"


class RiskScorer:
    """Computes weighted risk scores for tools.

    The scorer holds only its (immutable) configuration and is safe to
    share between threads.

    Parameters
    ----------
    config:
        Scoring policy.  Defaults to the built-in weights and thresholds.
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or ScoringConfig()
        self._trusted_regions = {r.upper() for r in self._config.trusted_regions}
        self._untrusted_vendors = {v.lower() for v in self._config.untrusted_vendors}

    @property
    def config(self) -> ScoringConfig:
        return self._config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def score(self, tool: Tool) -> RiskScore:
        """Score a tool.

        Parameters
        ----------
        tool:
            The tool to score.  Every field combination yields a score.

        Returns
        -------
        RiskScore
            Overall score, tier, factor breakdown and recommendations.
        """
        weights = self._config.weights
        factors = (
            RiskFactor(
                category=DATA_SENSITIVITY,
                score=self.data_sensitivity_score(tool),
                weight=weights.data_sensitivity,
                description=(
                    "Tool processes sensitive personal information"
                    if tool.processes_sensitive_info
                    else "Tool processes personal information"
                    if tool.processes_personal_info
                    else "Tool handles general data"
                ),
            ),
            RiskFactor(
                category=DEPLOYMENT,
                score=self.deployment_score(tool),
                weight=weights.deployment,
                description=f"{tool.deployment.value} deployment model",
            ),
            RiskFactor(
                category=CROSS_BORDER,
                score=self.cross_border_score(tool),
                weight=weights.cross_border,
                description=(
                    "Data transferred outside the home jurisdiction - APP 8 applies"
                    if tool.cross_border_disclosure
                    else "Data remains within the home jurisdiction"
                ),
            ),
            RiskFactor(
                category=COMPLIANCE,
                score=self.compliance_score(tool),
                weight=weights.compliance,
                description=(
                    "Vendor compliance verified"
                    if tool.vendor_compliance_verified is True
                    else "Vendor compliance not verified"
                ),
            ),
            RiskFactor(
                category=APPROVAL_STATUS,
                score=self.approval_score(tool),
                weight=weights.approval_status,
                description=(
                    f"Tool status: {tool.approval_status.value}"
                    if tool.approval_status is not None
                    else "Tool status: unknown"
                ),
            ),
        )

        overall = round_half_up(math.fsum(f.contribution for f in factors))
        overall = min(max(overall, 0), 100)
        tier = self.tier_for(overall)
        recommendations = self._recommendations(tool, tier)

        logger.debug("Scored tool %s: %d (%s)", tool.tool_id, overall, tier.value)
        return RiskScore(
            overall_risk=overall,
            risk_tier=tier,
            factors=factors,
            recommendations=recommendations,
        )

    def assess(
        self,
        tool: Tool,
        assessment_type: AssessmentType = AssessmentType.MANUAL,
        now: datetime | None = None,
    ) -> RiskAssessment:
        """Score a tool and wrap the result in an immutable assessment record."""
        result = self.score(tool)
        return RiskAssessment(
            tool_id=tool.tool_id,
            assessment_type=assessment_type,
            overall_risk=result.overall_risk,
            risk_tier=result.risk_tier,
            factors=result.factors,
            recommendations=result.recommendations,
            assessed_at=now or datetime.now(tz=timezone.utc),
        )

    def tier_for(self, overall_risk: int) -> RiskTier:
        """Map a 0-100 score to a tier; lower bounds are inclusive."""
        thresholds = self._config.thresholds
        if overall_risk >= thresholds.critical:
            return RiskTier.CRITICAL
        if overall_risk >= thresholds.high:
            return RiskTier.HIGH
        if overall_risk >= thresholds.medium:
            return RiskTier.MEDIUM
        return RiskTier.LOW

    # ------------------------------------------------------------------
    # Factor scores
    # ------------------------------------------------------------------

    def data_sensitivity_score(self, tool: Tool) -> int:
        score = 0
        if tool.processes_personal_info:
            score += self._config.personal_info_score
        if tool.processes_sensitive_info:
            score += self._config.sensitive_info_score
        return min(score, 100)

    def deployment_score(self, tool: Tool) -> int:
        table = self._config.deployment_scores
        fallback = max(table.values(), default=100)
        return table.get(tool.deployment.value, table.get(DeploymentModel.UNKNOWN.value, fallback))

    def cross_border_score(self, tool: Tool) -> int:
        if not tool.cross_border_disclosure:
            return 0

        cfg = self._config
        score = cfg.cross_border_base
        if tool.processes_personal_info:
            score += cfg.cross_border_personal
        if tool.processes_sensitive_info:
            score += cfg.cross_border_sensitive
        if not self.is_trusted_region(tool.data_residency):
            score += cfg.cross_border_untrusted_region
        return min(score, 100)

    def compliance_score(self, tool: Tool) -> int:
        cfg = self._config
        score = cfg.compliance_base
        if tool.vendor_compliance_verified is True:
            score += cfg.compliance_verified_adjustment
        else:
            score += cfg.compliance_unverified_adjustment
        if self.is_untrusted_vendor(tool.vendor):
            score += cfg.untrusted_vendor_adjustment
        return min(max(score, 0), 100)

    def approval_score(self, tool: Tool) -> int:
        if tool.approval_status is None:
            return self._config.unknown_approval_score
        return self._config.approval_scores.get(
            tool.approval_status.value, self._config.unknown_approval_score
        )

    def is_trusted_region(self, residency: str | None) -> bool:
        return residency is not None and residency.strip().upper() in self._trusted_regions

    def is_untrusted_vendor(self, vendor: str | None) -> bool:
        if vendor is None or not vendor.strip():
            return True
        return vendor.strip().lower() in self._untrusted_vendors

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _recommendations(self, tool: Tool, tier: RiskTier) -> tuple[str, ...]:
        recommendations: list[str] = []

        if tier == RiskTier.CRITICAL:
            recommendations.append("Immediate review required before production use")
            recommendations.append("Conduct formal Privacy Impact Assessment (PIA)")

        if tool.cross_border_disclosure and tool.processes_personal_info:
            recommendations.append("Ensure APP 8 compliance for cross-border disclosure")
            recommendations.append("Document cross-border transfer safeguards")
            recommendations.append("Consider data residency requirements")

        if tool.processes_sensitive_info:
            recommendations.append("Implement additional security controls for sensitive data")
            recommendations.append("Ensure proper consent mechanisms are in place")
            recommendations.append("Regular audit of data handling practices")

        if tool.vendor_compliance_verified is not True:
            recommendations.append("Verify vendor Privacy Act 1988 compliance")
            recommendations.append("Request data processing agreement from vendor")

        if tool.deployment == DeploymentModel.CLOUD:
            recommendations.append("Review cloud provider security certifications")
            recommendations.append("Ensure data encryption in transit and at rest")

        if tool.approval_status is not ApprovalStatus.APPROVED:
            recommendations.append("Complete formal approval process before widespread use")

        return tuple(dict.fromkeys(recommendations))


_DEFAULT_SCORER = RiskScorer()


def score(tool: Tool, config: ScoringConfig | None = None) -> RiskScore:
    """Score ``tool`` with the given (or default) scoring policy."""
    scorer = _DEFAULT_SCORER if config is None else RiskScorer(config)
    return scorer.score(tool)
