"""Tool risk scoring."""
from __future__ import annotations

from byoai_compliance.risk.privacy import (
    BorderRisk,
    PrivacyActStatus,
    check_privacy_act_usage,
    evaluate_cross_border_risk,
)
from byoai_compliance.risk.scorer import (
    AssessmentType,
    RiskAssessment,
    RiskFactor,
    RiskScore,
    RiskScorer,
    round_half_up,
    score,
)

__all__ = [
    "AssessmentType",
    "BorderRisk",
    "PrivacyActStatus",
    "RiskAssessment",
    "RiskFactor",
    "RiskScore",
    "RiskScorer",
    "check_privacy_act_usage",
    "evaluate_cross_border_risk",
    "round_half_up",
    "score",
]
