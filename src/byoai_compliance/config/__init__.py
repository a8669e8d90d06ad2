"""Engine configuration."""
from __future__ import annotations

from byoai_compliance.config.loader import (
    AssessmentConfig,
    AuditConfig,
    ComplianceConfig,
    ConfigError,
    ConfigLoader,
    LifecycleConfig,
    RiskWeights,
    ScoringConfig,
    TierThresholds,
)

__all__ = [
    "AssessmentConfig",
    "AuditConfig",
    "ComplianceConfig",
    "ConfigError",
    "ConfigLoader",
    "LifecycleConfig",
    "RiskWeights",
    "ScoringConfig",
    "TierThresholds",
]
