"""Compliance engine configuration with Pydantic v2 validation.

Loads and validates a ``compliance.yaml`` file into a typed
:class:`ComplianceConfig` object.  Every scoring weight, tier threshold and
lookup table the engine uses lives here, so a scoring policy can be swapped
without code changes.  Unknown keys are allowed to support future schema
additions without breakage.

Example
-------
>>> loader = ConfigLoader()
>>> config = loader.load_string("scoring:\\n  thresholds:\\n    critical: 80\\n")
>>> config.scoring.thresholds.critical
80
"""
from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from byoai_compliance.permissions.roles import Role


class ConfigError(ValueError):
    """Raised when a configuration file is malformed or fails validation.

    Attributes
    ----------
    config_path:
        The path to the config file that caused the error, if known.
    """

    def __init__(self, message: str, config_path: str | None = None) -> None:
        self.config_path = config_path
        prefix = f"[{config_path}] " if config_path else ""
        super().__init__(f"{prefix}{message}")


class RiskWeights(BaseModel):
    """Weights of the five risk factors; must sum to 1.0."""

    model_config = {"extra": "forbid", "frozen": True}

    data_sensitivity: float = Field(default=0.35, ge=0, le=1)
    deployment: float = Field(default=0.20, ge=0, le=1)
    cross_border: float = Field(default=0.25, ge=0, le=1)
    compliance: float = Field(default=0.15, ge=0, le=1)
    approval_status: float = Field(default=0.05, ge=0, le=1)

    @model_validator(mode="after")
    def check_total(self) -> "RiskWeights":
        total = (
            self.data_sensitivity
            + self.deployment
            + self.cross_border
            + self.compliance
            + self.approval_status
        )
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Risk weights must sum to 1.0, got {total:.4f}.")
        return self


class TierThresholds(BaseModel):
    """Inclusive lower bounds of the risk tiers."""

    model_config = {"extra": "forbid", "frozen": True}

    critical: int = Field(default=75, ge=0, le=100)
    high: int = Field(default=50, ge=0, le=100)
    medium: int = Field(default=25, ge=0, le=100)

    @model_validator(mode="after")
    def check_order(self) -> "TierThresholds":
        if not self.critical > self.high > self.medium:
            raise ValueError(
                "Tier thresholds must be strictly descending: "
                f"critical={self.critical} high={self.high} medium={self.medium}."
            )
        return self


class ScoringConfig(BaseModel):
    """Scoring policy for the risk scorer."""

    model_config = {"extra": "allow", "frozen": True}

    weights: RiskWeights = Field(default_factory=RiskWeights)
    thresholds: TierThresholds = Field(default_factory=TierThresholds)

    personal_info_score: int = Field(default=40, ge=0, le=100)
    sensitive_info_score: int = Field(default=60, ge=0, le=100)

    deployment_scores: dict[str, int] = Field(
        default_factory=lambda: {
            "on_premise": 10,
            "hybrid": 50,
            "cloud": 70,
            "unknown": 80,
        }
    )

    cross_border_base: int = Field(default=60, ge=0, le=100)
    cross_border_personal: int = Field(default=20, ge=0, le=100)
    cross_border_sensitive: int = Field(default=20, ge=0, le=100)
    cross_border_untrusted_region: int = Field(default=10, ge=0, le=100)
    trusted_regions: list[str] = Field(default_factory=lambda: ["AU", "ANZ"])

    compliance_base: int = Field(default=50, ge=0, le=100)
    compliance_verified_adjustment: int = Field(default=-30)
    compliance_unverified_adjustment: int = Field(default=50)
    untrusted_vendor_adjustment: int = Field(default=20)
    untrusted_vendors: list[str] = Field(default_factory=lambda: ["Unknown", "Unverified"])

    approval_scores: dict[str, int] = Field(
        default_factory=lambda: {
            "approved": 0,
            "conditional": 30,
            "under_review": 50,
            "pending": 70,
            "restricted": 90,
            "banned": 100,
        }
    )
    unknown_approval_score: int = Field(default=100, ge=0, le=100)

    @field_validator("deployment_scores", "approval_scores")
    @classmethod
    def validate_scores(cls, values: dict[str, int]) -> dict[str, int]:
        for key, value in values.items():
            if not 0 <= value <= 100:
                raise ValueError(f"Score for '{key}' must be within 0-100, got {value}.")
        return values


class LifecycleConfig(BaseModel):
    """Configuration for violation remediation."""

    model_config = {"extra": "allow", "frozen": True}

    remediation_min_role: str = Field(default="compliance_officer")
    reopen_min_role: str = Field(default="admin")
    reportable_subject_threshold: int = Field(default=100, ge=1)

    @field_validator("remediation_min_role", "reopen_min_role")
    @classmethod
    def validate_role(cls, value: str) -> str:
        role = Role.lookup(value)
        if role is None:
            allowed = ", ".join(r.value for r in Role)
            raise ValueError(f"Unknown role '{value}'; expected one of: {allowed}.")
        return role.value


class AssessmentConfig(BaseModel):
    """Configuration for compliance-framework assessments."""

    model_config = {"extra": "allow", "frozen": True}

    breach_window_days: int = Field(default=30, ge=1)


class AuditConfig(BaseModel):
    """Configuration for the audit trail.

    Auditing is opt-in.  A relative ``log_path`` in a config file is resolved
    against the directory holding that file.
    """

    model_config = {"extra": "allow"}

    enabled: bool = Field(default=False)
    log_path: Path = Field(default=Path("./compliance_audit.jsonl"))


class ComplianceConfig(BaseModel):
    """Top-level engine configuration schema.

    Loaded from ``compliance.yaml``.  All sections are optional and fall
    back to the built-in scoring policy.
    """

    model_config = {"extra": "allow"}

    version: str = Field(default="1")
    organization_id: str | None = Field(default=None)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    assessment: AssessmentConfig = Field(default_factory=AssessmentConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
    policies: list[dict[str, object]] = Field(default_factory=list)


class ConfigLoader:
    """Loads and validates compliance YAML configuration.

    Example
    -------
    >>> loader = ConfigLoader()
    >>> config = loader.load(Path("compliance.yaml"))
    """

    def load(self, config_path: Path) -> ComplianceConfig:
        """Load and validate a compliance YAML file.

        Raises
        ------
        FileNotFoundError:
            When the config file does not exist.
        ConfigError:
            When the YAML content fails validation.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Compliance config not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw: dict[str, object] = yaml.safe_load(fh) or {}

        config = self._validate(raw, str(config_path))
        log_path = config.audit.log_path
        if not log_path.is_absolute():
            config.audit = config.audit.model_copy(
                update={"log_path": config_path.parent / log_path}
            )
        return config

    def load_string(self, yaml_content: str) -> ComplianceConfig:
        """Load and validate a YAML string directly."""
        raw: dict[str, object] = yaml.safe_load(yaml_content) or {}
        return self._validate(raw, None)

    def defaults(self) -> ComplianceConfig:
        """Return a config with all defaults (no file required)."""
        return ComplianceConfig()

    def _validate(self, raw: dict[str, object], source: str | None) -> ComplianceConfig:
        if not isinstance(raw, dict):
            raise ConfigError("Top-level YAML value must be a mapping.", source)
        try:
            return ComplianceConfig.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(str(exc), source) from exc
