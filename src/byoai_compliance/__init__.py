"""byoai-compliance: Risk and policy compliance engine for employee AI tool usage.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import byoai_compliance as bc
>>> bc.__version__
'0.1.0'
>>> bc.classify("My TFN is 123 456 782").classification
<DataClassification.RESTRICTED: 'restricted'>
>>> tool = bc.Tool(name="ChatGPT", deployment=bc.DeploymentModel.CLOUD)
>>> bc.score(tool).risk_tier
<RiskTier.MEDIUM: 'medium'>
"""
from __future__ import annotations

__version__: str = "0.1.0"

from byoai_compliance.service import ComplianceService, UsageOutcome

# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------
from byoai_compliance.detection.classifier import (
    ClassificationResult,
    DataClassification,
    SensitivityClassifier,
    classify,
)
from byoai_compliance.detection.pii_detector import PiiDetector, PiiMatch

# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
from byoai_compliance.registry.tool import (
    ApprovalStatus,
    DeploymentModel,
    RiskTier,
    Tool,
    ToolCategory,
)
from byoai_compliance.registry.usage import UsageEvent

# ---------------------------------------------------------------------------
# Risk
# ---------------------------------------------------------------------------
from byoai_compliance.risk.scorer import RiskAssessment, RiskFactor, RiskScore, RiskScorer, score
from byoai_compliance.risk.privacy import check_privacy_act_usage, evaluate_cross_border_risk

# ---------------------------------------------------------------------------
# Policies
# ---------------------------------------------------------------------------
from byoai_compliance.policies.model import Decision, EnforcementLevel, Policy, Severity
from byoai_compliance.policies.engine import (
    EvaluationResult,
    PolicyEvaluator,
    PolicyViolation,
    evaluate,
)
from byoai_compliance.policies.parser import PolicyParseError, PolicyParser
from byoai_compliance.policies.actions import PolicyActionHandler, PolicyBlockedError
from byoai_compliance.policies.report import PolicyReport, generate_policy_report

# ---------------------------------------------------------------------------
# Violations
# ---------------------------------------------------------------------------
from byoai_compliance.violations.model import RemediationStatus, Violation
from byoai_compliance.violations.lifecycle import (
    TransitionError,
    TransitionResult,
    ViolationLifecycle,
)
from byoai_compliance.violations.reportability import assess_reportability

# ---------------------------------------------------------------------------
# Compliance
# ---------------------------------------------------------------------------
from byoai_compliance.compliance.assessor import ComplianceAssessor, ComplianceReport, assess
from byoai_compliance.compliance.frameworks import UnknownFrameworkError, list_frameworks
from byoai_compliance.compliance.snapshot import OrganizationSnapshot, load_snapshot

# ---------------------------------------------------------------------------
# Permissions, audit, config
# ---------------------------------------------------------------------------
from byoai_compliance.permissions.roles import Caller, Role
from byoai_compliance.audit.trail import AuditTrail
from byoai_compliance.config.loader import ComplianceConfig, ConfigError, ConfigLoader
from byoai_compliance.approval.workflow import ToolApprovalWorkflow
from byoai_compliance.store.memory import InMemoryStore

# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------
from byoai_compliance.templates.policy_templates import (
    get_template,
    list_templates,
    write_template,
)

__all__ = [
    "__version__",
    "ComplianceService",
    "UsageOutcome",
    # Detection
    "ClassificationResult",
    "DataClassification",
    "PiiDetector",
    "PiiMatch",
    "SensitivityClassifier",
    "classify",
    # Registry
    "ApprovalStatus",
    "DeploymentModel",
    "RiskTier",
    "Tool",
    "ToolCategory",
    "UsageEvent",
    # Risk
    "RiskAssessment",
    "RiskFactor",
    "RiskScore",
    "RiskScorer",
    "check_privacy_act_usage",
    "evaluate_cross_border_risk",
    "score",
    # Policies
    "Decision",
    "EnforcementLevel",
    "EvaluationResult",
    "Policy",
    "PolicyActionHandler",
    "PolicyBlockedError",
    "PolicyEvaluator",
    "PolicyParseError",
    "PolicyParser",
    "PolicyReport",
    "PolicyViolation",
    "Severity",
    "evaluate",
    "generate_policy_report",
    # Violations
    "RemediationStatus",
    "TransitionError",
    "TransitionResult",
    "Violation",
    "ViolationLifecycle",
    "assess_reportability",
    # Compliance
    "ComplianceAssessor",
    "ComplianceReport",
    "OrganizationSnapshot",
    "UnknownFrameworkError",
    "assess",
    "list_frameworks",
    "load_snapshot",
    # Permissions, audit, config
    "AuditTrail",
    "Caller",
    "ComplianceConfig",
    "ConfigError",
    "ConfigLoader",
    "InMemoryStore",
    "Role",
    "ToolApprovalWorkflow",
    # Templates
    "get_template",
    "list_templates",
    "write_template",
]
