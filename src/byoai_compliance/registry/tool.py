"""AI tool registry records.

A :class:`Tool` is a registered AI system.  Records are immutable; the
approval workflow produces updated copies rather than editing in place,
and tools are soft-deactivated instead of deleted.

Enum values accept both hyphenated and underscored spellings
(``"on-premise"`` and ``"on_premise"``).  Unrecognised values map to the
most conservative member.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from byoai_compliance.registry.fields import parse_flag

logger = logging.getLogger(__name__)


def _normalise(value: object) -> str:
    return str(value).strip().lower().replace("-", "_").replace(" ", "_")


class ToolCategory(str, Enum):
    """Kind of AI system."""

    LLM = "llm"
    IMAGE_GENERATION = "image_generation"
    CODE_ASSISTANT = "code_assistant"
    DATA_ANALYSIS = "data_analysis"
    CHATBOT = "chatbot"
    OTHER = "other"

    @classmethod
    def parse(cls, value: object) -> "ToolCategory":
        aliases = {"image_gen": cls.IMAGE_GENERATION, "code_assist": cls.CODE_ASSISTANT}
        key = _normalise(value)
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


class DeploymentModel(str, Enum):
    """Where the tool runs."""

    ON_PREMISE = "on_premise"
    HYBRID = "hybrid"
    CLOUD = "cloud"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: object) -> "DeploymentModel":
        if value is None:
            return cls.UNKNOWN
        try:
            return cls(_normalise(value))
        except ValueError:
            logger.warning("Unknown deployment model %r; treating as unknown.", value)
            return cls.UNKNOWN


class ApprovalStatus(str, Enum):
    """Approval workflow status of a tool."""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    CONDITIONAL = "conditional"
    RESTRICTED = "restricted"
    BANNED = "banned"

    @classmethod
    def parse(cls, value: object) -> "ApprovalStatus | None":
        """Return the matching status, or ``None`` when unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(_normalise(value))
        except ValueError:
            logger.warning("Unknown approval status %r.", value)
            return None


class RiskTier(str, Enum):
    """Discrete risk bucket derived from a 0-100 risk score."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @classmethod
    def parse(cls, value: object) -> "RiskTier | None":
        if value is None:
            return None
        try:
            return cls(_normalise(value))
        except ValueError:
            return None


@dataclass(frozen=True)
class Tool:
    """A registered AI tool.

    ``vendor_compliance_verified`` is tri-state: ``True`` (verified),
    ``False`` (known non-compliant) or ``None`` (never checked).
    ``approval_status`` is ``None`` only when the source record carried an
    unrecognised value.
    """

    name: str
    tool_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    organization_id: str | None = None
    vendor: str | None = None
    category: ToolCategory = ToolCategory.OTHER
    deployment: DeploymentModel = DeploymentModel.UNKNOWN
    processes_personal_info: bool = False
    processes_sensitive_info: bool = False
    cross_border_disclosure: bool = False
    data_residency: str | None = None
    vendor_compliance_verified: bool | None = None
    approval_status: ApprovalStatus | None = ApprovalStatus.PENDING
    risk_tier: RiskTier | None = None
    is_active: bool = True
    terms_of_service_url: str | None = None
    approval_conditions: dict[str, object] = field(default_factory=dict)
    approved_by: str | None = None
    approved_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Tool":
        """Build a Tool from a plain dictionary (e.g. a parsed YAML record).

        Accepts both the registry column names (``tool_name``,
        ``tool_vendor``, ``tool_type``, ``deployment_type``,
        ``privacy_act_compliant``) and the attribute names of this class.
        Boolean fields accept true/false/yes/no strings; an unreadable data
        flag counts as set and an unreadable verification as unverified.
        """

        def pick(*keys: str, default: object = None) -> object:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return default

        verified = pick("vendor_compliance_verified", "privacy_act_compliant")
        conditions = pick("approval_conditions", default={})
        if not isinstance(conditions, dict):
            logger.warning("Ignoring non-mapping approval_conditions %r.", conditions)
            conditions = {}
        risk_raw = pick("risk_tier", "risk_level")
        approval_raw = pick("approval_status", default=ApprovalStatus.PENDING.value)

        kwargs: dict[str, object] = {}
        tool_id = pick("tool_id", "id")
        if tool_id is not None:
            kwargs["tool_id"] = str(tool_id)

        return cls(
            name=str(pick("name", "tool_name", default="unnamed")),
            organization_id=_optional_str(pick("organization_id")),
            vendor=_optional_str(pick("vendor", "tool_vendor")),
            category=ToolCategory.parse(pick("category", "tool_type", default="other")),
            deployment=DeploymentModel.parse(pick("deployment", "deployment_type")),
            processes_personal_info=_risk_flag(pick("processes_personal_info")),
            processes_sensitive_info=_risk_flag(pick("processes_sensitive_info")),
            cross_border_disclosure=_risk_flag(pick("cross_border_disclosure")),
            data_residency=_optional_str(pick("data_residency")),
            vendor_compliance_verified=parse_flag(
                verified, fallback=None, field="vendor_compliance_verified"
            ),
            approval_status=ApprovalStatus.parse(approval_raw),
            risk_tier=RiskTier.parse(risk_raw),
            is_active=bool(parse_flag(pick("is_active"), fallback=True, field="is_active")),
            terms_of_service_url=_optional_str(pick("terms_of_service_url")),
            approval_conditions=dict(conditions),
            **kwargs,  # type: ignore[arg-type]
        )


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def _risk_flag(value: object) -> bool:
    if value is None:
        return False
    return bool(parse_flag(value, fallback=True, field="tool data flag"))
