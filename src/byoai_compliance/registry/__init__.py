"""Tool registry and usage records."""
from __future__ import annotations

from byoai_compliance.registry.tool import (
    ApprovalStatus,
    DeploymentModel,
    RiskTier,
    Tool,
    ToolCategory,
)
from byoai_compliance.registry.usage import UsageEvent, digest_prompt

__all__ = [
    "ApprovalStatus",
    "DeploymentModel",
    "RiskTier",
    "Tool",
    "ToolCategory",
    "UsageEvent",
    "digest_prompt",
]
