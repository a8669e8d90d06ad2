"""Tool approval workflow."""
from __future__ import annotations

from byoai_compliance.approval.workflow import (
    ApprovalError,
    ApprovalResult,
    ToolApprovalWorkflow,
)

__all__ = ["ApprovalError", "ApprovalResult", "ToolApprovalWorkflow"]
