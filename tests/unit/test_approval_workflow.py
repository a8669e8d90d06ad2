"""Unit tests for approval/workflow.py: ToolApprovalWorkflow."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from byoai_compliance.approval.workflow import ApprovalError, ToolApprovalWorkflow
from byoai_compliance.permissions.roles import APPROVE_TOOLS_PERMISSION, Caller, Role
from byoai_compliance.registry.tool import ApprovalStatus, DeploymentModel, RiskTier, Tool
from byoai_compliance.risk.scorer import AssessmentType

_NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

OFFICER = Caller("officer-1", Role.COMPLIANCE_OFFICER)
ADMIN = Caller("admin-1", Role.ADMIN)
MEMBER = Caller("member-1")


@pytest.fixture()
def workflow() -> ToolApprovalWorkflow:
    return ToolApprovalWorkflow()


@pytest.fixture()
def registered(workflow: ToolApprovalWorkflow) -> Tool:
    return workflow.register(Tool(name="ChatGPT", deployment=DeploymentModel.CLOUD), now=_NOW).tool


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


class TestRegister:
    def test_initial_assessment(self, workflow: ToolApprovalWorkflow) -> None:
        result = workflow.register(Tool(name="ChatGPT", deployment=DeploymentModel.CLOUD), now=_NOW)
        assert result.success is True
        assert result.assessment is not None
        assert result.assessment.assessment_type is AssessmentType.INITIAL
        assert result.assessment.overall_risk == 33
        assert result.assessment.assessed_at == _NOW
        assert result.tool.risk_tier is RiskTier.MEDIUM

    def test_approval_fields_discarded(self, workflow: ToolApprovalWorkflow) -> None:
        claimed = Tool(
            name="Sneaky",
            approval_status=ApprovalStatus.APPROVED,
            approved_by="someone",
            approved_at=_NOW,
            is_active=False,
        )
        tool = workflow.register(claimed).tool
        assert tool.approval_status is ApprovalStatus.PENDING
        assert tool.approved_by is None
        assert tool.approved_at is None
        assert tool.is_active is True
        assert claimed.approval_status is ApprovalStatus.APPROVED


# ---------------------------------------------------------------------------
# Review
# ---------------------------------------------------------------------------


class TestReview:
    def test_officer_approves(self, workflow: ToolApprovalWorkflow, registered: Tool) -> None:
        result = workflow.review(registered, OFFICER, ApprovalStatus.APPROVED, now=_NOW)
        assert result.success is True
        assert result.tool.approval_status is ApprovalStatus.APPROVED
        assert result.tool.approved_by == "officer-1"
        assert result.tool.approved_at == _NOW
        assert result.assessment is not None
        assert result.assessment.assessment_type is AssessmentType.MANUAL
        assert result.assessment.overall_risk < 33
        assert result.tool.risk_tier is result.assessment.risk_tier

    def test_conditional_with_conditions(
        self, workflow: ToolApprovalWorkflow, registered: Tool
    ) -> None:
        result = workflow.review(
            registered, OFFICER, "conditional", conditions={"max_users": 10}
        )
        assert result.tool.approval_status is ApprovalStatus.CONDITIONAL
        assert result.tool.approval_conditions == {"max_users": 10}

    def test_member_with_permission(
        self, workflow: ToolApprovalWorkflow, registered: Tool
    ) -> None:
        approver = Caller("m-2", Role.MEMBER, frozenset({APPROVE_TOOLS_PERMISSION}))
        assert workflow.review(registered, approver, ApprovalStatus.BANNED).success is True

    def test_member_unauthorized(self, workflow: ToolApprovalWorkflow, registered: Tool) -> None:
        result = workflow.review(registered, MEMBER, ApprovalStatus.APPROVED)
        assert result.success is False
        assert result.error is ApprovalError.UNAUTHORIZED
        assert result.tool is registered

    def test_unknown_status(self, workflow: ToolApprovalWorkflow, registered: Tool) -> None:
        result = workflow.review(registered, OFFICER, "sort-of-ok")
        assert result.error is ApprovalError.INVALID_STATUS
        assert "sort-of-ok" in result.message

    def test_inactive_tool(self, workflow: ToolApprovalWorkflow, registered: Tool) -> None:
        inactive = workflow.deactivate(registered, ADMIN).tool
        result = workflow.review(inactive, OFFICER, ApprovalStatus.APPROVED)
        assert result.error is ApprovalError.TOOL_INACTIVE


# ---------------------------------------------------------------------------
# Deactivation
# ---------------------------------------------------------------------------


class TestDeactivate:
    def test_admin_deactivates(self, workflow: ToolApprovalWorkflow, registered: Tool) -> None:
        result = workflow.deactivate(registered, ADMIN)
        assert result.success is True
        assert result.tool.is_active is False
        assert registered.is_active is True

    def test_officer_cannot_deactivate(
        self, workflow: ToolApprovalWorkflow, registered: Tool
    ) -> None:
        result = workflow.deactivate(registered, OFFICER)
        assert result.error is ApprovalError.UNAUTHORIZED
        assert result.tool.is_active is True
