"""Tool approval workflow.

Manages the lifecycle of registered AI tools: registration with an initial
risk assessment, approval-status review, and soft deactivation.

Tools are immutable; every operation returns an :class:`ApprovalResult`
carrying the updated copy (or the unchanged input and an
:class:`ApprovalError` when the request is rejected).  Persisting the
result is the caller's job.

Example
-------
>>> workflow = ToolApprovalWorkflow()
>>> registered = workflow.register(Tool(name="ChatGPT", deployment=DeploymentModel.CLOUD))
>>> registered.tool.approval_status
<ApprovalStatus.PENDING: 'pending'>
>>> officer = Caller("u-1", Role.COMPLIANCE_OFFICER)
>>> approved = workflow.review(registered.tool, officer, ApprovalStatus.APPROVED)
>>> approved.tool.approved_by
'u-1'
"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from byoai_compliance.permissions.roles import Caller, can_approve_tools, can_deactivate_tools
from byoai_compliance.registry.tool import ApprovalStatus, Tool
from byoai_compliance.risk.scorer import AssessmentType, RiskAssessment, RiskScorer

logger = logging.getLogger(__name__)


class ApprovalError(str, Enum):
    """Why an approval-workflow request was rejected."""

    UNAUTHORIZED = "unauthorized"
    INVALID_STATUS = "invalid_status"
    TOOL_INACTIVE = "tool_inactive"


@dataclass(frozen=True)
class ApprovalResult:
    """Outcome of a workflow operation.

    Attributes
    ----------
    success:
        ``True`` when the request was applied.
    tool:
        The updated tool on success, the unchanged input otherwise.
    assessment:
        The risk assessment produced by the operation, if any.
    error:
        Rejection reason when ``success`` is ``False``.
    message:
        Human-readable explanation of a rejection.
    """

    success: bool
    tool: Tool
    assessment: RiskAssessment | None = None
    error: ApprovalError | None = None
    message: str = ""


class ToolApprovalWorkflow:
    """Registers, reviews and deactivates AI tools.

    Parameters
    ----------
    scorer:
        Risk scorer used for the initial and review assessments.
    """

    def __init__(self, scorer: RiskScorer | None = None) -> None:
        self._scorer = scorer or RiskScorer()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, tool: Tool, now: datetime | None = None) -> ApprovalResult:
        """Register ``tool`` as pending and attach its initial risk tier.

        Any approval fields on the input are discarded: new tools always
        start in ``pending``.
        """
        pending = dataclasses.replace(
            tool,
            approval_status=ApprovalStatus.PENDING,
            approved_by=None,
            approved_at=None,
            is_active=True,
        )
        assessment = self._scorer.assess(pending, AssessmentType.INITIAL, now=now)
        registered = dataclasses.replace(pending, risk_tier=assessment.risk_tier)
        logger.info(
            "Registered tool %s (%s): risk %d (%s)",
            registered.tool_id,
            registered.name,
            assessment.overall_risk,
            assessment.risk_tier.value,
        )
        return ApprovalResult(success=True, tool=registered, assessment=assessment)

    # ------------------------------------------------------------------
    # Review
    # ------------------------------------------------------------------

    def review(
        self,
        tool: Tool,
        caller: Caller,
        new_status: ApprovalStatus | str,
        conditions: dict[str, object] | None = None,
        now: datetime | None = None,
    ) -> ApprovalResult:
        """Set the approval status of ``tool`` on behalf of ``caller``.

        Parameters
        ----------
        tool:
            The tool under review.
        caller:
            Must be a compliance officer or above, or hold the
            ``can_approve_tools`` permission.
        new_status:
            The decided status.
        conditions:
            Conditions attached to a conditional approval.
        now:
            Review timestamp; defaults to the current UTC time.

        Returns
        -------
        ApprovalResult
            The re-scored tool stamped with reviewer and time.
        """
        if not can_approve_tools(caller):
            return self._reject(
                tool,
                ApprovalError.UNAUTHORIZED,
                "Insufficient permissions to approve tools",
                caller,
            )
        if not tool.is_active:
            return self._reject(
                tool, ApprovalError.TOOL_INACTIVE, "Deactivated tools cannot be reviewed", caller
            )
        status = ApprovalStatus.parse(new_status)
        if status is None:
            return self._reject(
                tool,
                ApprovalError.INVALID_STATUS,
                f"Unknown approval status {new_status!r}",
                caller,
            )

        reviewed_at = now or datetime.now(tz=timezone.utc)
        reviewed = dataclasses.replace(
            tool,
            approval_status=status,
            approved_by=caller.user_id,
            approved_at=reviewed_at,
            approval_conditions=(
                dict(conditions) if conditions is not None else tool.approval_conditions
            ),
        )
        assessment = self._scorer.assess(reviewed, AssessmentType.MANUAL, now=reviewed_at)
        reviewed = dataclasses.replace(reviewed, risk_tier=assessment.risk_tier)

        logger.info(
            "Tool %s set to %s by %s (risk %s)",
            tool.tool_id,
            status.value,
            caller.user_id,
            assessment.risk_tier.value,
        )
        return ApprovalResult(success=True, tool=reviewed, assessment=assessment)

    # ------------------------------------------------------------------
    # Deactivation
    # ------------------------------------------------------------------

    def deactivate(self, tool: Tool, caller: Caller) -> ApprovalResult:
        """Soft-deactivate ``tool``; only admins and owners may do this."""
        if not can_deactivate_tools(caller):
            return self._reject(
                tool,
                ApprovalError.UNAUTHORIZED,
                "Only admins and owners can deactivate tools",
                caller,
            )
        logger.info("Tool %s deactivated by %s", tool.tool_id, caller.user_id)
        return ApprovalResult(success=True, tool=dataclasses.replace(tool, is_active=False))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _reject(
        self,
        tool: Tool,
        error: ApprovalError,
        message: str,
        caller: Caller,
    ) -> ApprovalResult:
        logger.warning(
            "Rejected change to tool %s by %s: %s", tool.tool_id, caller.user_id, message
        )
        return ApprovalResult(success=False, tool=tool, error=error, message=message)
