"""Service facade wiring the engine to storage and the audit trail.

The engine components are pure; this module is the thin caller layer that
fetches records from a :class:`~byoai_compliance.store.ComplianceStore`,
runs the engine, persists the results and writes audit records.

Example
-------
::

    from byoai_compliance import ComplianceService
    service = ComplianceService()
    registered = service.register_tool(Tool(name="ChatGPT", organization_id="org-1"), admin)
    outcome = service.log_usage("Summarise this memo", tool_id=registered.tool.tool_id,
                                user_id="u-1", organization_id="org-1")
    print(outcome.decision)

"""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable

from byoai_compliance.approval.workflow import ApprovalResult, ToolApprovalWorkflow
from byoai_compliance.audit.trail import AuditTrail
from byoai_compliance.compliance.assessor import ComplianceAssessor, ComplianceReport
from byoai_compliance.config.loader import ComplianceConfig
from byoai_compliance.detection.classifier import DataClassification, SensitivityClassifier
from byoai_compliance.permissions.roles import Caller
from byoai_compliance.policies.actions import (
    EnforcementAction,
    PolicyActionHandler,
    PolicyBlockedError,
    enforce,
)
from byoai_compliance.policies.engine import EvaluationResult, PolicyEvaluator
from byoai_compliance.policies.model import Decision, EnforcementLevel, Policy
from byoai_compliance.policies.parser import PolicyParser
from byoai_compliance.policies.report import PolicyReport, generate_policy_report
from byoai_compliance.registry.tool import ApprovalStatus, Tool
from byoai_compliance.registry.usage import UsageEvent
from byoai_compliance.risk.scorer import RiskScorer
from byoai_compliance.store.memory import ComplianceStore, InMemoryStore
from byoai_compliance.violations.lifecycle import TransitionResult, ViolationLifecycle
from byoai_compliance.violations.model import RemediationStatus, Violation
from byoai_compliance.violations.summary import visible_violations

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UsageOutcome:
    """Result of logging one usage event."""

    usage: UsageEvent
    evaluation: EvaluationResult
    action: EnforcementAction
    violations: tuple[Violation, ...]
    block_reason: str | None = None

    @property
    def decision(self) -> Decision:
        return self.evaluation.decision

    @property
    def blocked(self) -> bool:
        return not self.evaluation.allowed


class ComplianceService:
    """Registers tools, logs usage and manages violations for organisations.

    Parameters
    ----------
    store:
        Datastore.  Defaults to a fresh :class:`InMemoryStore`.
    config:
        Engine configuration.  Defaults to the built-in policy.
    audit:
        Audit trail.  When omitted, one is opened at
        ``config.audit.log_path`` only if ``config.audit.enabled`` is set;
        auditing is off by default.
    classifier:
        Classifier run over prompt text in :meth:`log_usage`.
    """

    def __init__(
        self,
        store: ComplianceStore | None = None,
        config: ComplianceConfig | None = None,
        audit: AuditTrail | None = None,
        classifier: SensitivityClassifier | None = None,
    ) -> None:
        self._config = config or ComplianceConfig()
        self._store: ComplianceStore = store if store is not None else InMemoryStore()
        if audit is None and self._config.audit.enabled:
            audit = AuditTrail(self._config.audit.log_path)
        self._audit = audit
        self._classifier = classifier or SensitivityClassifier()
        self._scorer = RiskScorer(self._config.scoring)
        self._evaluator = PolicyEvaluator()
        self._lifecycle = ViolationLifecycle(self._config.lifecycle)
        self._assessor = ComplianceAssessor(self._config.assessment)
        self._workflow = ToolApprovalWorkflow(self._scorer)
        self._actions = PolicyActionHandler(self._audit)

        if self._config.policies:
            parsed = PolicyParser().parse_dict({"policies": self._config.policies})
            self.add_policies(
                p
                if p.organization_id
                else dataclasses.replace(p, organization_id=self._config.organization_id)
                for p in parsed
            )

    def __repr__(self) -> str:
        return f"ComplianceService(store={type(self._store).__name__})"

    @property
    def store(self) -> ComplianceStore:
        return self._store

    @property
    def audit(self) -> AuditTrail | None:
        return self._audit

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def register_tool(self, tool: Tool, caller: Caller) -> ApprovalResult:
        """Register ``tool`` as pending and store its initial assessment."""
        result = self._workflow.register(tool)
        self._store.put_tool(result.tool)
        if result.assessment is not None:
            self._store.add_assessment(result.assessment)
        self._record(
            "ai_tool_registered",
            "ai_tool",
            result.tool.tool_id,
            caller,
            new_values={
                "tool_name": result.tool.name,
                "risk_level": result.tool.risk_tier.value if result.tool.risk_tier else None,
                "approval_status": ApprovalStatus.PENDING.value,
            },
        )
        return result

    def review_tool(
        self,
        tool_id: str,
        caller: Caller,
        new_status: ApprovalStatus | str,
        conditions: dict[str, object] | None = None,
    ) -> ApprovalResult:
        """Set a tool's approval status.  Raises ``KeyError`` for unknown tools."""
        tool = self._store.get_tool(tool_id)
        result = self._workflow.review(tool, caller, new_status, conditions)
        if result.success:
            self._store.put_tool(result.tool)
            if result.assessment is not None:
                self._store.add_assessment(result.assessment)
        self._record(
            "ai_tool_updated",
            "ai_tool",
            tool_id,
            caller,
            success=result.success,
            new_values={
                "approval_status": str(getattr(new_status, "value", new_status)),
                "error": result.error.value if result.error else None,
            },
        )
        return result

    def deactivate_tool(self, tool_id: str, caller: Caller) -> ApprovalResult:
        result = self._workflow.deactivate(self._store.get_tool(tool_id), caller)
        if result.success:
            self._store.put_tool(result.tool)
        self._record(
            "ai_tool_deactivated",
            "ai_tool",
            tool_id,
            caller,
            success=result.success,
            new_values={"is_active": False} if result.success else {},
        )
        return result

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def add_policies(self, policies: Iterable[Policy]) -> None:
        count = 0
        for policy in policies:
            self._store.put_policy(policy)
            count += 1
        logger.info("Stored %d policies", count)

    # ------------------------------------------------------------------
    # Usage
    # ------------------------------------------------------------------

    def log_usage(
        self,
        prompt_text: str,
        *,
        tool_id: str,
        user_id: str | None = None,
        organization_id: str | None = None,
        user_role: str | None = None,
        user_department: str | None = None,
        data_classification: DataClassification | str = DataClassification.PUBLIC,
        contains_personal_info: bool = False,
        contains_sensitive_info: bool = False,
        prompt_token_count: int | None = None,
        response_token_count: int | None = None,
        estimated_cost_usd: float | None = None,
        affected_subjects_count: int | None = None,
    ) -> UsageOutcome:
        """Record one use of a registered tool and enforce policy on it.

        The prompt is hashed and classified; only the digest and derived
        flags are stored.  The usage is evaluated against the
        organisation's policies, violations are created for every breach,
        and the enforcement decision is audited.  Usage with no organisation
        is checked only against policies that have no organisation either.

        Raises
        ------
        KeyError
            If ``tool_id`` is not registered.
        """
        tool = self._store.get_tool(tool_id)
        org_id = organization_id or tool.organization_id

        usage = UsageEvent.from_prompt(
            prompt_text,
            tool_id=tool_id,
            classifier=self._classifier,
            data_classification=data_classification,
            contains_personal_info=contains_personal_info,
            contains_sensitive_info=contains_sensitive_info,
            organization_id=org_id,
            tool_approval_status=tool.approval_status,
            user_id=user_id,
            user_role=user_role,
            user_department=user_department,
            cross_border=tool.cross_border_disclosure,
            prompt_token_count=prompt_token_count,
            response_token_count=response_token_count,
            estimated_cost_usd=estimated_cost_usd,
        )
        self._store.add_usage_event(usage)

        evaluation = self._evaluator.evaluate(self._policies_for(org_id), usage)
        violations = self._lifecycle.create_from_evaluation(
            evaluation,
            usage,
            organization_id=org_id,
            affected_subjects_count=affected_subjects_count,
        )
        self._store.add_violations(violations)
        for violation in violations:
            if self._lifecycle.requires_notification(violation):
                logger.warning(
                    "Violation %s (%s, %s) requires officer notification",
                    violation.violation_id,
                    violation.violation_type,
                    violation.severity.value,
                )

        self._record(
            "ai_usage_logged",
            "usage_event",
            usage.event_id,
            user_id,
            success=evaluation.allowed,
            new_values={
                "tool_id": tool_id,
                "data_classification": usage.data_classification.value,
                "prompt_hash": usage.prompt_digest,
                "decision": evaluation.decision.value,
                "violations": len(violations),
            },
        )

        block_reason: str | None = None
        try:
            action = self._actions.execute(evaluation, usage)
        except PolicyBlockedError as exc:
            action = enforce(evaluation)
            block_reason = str(exc)

        return UsageOutcome(
            usage=usage,
            evaluation=evaluation,
            action=action,
            violations=tuple(violations),
            block_reason=block_reason,
        )

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    def list_violations(self, organization_id: str, caller: Caller) -> list[Violation]:
        """Violations of ``organization_id`` visible to ``caller``, newest first."""
        visible = visible_violations(self._store.list_violations(organization_id), caller)
        return sorted(visible, key=lambda v: v.created_at, reverse=True)

    def update_violation(
        self,
        violation_id: str,
        caller: Caller,
        new_status: RemediationStatus | str,
        notes: str | None = None,
        steps: dict[str, object] | None = None,
    ) -> TransitionResult:
        """Advance a violation's remediation status.  Raises ``KeyError`` if unknown."""
        result = self._lifecycle.transition(
            self._store.get_violation(violation_id), new_status, caller, notes=notes, steps=steps
        )
        if result.success:
            self._store.update_violation(result.violation)
        self._record(
            "violation_remediated",
            "compliance_violation",
            violation_id,
            caller,
            success=result.success,
            new_values={
                "remediation_status": result.violation.remediation_status.value,
                "remediation_notes": notes,
                "error": result.error.value if result.error else None,
            },
        )
        return result

    def reopen_violation(self, violation_id: str, caller: Caller, reason: str) -> TransitionResult:
        result = self._lifecycle.reopen(self._store.get_violation(violation_id), caller, reason)
        if result.success:
            self._store.update_violation(result.violation)
        self._record(
            "violation_reopened",
            "compliance_violation",
            violation_id,
            caller,
            success=result.success,
            new_values={"reason": reason, "error": result.error.value if result.error else None},
        )
        return result

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def run_assessment(
        self,
        framework_code: str,
        organization_id: str,
        caller: Caller | None = None,
        as_of: datetime | None = None,
    ) -> ComplianceReport:
        """Assess an organisation against a framework.

        Raises
        ------
        UnknownFrameworkError
            If the framework code is not registered.
        """
        report = self._assessor.assess(framework_code, self._store.snapshot(organization_id, as_of))
        self._record(
            "compliance_assessment_run",
            "compliance_framework",
            report.framework_code,
            caller,
            new_values={"organization_id": organization_id, "score": report.score},
        )
        return report

    def policy_report(
        self,
        organization_id: str,
        period_start: datetime,
        period_end: datetime | None = None,
    ) -> PolicyReport:
        """Summarise policy effectiveness between ``period_start`` and ``period_end``."""
        end = period_end or datetime.now(tz=timezone.utc)
        usage = [
            u
            for u in self._store.list_usage_events(organization_id)
            if period_start <= u.recorded_at <= end
        ]
        violations = [
            v
            for v in self._store.list_violations(organization_id)
            if period_start <= v.created_at <= end
        ]
        blocked_usage = {
            v.usage_event_id for v in violations if v.enforcement_level == EnforcementLevel.BLOCK
        }
        return generate_policy_report(
            organization_id,
            self._store.list_policies(organization_id),
            violations,
            total_usage=len(usage),
            blocked_count=len(blocked_usage),
            period=(period_start, end),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _policies_for(self, organization_id: str | None) -> list[Policy]:
        # Stores treat a None organisation as "all"; usage needs an exact match.
        return [
            p
            for p in self._store.list_policies(organization_id)
            if p.organization_id == organization_id
        ]

    def _record(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        actor: Caller | str | None,
        success: bool = True,
        new_values: dict[str, object] | None = None,
    ) -> None:
        if self._audit is None:
            return
        user_id = actor.user_id if isinstance(actor, Caller) else actor
        self._audit.record(action, resource_type, resource_id, user_id, success, new_values)
