"""In-memory reference datastore.

Holds tools, policies, usage events, violations and risk assessments keyed
by id.  The store mirrors the guarantees the engine expects from durable
storage:

- usage events and risk assessments are append-only;
- violations can be added and updated but never deleted;
- tools are never deleted (deactivation is an update).

All public methods are guarded by a ``threading.Lock``.

Example
-------
>>> store = InMemoryStore()
>>> store.put_tool(Tool(name="ChatGPT", organization_id="org-1"))
>>> len(store.list_tools("org-1"))
1
"""
from __future__ import annotations

import threading
from datetime import datetime
from typing import Iterable, Protocol

from byoai_compliance.compliance.snapshot import OrganizationSnapshot
from byoai_compliance.policies.model import Policy
from byoai_compliance.registry.tool import Tool
from byoai_compliance.registry.usage import UsageEvent
from byoai_compliance.risk.scorer import RiskAssessment
from byoai_compliance.violations.model import Violation


class ComplianceStore(Protocol):
    """Key-based storage the service layer depends on."""

    def put_tool(self, tool: Tool) -> None: ...

    def get_tool(self, tool_id: str) -> Tool: ...

    def list_tools(
        self, organization_id: str | None = None, include_inactive: bool = False
    ) -> list[Tool]: ...

    def put_policy(self, policy: Policy) -> None: ...

    def list_policies(self, organization_id: str | None = None) -> list[Policy]: ...

    def add_usage_event(self, event: UsageEvent) -> None: ...

    def list_usage_events(self, organization_id: str | None = None) -> list[UsageEvent]: ...

    def add_violations(self, violations: Iterable[Violation]) -> None: ...

    def get_violation(self, violation_id: str) -> Violation: ...

    def update_violation(self, violation: Violation) -> None: ...

    def list_violations(self, organization_id: str | None = None) -> list[Violation]: ...

    def add_assessment(self, assessment: RiskAssessment) -> None: ...

    def list_assessments(self, tool_id: str) -> list[RiskAssessment]: ...

    def snapshot(
        self, organization_id: str, as_of: datetime | None = None
    ) -> OrganizationSnapshot: ...


class InMemoryStore:
    """Thread-safe, process-local implementation of :class:`ComplianceStore`."""

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._policies: dict[str, Policy] = {}
        self._usage: dict[str, UsageEvent] = {}
        self._violations: dict[str, Violation] = {}
        self._assessments: list[RiskAssessment] = []
        self._frameworks: dict[str, str] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Organisations
    # ------------------------------------------------------------------

    def set_compliance_framework(self, organization_id: str, framework_code: str | None) -> None:
        with self._lock:
            if framework_code:
                self._frameworks[organization_id] = framework_code
            else:
                self._frameworks.pop(organization_id, None)

    def get_compliance_framework(self, organization_id: str) -> str | None:
        with self._lock:
            return self._frameworks.get(organization_id)

    # ------------------------------------------------------------------
    # Tools
    # ------------------------------------------------------------------

    def put_tool(self, tool: Tool) -> None:
        with self._lock:
            self._tools[tool.tool_id] = tool

    def get_tool(self, tool_id: str) -> Tool:
        """Raises ``KeyError`` when the tool is unknown."""
        with self._lock:
            return self._tools[tool_id]

    def list_tools(
        self,
        organization_id: str | None = None,
        include_inactive: bool = False,
    ) -> list[Tool]:
        with self._lock:
            return [
                t
                for t in self._tools.values()
                if _in_org(t.organization_id, organization_id)
                and (include_inactive or t.is_active)
            ]

    # ------------------------------------------------------------------
    # Policies
    # ------------------------------------------------------------------

    def put_policy(self, policy: Policy) -> None:
        with self._lock:
            self._policies[policy.policy_id] = policy

    def get_policy(self, policy_id: str) -> Policy:
        with self._lock:
            return self._policies[policy_id]

    def list_policies(self, organization_id: str | None = None) -> list[Policy]:
        with self._lock:
            return [
                p for p in self._policies.values() if _in_org(p.organization_id, organization_id)
            ]

    # ------------------------------------------------------------------
    # Usage events
    # ------------------------------------------------------------------

    def add_usage_event(self, event: UsageEvent) -> None:
        """Append a usage event.

        Raises
        ------
        ValueError
            If an event with the same id was already recorded.
        """
        with self._lock:
            if event.event_id in self._usage:
                raise ValueError(f"Usage event {event.event_id} is already recorded")
            self._usage[event.event_id] = event

    def list_usage_events(self, organization_id: str | None = None) -> list[UsageEvent]:
        with self._lock:
            return [
                u for u in self._usage.values() if _in_org(u.organization_id, organization_id)
            ]

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    def add_violations(self, violations: Iterable[Violation]) -> None:
        """Add a batch of new violations.  Nothing is stored if any id clashes.

        Raises
        ------
        ValueError
            If an id is already stored or repeats within the batch.
        """
        batch = list(violations)
        with self._lock:
            seen: set[str] = set()
            for violation in batch:
                if violation.violation_id in self._violations or violation.violation_id in seen:
                    raise ValueError(f"Violation {violation.violation_id} already exists")
                seen.add(violation.violation_id)
            for violation in batch:
                self._violations[violation.violation_id] = violation

    def get_violation(self, violation_id: str) -> Violation:
        with self._lock:
            return self._violations[violation_id]

    def update_violation(self, violation: Violation) -> None:
        """Replace a stored violation.

        Raises
        ------
        KeyError
            If the violation was never added.
        """
        with self._lock:
            if violation.violation_id not in self._violations:
                raise KeyError(violation.violation_id)
            self._violations[violation.violation_id] = violation

    def list_violations(self, organization_id: str | None = None) -> list[Violation]:
        with self._lock:
            return [
                v
                for v in self._violations.values()
                if _in_org(v.organization_id, organization_id)
            ]

    # ------------------------------------------------------------------
    # Risk assessments
    # ------------------------------------------------------------------

    def add_assessment(self, assessment: RiskAssessment) -> None:
        with self._lock:
            self._assessments.append(assessment)

    def list_assessments(self, tool_id: str) -> list[RiskAssessment]:
        """Assessments of ``tool_id`` in the order they were recorded."""
        with self._lock:
            return [a for a in self._assessments if a.tool_id == tool_id]

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self, organization_id: str, as_of: datetime | None = None) -> OrganizationSnapshot:
        """Build an :class:`OrganizationSnapshot` of everything in ``organization_id``."""
        kwargs: dict[str, object] = {}
        if as_of is not None:
            kwargs["as_of"] = as_of
        return OrganizationSnapshot(
            organization_id=organization_id,
            compliance_framework=self.get_compliance_framework(organization_id),
            tools=tuple(self.list_tools(organization_id, include_inactive=True)),
            policies=tuple(self.list_policies(organization_id)),
            violations=tuple(self.list_violations(organization_id)),
            usage_events=tuple(self.list_usage_events(organization_id)),
            **kwargs,  # type: ignore[arg-type]
        )


def _in_org(record_org: str | None, wanted: str | None) -> bool:
    return wanted is None or record_org == wanted
