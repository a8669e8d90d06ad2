"""Unit tests for store/memory.py: InMemoryStore."""
from __future__ import annotations

import dataclasses
from datetime import datetime, timezone

import pytest

from byoai_compliance.policies.model import Policy, Severity
from byoai_compliance.registry.tool import Tool
from byoai_compliance.registry.usage import UsageEvent
from byoai_compliance.risk.scorer import RiskScorer
from byoai_compliance.store.memory import InMemoryStore
from byoai_compliance.violations.model import RemediationStatus, Violation


@pytest.fixture()
def store() -> InMemoryStore:
    return InMemoryStore()


class TestTools:
    def test_put_get_list(self, store: InMemoryStore) -> None:
        tool = Tool(name="A", organization_id="org-1")
        store.put_tool(tool)
        store.put_tool(Tool(name="B", organization_id="org-2"))
        assert store.get_tool(tool.tool_id) == tool
        assert [t.name for t in store.list_tools("org-1")] == ["A"]
        assert len(store.list_tools()) == 2

    def test_inactive_hidden_by_default(self, store: InMemoryStore) -> None:
        tool = Tool(name="A", organization_id="org-1", is_active=False)
        store.put_tool(tool)
        assert store.list_tools("org-1") == []
        assert store.list_tools("org-1", include_inactive=True) == [tool]

    def test_unknown_tool(self, store: InMemoryStore) -> None:
        with pytest.raises(KeyError):
            store.get_tool("missing")


class TestAppendOnly:
    def test_duplicate_usage_event_rejected(self, store: InMemoryStore) -> None:
        event = UsageEvent(tool_id="t")
        store.add_usage_event(event)
        with pytest.raises(ValueError, match="already recorded"):
            store.add_usage_event(event)

    def test_duplicate_violation_rejected(self, store: InMemoryStore) -> None:
        violation = Violation(policy_id="p", violation_type="x", severity=Severity.INFO)
        store.add_violations([violation])
        with pytest.raises(ValueError, match="already exists"):
            store.add_violations([violation])

    def test_failed_batch_stores_nothing(self, store: InMemoryStore) -> None:
        existing = Violation(policy_id="p", violation_type="x", severity=Severity.INFO)
        store.add_violations([existing])
        fresh = Violation(policy_id="p", violation_type="y", severity=Severity.HIGH)
        with pytest.raises(ValueError, match="already exists"):
            store.add_violations([fresh, existing])
        assert store.list_violations() == [existing]

    def test_repeat_within_batch_stores_nothing(self, store: InMemoryStore) -> None:
        violation = Violation(policy_id="p", violation_type="x", severity=Severity.INFO)
        with pytest.raises(ValueError, match="already exists"):
            store.add_violations([violation, violation])
        assert store.list_violations() == []

    def test_update_violation(self, store: InMemoryStore) -> None:
        violation = Violation(policy_id="p", violation_type="x", severity=Severity.INFO)
        store.add_violations([violation])
        changed = dataclasses.replace(
            violation, remediation_status=RemediationStatus.ACKNOWLEDGED
        )
        store.update_violation(changed)
        assert store.get_violation(violation.violation_id) == changed

    def test_update_unknown_violation(self, store: InMemoryStore) -> None:
        with pytest.raises(KeyError):
            store.update_violation(
                Violation(policy_id="p", violation_type="x", severity=Severity.INFO)
            )

    def test_assessments_in_order(self, store: InMemoryStore) -> None:
        scorer = RiskScorer()
        tool = Tool(name="A")
        first = scorer.assess(tool)
        second = scorer.assess(tool)
        store.add_assessment(first)
        store.add_assessment(second)
        store.add_assessment(scorer.assess(Tool(name="B")))
        assert store.list_assessments(tool.tool_id) == [first, second]


class TestSnapshot:
    def test_snapshot_collects_org_records(self, store: InMemoryStore) -> None:
        as_of = datetime(2024, 1, 1, tzinfo=timezone.utc)
        store.put_tool(Tool(name="A", organization_id="org-1", is_active=False))
        store.put_policy(Policy(name="P", organization_id="org-1"))
        store.put_policy(Policy(name="Q", organization_id="org-2"))
        store.add_usage_event(UsageEvent(tool_id="t", organization_id="org-1"))
        store.set_compliance_framework("org-1", "au_privacy_act")

        snapshot = store.snapshot("org-1", as_of=as_of)
        assert snapshot.organization_id == "org-1"
        assert snapshot.compliance_framework == "au_privacy_act"
        assert len(snapshot.tools) == 1
        assert snapshot.active_tools == ()
        assert [p.name for p in snapshot.policies] == ["P"]
        assert len(snapshot.usage_events) == 1
        assert snapshot.as_of == as_of

    def test_clear_framework(self, store: InMemoryStore) -> None:
        store.set_compliance_framework("org-1", "au_privacy_act")
        store.set_compliance_framework("org-1", None)
        assert store.get_compliance_framework("org-1") is None
