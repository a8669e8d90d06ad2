"""Organisation snapshots for compliance assessment.

An :class:`OrganizationSnapshot` is the read-only view of an organisation's
tools, policies, violations and usage the assessor works from.  Snapshots
are built by the datastore or loaded from YAML::

    organization_id: org-1
    compliance_framework: au_privacy_act
    as_of: 2026-06-30T00:00:00+00:00
    tools:
      - tool_name: ChatGPT
        deployment_type: cloud
        processes_personal_info: true
        approval_status: approved
    policies:
      - policy_name: Privacy baseline
        enforcement_level: block
        rules: {block_personal_info: true}
    violations:
      - policy_id: p-1
        violation_type: personal_info_blocked
        severity: high
        reportable_to_regulator: true
    usage_events:
      - tool_id: t-1
        data_classification: internal
        contains_personal_info: true
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

import yaml

from byoai_compliance.policies.model import EnforcementLevel, Policy, Severity
from byoai_compliance.policies.parser import PolicyParser
from byoai_compliance.registry.fields import (
    parse_flag,
    parse_member,
    parse_optional_int,
    parse_timestamp,
)
from byoai_compliance.registry.tool import Tool
from byoai_compliance.registry.usage import UsageEvent
from byoai_compliance.violations.model import RemediationStatus, Violation


@dataclass(frozen=True)
class OrganizationSnapshot:
    """Point-in-time view of an organisation's compliance-relevant state."""

    organization_id: str
    compliance_framework: str | None = None
    tools: tuple[Tool, ...] = ()
    policies: tuple[Policy, ...] = ()
    violations: tuple[Violation, ...] = ()
    usage_events: tuple[UsageEvent, ...] = ()
    as_of: datetime = field(default_factory=lambda: datetime.now(tz=timezone.utc))

    @property
    def active_tools(self) -> tuple[Tool, ...]:
        return tuple(t for t in self.tools if t.is_active)

    @property
    def active_policies(self) -> tuple[Policy, ...]:
        return tuple(p for p in self.policies if p.is_active)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "OrganizationSnapshot":
        """Build a snapshot from a plain dictionary (e.g. parsed YAML)."""
        parser = PolicyParser()
        kwargs: dict[str, object] = {}
        as_of = parse_timestamp(data.get("as_of"), field="as_of")
        if as_of is not None:
            kwargs["as_of"] = as_of

        return cls(
            organization_id=str(data.get("organization_id", "default")),
            compliance_framework=(
                str(data["compliance_framework"]) if data.get("compliance_framework") else None
            ),
            tools=tuple(Tool.from_dict(t) for t in _records(data, "tools")),
            policies=tuple(parser.parse_policy(p) for p in _records(data, "policies")),
            violations=tuple(_violation_from_dict(v) for v in _records(data, "violations")),
            usage_events=tuple(UsageEvent.from_dict(u) for u in _records(data, "usage_events")),
            **kwargs,  # type: ignore[arg-type]
        )


def load_snapshot(path: str | Path) -> OrganizationSnapshot:
    """Load a snapshot from a YAML file.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Snapshot file not found: {path}")
    with path.open("r", encoding="utf-8") as fh:
        raw = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"[{path}] Top-level YAML value must be a mapping.")
    return OrganizationSnapshot.from_dict(raw)


def _records(data: dict[str, object], key: str) -> list[dict[str, object]]:
    return list(data.get(key) or [])  # type: ignore[call-overload]


def _violation_from_dict(data: dict[str, object]) -> Violation:
    """Unreadable fields take their most severe value; counts are dropped."""
    kwargs: dict[str, object] = {}
    violation_id = data.get("violation_id", data.get("id"))
    if violation_id is not None:
        kwargs["violation_id"] = str(violation_id)
    created_at = parse_timestamp(data.get("created_at"), field="created_at")
    if created_at is not None:
        kwargs["created_at"] = created_at
    subjects = data.get("affected_subjects_count", data.get("affected_data_subjects"))

    return Violation(
        policy_id=str(data.get("policy_id", "")),
        violation_type=str(data.get("violation_type", "unknown")),
        severity=parse_member(
            Severity, data.get("severity"), fallback=Severity.CRITICAL, field="severity"
        ),
        organization_id=_optional_str(data.get("organization_id")),
        policy_name=_optional_str(data.get("policy_name")),
        tool_id=_optional_str(data.get("tool_id")),
        user_id=_optional_str(data.get("user_id")),
        enforcement_level=parse_member(
            EnforcementLevel,
            data.get("enforcement_level"),
            fallback=EnforcementLevel.BLOCK,
            field="enforcement_level",
        ),
        message=str(data.get("message", "")),
        affected_subjects_count=parse_optional_int(subjects, field="affected_subjects_count"),
        potential_privacy_breach=_flag(data.get("potential_privacy_breach")),
        involves_sensitive_info=_flag(data.get("involves_sensitive_info")),
        reportable_to_regulator=_flag(
            data.get("reportable_to_regulator", data.get("reportable_to_oaic"))
        ),
        remediation_status=parse_member(
            RemediationStatus,
            data.get("remediation_status"),
            fallback=RemediationStatus.PENDING,
            field="remediation_status",
        ),
        **kwargs,  # type: ignore[arg-type]
    )


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def _flag(value: object) -> bool:
    if value is None:
        return False
    return bool(parse_flag(value, fallback=True, field="violation flag"))
