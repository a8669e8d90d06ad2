"""Policy records and the enums shared by the evaluator."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from byoai_compliance.policies.rules import Rule
    from byoai_compliance.registry.usage import UsageEvent


class EnforcementLevel(str, Enum):
    """What a policy does when one of its rules is breached.

    - ``monitor``: record only, the usage is allowed.
    - ``alert``: record and warn, the usage is allowed.
    - ``block``: the usage is prevented.
    """

    MONITOR = "monitor"
    ALERT = "alert"
    BLOCK = "block"

    @property
    def rank(self) -> int:
        return _ENFORCEMENT_RANK[self]


_ENFORCEMENT_RANK = {
    EnforcementLevel.MONITOR: 0,
    EnforcementLevel.ALERT: 1,
    EnforcementLevel.BLOCK: 2,
}


class Decision(str, Enum):
    """Aggregate enforcement decision for a usage event."""

    ALLOW = "allow"
    WARN = "warn"
    BLOCK = "block"

    @classmethod
    def for_level(cls, level: EnforcementLevel | None) -> "Decision":
        """Map the strictest violated enforcement level to a decision."""
        match level:
            case EnforcementLevel.BLOCK:
                return cls.BLOCK
            case EnforcementLevel.ALERT:
                return cls.WARN
            case _:
                return cls.ALLOW


class Severity(str, Enum):
    """Severity of a single rule breach."""

    INFO = "info"
    WARNING = "warning"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.INFO: 0,
    Severity.WARNING: 1,
    Severity.HIGH: 2,
    Severity.CRITICAL: 3,
}


class PolicyType(str, Enum):
    """Category of an organisation policy."""

    DATA_HANDLING = "data_handling"
    TOOL_APPROVAL = "tool_approval"
    USAGE_LIMITS = "usage_limits"
    DATA_CLASSIFICATION = "data_classification"
    INDUSTRY_SPECIFIC = "industry_specific"
    PRIVACY_PROTECTION = "privacy_protection"
    SECURITY_REQUIREMENTS = "security_requirements"


@dataclass(frozen=True)
class Policy:
    """An organisation-scoped bundle of rules with one enforcement level.

    Scope lists (roles, departments, tools) are allow-lists; an empty list
    places no restriction on that dimension.  Lower ``priority`` values are
    reported first.
    """

    name: str
    rules: tuple["Rule", ...] = ()
    enforcement_level: EnforcementLevel = EnforcementLevel.MONITOR
    policy_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    policy_type: PolicyType = PolicyType.DATA_HANDLING
    priority: int = 100
    is_active: bool = True
    auto_remediation: bool = False
    organization_id: str | None = None
    description: str = ""
    applicable_roles: tuple[str, ...] = ()
    applicable_departments: tuple[str, ...] = ()
    applicable_tools: tuple[str, ...] = ()

    def applies_to(self, usage: "UsageEvent") -> bool:
        """Return ``True`` when ``usage`` falls inside this policy's scope.

        A scoped dimension requires the usage attribute to be present and
        listed; a missing role or department never matches a scoped policy.
        """
        if self.applicable_roles and usage.user_role not in self.applicable_roles:
            return False
        if (
            self.applicable_departments
            and usage.user_department not in self.applicable_departments
        ):
            return False
        if self.applicable_tools and usage.tool_id not in self.applicable_tools:
            return False
        return True

    def has_rule(self, rule_name: str) -> bool:
        """Return ``True`` when any rule of this policy is named ``rule_name``."""
        return any(rule.rule_name == rule_name for rule in self.rules)
