"""YAML policy parser.

Parses organisation policies from YAML (or already-loaded dictionaries)
into typed :class:`~byoai_compliance.policies.model.Policy` objects.

The expected top-level YAML structure is::

    policies:
      - policy_name: "No restricted data"
        policy_type: data_classification
        enforcement_level: block
        priority: 10
        rules:
          forbidden_data_types: [restricted]
          block_sensitive_info: true
          max_token_limit: 4000
        applicable_departments: [finance]

Rule bundles are closed: an unknown rule key, enforcement level, policy
type or data classification raises :class:`PolicyParseError` rather than
being silently ignored.  Unknown policy-level keys are tolerated.

Example
-------
>>> parser = PolicyParser()
>>> policies = parser.parse("policies.yaml")
>>> policies[0].enforcement_level
<EnforcementLevel.BLOCK: 'block'>
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml

from byoai_compliance.detection.classifier import DataClassification
from byoai_compliance.policies.model import EnforcementLevel, Policy, PolicyType
from byoai_compliance.policies.rules import (
    BlockTarget,
    BooleanBlockRule,
    ClassificationMode,
    ClassificationRule,
    Rule,
    ThresholdMetric,
    ThresholdRule,
)

logger = logging.getLogger(__name__)


class PolicyParseError(ValueError):
    """Raised when a policy definition cannot be parsed.

    Attributes
    ----------
    policy_name:
        Name of the offending policy, when known.
    source:
        File the policy was read from, when known.
    """

    def __init__(
        self,
        message: str,
        policy_name: str | None = None,
        source: str | None = None,
    ) -> None:
        self.policy_name = policy_name
        self.source = source
        prefix = f"[{source}] " if source else ""
        where = f"policy '{policy_name}': " if policy_name else ""
        super().__init__(f"{prefix}{where}{message}")


class PolicyParser:
    """Parses policy definitions into :class:`Policy` objects."""

    # Rule keys in evaluation order.
    RULE_KEYS: tuple[str, ...] = (
        "forbidden_data_types",
        "allowed_data_types",
        "block_personal_info",
        "block_sensitive_info",
        "require_approved_tools",
        "block_cross_border",
        "max_token_limit",
        "require_approval_above_cost",
    )

    _BLOCK_KEYS: dict[str, BlockTarget] = {
        "block_personal_info": BlockTarget.PERSONAL_INFO,
        "block_sensitive_info": BlockTarget.SENSITIVE_INFO,
        "require_approved_tools": BlockTarget.UNAPPROVED_TOOL,
        "block_cross_border": BlockTarget.CROSS_BORDER,
    }

    _THRESHOLD_KEYS: dict[str, ThresholdMetric] = {
        "max_token_limit": ThresholdMetric.TOKENS,
        "require_approval_above_cost": ThresholdMetric.COST,
    }

    _CLASSIFICATION_KEYS: dict[str, ClassificationMode] = {
        "forbidden_data_types": ClassificationMode.FORBIDDEN,
        "allowed_data_types": ClassificationMode.ALLOWED,
    }

    def parse(self, config_path: str | Path) -> list[Policy]:
        """Parse a YAML policy file.

        Raises
        ------
        FileNotFoundError
            If the file does not exist.
        PolicyParseError
            If any policy is malformed.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Policy file not found: {config_path}")

        with config_path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

        policies = self._parse_document(raw, str(config_path))
        logger.info("Loaded %d policies from %s", len(policies), config_path)
        return policies

    def parse_string(self, yaml_content: str) -> list[Policy]:
        """Parse a YAML string directly (useful for testing)."""
        raw = yaml.safe_load(yaml_content) or {}
        return self._parse_document(raw, None)

    def parse_dict(self, raw: dict[str, object]) -> list[Policy]:
        """Parse an already-loaded document with a top-level ``policies`` list."""
        return self._parse_document(raw, None)

    def parse_policy(self, raw_policy: dict[str, object], source: str | None = None) -> Policy:
        """Parse a single policy mapping."""
        if not isinstance(raw_policy, dict):
            raise PolicyParseError("Each policy must be a mapping.", source=source)

        name = raw_policy.get("policy_name", raw_policy.get("name"))
        if not name:
            raise PolicyParseError("Policy is missing 'policy_name'.", source=source)
        name = str(name)

        level_raw = raw_policy.get("enforcement_level")
        try:
            level = EnforcementLevel(str(level_raw).strip().lower())
        except ValueError:
            raise PolicyParseError(
                f"Unknown enforcement level {level_raw!r}.", name, source
            ) from None

        type_raw = raw_policy.get("policy_type", PolicyType.DATA_HANDLING.value)
        try:
            policy_type = PolicyType(str(type_raw).strip().lower())
        except ValueError:
            raise PolicyParseError(f"Unknown policy type {type_raw!r}.", name, source) from None

        priority_raw = raw_policy.get("priority", 100)
        if isinstance(priority_raw, bool) or not isinstance(priority_raw, int):
            raise PolicyParseError(
                f"Priority must be an integer, got {priority_raw!r}.", name, source
            )

        rules = self.parse_rules(
            raw_policy.get("rules") or {},  # type: ignore[arg-type]
            policy_name=name,
            source=source,
        )

        kwargs: dict[str, object] = {}
        policy_id = raw_policy.get("policy_id", raw_policy.get("id"))
        if policy_id is not None:
            kwargs["policy_id"] = str(policy_id)

        return Policy(
            name=name,
            rules=rules,
            enforcement_level=level,
            policy_type=policy_type,
            priority=priority_raw,
            is_active=_flag(
                raw_policy.get("is_active", raw_policy.get("enabled")),
                True,
                "is_active",
                name,
                source,
            ),
            auto_remediation=_flag(
                raw_policy.get("auto_remediation"), False, "auto_remediation", name, source
            ),
            organization_id=_optional_str(raw_policy.get("organization_id")),
            description=str(
                raw_policy.get("policy_description", raw_policy.get("description")) or ""
            ),
            applicable_roles=_str_tuple(raw_policy.get("applicable_roles")),
            applicable_departments=_str_tuple(raw_policy.get("applicable_departments")),
            applicable_tools=_str_tuple(raw_policy.get("applicable_tools")),
            **kwargs,  # type: ignore[arg-type]
        )

    def parse_rules(
        self,
        raw_rules: dict[str, object],
        policy_name: str | None = None,
        source: str | None = None,
    ) -> tuple[Rule, ...]:
        """Convert a key/value rule bundle into typed rules.

        Rules are returned in :attr:`RULE_KEYS` order regardless of the
        order the keys appear in the input.  Boolean keys set to ``false``
        produce no rule.
        """
        if not isinstance(raw_rules, dict):
            raise PolicyParseError("'rules' must be a mapping.", policy_name, source)

        unknown = sorted(set(raw_rules) - set(self.RULE_KEYS))
        if unknown:
            raise PolicyParseError(
                f"Unknown rule key(s): {', '.join(unknown)}.", policy_name, source
            )

        rules: list[Rule] = []
        for key in self.RULE_KEYS:
            if key not in raw_rules:
                continue
            value = raw_rules[key]

            if key in self._CLASSIFICATION_KEYS:
                rules.append(
                    ClassificationRule(
                        mode=self._CLASSIFICATION_KEYS[key],
                        classifications=self._parse_classifications(
                            key, value, policy_name, source
                        ),
                    )
                )
            elif key in self._BLOCK_KEYS:
                if not isinstance(value, bool):
                    raise PolicyParseError(
                        f"'{key}' must be true or false, got {value!r}.", policy_name, source
                    )
                if value:
                    rules.append(BooleanBlockRule(self._BLOCK_KEYS[key]))
            else:
                if isinstance(value, bool) or not isinstance(value, (int, float)) or value < 0:
                    raise PolicyParseError(
                        f"'{key}' must be a non-negative number, got {value!r}.",
                        policy_name,
                        source,
                    )
                rules.append(ThresholdRule(self._THRESHOLD_KEYS[key], float(value)))

        logger.debug("Parsed %d rules for policy %s", len(rules), policy_name)
        return tuple(rules)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _parse_document(self, raw: object, source: str | None) -> list[Policy]:
        if not isinstance(raw, dict):
            raise PolicyParseError("Top-level YAML value must be a mapping.", source=source)
        raw_policies = raw.get("policies", [])
        if not isinstance(raw_policies, list):
            raise PolicyParseError("'policies' must be a list.", source=source)
        return [self.parse_policy(p, source) for p in raw_policies]

    def _parse_classifications(
        self,
        key: str,
        value: object,
        policy_name: str | None,
        source: str | None,
    ) -> frozenset[DataClassification]:
        if not isinstance(value, (list, tuple)):
            raise PolicyParseError(f"'{key}' must be a list.", policy_name, source)
        levels: set[DataClassification] = set()
        for item in value:
            try:
                levels.add(DataClassification(str(item).strip().lower()))
            except ValueError:
                raise PolicyParseError(
                    f"Unknown data classification {item!r} in '{key}'.", policy_name, source
                ) from None
        return frozenset(levels)


def _optional_str(value: object) -> str | None:
    return None if value is None else str(value)


def _flag(
    value: object, default: bool, key: str, policy_name: str, source: str | None
) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise PolicyParseError(
            f"'{key}' must be true or false, got {value!r}.", policy_name, source
        )
    return value


def _str_tuple(value: object) -> tuple[str, ...]:
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(v) for v in value)  # type: ignore[union-attr]
