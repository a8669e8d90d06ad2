"""Built-in YAML policy templates for common AI usage scenarios.

Five templates are bundled: blocking restricted data, limiting use to
approved tools, controlling overseas disclosure, capping token and cost
usage, and an Australian Privacy Act baseline.

Example
-------
>>> from byoai_compliance.templates.policy_templates import get_template, list_templates
>>> list_templates()
['approved_tools_only', 'cross_border', 'privacy_act_baseline', 'restricted_data', 'usage_limits']
>>> yaml_str = get_template("restricted_data")
>>> yaml_str.startswith("# Restricted Data")
True
"""
from __future__ import annotations

from pathlib import Path

# ---------------------------------------------------------------------------
# Template definitions
# ---------------------------------------------------------------------------

_RESTRICTED_DATA = """\
# Restricted Data Policy Template
# --------------------------------
# Stops restricted data (tax file numbers, health information) from being
# sent to any AI tool, and flags confidential data for review.

policies:
  - policy_name: Block restricted data
    policy_type: data_classification
    enforcement_level: block
    priority: 10
    description: >
      Restricted data must never be entered into an AI tool.
    rules:
      forbidden_data_types: [restricted]
      block_sensitive_info: true

  - policy_name: Alert on confidential data
    policy_type: data_classification
    enforcement_level: alert
    priority: 50
    rules:
      forbidden_data_types: [confidential]
"""

_APPROVED_TOOLS_ONLY = """\
# Approved Tools Only Policy Template
# ------------------------------------
# Blocks usage of any tool that has not been fully approved by a compliance
# officer.  Conditional approval does not satisfy this rule.

policies:
  - policy_name: Approved tools only
    policy_type: tool_approval
    enforcement_level: block
    priority: 5
    description: >
      Staff may only use AI tools on the approved register.
    rules:
      require_approved_tools: true
"""

_CROSS_BORDER = """\
# Cross-Border Disclosure Policy Template
# ----------------------------------------
# Controls disclosure of information to tools that process data offshore.
# An active block-level policy with this rule satisfies APP 8 checks.

policies:
  - policy_name: Block cross-border disclosure
    policy_type: privacy_protection
    enforcement_level: block
    priority: 20
    description: >
      Personal information may not be disclosed to overseas recipients
      without the safeguards required by APP 8.
    rules:
      block_cross_border: true
"""

_USAGE_LIMITS = """\
# Usage Limits Policy Template
# -----------------------------
# Warns when a single interaction exceeds token or cost thresholds.

policies:
  - policy_name: Token limit
    policy_type: usage_limits
    enforcement_level: alert
    priority: 100
    rules:
      max_token_limit: 8000

  - policy_name: Cost approval threshold
    policy_type: usage_limits
    enforcement_level: monitor
    priority: 110
    rules:
      require_approval_above_cost: 5.00
"""

_PRIVACY_ACT_BASELINE = """\
# Australian Privacy Act Baseline Policy Template
# ------------------------------------------------
# A starting-point set of policies covering the Australian Privacy
# Principles assessed by the au_privacy_act framework (APP 1, 3, 6, 8, 11).

policies:
  - policy_name: APP 3 - Restrict sensitive information
    policy_type: privacy_protection
    enforcement_level: block
    priority: 10
    description: >
      Sensitive information (health, TFN, Medicare) must not be collected
      by AI tools.
    rules:
      block_sensitive_info: true
      forbidden_data_types: [restricted]

  - policy_name: APP 6 - Personal information handling
    policy_type: privacy_protection
    enforcement_level: alert
    priority: 20
    description: >
      Use of personal information in AI tools must match the primary
      purpose of collection.
    rules:
      block_personal_info: true

  - policy_name: APP 8 - Cross-border disclosure
    policy_type: privacy_protection
    enforcement_level: block
    priority: 30
    rules:
      block_cross_border: true

  - policy_name: APP 11 - Approved tools only
    policy_type: security_requirements
    enforcement_level: block
    priority: 40
    rules:
      require_approved_tools: true
"""

TEMPLATES: dict[str, str] = {
    "restricted_data": _RESTRICTED_DATA,
    "approved_tools_only": _APPROVED_TOOLS_ONLY,
    "cross_border": _CROSS_BORDER,
    "usage_limits": _USAGE_LIMITS,
    "privacy_act_baseline": _PRIVACY_ACT_BASELINE,
}

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_template(name: str) -> str:
    """Return the YAML string for a built-in policy template.

    Parameters
    ----------
    name:
        The template identifier.  See :func:`list_templates` for available
        names.

    Returns
    -------
    str
        The YAML policy template string, ready to write to a file or pass
        to :meth:`~byoai_compliance.policies.parser.PolicyParser.parse_string`.

    Raises
    ------
    KeyError
        If no template with the given name is registered.
    """
    if name not in TEMPLATES:
        available = ", ".join(sorted(TEMPLATES))
        raise KeyError(f"Template {name!r} not found. Available templates: {available}.")
    return TEMPLATES[name]


def list_templates() -> list[str]:
    """Return all built-in template names in alphabetical order."""
    return sorted(TEMPLATES)


def write_template(name: str, output_path: Path) -> Path:
    """Write a built-in policy template to a file.

    Parent directories are created automatically.  Returns the absolute
    path of the written file; raises ``KeyError`` for unknown names.
    """
    content = get_template(name)
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(content, encoding="utf-8")
    return output_path.resolve()
