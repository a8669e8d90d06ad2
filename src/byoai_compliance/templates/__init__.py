"""Policy template library for byoai-compliance.

Provides five built-in YAML policy templates covering restricted data,
approved tools, cross-border disclosure, usage limits and an Australian
Privacy Act baseline.
"""
from __future__ import annotations

from byoai_compliance.templates.policy_templates import (
    TEMPLATES,
    get_template,
    list_templates,
    write_template,
)

__all__ = [
    "TEMPLATES",
    "get_template",
    "list_templates",
    "write_template",
]
