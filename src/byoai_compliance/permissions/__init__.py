"""Caller roles and authorisation checks."""
from __future__ import annotations

from byoai_compliance.permissions.roles import (
    APPROVE_TOOLS_PERMISSION,
    Caller,
    Role,
    can_approve_tools,
    can_deactivate_tools,
    can_remediate,
    can_reopen,
    has_role_at_least,
)

__all__ = [
    "APPROVE_TOOLS_PERMISSION",
    "Caller",
    "Role",
    "can_approve_tools",
    "can_deactivate_tools",
    "can_remediate",
    "can_reopen",
    "has_role_at_least",
]
