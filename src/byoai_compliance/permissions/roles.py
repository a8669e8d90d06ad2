"""Caller roles and the authorisation checks the engine needs.

Identity and role resolution happen outside the engine; callers arrive as
an already-resolved :class:`Caller`.  Roles are ranked
``member < compliance_officer < admin < owner``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

logger = logging.getLogger(__name__)

APPROVE_TOOLS_PERMISSION = "can_approve_tools"


class Role(str, Enum):
    """Organisation membership role."""

    MEMBER = "member"
    COMPLIANCE_OFFICER = "compliance_officer"
    ADMIN = "admin"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return list(Role).index(self)

    @classmethod
    def lookup(cls, value: object) -> "Role | None":
        """Return the role named by ``value``, or ``None`` when unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("-", "_").replace(" ", "_"))
        except ValueError:
            return None

    @classmethod
    def parse(cls, value: object) -> "Role":
        """Parse a caller's role label; unknown values get the least privilege."""
        role = cls.lookup(value)
        if role is None:
            logger.warning("Unknown role %r; treating as member.", value)
            return cls.MEMBER
        return role


@dataclass(frozen=True)
class Caller:
    """An authenticated user acting on the engine."""

    user_id: str
    role: Role = Role.MEMBER
    permissions: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def of(cls, user_id: str, role: object, permissions: object = ()) -> "Caller":
        return cls(
            user_id=user_id,
            role=Role.parse(role),
            permissions=frozenset(str(p) for p in permissions),  # type: ignore[union-attr]
        )


def has_role_at_least(caller: Caller, minimum: Role | str) -> bool:
    """An unrecognised ``minimum`` is never satisfied."""
    required = Role.lookup(minimum)
    if required is None:
        logger.warning("Unknown minimum role %r; denying access.", minimum)
        return False
    return caller.role.rank >= required.rank


def can_remediate(caller: Caller, minimum: Role | str = Role.COMPLIANCE_OFFICER) -> bool:
    """Whether ``caller`` may change a violation's remediation status."""
    return has_role_at_least(caller, minimum)


def can_reopen(caller: Caller, minimum: Role | str = Role.ADMIN) -> bool:
    """Whether ``caller`` may reopen a closed violation."""
    return has_role_at_least(caller, minimum)


def can_approve_tools(caller: Caller) -> bool:
    """Compliance officers and above, or anyone granted ``can_approve_tools``."""
    return (
        has_role_at_least(caller, Role.COMPLIANCE_OFFICER)
        or APPROVE_TOOLS_PERMISSION in caller.permissions
    )


def can_deactivate_tools(caller: Caller) -> bool:
    return has_role_at_least(caller, Role.ADMIN)
