"""Unit tests for permissions/roles.py: Role, Caller and the checks."""
from __future__ import annotations

import pytest

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


class TestRole:
    def test_ranking(self) -> None:
        ranks = [r.rank for r in (Role.MEMBER, Role.COMPLIANCE_OFFICER, Role.ADMIN, Role.OWNER)]
        assert ranks == sorted(ranks)
        assert len(set(ranks)) == 4

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("admin", Role.ADMIN),
            ("Compliance Officer", Role.COMPLIANCE_OFFICER),
            ("compliance-officer", Role.COMPLIANCE_OFFICER),
            (" OWNER ", Role.OWNER),
            (Role.MEMBER, Role.MEMBER),
            ("superuser", Role.MEMBER),
            (None, Role.MEMBER),
        ],
    )
    def test_parse(self, raw: object, expected: Role) -> None:
        assert Role.parse(raw) is expected


class TestCaller:
    def test_of_normalises(self) -> None:
        caller = Caller.of("u-1", "Admin", ["can_approve_tools"])
        assert caller.role is Role.ADMIN
        assert caller.permissions == frozenset({APPROVE_TOOLS_PERMISSION})

    def test_defaults(self) -> None:
        caller = Caller("u-1")
        assert caller.role is Role.MEMBER
        assert caller.permissions == frozenset()


class TestChecks:
    @pytest.mark.parametrize(
        "role, remediate, reopen, deactivate",
        [
            (Role.MEMBER, False, False, False),
            (Role.COMPLIANCE_OFFICER, True, False, False),
            (Role.ADMIN, True, True, True),
            (Role.OWNER, True, True, True),
        ],
    )
    def test_role_matrix(
        self, role: Role, remediate: bool, reopen: bool, deactivate: bool
    ) -> None:
        caller = Caller("u", role)
        assert can_remediate(caller) is remediate
        assert can_reopen(caller) is reopen
        assert can_deactivate_tools(caller) is deactivate

    def test_configurable_minimum(self) -> None:
        officer = Caller("u", Role.COMPLIANCE_OFFICER)
        assert can_remediate(officer, "admin") is False
        assert can_reopen(officer, Role.COMPLIANCE_OFFICER) is True
        assert has_role_at_least(officer, "member") is True

    def test_approve_by_role_or_permission(self) -> None:
        assert can_approve_tools(Caller("u", Role.COMPLIANCE_OFFICER)) is True
        assert can_approve_tools(Caller("u")) is False
        granted = Caller("u", permissions=frozenset({APPROVE_TOOLS_PERMISSION}))
        assert can_approve_tools(granted) is True

    @pytest.mark.parametrize("minimum", ["compliance-officr", "superuser", None])
    def test_unknown_minimum_is_never_satisfied(self, minimum: object) -> None:
        owner = Caller("u", Role.OWNER)
        assert has_role_at_least(owner, minimum) is False  # type: ignore[arg-type]
        assert can_remediate(Caller("u"), minimum) is False  # type: ignore[arg-type]

    def test_lookup_does_not_default(self) -> None:
        assert Role.lookup("compliance officer") is Role.COMPLIANCE_OFFICER
        assert Role.lookup("superuser") is None
