"""Tests for role permissions and the role gate."""

import pytest

from cineverse.core.permissions import (
    GateOutcome,
    Permission,
    evaluate_role_gate,
    has_permission,
    permissions_for,
)
from cineverse.models.user import UserRole


@pytest.mark.parametrize(
    "role,allowed,expected",
    [
        (None, [UserRole.SUPER_ADMIN], GateOutcome.LOGIN),
        ("SUPER_ADMIN", [UserRole.SUPER_ADMIN], GateOutcome.ALLOW),
        ("USER_ADMIN", [UserRole.SUPER_ADMIN], GateOutcome.DENY),
        ("USER_ADMIN", [UserRole.SUPER_ADMIN, UserRole.USER_ADMIN], GateOutcome.ALLOW),
        ("USER", [UserRole.SUPER_ADMIN, UserRole.USER_ADMIN], GateOutcome.DENY),
        ("super_admin", [UserRole.SUPER_ADMIN], GateOutcome.DENY),
        ("", [UserRole.USER], GateOutcome.DENY),
    ],
)
def test_evaluate_role_gate(role, allowed, expected) -> None:
    assert evaluate_role_gate(role, allowed) is expected


def test_super_admin_has_every_permission() -> None:
    assert set(permissions_for(UserRole.SUPER_ADMIN)) == {p.value for p in Permission}


def test_user_admin_cannot_manage_users() -> None:
    permissions = permissions_for("USER_ADMIN")

    assert "post.change_status" in permissions
    assert not any(p.startswith("user.") for p in permissions)
    assert "post.hard_delete" not in permissions


def test_user_can_only_read_posts() -> None:
    assert permissions_for("USER") == ["post.read"]


def test_unknown_role_has_no_permissions() -> None:
    assert permissions_for("ROOT") == []
    assert permissions_for(None) == []
    assert not has_permission("ROOT", Permission.POST_READ)


def test_has_permission_accepts_strings() -> None:
    assert has_permission("USER_ADMIN", "post.approve_deletion")
    assert not has_permission("USER", Permission.POST_UPDATE)
