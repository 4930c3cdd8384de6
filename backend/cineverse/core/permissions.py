"""Roles, permissions and the role gate."""

from collections.abc import Iterable
from enum import Enum

from cineverse.core.logging import get_logger
from cineverse.models.user import UserRole

logger = get_logger(__name__)


class Permission(str, Enum):
    USER_CREATE = "user.create"
    USER_READ = "user.read"
    USER_UPDATE = "user.update"
    USER_DELETE = "user.delete"
    POST_CREATE = "post.create"
    POST_READ = "post.read"
    POST_UPDATE = "post.update"
    POST_DELETE = "post.delete"  # Soft delete
    POST_HARD_DELETE = "post.hard_delete"
    POST_APPROVE_DELETION = "post.approve_deletion"
    POST_CHANGE_STATUS = "post.change_status"


ROLE_PERMISSIONS: dict[UserRole, tuple[Permission, ...]] = {
    UserRole.SUPER_ADMIN: (
        Permission.USER_CREATE,
        Permission.USER_READ,
        Permission.USER_UPDATE,
        Permission.USER_DELETE,
        Permission.POST_CREATE,
        Permission.POST_READ,
        Permission.POST_UPDATE,
        Permission.POST_DELETE,
        Permission.POST_HARD_DELETE,
        Permission.POST_APPROVE_DELETION,
        Permission.POST_CHANGE_STATUS,
    ),
    UserRole.USER_ADMIN: (
        Permission.POST_CREATE,
        Permission.POST_READ,
        Permission.POST_UPDATE,
        Permission.POST_DELETE,
        Permission.POST_APPROVE_DELETION,
        Permission.POST_CHANGE_STATUS,
    ),
    UserRole.USER: (Permission.POST_READ,),
}

ADMIN_ROLES = (UserRole.SUPER_ADMIN, UserRole.USER_ADMIN)


class GateOutcome(str, Enum):
    ALLOW = "allow"
    LOGIN = "login"  # No session
    DENY = "deny"


def parse_role(role: str | None) -> UserRole | None:
    """Map a stored or token role string onto the enum; unknown strings give None."""
    if role is None:
        return None
    try:
        return UserRole(role)
    except ValueError:
        return None


def permissions_for(role: str | UserRole | None) -> list[str]:
    """Permission strings derived from a role. Unknown roles get none."""
    parsed = role if isinstance(role, UserRole) else parse_role(role)
    if parsed is None:
        return []
    return [permission.value for permission in ROLE_PERMISSIONS[parsed]]


def has_permission(role: str | UserRole | None, permission: Permission | str) -> bool:
    value = permission.value if isinstance(permission, Permission) else permission
    return value in permissions_for(role)


def evaluate_role_gate(role: str | None, allowed_roles: Iterable[UserRole]) -> GateOutcome:
    """Decide whether a session role passes a gate.

    ``role`` is ``None`` when there is no session. Role strings outside the
    enum never match, even if they equal an allowed value in some other case.
    """
    if role is None:
        return GateOutcome.LOGIN

    parsed = parse_role(role)
    if parsed is None:
        logger.warning("Unknown role in session", extra={"role": role})
        return GateOutcome.DENY

    if parsed not in set(allowed_roles):
        return GateOutcome.DENY

    return GateOutcome.ALLOW
