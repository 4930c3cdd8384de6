"""FastAPI dependencies for authentication and authorization."""

from typing import Annotated
from urllib.parse import quote
from uuid import UUID

from fastapi import Depends, Header, Request
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import Forbidden, NotFound, PageRedirect, Unauthorized
from cineverse.core.config import settings
from cineverse.core.logging import get_logger
from cineverse.core.permissions import GateOutcome, Permission, evaluate_role_gate, has_permission
from cineverse.core.security import verify_session_token
from cineverse.core.security_logging import log_security_event
from cineverse.db.session import get_db
from cineverse.models.user import User, UserRole

logger = get_logger(__name__)


def extract_token(request: Request, authorization: str | None) -> str | None:
    """Read the session token from a Bearer Authorization header, then the cookie."""
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    # Non-bearer schemes (e.g. Basic from a proxy) fall through to the cookie
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


def get_optional_user(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
    db: Session = Depends(get_db),
) -> User | None:
    """Resolve the session to a user, or None when there is no usable session."""
    token = extract_token(request, authorization)
    if not token:
        return None

    try:
        session_data = verify_session_token(token)
        user_id = UUID(session_data.user_id)
    except Exception as e:
        logger.info("Rejected session token", extra={"reason": str(e)})
        return None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None

    # Role changed since the token was issued: the token is stale
    if user.role != session_data.role:
        logger.info("Stale session role", extra={"user_id": str(user.id)})
        return None

    return user


def get_current_user(user: User | None = Depends(get_optional_user)) -> User:
    """Dependency to get the current authenticated user."""
    if user is None:
        raise Unauthorized("Authentication required")
    return user


def require_roles(*allowed_roles: UserRole, conceal: bool = False):
    """Dependency factory gating an API route on the session role.

    No session gives 401. A role outside ``allowed_roles`` gives 403, or 404
    when ``conceal`` is set so the route does not reveal that it exists.
    """

    def role_checker(
        request: Request, user: User | None = Depends(get_optional_user)
    ) -> User:
        outcome = evaluate_role_gate(user.role if user else None, allowed_roles)
        if outcome is GateOutcome.LOGIN:
            raise Unauthorized("Authentication required")
        if outcome is GateOutcome.DENY:
            log_security_event(
                request,
                event_type="role_gate",
                outcome="deny",
                reason_code="NOT_FOUND" if conceal else "FORBIDDEN",
                user_id=str(user.id),
                role=user.role,
            )
            if conceal:
                raise NotFound()
            raise Forbidden(
                f"Access denied. Required roles: {[r.value for r in allowed_roles]}"
            )
        return user

    return role_checker


def require_permission(permission: Permission):
    """Dependency factory gating an API route on a derived permission."""

    def permission_checker(request: Request, user: User = Depends(get_current_user)) -> User:
        if not has_permission(user.role, permission):
            log_security_event(
                request,
                event_type="permission_gate",
                outcome="deny",
                reason_code="FORBIDDEN",
                user_id=str(user.id),
                permission=permission.value,
            )
            raise Forbidden(f"Missing permission: {permission.value}")
        return user

    return permission_checker


def require_page_roles(*allowed_roles: UserRole):
    """Dependency factory for page routes: denials redirect instead of erroring.

    No session redirects to the login page with a callback URL; a wrong role
    redirects to the home page.
    """

    def page_checker(request: Request, user: User | None = Depends(get_optional_user)) -> User:
        outcome = evaluate_role_gate(user.role if user else None, allowed_roles)
        if outcome is GateOutcome.LOGIN:
            raise PageRedirect(f"/login?callbackUrl={quote(request.url.path, safe='')}")
        if outcome is GateOutcome.DENY:
            log_security_event(
                request,
                event_type="page_gate",
                outcome="deny",
                reason_code="REDIRECT",
                user_id=str(user.id),
                role=user.role,
            )
            raise PageRedirect("/")
        return user

    return page_checker

