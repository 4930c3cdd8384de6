"""Admin user management endpoints."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session

from cineverse.common.pagination import PaginatedResponse, PaginationParams, pagination_params
from cineverse.core.app_exceptions import NotFound, ValidationFailed
from cineverse.core.dependencies import require_roles
from cineverse.core.permissions import parse_role, permissions_for
from cineverse.core.security_logging import log_security_event
from cineverse.db.session import get_db
from cineverse.models.user import User, UserRole
from cineverse.schemas.admin_users import UserListItem, UserRoleResponse, UserRoleUpdate

router = APIRouter(prefix="/admin/users", tags=["Admin - Users"])


@router.get(
    "",
    response_model=PaginatedResponse[UserListItem],
    summary="List users",
    description="Get paginated list of users with optional search and role filter.",
)
async def list_users(
    q: Optional[str] = Query(None, description="Search by name or email"),
    role: Optional[str] = Query(None, description="Filter by role"),
    pagination: PaginationParams = Depends(pagination_params),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.SUPER_ADMIN)),
) -> PaginatedResponse[UserListItem]:
    query = db.query(User)

    if q:
        search_term = f"%{q.lower()}%"
        query = query.filter(or_(User.name.ilike(search_term), User.email.ilike(search_term)))

    if role:
        role_enum = parse_role(role)
        if role_enum is None:
            raise ValidationFailed(f"Invalid role: {role}")
        query = query.filter(User.role == role_enum.value)

    total = query.count()
    users = (
        query.order_by(User.created_at.desc())
        .offset(pagination.offset)
        .limit(pagination.page_size)
        .all()
    )

    return PaginatedResponse[UserListItem](
        items=[UserListItem.model_validate(user) for user in users],
        page=pagination.page,
        page_size=pagination.page_size,
        total=total,
    )


@router.patch(
    "/{user_id}/role",
    response_model=UserRoleResponse,
    summary="Change a user's role",
    description="Existing sessions of the user stop working until they sign in again.",
)
async def update_user_role(
    user_id: UUID,
    request_data: UserRoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.SUPER_ADMIN)),
) -> UserRoleResponse:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User")

    if user.id == current_user.id and request_data.role != UserRole.SUPER_ADMIN:
        raise ValidationFailed("You cannot remove your own super admin role")

    previous = user.role
    user.role = request_data.role.value
    db.commit()
    db.refresh(user)

    log_security_event(
        request,
        event_type="role_change",
        outcome="allow",
        user_id=str(current_user.id),
        target_user_id=str(user.id),
        from_role=previous,
        to_role=user.role,
    )

    return UserRoleResponse(
        id=user.id, email=user.email, role=user.role, permissions=permissions_for(user.role)
    )
