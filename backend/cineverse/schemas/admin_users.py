"""Schemas for admin user management."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from cineverse.models.user import UserRole


class UserListItem(BaseModel):
    """User list item response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: Optional[str] = None
    email: str
    role: str
    is_active: bool
    account_type: str
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserRoleResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: str
    permissions: list[str]
