"""Authentication schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class RegisterRequest(BaseModel):
    """Registration request schema."""

    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    captcha_token: str | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank")
        return v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        """Normalize email to lowercase."""
        return v.lower().strip()


class SigninRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    captcha_token: str | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower().strip()


class UserResponse(BaseModel):
    """User record as returned to clients (never includes the password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None
    email: str
    role: str
    created_at: datetime


class SigninResponse(BaseModel):
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime


class SessionUser(BaseModel):
    id: str
    name: str | None = None
    email: str | None = None
    role: str
    permissions: list[str]


class SessionResponse(BaseModel):
    """Current session; both fields are absent when signed out."""

    user: SessionUser | None = None
    expires: datetime | None = None


class StatusResponse(BaseModel):
    status: str = "ok"
    message: str | None = None
