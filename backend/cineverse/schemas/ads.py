"""Ad payment schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PaymentLinkRequest(BaseModel):
    amount: float = Field(default=50.00, gt=0)
    currency: str = Field(default="USD", min_length=3, max_length=8)
    duration_days: int = Field(default=30, ge=1)


class AdPaymentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    amount: float
    currency: str
    duration_days: int
    is_used: bool
    used_at: datetime | None = None
    assigned_to_user_id: UUID | None = None
    created_at: datetime


class PaymentLinkResponse(BaseModel):
    payment: AdPaymentOut
    created: bool


class PaymentCodeCreate(BaseModel):
    amount: float = Field(default=1000.0, gt=0)
    currency: str = Field(default="LKR", min_length=3, max_length=8)
    duration_days: int = Field(default=30, ge=1)
    prefix: str = Field(default="AD", pattern="^[A-Za-z0-9]{1,10}$")
    assigned_to_user_id: UUID | None = None


class PaymentCodeRedeem(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class SponsoredPostOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    status: str
    payment_id: UUID | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
