"""Subscription plan and access key schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cineverse.models.subscription import AccessKeyType


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: str | None = None
    price: float
    currency: str
    interval: str
    duration_days: int
    discount_percent: int
    features: list[str]


class RedeemRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=64)


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    plan: PlanOut
    status: str
    start_date: datetime
    end_date: datetime


class PaymentRecordOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    amount: float
    currency: str
    method: str
    status: str
    type: str


class RedeemResponse(BaseModel):
    type: str
    payment: PaymentRecordOut
    subscription: SubscriptionOut | None = None


class MySubscriptionResponse(BaseModel):
    account_type: str
    subscription_end_date: datetime | None = None
    ad_balance: float
    active: SubscriptionOut | None = None


class AccessKeyCreate(BaseModel):
    type: AccessKeyType = AccessKeyType.SUBSCRIPTION
    plan_id: UUID | None = None
    credit_amount: float | None = Field(default=None, gt=0)
    assigned_to_user_id: UUID | None = None
    expires_at: datetime | None = None
    prefix: str = Field(default="CV", pattern="^[A-Za-z0-9]{1,10}$")

    @model_validator(mode="after")
    def check_type_fields(self):
        if self.type == AccessKeyType.SUBSCRIPTION and self.plan_id is None:
            raise ValueError("plan_id is required for subscription keys")
        if self.type == AccessKeyType.AD_CAMPAIGN and self.credit_amount is None:
            raise ValueError("credit_amount is required for ad campaign keys")
        return self


class AccessKeyOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    code: str
    type: str
    plan_id: UUID | None = None
    credit_amount: float | None = None
    assigned_to_user_id: UUID | None = None
    expires_at: datetime | None = None
    created_at: datetime
