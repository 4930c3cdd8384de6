"""Subscription plan and access key endpoints."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cineverse.core.dependencies import get_current_user, require_roles
from cineverse.db.session import get_db
from cineverse.models.user import User, UserRole
from cineverse.schemas.subscription import (
    AccessKeyCreate,
    AccessKeyOut,
    MySubscriptionResponse,
    PaymentRecordOut,
    PlanOut,
    RedeemRequest,
    RedeemResponse,
    SubscriptionOut,
)
from cineverse.services.subscriptions import (
    generate_access_key,
    get_active_subscription,
    list_active_plans,
    redeem_access_key,
)

router = APIRouter(tags=["Subscriptions"])


@router.get(
    "/subscriptions/plans",
    response_model=list[PlanOut],
    summary="List active plans",
)
async def list_plans(db: Session = Depends(get_db)) -> list[PlanOut]:
    return [PlanOut.model_validate(plan) for plan in list_active_plans(db)]


@router.post(
    "/subscriptions/redeem",
    response_model=RedeemResponse,
    summary="Redeem an access key",
)
async def redeem(
    request_data: RedeemRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> RedeemResponse:
    result = redeem_access_key(db, current_user, request_data.code)
    return RedeemResponse(
        type=result.type,
        payment=PaymentRecordOut.model_validate(result.payment),
        subscription=(
            SubscriptionOut.model_validate(result.subscription) if result.subscription else None
        ),
    )


@router.get(
    "/subscriptions/me",
    response_model=MySubscriptionResponse,
    summary="Current user's premium status",
)
async def my_subscription(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MySubscriptionResponse:
    active = get_active_subscription(db, current_user.id)
    return MySubscriptionResponse(
        account_type=current_user.account_type,
        subscription_end_date=current_user.subscription_end_date,
        ad_balance=current_user.ad_balance or 0.0,
        active=SubscriptionOut.model_validate(active) if active else None,
    )


@router.post(
    "/admin/access-keys",
    response_model=AccessKeyOut,
    status_code=status.HTTP_201_CREATED,
    summary="Generate an access key",
    tags=["Admin - Subscriptions"],
)
async def create_access_key(
    request_data: AccessKeyCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.SUPER_ADMIN)),
) -> AccessKeyOut:
    key = generate_access_key(
        db,
        key_type=request_data.type.value,
        plan_id=request_data.plan_id,
        credit_amount=request_data.credit_amount,
        assigned_to_user_id=request_data.assigned_to_user_id,
        expires_at=request_data.expires_at,
        prefix=request_data.prefix,
    )
    return AccessKeyOut.model_validate(key)
