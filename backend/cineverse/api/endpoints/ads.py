"""Ad payment endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from cineverse.core.dependencies import get_current_user, require_roles
from cineverse.db.session import get_db
from cineverse.models.user import User, UserRole
from cineverse.schemas.ads import (
    AdPaymentOut,
    PaymentCodeCreate,
    PaymentCodeRedeem,
    PaymentLinkRequest,
    PaymentLinkResponse,
    SponsoredPostOut,
)
from cineverse.services.ad_payments import (
    generate_payment_code,
    link_payment_to_post,
    redeem_payment_code,
)

router = APIRouter(tags=["Ads"])


@router.post(
    "/admin/ads/{sponsored_post_id}/payment",
    response_model=PaymentLinkResponse,
    summary="Link a payment to a sponsored post",
    description="Creates and links a used payment unless the post already has one.",
    tags=["Admin - Ads"],
)
async def link_payment(
    sponsored_post_id: UUID,
    request_data: PaymentLinkRequest | None = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.SUPER_ADMIN)),
) -> PaymentLinkResponse:
    options = request_data or PaymentLinkRequest()
    result = link_payment_to_post(
        db,
        sponsored_post_id,
        amount=options.amount,
        currency=options.currency,
        duration_days=options.duration_days,
    )
    return PaymentLinkResponse(
        payment=AdPaymentOut.model_validate(result.payment), created=result.created
    )


@router.post(
    "/admin/ads/codes",
    response_model=AdPaymentOut,
    status_code=status.HTTP_201_CREATED,
    summary="Generate an ad payment code",
    tags=["Admin - Ads"],
)
async def create_payment_code(
    request_data: PaymentCodeCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.SUPER_ADMIN)),
) -> AdPaymentOut:
    payment = generate_payment_code(
        db,
        amount=request_data.amount,
        currency=request_data.currency,
        duration_days=request_data.duration_days,
        prefix=request_data.prefix,
        assigned_to_user_id=request_data.assigned_to_user_id,
    )
    return AdPaymentOut.model_validate(payment)


@router.post(
    "/ads/{sponsored_post_id}/redeem",
    response_model=SponsoredPostOut,
    summary="Pay for a sponsored post with a code",
)
async def redeem_code(
    sponsored_post_id: UUID,
    request_data: PaymentCodeRedeem,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SponsoredPostOut:
    post = redeem_payment_code(db, request_data.code, current_user, sponsored_post_id)
    return SponsoredPostOut.model_validate(post)
