"""Ad payment codes and their link to sponsored posts.

A payment, once used, belongs to exactly one sponsored post. Every flow here
that writes both a payment and a post commits them together.
"""

import secrets
import time
from dataclasses import dataclass
from datetime import timedelta
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from cineverse.common.timeutils import utcnow
from cineverse.core.app_exceptions import Conflict, Forbidden, NotFound
from cineverse.core.logging import get_logger
from cineverse.models.ads import AdPayment, SponsoredPost, SponsoredPostStatus
from cineverse.models.user import User

logger = get_logger(__name__)

MAX_CODE_ATTEMPTS = 5


@dataclass
class LinkResult:
    payment: AdPayment
    created: bool


def link_payment_to_post(
    db: Session,
    sponsored_post_id: UUID,
    amount: float = 50.00,
    currency: str = "USD",
    duration_days: int = 30,
) -> LinkResult:
    """Find or create the payment backing a sponsored post.

    A post that already has a payment is left alone. Otherwise a used payment
    is created for the post owner and linked in the same transaction.
    """
    post = db.get(SponsoredPost, sponsored_post_id)
    if post is None:
        raise NotFound("Sponsored post")

    if post.payment_id is not None:
        logger.info(
            "Sponsored post already has a payment",
            extra={"sponsored_post_id": str(post.id), "payment_id": str(post.payment_id)},
        )
        return LinkResult(payment=post.payment, created=False)

    now = utcnow()
    payment = AdPayment(
        code=f"SEED_{int(time.time() * 1000)}",
        amount=amount,
        currency=currency,
        duration_days=duration_days,
        is_used=True,
        used_at=now,
        used_by_user_id=post.user_id,
    )
    try:
        db.add(payment)
        db.flush()
        # Only link while the post is still unpaid; a concurrent link wins otherwise
        claimed = db.execute(
            update(SponsoredPost)
            .where(SponsoredPost.id == post.id, SponsoredPost.payment_id.is_(None))
            .values(payment_id=payment.id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if claimed == 0:
            db.rollback()
            return _existing_link(db, post)
        db.commit()
    except IntegrityError:
        db.rollback()
        return _existing_link(db, post)
    except Exception:
        db.rollback()
        raise
    db.refresh(post)
    db.refresh(payment)

    logger.info(
        "Payment linked to sponsored post",
        extra={"sponsored_post_id": str(post.id), "payment_id": str(payment.id)},
    )
    return LinkResult(payment=payment, created=True)


def _existing_link(db: Session, post: SponsoredPost) -> LinkResult:
    db.refresh(post)
    if post.payment_id is None:
        raise Conflict("Could not link a payment to this sponsored post")
    logger.info(
        "Sponsored post was linked concurrently",
        extra={"sponsored_post_id": str(post.id), "payment_id": str(post.payment_id)},
    )
    return LinkResult(payment=post.payment, created=False)


def _new_code(prefix: str) -> str:
    return f"{prefix.upper()}-{secrets.token_hex(4).upper()}"


def generate_payment_code(
    db: Session,
    amount: float = 1000.0,
    currency: str = "LKR",
    duration_days: int = 30,
    prefix: str = "AD",
    assigned_to_user_id: UUID | None = None,
) -> AdPayment:
    """Create an unused, redeemable payment code."""
    for _ in range(MAX_CODE_ATTEMPTS):
        code = _new_code(prefix)
        if db.query(AdPayment.id).filter(AdPayment.code == code).first() is None:
            break
    else:
        raise Conflict("Could not allocate a unique payment code")

    payment = AdPayment(
        code=code,
        amount=amount,
        currency=currency,
        duration_days=duration_days,
        is_used=False,
        assigned_to_user_id=assigned_to_user_id,
    )
    db.add(payment)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)

    logger.info("Payment code generated", extra={"payment_id": str(payment.id)})
    return payment


def redeem_payment_code(
    db: Session, code: str, user: User, sponsored_post_id: UUID
) -> SponsoredPost:
    """Spend an unused code on one of the caller's sponsored posts and activate it."""
    payment = db.query(AdPayment).filter(AdPayment.code == code.strip()).first()
    if payment is None:
        raise NotFound("Payment code")
    if payment.is_used:
        raise Conflict("This code has already been used")
    if payment.assigned_to_user_id is not None and payment.assigned_to_user_id != user.id:
        raise Forbidden("This code is reserved for another user")

    post = db.get(SponsoredPost, sponsored_post_id)
    if post is None or post.user_id != user.id:
        raise NotFound("Sponsored post")
    if post.payment_id is not None:
        raise Conflict("This ad already has a payment")

    now = utcnow()
    try:
        # Conditional updates so two concurrent redemptions cannot both spend the code
        code_claimed = db.execute(
            update(AdPayment)
            .where(AdPayment.id == payment.id, AdPayment.is_used.is_(False))
            .values(is_used=True, used_at=now, used_by_user_id=user.id)
            .execution_options(synchronize_session=False)
        ).rowcount
        if code_claimed == 0:
            raise Conflict("This code has already been used")

        post_claimed = db.execute(
            update(SponsoredPost)
            .where(SponsoredPost.id == post.id, SponsoredPost.payment_id.is_(None))
            .values(
                payment_id=payment.id,
                status=SponsoredPostStatus.ACTIVE.value,
                start_date=now,
                end_date=now + timedelta(days=payment.duration_days),
            )
            .execution_options(synchronize_session=False)
        ).rowcount
        if post_claimed == 0:
            raise Conflict("This ad already has a payment")
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise Conflict("This code has already been used") from e
    except Exception:
        db.rollback()
        raise
    db.refresh(payment)
    db.refresh(post)

    logger.info(
        "Payment code redeemed",
        extra={"payment_id": str(payment.id), "sponsored_post_id": str(post.id), "user_id": str(user.id)},
    )
    return post
