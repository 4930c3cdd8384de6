"""Admin dashboard pages.

Page routes never answer with an error body: a missing session redirects to
the login page and a non-admin session redirects home.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from cineverse.core.dependencies import require_page_roles
from cineverse.db.session import get_db
from cineverse.models.ads import AdPayment
from cineverse.models.post import Post
from cineverse.models.subscription import PaymentRecord
from cineverse.models.user import User, UserRole
from cineverse.services.settings_store import (
    get_ad_config,
    get_featured_promo,
    get_micro_post_group_ids,
)

router = APIRouter(prefix="/admin", tags=["Pages"], include_in_schema=False)

require_super_admin_page = require_page_roles(UserRole.SUPER_ADMIN)


def _count(db: Session, column) -> int:
    return db.query(func.count(column)).scalar() or 0


@router.get("")
async def admin_dashboard(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin_page),
) -> dict:
    posts_by_status = dict(db.query(Post.status, func.count(Post.id)).group_by(Post.status).all())
    return {
        "page": "admin",
        "viewer": {"id": str(current_user.id), "name": current_user.name},
        "stats": {
            "users": _count(db, User.id),
            "posts": _count(db, Post.id),
            "posts_by_status": posts_by_status,
            "ad_payments": _count(db, AdPayment.id),
            "payment_records": _count(db, PaymentRecord.id),
        },
    }


@router.get("/settings")
async def admin_settings_page(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin_page),
) -> dict:
    return {
        "page": "admin/settings",
        "ad_config": get_ad_config(db).model_dump(by_alias=True),
        "featured_promo": get_featured_promo(db).model_dump(by_alias=True),
        "micro_post_group_ids": get_micro_post_group_ids(db),
    }
