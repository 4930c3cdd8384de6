"""Public settings endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cineverse.core.config import settings
from cineverse.db.session import get_db
from cineverse.schemas.settings import AdConfig, CaptchaConfig, PromoData
from cineverse.services.settings_store import get_ad_config, get_featured_promo

router = APIRouter(prefix="/settings", tags=["Settings"])


@router.get(
    "/ad-config",
    response_model=AdConfig,
    response_model_by_alias=True,
    summary="Watch-page ad configuration",
)
async def read_ad_config(db: Session = Depends(get_db)) -> AdConfig:
    return get_ad_config(db)


@router.get(
    "/featured-promo",
    response_model=PromoData,
    response_model_by_alias=True,
    summary="Home page featured promo",
)
async def read_featured_promo(db: Session = Depends(get_db)) -> PromoData:
    return get_featured_promo(db)


@router.get(
    "/captcha",
    response_model=CaptchaConfig,
    response_model_by_alias=True,
    summary="CAPTCHA widget configuration",
    description="Clients without a site key send the bypass token instead of rendering the widget.",
)
async def read_captcha_config() -> CaptchaConfig:
    return CaptchaConfig(enabled=settings.recaptcha_enabled, site_key=settings.RECAPTCHA_SITE_KEY)
