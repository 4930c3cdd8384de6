"""Admin settings endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import NotFound
from cineverse.core.dependencies import require_roles
from cineverse.db.session import get_db
from cineverse.models.user import User, UserRole
from cineverse.schemas.settings import (
    AdConfig,
    MicroPostGroups,
    PromoData,
    RawSettingResponse,
    RawSettingUpdate,
)
from cineverse.services.settings_store import (
    get_micro_post_group_ids,
    get_setting,
    save_ad_config,
    save_featured_promo,
    save_micro_post_group_ids,
    update_setting,
)

router = APIRouter(prefix="/admin/settings", tags=["Admin - Settings"])

require_super_admin = require_roles(UserRole.SUPER_ADMIN)

SettingKey = Annotated[str, Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_.\-]+$")]


@router.put(
    "/ad-config",
    response_model=AdConfig,
    response_model_by_alias=True,
    summary="Update ad configuration",
)
async def update_ad_config(
    request_data: AdConfig,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
) -> AdConfig:
    return save_ad_config(db, request_data, updated_by=current_user.id)


@router.put(
    "/featured-promo",
    response_model=PromoData,
    response_model_by_alias=True,
    summary="Update featured promo",
)
async def update_featured_promo(
    request_data: PromoData,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
) -> PromoData:
    return save_featured_promo(db, request_data, updated_by=current_user.id)


@router.get(
    "/micro-post-groups",
    response_model=MicroPostGroups,
    response_model_by_alias=True,
    summary="Groups allowed on the micro-post wall",
)
async def read_micro_post_groups(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
) -> MicroPostGroups:
    return MicroPostGroups(group_ids=get_micro_post_group_ids(db))


@router.put(
    "/micro-post-groups",
    response_model=MicroPostGroups,
    response_model_by_alias=True,
    summary="Update groups allowed on the micro-post wall",
)
async def update_micro_post_groups(
    request_data: MicroPostGroups,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
) -> MicroPostGroups:
    group_ids = save_micro_post_group_ids(db, request_data.group_ids, updated_by=current_user.id)
    return MicroPostGroups(group_ids=group_ids)


@router.get(
    "/{key}",
    response_model=RawSettingResponse,
    summary="Read a raw setting",
)
async def read_raw_setting(
    key: SettingKey,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
) -> RawSettingResponse:
    setting = get_setting(db, key)
    if setting is None:
        raise NotFound("Setting")
    return RawSettingResponse.model_validate(setting)


@router.put(
    "/{key}",
    response_model=RawSettingResponse,
    summary="Write a raw setting",
    description="Upsert a raw value. Pass expected_version to reject concurrent edits.",
)
async def write_raw_setting(
    request_data: RawSettingUpdate,
    key: SettingKey,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_super_admin),
) -> RawSettingResponse:
    setting = update_setting(
        db,
        key,
        request_data.value,
        updated_by=current_user.id,
        expected_version=request_data.expected_version,
    )
    return RawSettingResponse.model_validate(setting)
