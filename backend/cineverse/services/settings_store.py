"""Key-value settings store.

Values are JSON strings under well-known keys. Reads fall back to the
documented defaults when a key is missing or its payload is unusable; writes
upsert by key and bump a version counter.
"""

import json
from typing import TypeVar
from uuid import UUID

from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

from cineverse.common.timeutils import utcnow
from cineverse.core.app_exceptions import Conflict
from cineverse.core.logging import get_logger
from cineverse.models.settings import AppSetting
from cineverse.schemas.settings import AdConfig, PromoData

logger = get_logger(__name__)

AD_CONFIG_KEY = "AD_CONFIG"
FEATURED_PROMO_KEY = "featured_promo"
MICRO_POST_GROUPS_KEY = "microPostAllowedGroupIds"

ModelT = TypeVar("ModelT", bound=BaseModel)


def get_setting(db: Session, key: str) -> AppSetting | None:
    return db.get(AppSetting, key)


def update_setting(
    db: Session,
    key: str,
    value: str,
    updated_by: UUID | None = None,
    expected_version: int | None = None,
) -> AppSetting:
    """Upsert a raw setting value.

    Last write wins unless ``expected_version`` is given, in which case the
    stored version must match or the write is rejected with a conflict.
    A missing key has version 0.
    """
    setting = db.get(AppSetting, key)
    current_version = setting.version if setting else 0

    if expected_version is not None and expected_version != current_version:
        raise Conflict(
            "Setting was modified by someone else",
            details={"key": key, "expected_version": expected_version, "version": current_version},
        )

    if setting is None:
        setting = AppSetting(key=key, value=value, version=1, updated_by_user_id=updated_by)
        db.add(setting)
    else:
        setting.value = value
        setting.version = current_version + 1
        setting.updated_at = utcnow()
        setting.updated_by_user_id = updated_by

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(setting)

    logger.info("Setting updated", extra={"key": key, "version": setting.version})
    return setting


def read_json_setting(db: Session, key: str, model: type[ModelT]) -> ModelT:
    """Parse a JSON setting into ``model``, falling back to its defaults."""
    setting = db.get(AppSetting, key)
    if setting is None:
        return model()

    try:
        return model.model_validate_json(setting.value)
    except ValidationError as e:
        logger.warning(
            "Malformed setting payload, using defaults",
            extra={"key": key, "errors": e.error_count()},
        )
        return model()


def write_json_setting(
    db: Session,
    key: str,
    value: BaseModel,
    updated_by: UUID | None = None,
    expected_version: int | None = None,
) -> AppSetting:
    payload = value.model_dump_json(by_alias=True)
    return update_setting(db, key, payload, updated_by=updated_by, expected_version=expected_version)


def get_ad_config(db: Session) -> AdConfig:
    return read_json_setting(db, AD_CONFIG_KEY, AdConfig)


def save_ad_config(db: Session, config: AdConfig, updated_by: UUID | None = None) -> AdConfig:
    write_json_setting(db, AD_CONFIG_KEY, config, updated_by=updated_by)
    return config


def get_featured_promo(db: Session) -> PromoData:
    return read_json_setting(db, FEATURED_PROMO_KEY, PromoData)


def save_featured_promo(db: Session, promo: PromoData, updated_by: UUID | None = None) -> PromoData:
    write_json_setting(db, FEATURED_PROMO_KEY, promo, updated_by=updated_by)
    return promo


def get_micro_post_group_ids(db: Session) -> list[str]:
    """Group ids allowed on the micro-post wall.

    Stored as a JSON list; older rows hold a comma-separated string.
    """
    setting = db.get(AppSetting, MICRO_POST_GROUPS_KEY)
    if setting is None or not setting.value.strip():
        return []

    try:
        parsed = json.loads(setting.value)
    except json.JSONDecodeError:
        return [part.strip() for part in setting.value.split(",") if part.strip()]

    if isinstance(parsed, list):
        return [str(item) for item in parsed if str(item).strip()]
    if isinstance(parsed, (str, int)):
        return [str(parsed)]

    logger.warning("Malformed setting payload, using defaults", extra={"key": MICRO_POST_GROUPS_KEY})
    return []


def save_micro_post_group_ids(
    db: Session, group_ids: list[str], updated_by: UUID | None = None
) -> list[str]:
    cleaned = list(dict.fromkeys(g.strip() for g in group_ids if g.strip()))
    update_setting(db, MICRO_POST_GROUPS_KEY, json.dumps(cleaned), updated_by=updated_by)
    return cleaned
