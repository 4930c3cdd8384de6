"""Tests for the key-value settings store."""

import json
import logging

import pytest
from sqlalchemy.orm import Session

from cineverse.core.app_exceptions import Conflict
from cineverse.models.settings import AppSetting
from cineverse.schemas.settings import AdConfig, PromoData
from cineverse.services.settings_store import (
    AD_CONFIG_KEY,
    FEATURED_PROMO_KEY,
    MICRO_POST_GROUPS_KEY,
    get_ad_config,
    get_featured_promo,
    get_micro_post_group_ids,
    get_setting,
    save_ad_config,
    save_micro_post_group_ids,
    update_setting,
)


def test_missing_ad_config_returns_defaults(db: Session) -> None:
    assert get_ad_config(db).model_dump(by_alias=True) == {
        "imageUrl": "",
        "linkUrl": "",
        "enabled": True,
    }


def test_missing_featured_promo_returns_defaults(db: Session) -> None:
    assert get_featured_promo(db).model_dump(by_alias=True) == {
        "active": False,
        "type": "image",
        "mediaUrl": "",
        "title": "",
        "description": "",
        "linkUrl": None,
        "audioTracks": [],
    }


def test_missing_micro_post_groups_is_empty(db: Session) -> None:
    assert get_micro_post_group_ids(db) == []


def test_malformed_json_falls_back_and_logs(db: Session, caplog: pytest.LogCaptureFixture) -> None:
    db.add(AppSetting(key=AD_CONFIG_KEY, value="{not json"))
    db.commit()

    with caplog.at_level(logging.WARNING):
        config = get_ad_config(db)

    assert config == AdConfig()
    assert any("Malformed setting payload" in record.getMessage() for record in caplog.records)


def test_invalid_payload_falls_back(db: Session) -> None:
    db.add(AppSetting(key=FEATURED_PROMO_KEY, value=json.dumps({"type": "hologram"})))
    db.commit()

    assert get_featured_promo(db) == PromoData()


def test_saved_blob_uses_camel_case_keys(db: Session) -> None:
    save_ad_config(db, AdConfig(image_url="https://cdn/ad.png", link_url="https://sponsor", enabled=False))

    stored = json.loads(get_setting(db, AD_CONFIG_KEY).value)

    assert stored == {"imageUrl": "https://cdn/ad.png", "linkUrl": "https://sponsor", "enabled": False}
    assert get_ad_config(db).image_url == "https://cdn/ad.png"


def test_camel_case_payload_is_read(db: Session) -> None:
    value = {"active": True, "type": "audio", "mediaUrl": "cover.jpg", "audioTracks": [{"title": "Theme", "url": "a.mp3"}]}
    db.add(AppSetting(key=FEATURED_PROMO_KEY, value=json.dumps(value)))
    db.commit()

    promo = get_featured_promo(db)

    assert promo.active is True
    assert promo.media_url == "cover.jpg"
    assert promo.audio_tracks[0].url == "a.mp3"


def test_update_setting_bumps_version(db: Session) -> None:
    first_version = update_setting(db, "banner", "one").version
    second_version = update_setting(db, "banner", "two").version

    assert first_version == 1
    assert second_version == 2
    assert get_setting(db, "banner").value == "two"


def test_update_setting_rejects_stale_version(db: Session) -> None:
    update_setting(db, "banner", "one")
    update_setting(db, "banner", "two", expected_version=1)

    with pytest.raises(Conflict):
        update_setting(db, "banner", "three", expected_version=1)

    assert get_setting(db, "banner").value == "two"


def test_expected_version_zero_creates(db: Session) -> None:
    assert update_setting(db, "fresh", "x", expected_version=0).version == 1

    with pytest.raises(Conflict):
        update_setting(db, "fresh", "y", expected_version=0)


def test_legacy_comma_separated_groups_are_read(db: Session) -> None:
    db.add(AppSetting(key=MICRO_POST_GROUPS_KEY, value="g1, g2,,g3 "))
    db.commit()

    assert get_micro_post_group_ids(db) == ["g1", "g2", "g3"]


def test_save_groups_dedupes_and_stores_json(db: Session) -> None:
    saved = save_micro_post_group_ids(db, ["g1", " g2 ", "g1", ""])

    assert saved == ["g1", "g2"]
    assert json.loads(get_setting(db, MICRO_POST_GROUPS_KEY).value) == ["g1", "g2"]
