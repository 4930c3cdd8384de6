"""Schemas for settings blobs.

Blobs are persisted with camelCase keys; both spellings are accepted on input.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SettingsBlob(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AdConfig(SettingsBlob):
    """Watch-page ad slot."""

    image_url: str = ""
    link_url: str = ""
    enabled: bool = True


class AudioTrack(SettingsBlob):
    title: str
    url: str


class PromoData(SettingsBlob):
    """Featured promo shown on the home page."""

    active: bool = False
    type: Literal["video", "image", "audio"] = "image"
    media_url: str = ""  # YouTube ID/URL, image URL, or audio cover image
    title: str = ""
    description: str = ""
    link_url: str | None = None
    audio_tracks: list[AudioTrack] = Field(default_factory=list)


class MicroPostGroups(SettingsBlob):
    group_ids: list[str] = Field(default_factory=list)


class RawSettingUpdate(BaseModel):
    value: str
    expected_version: int | None = Field(default=None, ge=0)


class RawSettingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    key: str
    value: str
    version: int
    updated_at: datetime | None = None
    updated_by_user_id: UUID | None = None


class CaptchaConfig(SettingsBlob):
    enabled: bool
    site_key: str | None = None
