"""Configuration Manager for the Fire Door Survey client."""
from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.schemas import FALLBACK_LATITUDE, FALLBACK_LONGITUDE


class ConfigManager(BaseSettings):
    """Client settings, overridable with SURVEY_* environment variables."""

    model_config = SettingsConfigDict(env_prefix='SURVEY_', case_sensitive=False)

    # API settings
    api_base_url: str = 'http://localhost:5000'
    api_timeout: float = Field(default=10.0, gt=0)

    # Stores
    survey_table: str = 'fire_door_surveys'
    photo_bucket: str = 'fire-door-photos'

    # Photo ingestion
    upload_photos: bool = True  # False embeds photos as data URIs instead
    max_photo_bytes: int = Field(default=15 * 1024 * 1024, gt=0)
    photo_workers: int = Field(default=4, ge=1)
    thumbnail_max_size: int = 200

    # Geolocation
    fallback_latitude: float = FALLBACK_LATITUDE
    fallback_longitude: float = FALLBACK_LONGITUDE
    gps_timeout: float = 10.0
    # Fixed device position; when unset the position provider reports it unavailable
    device_latitude: Optional[float] = None
    device_longitude: Optional[float] = None
