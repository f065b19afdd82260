"""Map configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.addresses.constants import CITY_NAME, COUNTRY_NAME


class MapSettings(BaseSettings):
    """Settings for the incremental geocoding map.

    Attributes:
        city_name: Qualifier that marks an address as already in the target city
        country_name: Country appended together with the city to bare addresses
        default_center_lat: Latitude of the initial map center
        default_center_lng: Longitude of the initial map center
        default_zoom: Initial zoom level
        close_zoom: Zoom used after a batch with exactly one address
        max_zoom: Highest zoom fit-to-bounds may choose
        viewport_width_px: Width of the rendered map
        viewport_height_px: Height of the rendered map
        watchdog_seconds: Time after which an unfinished batch stops blocking updates
    """

    model_config = SettingsConfigDict(
        env_prefix="MAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    city_name: str = Field(default=CITY_NAME)
    country_name: str = Field(default=COUNTRY_NAME)
    default_center_lat: float = Field(default=52.3676)
    default_center_lng: float = Field(default=4.9041)
    default_zoom: int = Field(default=13, ge=0, le=21)
    close_zoom: int = Field(default=15, ge=0, le=21)
    max_zoom: int = Field(default=21, ge=0, le=21)
    viewport_width_px: int = Field(default=640, gt=0)
    viewport_height_px: int = Field(default=300, gt=0)
    watchdog_seconds: float = Field(default=10.0, gt=0)


@lru_cache
def get_map_settings() -> MapSettings:
    """Get cached map settings instance.

    Returns:
        MapSettings: Cached settings instance
    """
    return MapSettings()
