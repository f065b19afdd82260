"""
Configuration management for the Google Maps integration package.

This module handles environment variable configuration for geocoding
lookups using Pydantic settings.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logger import logger


class GoogleMapsSettings(BaseSettings):
    """Configuration for Google Maps integration using Pydantic settings."""

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        env_prefix="GOOGLE_MAPS_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    api_key: str | None = Field(
        default=None, description="Google Maps API key for geocoding"
    )
    base_url: str = Field(
        default="https://maps.googleapis.com/maps/api",
        description="Google Maps web service base URL",
    )
    region: str = Field(
        default="nl", description="Region bias (ccTLD) for geocoding results"
    )
    timeout: int = Field(default=10, description="Request timeout in seconds")


# Global settings instance
_google_maps_settings: GoogleMapsSettings | None = None


def get_google_maps_settings() -> GoogleMapsSettings:
    """
    Get the global Google Maps settings instance.

    Returns:
        GoogleMapsSettings: The global settings instance
    """
    global _google_maps_settings
    if _google_maps_settings is None:
        _google_maps_settings = GoogleMapsSettings()
        key = _google_maps_settings.api_key
        logger.info(
            "GoogleMapsSettings loaded",
            api_key_prefix=(key[:8] + "...") if key else None,
        )
    return _google_maps_settings


def set_google_maps_settings(settings: GoogleMapsSettings | None) -> None:
    """
    Set the global Google Maps settings instance.

    Args:
        settings: The settings to set
    """
    global _google_maps_settings
    _google_maps_settings = settings
