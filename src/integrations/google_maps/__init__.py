"""
Google Maps integrations package.

Provides the geocoding client used to place detected addresses on a map.
"""

from .client import GoogleGeocodingClient
from .config import GoogleMapsSettings, get_google_maps_settings
from .exceptions import (
    GeocodingRequestError,
    GoogleMapsConfigurationError,
    GoogleMapsError,
)

__all__ = [
    "GeocodingRequestError",
    "GoogleGeocodingClient",
    "GoogleMapsConfigurationError",
    "GoogleMapsError",
    "GoogleMapsSettings",
    "get_google_maps_settings",
]
