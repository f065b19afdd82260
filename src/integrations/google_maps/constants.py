"""
Google Maps integration constants and enums.
"""

from enum import Enum


class GoogleMapsEndpoint(str, Enum):
    """Google Maps web service endpoints."""

    GEOCODE = "/geocode/json"


class GeocodeStatus(str, Enum):
    """Status codes returned by the Geocoding API."""

    OK = "OK"
    ZERO_RESULTS = "ZERO_RESULTS"
    OVER_DAILY_LIMIT = "OVER_DAILY_LIMIT"
    OVER_QUERY_LIMIT = "OVER_QUERY_LIMIT"
    REQUEST_DENIED = "REQUEST_DENIED"
    INVALID_REQUEST = "INVALID_REQUEST"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
