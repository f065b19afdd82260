"""Custom exception classes for the Google Maps client."""


class GoogleMapsError(Exception):
    """Base exception for all Google Maps errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    def __str__(self) -> str:
        if self.status_code:
            return f"Google Maps Error ({self.status_code}): {self.message}"
        return f"Google Maps Error: {self.message}"


class GoogleMapsConfigurationError(GoogleMapsError):
    """Raised when the Maps API key is not configured."""

    def __init__(self, message: str = "Google Maps API key not configured") -> None:
        super().__init__(message)


class GeocodingRequestError(GoogleMapsError):
    """Raised when a geocoding request fails at the HTTP level."""

    pass
