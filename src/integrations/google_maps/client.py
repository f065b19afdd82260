"""Async client for the Google Geocoding API."""

import httpx
from pydantic import ValidationError

from src.integrations.google_maps.config import GoogleMapsSettings
from src.integrations.google_maps.constants import GeocodeStatus, GoogleMapsEndpoint
from src.integrations.google_maps.exceptions import (
    GeocodingRequestError,
    GoogleMapsConfigurationError,
)
from src.integrations.google_maps.schemas import GeocodeResponse
from src.maps.base import GeocodeResult, Geocoder
from src.utils.logger import logger


class GoogleGeocodingClient(Geocoder):
    """Geocoder backed by the Google Geocoding web service.

    API-level failures (ZERO_RESULTS, REQUEST_DENIED, ...) come back as a
    GeocodeResult without a location; HTTP and network failures raise.
    """

    def __init__(
        self,
        settings: GoogleMapsSettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the geocoding client.

        Args:
            settings: Google Maps settings with API configuration
            transport: Optional httpx transport (used in tests)

        Raises:
            GoogleMapsConfigurationError: If no API key is configured
        """
        if not settings.api_key:
            raise GoogleMapsConfigurationError()
        self.settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                timeout=self.settings.timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def geocode(self, query: str) -> GeocodeResult:
        """Resolve a free-text address to coordinates.

        Args:
            query: Address to look up

        Returns:
            GeocodeResult: Result with the first candidate's location on success

        Raises:
            GeocodingRequestError: For HTTP, network or response format errors
        """
        await self._ensure_client()

        params = {
            "address": query,
            "key": self.settings.api_key,
            "region": self.settings.region,
        }
        try:
            response = await self._client.get(
                GoogleMapsEndpoint.GEOCODE.value, params=params
            )
            response.raise_for_status()
            payload = GeocodeResponse.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            raise GeocodingRequestError(
                f"HTTP error: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise GeocodingRequestError(f"Request error: {e}") from e
        except (ValueError, ValidationError) as e:
            logger.error("Failed to parse geocode response", error=str(e))
            raise GeocodingRequestError(f"Invalid response format: {e}") from e

        if payload.status != GeocodeStatus.OK.value or not payload.results:
            return GeocodeResult(
                query=query,
                status=payload.status,
                error_message=payload.error_message,
            )

        best = payload.results[0]
        return GeocodeResult(
            query=query,
            status=payload.status,
            location=best.geometry.location,
            formatted_address=best.formatted_address,
        )
