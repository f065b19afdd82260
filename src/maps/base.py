"""Geocoder interface used by the incremental map."""

from abc import ABC, abstractmethod

from pydantic import BaseModel

from src.maps.schemas import LatLng


class GeocodeResult(BaseModel):
    """Outcome of a single geocode lookup."""

    query: str
    status: str
    location: LatLng | None = None
    formatted_address: str | None = None
    error_message: str | None = None

    @property
    def ok(self) -> bool:
        return self.location is not None


class Geocoder(ABC):
    """Abstract base class for address-to-coordinate lookups."""

    @abstractmethod
    async def geocode(self, query: str) -> GeocodeResult:
        """Resolve a free-text address.

        Args:
            query: Address, optionally already containing the city qualifier

        Returns:
            GeocodeResult: Result with a location on success

        Raises:
            GoogleMapsError: If the lookup could not be performed at all
        """
        pass

    async def close(self) -> None:
        """Release network resources."""
        return None
