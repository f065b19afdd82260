"""Response schemas for the Google Geocoding API."""

from pydantic import BaseModel

from src.maps.schemas import LatLng


class Geometry(BaseModel):
    location: LatLng


class GeocodeCandidate(BaseModel):
    formatted_address: str | None = None
    geometry: Geometry


class GeocodeResponse(BaseModel):
    """Body of a /geocode/json response."""

    status: str
    results: list[GeocodeCandidate] = []
    error_message: str | None = None
