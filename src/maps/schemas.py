"""Map domain types: coordinates, bounds, markers and viewport."""

from pydantic import BaseModel, ConfigDict


class LatLng(BaseModel):
    """Geographic coordinate."""

    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class LatLngBounds(BaseModel):
    """Rectangle spanning a set of coordinates."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_point(cls, point: LatLng) -> "LatLngBounds":
        return cls(south=point.lat, west=point.lng, north=point.lat, east=point.lng)

    def extend(self, point: LatLng) -> "LatLngBounds":
        """Return bounds grown to include the point."""
        return LatLngBounds(
            south=min(self.south, point.lat),
            west=min(self.west, point.lng),
            north=max(self.north, point.lat),
            east=max(self.east, point.lng),
        )

    @property
    def center(self) -> LatLng:
        return LatLng(lat=(self.south + self.north) / 2, lng=(self.west + self.east) / 2)


class Marker(BaseModel):
    """Marker placed on a map for a geocoded address."""

    address: str
    position: LatLng
    title: str


class Viewport(BaseModel):
    """Visible map area."""

    center: LatLng
    zoom: int
    bounds: LatLngBounds | None = None


class MapState(BaseModel):
    """Render-ready snapshot of a map."""

    viewport: Viewport
    markers: list[Marker] = []
    error: str | None = None
    in_flight: bool = False
