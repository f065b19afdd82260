"""In-memory map surface holding markers and the visible viewport."""

import math

from src.maps.config import MapSettings
from src.maps.schemas import LatLng, LatLngBounds, Marker, Viewport

TILE_SIZE = 256


def _mercator_lat(lat: float) -> float:
    sin = math.sin(math.radians(lat))
    rad_x2 = math.log((1 + sin) / (1 - sin)) / 2
    return max(min(rad_x2, math.pi), -math.pi) / 2


def _zoom_for_fraction(map_px: int, fraction: float, max_zoom: int) -> int:
    if fraction <= 0:
        return max_zoom
    return math.floor(math.log2(map_px / TILE_SIZE / fraction))


def zoom_for_bounds(
    bounds: LatLngBounds, width_px: int, height_px: int, max_zoom: int
) -> int:
    """Highest Web Mercator zoom at which the bounds fit in the given pixel size."""
    lat_fraction = (_mercator_lat(bounds.north) - _mercator_lat(bounds.south)) / math.pi

    lng_diff = bounds.east - bounds.west
    if lng_diff < 0:
        lng_diff += 360
    lng_fraction = lng_diff / 360

    lat_zoom = _zoom_for_fraction(height_px, lat_fraction, max_zoom)
    lng_zoom = _zoom_for_fraction(width_px, lng_fraction, max_zoom)
    return max(0, min(lat_zoom, lng_zoom, max_zoom))


class MapView:
    """Map surface: the markers it shows and its viewport."""

    def __init__(
        self,
        center: LatLng,
        zoom: int,
        width_px: int = 640,
        height_px: int = 300,
        max_zoom: int = 21,
    ) -> None:
        self.width_px = width_px
        self.height_px = height_px
        self.max_zoom = max_zoom
        self.viewport = Viewport(center=center, zoom=zoom)
        self._markers: list[Marker] = []

    @classmethod
    def from_settings(cls, settings: MapSettings) -> "MapView":
        return cls(
            center=LatLng(lat=settings.default_center_lat, lng=settings.default_center_lng),
            zoom=settings.default_zoom,
            width_px=settings.viewport_width_px,
            height_px=settings.viewport_height_px,
            max_zoom=settings.max_zoom,
        )

    @property
    def markers(self) -> list[Marker]:
        return list(self._markers)

    def add_marker(self, marker: Marker) -> None:
        self._markers.append(marker)

    def clear_markers(self) -> int:
        """Detach every marker; returns how many were removed."""
        removed = len(self._markers)
        self._markers.clear()
        return removed

    def fit_bounds(self, bounds: LatLngBounds) -> None:
        zoom = zoom_for_bounds(bounds, self.width_px, self.height_px, self.max_zoom)
        self.viewport = Viewport(center=bounds.center, zoom=zoom, bounds=bounds)

    def set_zoom(self, zoom: int) -> None:
        self.viewport = self.viewport.model_copy(
            update={"zoom": max(0, min(zoom, self.max_zoom))}
        )
