"""
Incremental geocoding map.

Receives the address list of a (possibly still streaming) assistant message
every time it changes and places a marker for each address it has not seen
before. Addresses are claimed in a registry before their lookup starts, so an
address that shows up again, in this message or a later one, is never sent to
the geocoder twice.
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Sequence

from src.maps.base import Geocoder
from src.maps.config import MapSettings, get_map_settings
from src.maps.registry import AddressRegistry
from src.maps.schemas import LatLng, LatLngBounds, MapState, Marker
from src.maps.view import MapView
from src.utils.logger import logger

_batch_ids = itertools.count(1)


@dataclass
class GeocodeBatch:
    """Addresses resolved together in one round."""

    id: int
    addresses: list[str]
    completed: int = 0
    resolved: int = 0
    watchdog: asyncio.TimerHandle | None = field(default=None, repr=False)

    @property
    def done(self) -> bool:
        return self.completed >= len(self.addresses)


class IncrementalGeocodingMap:
    """Map that geocodes each newly seen address exactly once.

    All methods must be called from the event loop thread.
    """

    def __init__(
        self,
        geocoder: Geocoder | None,
        settings: MapSettings | None = None,
        view: MapView | None = None,
        load_error: str | None = None,
        registry: AddressRegistry | None = None,
    ) -> None:
        """Initialize the map.

        Args:
            geocoder: Lookup service; None when the map service is not configured
            settings: Map settings; defaults to the cached environment settings
            view: Map surface; defaults to one built from the settings
            load_error: User-visible reason the map cannot be used
            registry: Lookup outcomes shared with the other maps of the
                conversation; a private registry is used when omitted
        """
        self.settings = settings or get_map_settings()
        self.view = view or MapView.from_settings(self.settings)
        self.load_error = load_error
        if geocoder is None and self.load_error is None:
            self.load_error = "Map service is not configured"

        self._geocoder = geocoder
        self._registry = registry if registry is not None else AddressRegistry()
        self._processed: set[str] = set()
        self._bounds: LatLngBounds | None = None
        self._active_batch: GeocodeBatch | None = None
        self._latest: list[str] = []
        self._tasks: set[asyncio.Task] = set()
        self._disposed = False

    @property
    def in_flight(self) -> bool:
        return self._active_batch is not None

    @property
    def processed_addresses(self) -> frozenset[str]:
        return frozenset(self._processed)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def state(self) -> MapState:
        return MapState(
            viewport=self.view.viewport,
            markers=self.view.markers,
            error=self.load_error,
            in_flight=self.in_flight,
        )

    def qualify(self, address: str) -> str:
        """Append the city and country unless the address already names the city."""
        if self.settings.city_name.lower() in address.lower():
            return address
        return f"{address}, {self.settings.city_name}, {self.settings.country_name}"

    def update(self, addresses: Sequence[str]) -> None:
        """Handle a new version of the address list.

        Only addresses never processed by this map are geocoded. While a batch
        is in flight the list is remembered and evaluated again once that batch
        finishes or its watchdog fires.
        """
        if self._disposed or self._geocoder is None:
            return

        self._latest = list(addresses)
        new_addresses = [
            address
            for address in dict.fromkeys(self._latest)
            if address not in self._processed
        ]
        if not new_addresses:
            return

        if self._active_batch is not None:
            logger.debug(
                "Batch in flight, deferring new addresses",
                batch_id=self._active_batch.id,
                deferred=new_addresses,
            )
            return

        self._start_batch(new_addresses)

    def _start_batch(self, addresses: list[str]) -> None:
        loop = asyncio.get_running_loop()
        batch = GeocodeBatch(id=next(_batch_ids), addresses=addresses)
        self._active_batch = batch
        self._processed.update(addresses)

        batch.watchdog = loop.call_later(
            self.settings.watchdog_seconds, self._on_watchdog, batch
        )
        logger.info("Processing new addresses", batch_id=batch.id, addresses=addresses)

        for address in addresses:
            owner = address not in self._registry
            if owner:
                self._registry.claim(address)
            task = loop.create_task(self._resolve(batch, address, owner))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _resolve(self, batch: GeocodeBatch, address: str, owner: bool) -> None:
        if owner:
            location = await self._geocode(batch, address)
            self._registry.resolve(address, location)
        else:
            location = await self._shared_location(address)

        if self._disposed:
            return

        if location is not None:
            self._add_marker(address, location)
            batch.resolved += 1

        batch.completed += 1
        if batch.done:
            self._finish_batch(batch)

    async def _geocode(self, batch: GeocodeBatch, address: str) -> LatLng | None:
        query = self.qualify(address)
        logger.info("Geocoding address", query=query, batch_id=batch.id)

        try:
            result = await self._geocoder.geocode(query)
        except asyncio.CancelledError:
            self._registry.release(address)
            raise
        except Exception as e:
            # A failed lookup only costs this address its marker
            logger.warning(
                "Geocoding request failed",
                query=query,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

        if not result.ok:
            logger.warning(
                "Geocoding failed",
                query=query,
                status=result.status,
                error=result.error_message,
            )
            return None
        return result.location

    async def _shared_location(self, address: str) -> LatLng | None:
        entry = self._registry.get(address)
        if entry is None:
            return None
        logger.info("Reusing lookup from earlier in the conversation", address=address)
        try:
            return await asyncio.shield(entry)
        except asyncio.CancelledError:
            # Registry cleared while waiting
            if entry.cancelled():
                return None
            raise

    def _add_marker(self, address: str, position: LatLng) -> None:
        self.view.add_marker(Marker(address=address, position=position, title=address))
        if self._bounds is None:
            self._bounds = LatLngBounds.from_point(position)
        else:
            self._bounds = self._bounds.extend(position)
        logger.info("Geocoding successful", address=address, lat=position.lat, lng=position.lng)

    def _finish_batch(self, batch: GeocodeBatch) -> None:
        if batch.watchdog is not None:
            batch.watchdog.cancel()
            batch.watchdog = None

        # A batch released by its watchdog must not override a newer batch
        current = self._active_batch is batch
        if batch.resolved and self._bounds is not None:
            self.view.fit_bounds(self._bounds)
            if current and len(batch.addresses) == 1:
                self.view.set_zoom(self.settings.close_zoom)

        logger.info(
            "Batch complete",
            batch_id=batch.id,
            resolved=batch.resolved,
            failed=len(batch.addresses) - batch.resolved,
            zoom=self.view.viewport.zoom,
            released_by_watchdog=not current,
        )

        if current:
            self._active_batch = None
            self.update(self._latest)

    def _on_watchdog(self, batch: GeocodeBatch) -> None:
        batch.watchdog = None
        if self._disposed or self._active_batch is not batch:
            return
        logger.warning(
            "Geocoding timeout reached, resetting processing state",
            batch_id=batch.id,
            completed=batch.completed,
            total=len(batch.addresses),
        )
        self._active_batch = None
        self.update(self._latest)

    async def drain(self) -> None:
        """Wait until no lookups are running, including follow-up batches."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def dispose(self) -> None:
        """Detach all markers and stop any pending work."""
        if self._disposed:
            return
        self._disposed = True

        if self._active_batch is not None and self._active_batch.watchdog is not None:
            self._active_batch.watchdog.cancel()
        self._active_batch = None

        for task in list(self._tasks):
            task.cancel()

        removed = self.view.clear_markers()
        self._processed.clear()
        self._bounds = None
        self._latest = []
        logger.info("Map disposed", markers_removed=removed)
