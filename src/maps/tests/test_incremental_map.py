"""Tests for the incremental geocoding map."""

import asyncio

import pytest

from src.maps.base import GeocodeResult, Geocoder
from src.maps.config import MapSettings
from src.maps.incremental import IncrementalGeocodingMap
from src.maps.registry import AddressRegistry
from src.maps.schemas import LatLng

WESTERSTRAAT = "Westerstraat 35, 1015 MN Amsterdam"
ROKIN = "Rokin 84"
SINGEL = "Singel 12"

LOCATIONS = {
    WESTERSTRAAT: LatLng(lat=52.37, lng=4.88),
    f"{ROKIN}, Amsterdam, Netherlands": LatLng(lat=52.36, lng=4.90),
    f"{SINGEL}, Amsterdam, Netherlands": LatLng(lat=52.375, lng=4.89),
}


class FakeGeocoder(Geocoder):
    """Geocoder answering from a lookup table, optionally holding each request."""

    def __init__(self, locations=None, block: bool = False):
        self.locations = dict(LOCATIONS if locations is None else locations)
        self.block = block
        self.queries: list[str] = []
        self.pending: dict[str, asyncio.Future] = {}

    async def geocode(self, query: str) -> GeocodeResult:
        self.queries.append(query)
        if self.block:
            future = asyncio.get_running_loop().create_future()
            self.pending[query] = future
            await future

        location = self.locations.get(query)
        if isinstance(location, Exception):
            raise location
        if location is None:
            return GeocodeResult(query=query, status="ZERO_RESULTS")
        return GeocodeResult(query=query, status="OK", location=location)

    def release(self, query: str) -> None:
        self.pending.pop(query).set_result(None)


async def settle(rounds: int = 10) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def settings():
    return MapSettings(watchdog_seconds=5.0)


class TestIncrementalGeocodingMap:
    """Test cases for IncrementalGeocodingMap."""

    @pytest.mark.asyncio
    async def test_single_address_places_marker_and_zooms_in(self, settings):
        geocoder = FakeGeocoder()
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)

        map_.update([WESTERSTRAAT])
        await map_.drain()

        state = map_.state()
        assert [marker.address for marker in state.markers] == [WESTERSTRAAT]
        assert state.viewport.zoom == 15
        assert state.viewport.center == LatLng(lat=52.37, lng=4.88)
        assert not state.in_flight
        assert geocoder.queries == [WESTERSTRAAT]

    @pytest.mark.asyncio
    async def test_bare_address_is_qualified_with_city(self, settings):
        geocoder = FakeGeocoder()
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)

        map_.update([ROKIN])
        await map_.drain()

        assert geocoder.queries == ["Rokin 84, Amsterdam, Netherlands"]
        assert map_.state().markers[0].title == ROKIN

    def test_qualify_is_case_insensitive(self, settings):
        map_ = IncrementalGeocodingMap(FakeGeocoder(), settings=settings)

        assert map_.qualify("Damrak 1, AMSTERDAM") == "Damrak 1, AMSTERDAM"

    @pytest.mark.asyncio
    async def test_several_addresses_fit_bounds(self, settings):
        map_ = IncrementalGeocodingMap(FakeGeocoder(), settings=settings)

        map_.update([WESTERSTRAAT, ROKIN])
        await map_.drain()

        viewport = map_.state().viewport
        assert len(map_.state().markers) == 2
        assert viewport.zoom == 14
        assert viewport.center.lat == pytest.approx(52.365)
        assert viewport.center.lng == pytest.approx(4.89)

    @pytest.mark.asyncio
    async def test_repeated_updates_geocode_once(self, settings):
        geocoder = FakeGeocoder()
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)

        for _ in range(3):
            map_.update([WESTERSTRAAT, WESTERSTRAAT])
            await map_.drain()

        assert geocoder.queries == [WESTERSTRAAT]
        assert len(map_.state().markers) == 1

    @pytest.mark.asyncio
    async def test_updates_during_batch_are_deferred(self, settings):
        geocoder = FakeGeocoder(block=True)
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)

        map_.update([WESTERSTRAAT])
        await settle()
        map_.update([WESTERSTRAAT, ROKIN])
        await settle()

        assert geocoder.queries == [WESTERSTRAAT]
        assert map_.in_flight

        geocoder.release(WESTERSTRAAT)
        await settle()

        assert geocoder.queries == [WESTERSTRAAT, "Rokin 84, Amsterdam, Netherlands"]
        assert map_.in_flight

        geocoder.release("Rokin 84, Amsterdam, Netherlands")
        await map_.drain()

        assert not map_.in_flight
        assert [marker.address for marker in map_.state().markers] == [WESTERSTRAAT, ROKIN]
        assert map_.processed_addresses == {WESTERSTRAAT, ROKIN}

    @pytest.mark.asyncio
    async def test_failed_lookups_leave_viewport_alone(self, settings):
        geocoder = FakeGeocoder(
            locations={
                WESTERSTRAAT: RuntimeError("boom"),
            }
        )
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)

        map_.update([WESTERSTRAAT, ROKIN])
        await map_.drain()

        state = map_.state()
        assert state.markers == []
        assert state.viewport.zoom == settings.default_zoom
        assert not state.in_flight
        # failures are not retried
        map_.update([WESTERSTRAAT, ROKIN])
        await map_.drain()
        assert len(geocoder.queries) == 2

    @pytest.mark.asyncio
    async def test_watchdog_releases_stuck_batch(self):
        geocoder = FakeGeocoder(block=True)
        map_ = IncrementalGeocodingMap(geocoder, settings=MapSettings(watchdog_seconds=0.01))

        map_.update([WESTERSTRAAT])
        await asyncio.sleep(0.05)
        assert not map_.in_flight

        map_.update([WESTERSTRAAT, ROKIN])
        await settle()
        assert map_.in_flight
        assert geocoder.queries == [WESTERSTRAAT, "Rokin 84, Amsterdam, Netherlands"]

        # the late result still lands but does not release the newer batch
        geocoder.release(WESTERSTRAAT)
        await settle()
        assert len(map_.state().markers) == 1
        assert map_.in_flight

        geocoder.release("Rokin 84, Amsterdam, Netherlands")
        await map_.drain()
        assert len(map_.state().markers) == 2
        assert not map_.in_flight

    @pytest.mark.asyncio
    async def test_watchdog_releases_batch_before_any_lookup_resolves(self):
        geocoder = FakeGeocoder(block=True)
        map_ = IncrementalGeocodingMap(geocoder, settings=MapSettings(watchdog_seconds=0.01))

        map_.update([WESTERSTRAAT, ROKIN, SINGEL])
        await settle()
        assert len(geocoder.queries) == 3
        assert map_.in_flight

        await asyncio.sleep(0.05)
        assert not map_.in_flight
        assert map_.state().markers == []

        map_.update([WESTERSTRAAT, ROKIN, SINGEL, "Damrak 1"])
        await settle()
        assert map_.in_flight
        assert geocoder.queries[-1] == "Damrak 1, Amsterdam, Netherlands"

        for query in list(geocoder.pending):
            geocoder.release(query)
        await map_.drain()
        assert len(map_.state().markers) == 3
        assert not map_.in_flight

    @pytest.mark.asyncio
    async def test_late_single_address_batch_keeps_newer_fit(self):
        geocoder = FakeGeocoder(block=True)
        settings = MapSettings(watchdog_seconds=0.01)
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)

        map_.update([WESTERSTRAAT])
        await asyncio.sleep(0.05)
        map_.update([WESTERSTRAAT, ROKIN, SINGEL])
        await settle()
        geocoder.release("Rokin 84, Amsterdam, Netherlands")
        geocoder.release("Singel 12, Amsterdam, Netherlands")
        await settle()
        assert not map_.in_flight

        geocoder.release(WESTERSTRAAT)
        await map_.drain()

        viewport = map_.state().viewport
        assert len(map_.state().markers) == 3
        assert viewport.zoom < settings.close_zoom
        assert viewport.bounds.north == pytest.approx(52.375)
        assert viewport.bounds.south == pytest.approx(52.36)

    @pytest.mark.asyncio
    async def test_shared_registry_geocodes_once_across_maps(self, settings):
        geocoder = FakeGeocoder()
        registry = AddressRegistry()
        first = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)
        second = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)

        first.update([ROKIN])
        await first.drain()
        second.update([ROKIN])
        await second.drain()

        assert geocoder.queries == ["Rokin 84, Amsterdam, Netherlands"]
        assert second.state().markers[0].position == LatLng(lat=52.36, lng=4.90)
        assert second.state().viewport.zoom == 15

    @pytest.mark.asyncio
    async def test_shared_registry_waits_for_lookup_in_flight(self, settings):
        geocoder = FakeGeocoder(block=True)
        registry = AddressRegistry()
        first = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)
        second = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)

        first.update([WESTERSTRAAT])
        await settle()
        second.update([WESTERSTRAAT])
        await settle()
        assert geocoder.queries == [WESTERSTRAAT]

        geocoder.release(WESTERSTRAAT)
        await first.drain()
        await second.drain()

        assert len(first.state().markers) == 1
        assert len(second.state().markers) == 1
        assert registry.location(WESTERSTRAAT) == LatLng(lat=52.37, lng=4.88)

    @pytest.mark.asyncio
    async def test_shared_registry_skips_failed_addresses(self, settings):
        geocoder = FakeGeocoder(locations={})
        registry = AddressRegistry()
        first = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)
        second = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)

        first.update([ROKIN])
        await first.drain()
        second.update([ROKIN])
        await second.drain()

        assert len(geocoder.queries) == 1
        assert second.state().markers == []
        assert not second.in_flight

    @pytest.mark.asyncio
    async def test_disposed_owner_releases_its_claim(self, settings):
        geocoder = FakeGeocoder(block=True)
        registry = AddressRegistry()
        first = IncrementalGeocodingMap(geocoder, settings=settings, registry=registry)
        first.update([ROKIN])
        await settle()

        first.dispose()
        await first.drain()

        assert ROKIN not in registry

    @pytest.mark.asyncio
    async def test_dispose_clears_markers_and_stops_work(self, settings):
        geocoder = FakeGeocoder()
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)
        map_.update([WESTERSTRAAT])
        await map_.drain()

        map_.dispose()

        assert map_.disposed
        assert map_.state().markers == []
        assert map_.processed_addresses == frozenset()

        map_.update([ROKIN])
        await map_.drain()
        assert geocoder.queries == [WESTERSTRAAT]

    @pytest.mark.asyncio
    async def test_dispose_cancels_pending_lookups(self, settings):
        geocoder = FakeGeocoder(block=True)
        map_ = IncrementalGeocodingMap(geocoder, settings=settings)
        map_.update([WESTERSTRAAT, ROKIN])
        await settle()

        map_.dispose()
        await map_.drain()

        assert map_.state().markers == []
        assert not map_.in_flight
        assert all(future.cancelled() for future in geocoder.pending.values())

    @pytest.mark.asyncio
    async def test_missing_geocoder_reports_load_error(self, settings):
        map_ = IncrementalGeocodingMap(None, settings=settings)

        map_.update([WESTERSTRAAT])

        state = map_.state()
        assert state.error == "Map service is not configured"
        assert state.markers == []
        assert map_.processed_addresses == frozenset()
