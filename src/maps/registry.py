"""Conversation-wide record of addresses sent to the geocoder."""

import asyncio

from src.maps.schemas import LatLng


class AddressRegistry:
    """Lookup outcome per address, shared by every map of a conversation.

    Each address maps to a future holding its location, or None when the
    lookup failed. The first map to claim an address performs the lookup;
    later maps await the same future instead of geocoding again.
    """

    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Future[LatLng | None]] = {}

    def __contains__(self, address: str) -> bool:
        return address in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, address: str) -> asyncio.Future[LatLng | None] | None:
        return self._entries.get(address)

    def claim(self, address: str) -> asyncio.Future[LatLng | None]:
        """Register an address whose lookup the caller is about to perform."""
        if address in self._entries:
            raise ValueError(f"Address already claimed: {address}")
        future = asyncio.get_running_loop().create_future()
        self._entries[address] = future
        return future

    def resolve(self, address: str, location: LatLng | None) -> None:
        future = self._entries.get(address)
        if future is not None and not future.done():
            future.set_result(location)

    def release(self, address: str) -> None:
        """Forget an unfinished claim so the address can be looked up again."""
        future = self._entries.get(address)
        if future is None or future.done():
            return
        del self._entries[address]
        future.set_result(None)

    def location(self, address: str) -> LatLng | None:
        """Resolved location of an address, if its lookup has succeeded."""
        future = self._entries.get(address)
        if future is None or not future.done() or future.cancelled():
            return None
        return future.result()

    def clear(self) -> None:
        for future in self._entries.values():
            if not future.done():
                future.cancel()
        self._entries.clear()
