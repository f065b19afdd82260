"""
Chat client application.

Wires the chat session to address extraction and one incremental map per
assistant message, and produces a render-ready ChatView after every change.
"""

from typing import Callable

from src.addresses import extract_addresses, highlight_addresses
from src.ai.base import MessageRole
from src.chat_client.schemas import ChatView, Message, RenderedMessage
from src.chat_client.session import ChatSession
from src.integrations.google_maps import (
    GoogleGeocodingClient,
    GoogleMapsConfigurationError,
    get_google_maps_settings,
)
from src.maps.base import Geocoder
from src.maps.config import MapSettings, get_map_settings
from src.maps.incremental import IncrementalGeocodingMap
from src.maps.registry import AddressRegistry
from src.utils.logger import logger, preview
from src.utils.rate_limit import RateLimiter

Renderer = Callable[[ChatView], None]


def extractable_text(message: Message) -> str:
    """Text of a message that is safe to scan for addresses.

    While a message is streaming its last line may end in a half-received
    address, so only the completed lines are returned.
    """
    if message.final:
        return message.content
    cut = message.content.rfind("\n")
    return message.content[: cut + 1] if cut >= 0 else ""


class ChatClientApp:
    """Conversation plus the maps of its assistant messages."""

    def __init__(
        self,
        session: ChatSession | None = None,
        geocoder: Geocoder | None = None,
        map_settings: MapSettings | None = None,
        renderer: Renderer | None = None,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        """Initialize the app.

        Args:
            session: Chat session; defaults to one built from settings
            geocoder: Geocoder override; defaults to the Google client
            map_settings: Map settings override
            renderer: Called with the latest ChatView after every change
            rate_limiter: Gate for chat state snapshot logging
        """
        self.session = session or ChatSession()
        self.map_settings = map_settings or get_map_settings()
        self.renderer = renderer
        self.map_error: str | None = None
        self.geocoder = geocoder if geocoder is not None else self._create_geocoder()
        self._rate_limiter = rate_limiter or RateLimiter()
        self._maps: dict[str, IncrementalGeocodingMap] = {}
        self.registry = AddressRegistry()
        self._unsubscribe = self.session.subscribe(self._on_session_change)

    def _create_geocoder(self) -> Geocoder | None:
        try:
            return GoogleGeocodingClient(get_google_maps_settings())
        except GoogleMapsConfigurationError as e:
            logger.error("Map service unavailable", error=e.message)
            self.map_error = e.message
            return None

    def map_for(self, message_id: str) -> IncrementalGeocodingMap | None:
        return self._maps.get(message_id)

    def _on_session_change(self, session: ChatSession) -> None:
        visible = session.visible_messages()
        live_ids = {m.id for m in visible}

        for message_id in list(self._maps):
            if message_id not in live_ids:
                self._maps.pop(message_id).dispose()

        # An empty conversation (after reset) starts with no known addresses
        if not visible and len(self.registry):
            self.registry.clear()

        for message in visible:
            if message.role != MessageRole.ASSISTANT:
                continue
            addresses = extract_addresses(extractable_text(message))
            if not addresses:
                continue
            map_ = self._maps.get(message.id)
            if map_ is None:
                logger.info(
                    "Found addresses in message",
                    message_index=message.ordinal,
                    addresses=addresses,
                )
                map_ = IncrementalGeocodingMap(
                    self.geocoder,
                    settings=self.map_settings,
                    load_error=self.map_error,
                    registry=self.registry,
                )
                self._maps[message.id] = map_
            map_.update(addresses)

        self._log_state()
        self.render()

    def _log_state(self) -> None:
        if not self._rate_limiter.should_run():
            return
        logger.info(
            "Current chat state",
            message_count=len(self.session.messages),
            state=self.session.state.value,
            current_input=preview(self.session.input),
            chat_error=self.session.error,
        )

    def view(self) -> ChatView:
        """Build the render-ready state of the conversation."""
        rendered = []
        for message in self.session.visible_messages():
            segments = []
            map_state = None
            if message.role == MessageRole.ASSISTANT:
                segments = highlight_addresses(message.content)
                map_ = self._maps.get(message.id)
                map_state = map_.state() if map_ else None
            rendered.append(
                RenderedMessage(
                    id=message.id,
                    role=message.role,
                    content=message.content,
                    streaming=not message.final,
                    segments=segments,
                    map=map_state,
                )
            )
        return ChatView(
            state=self.session.state,
            input=self.session.input,
            error=self.session.error,
            messages=rendered,
        )

    def render(self) -> None:
        if self.renderer is not None:
            self.renderer(self.view())

    async def submit(self, text: str | None = None) -> bool:
        return await self.session.submit(text)

    async def settle_maps(self) -> None:
        """Wait for every map's lookups to finish, then render once more."""
        for map_ in list(self._maps.values()):
            await map_.drain()
        self.render()

    def reset(self) -> None:
        """Reset the conversation; maps are disposed and known addresses forgotten."""
        self.session.reset()

    async def close(self) -> None:
        self._unsubscribe()
        for map_ in self._maps.values():
            map_.dispose()
        self._maps.clear()
        self.registry.clear()
        if self.geocoder is not None:
            await self.geocoder.close()
        await self.session.transport.close()
