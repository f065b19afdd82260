"""
Terminal front end for the restaurant guide.

Usage:
    python -m src.chat_client.cli [--endpoint URL]

Type a question to chat, /reset to start over, /quit to leave.
"""

import argparse
import asyncio

from src.ai.base import MessageRole
from src.chat_client.app import ChatClientApp
from src.chat_client.config import get_chat_client_settings
from src.chat_client.schemas import ChatState, ChatView, RenderedMessage
from src.chat_client.session import ChatSession
from src.chat_client.transport import CompletionTransport
from src.maps.schemas import MapState

UNDERLINE = "\033[4m"
RESET_STYLE = "\033[0m"


class TerminalRenderer:
    """Prints streamed text as it grows and a summary once a turn ends."""

    def __init__(self, echo=print) -> None:
        self._echo = echo
        self._printed: dict[str, int] = {}
        self._last_error: str | None = None

    def __call__(self, view: ChatView) -> None:
        for message in view.messages:
            if message.role != MessageRole.ASSISTANT:
                continue
            shown = self._printed.get(message.id, 0)
            if len(message.content) > shown:
                self._echo(message.content[shown:], end="", flush=True)
                self._printed[message.id] = len(message.content)

        if view.error and view.error != self._last_error and view.state == ChatState.IDLE:
            self._echo(f"\nError: {view.error}")
        self._last_error = view.error

        if not view.messages:
            self._printed.clear()

    def summary(self, message: RenderedMessage) -> str:
        """Highlighted text and map details of a finished assistant message."""
        lines = [
            "".join(
                f"{UNDERLINE}{segment.text}{RESET_STYLE}" if segment.is_address else segment.text
                for segment in message.segments
            )
        ]
        if message.map is not None:
            lines.extend(describe_map(message.map))
        return "\n".join(lines)


def describe_map(state: MapState) -> list[str]:
    if state.error:
        return [f"Map unavailable: {state.error}"]
    viewport = state.viewport
    lines = [
        f"Map: {len(state.markers)} marker(s), center "
        f"({viewport.center.lat:.5f}, {viewport.center.lng:.5f}), zoom {viewport.zoom}"
    ]
    for marker in state.markers:
        lines.append(
            f"  * {marker.title} ({marker.position.lat:.5f}, {marker.position.lng:.5f})"
        )
    return lines


async def run(app: ChatClientApp, renderer: TerminalRenderer) -> None:
    print("Ask me about restaurants in Amsterdam. /reset starts over, /quit leaves.")
    while True:
        try:
            line = await asyncio.to_thread(input, "\n> ")
        except EOFError:
            break

        command = line.strip()
        if command == "/quit":
            break
        if command == "/reset":
            app.reset()
            print("Chat reset.")
            continue

        if not await app.submit(line):
            continue
        print()

        await app.settle_maps()
        view = app.view()
        if view.messages and view.messages[-1].role == MessageRole.ASSISTANT:
            last = view.messages[-1]
            if last.map is not None:
                print(renderer.summary(last))


async def main():
    """Main entry point for the terminal client."""
    parser = argparse.ArgumentParser(
        description="Chat about Amsterdam restaurants and map the addresses mentioned"
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        default=None,
        help="Completion endpoint URL (defaults to DINEMAP_CHAT_ENDPOINT)",
    )
    args = parser.parse_args()

    settings = get_chat_client_settings()
    if args.endpoint:
        settings = settings.model_copy(update={"chat_endpoint": args.endpoint})

    renderer = TerminalRenderer()
    app = ChatClientApp(
        session=ChatSession(transport=CompletionTransport(settings=settings)),
        renderer=renderer,
    )
    try:
        await run(app, renderer)
    finally:
        await app.close()


if __name__ == "__main__":
    asyncio.run(main())
