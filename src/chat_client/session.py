"""
Streaming chat session.

Holds the ordered message log (hidden system message first), sends it to the
completion endpoint, and appends the streamed answer to an in-progress
assistant message. Every mutation is followed by a call to each subscribed
listener, so a front end can re-render from the latest committed state.
"""

from contextlib import aclosing
from typing import Callable

from src.ai.base import MessageRole
from src.chat_client.config import load_system_prompt
from src.chat_client.exceptions import ChatClientError
from src.chat_client.schemas import ChatState, Message
from src.chat_client.transport import CompletionTransport
from src.utils.logger import logger, preview

GENERIC_ERROR = "An error occurred while sending your message"

Listener = Callable[["ChatSession"], None]


class ChatSession:
    """Single conversation with at most one turn in flight."""

    def __init__(
        self,
        transport: CompletionTransport | None = None,
        system_prompt: str | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            transport: Completion transport; defaults to one built from settings
            system_prompt: Hidden system message; defaults to the prompt file
        """
        self.transport = transport or CompletionTransport()
        self.system_prompt = system_prompt or load_system_prompt()
        self.messages: list[Message] = []
        self.input = ""
        self.error: str | None = None
        self.state = ChatState.IDLE
        self._listeners: list[Listener] = []
        self._turn = 0
        self._restore_system_message()

    def _restore_system_message(self) -> None:
        self.messages = [
            Message(
                role=MessageRole.SYSTEM,
                content=self.system_prompt,
                ordinal=0,
                final=True,
            )
        ]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    @property
    def busy(self) -> bool:
        return self.state != ChatState.IDLE

    def visible_messages(self) -> list[Message]:
        return [m for m in self.messages if m.role != MessageRole.SYSTEM]

    def payload(self) -> list[dict[str, str]]:
        """Full message log as sent to the completion endpoint."""
        return [m.to_payload() for m in self.messages]

    def set_input(self, text: str) -> None:
        self.input = text
        self._notify()

    def _append_message(self, role: MessageRole, content: str) -> Message:
        message = Message(role=role, content=content, ordinal=len(self.messages))
        self.messages.append(message)
        return message

    async def submit(self, text: str | None = None) -> bool:
        """Send a user message and stream the answer.

        Args:
            text: Message text; the pending input is used when omitted

        Returns:
            bool: False if the submission was rejected, True once the turn ended
        """
        text = self.input if text is None else text
        if not text.strip():
            logger.debug("Empty input, skipping submission")
            return False
        if self.busy:
            logger.warning("Submission rejected while a turn is in flight", state=self.state.value)
            return False

        self._turn += 1
        turn = self._turn

        self.error = None
        user_message = self._append_message(MessageRole.USER, text)
        user_message.finalize()
        self.input = ""
        self.state = ChatState.SENDING
        logger.info("Form submitted", content_preview=preview(text), turn=turn)
        self._notify()

        assistant: Message | None = None
        try:
            async with aclosing(self.transport.stream_completion(self.payload())) as chunks:
                async for chunk in chunks:
                    if turn != self._turn:
                        logger.info("Dropping chunks of abandoned turn", turn=turn)
                        return True
                    if assistant is None:
                        assistant = self._append_message(MessageRole.ASSISTANT, "")
                        self.state = ChatState.STREAMING
                    assistant.append(chunk)
                    self._notify()
        except ChatClientError as e:
            self._fail(turn, assistant, e.message)
            return True
        except Exception as e:
            logger.exception("Chat turn failed", error=str(e))
            self._fail(turn, assistant, str(e) or GENERIC_ERROR)
            return True

        if turn != self._turn:
            return True

        if assistant is None:
            assistant = self._append_message(MessageRole.ASSISTANT, "")
        assistant.finalize()
        self.state = ChatState.IDLE
        logger.info(
            "Chat message completed",
            content_preview=preview(assistant.content),
            content_length=len(assistant.content),
        )
        self._notify()
        return True

    def _fail(self, turn: int, partial: Message | None, error: str) -> None:
        if turn != self._turn:
            return
        logger.error("Chat error", error=error)
        if partial is not None and partial in self.messages:
            self.messages.remove(partial)
        self.error = error
        self.state = ChatState.ERROR
        self._notify()
        self.state = ChatState.IDLE
        self._notify()

    def reset(self) -> None:
        """Start over with only the system message; abandons any turn in flight."""
        logger.info("Restarting chat", abandoned_turn=self.busy)
        self._turn += 1
        self._restore_system_message()
        self.input = ""
        self.error = None
        self.state = ChatState.IDLE
        self._notify()
