"""Chat client state models."""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field

from src.addresses import TextSegment
from src.ai.base import MessageRole
from src.chat_client.exceptions import MessageFinalizedError
from src.maps.schemas import MapState


class ChatState(str, Enum):
    """Lifecycle of a chat turn."""

    IDLE = "idle"
    SENDING = "sending"
    STREAMING = "streaming"
    ERROR = "error"


class Message(BaseModel):
    """A message in the conversation.

    Only an assistant message that is still streaming is mutated, and only by
    appending chunks.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    role: MessageRole
    content: str = ""
    ordinal: int
    final: bool = False

    def append(self, chunk: str) -> None:
        if self.final:
            raise MessageFinalizedError(self.id)
        self.content += chunk

    def finalize(self) -> None:
        self.final = True

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class RenderedMessage(BaseModel):
    """A visible message ready for display."""

    id: str
    role: MessageRole
    content: str
    streaming: bool
    segments: list[TextSegment] = []
    map: MapState | None = None


class ChatView(BaseModel):
    """Everything a front end needs to draw the conversation."""

    state: ChatState
    input: str
    error: str | None = None
    messages: list[RenderedMessage] = []
