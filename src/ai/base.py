"""Base classes for AI provider abstraction."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, AsyncIterator

from pydantic import BaseModel


class MessageRole(str, Enum):
    """Roles a chat message can have."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """Chat message as sent to the completion service.

    The system message travels in the message list like any other message.
    """

    role: MessageRole
    content: str


class ChatStreamChunk(BaseModel):
    """Piece of a streaming chat completion."""

    content: str = ""
    finish_reason: str | None = None


class ErrorResponse(BaseModel):
    """JSON body returned for failed requests."""

    error: str
    details: dict[str, Any] | None = None


class AIProvider(ABC):
    """Abstract base class for AI providers.

    Provides a common interface for completion backends so the chat route does
    not depend on a specific SDK.
    """

    @abstractmethod
    async def open_chat_stream(
        self,
        messages: list[ChatMessage],
        **kwargs,
    ) -> AsyncIterator[ChatStreamChunk]:
        """Start a streaming chat completion.

        The upstream request is made before this coroutine returns, so
        configuration and upstream errors surface here rather than while the
        returned iterator is consumed.

        Args:
            messages: Full message log, system message included
            **kwargs: Provider-specific options (model, temperature, etc.)

        Returns:
            AsyncIterator[ChatStreamChunk]: Chunks in arrival order
        """
        pass
