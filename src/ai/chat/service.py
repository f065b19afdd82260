"""
Chat completion service for the restaurant guide.

Passes the client's message log to the AI provider and exposes the answer as
a stream of plain text chunks.
"""

from typing import AsyncIterator

from src.ai.base import AIProvider, ChatMessage
from src.ai.providers.factory import AIProviderType, create_ai_provider
from src.utils.logger import logger, preview


class ChatCompletionService:
    """Service streaming chat completions for a client-supplied message log."""

    def __init__(self, provider: AIProvider | None = None):
        """Initialize the chat completion service.

        Args:
            provider: Provider override; defaults to the OpenAI provider
        """
        self.provider = provider or create_ai_provider(AIProviderType.OPENAI)

    async def open_stream(self, messages: list[ChatMessage]) -> AsyncIterator[str]:
        """Open the upstream completion and return its text chunks.

        Upstream and configuration errors are raised before any text is
        produced, so callers can still answer with an error status.

        Args:
            messages: Full message log, system message included

        Returns:
            AsyncIterator[str]: Text chunks in arrival order
        """
        logger.info(
            "Making completion request",
            messages=[
                {
                    "role": m.role.value,
                    "content_preview": preview(m.content),
                    "content_length": len(m.content),
                }
                for m in messages
            ],
        )
        chunks = await self.provider.open_chat_stream(messages)
        return self._text_stream(chunks)

    async def _text_stream(self, chunks) -> AsyncIterator[str]:
        total_length = 0
        finish_reason = None
        async for chunk in chunks:
            if chunk.finish_reason:
                finish_reason = chunk.finish_reason
            if chunk.content:
                total_length += len(chunk.content)
                yield chunk.content

        logger.info(
            "Chat stream completed",
            output_length=total_length,
            finish_reason=finish_reason,
        )
