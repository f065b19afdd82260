"""OpenAI provider implementation."""

from typing import AsyncIterator

import httpx
from openai import APIConnectionError, APIError, APIStatusError, AsyncOpenAI, AsyncStream
from openai.types.chat import ChatCompletionChunk

from src.ai.base import AIProvider, ChatMessage, ChatStreamChunk
from src.ai.openai.config import OpenAISettings, get_openai_settings
from src.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIConnectionError,
    OpenAIUpstreamError,
)
from src.utils.logger import logger, preview


class OpenAIProvider(AIProvider):
    """OpenAI provider implementation.

    Streams chat completions through the Chat Completions API.
    """

    def __init__(self, settings: OpenAISettings | None = None):
        """Initialize OpenAI provider.

        Args:
            settings: Settings override; defaults to the cached environment settings
        """
        self.settings = settings or get_openai_settings()
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the OpenAI client.

        Raises:
            OpenAIConfigurationError: If no API key is configured
        """
        if self._client is None:
            if not self.settings.api_key:
                raise OpenAIConfigurationError("OpenAI API key not configured")

            timeout = httpx.Timeout(
                timeout=self.settings.request_timeout,
                connect=10.0,
            )
            self._client = AsyncOpenAI(
                api_key=self.settings.api_key,
                timeout=timeout,
            )
            logger.info(
                "[OPENAI] Client initialized",
                timeout_seconds=self.settings.request_timeout,
            )
        return self._client

    async def open_chat_stream(
        self,
        messages: list[ChatMessage],
        **kwargs,
    ) -> AsyncIterator[ChatStreamChunk]:
        """Start a streaming chat completion.

        Args:
            messages: Full message log, system message included
            **kwargs: Provider-specific options:
                - model: Model name (default from settings)
                - temperature: Sampling temperature (default from settings)

        Returns:
            AsyncIterator[ChatStreamChunk]: Content deltas in arrival order

        Raises:
            OpenAIConfigurationError: If the API key is missing
            OpenAIUpstreamError: If OpenAI answers with a non-success status
            OpenAIConnectionError: If OpenAI cannot be reached
        """
        client = self._get_client()

        model = kwargs.get("model") or self.settings.model_name
        temperature = kwargs.get("temperature", self.settings.temperature)

        params: dict = {
            "model": model,
            "stream": True,
            "messages": [message.model_dump(mode="json") for message in messages],
        }
        if temperature is not None:
            params["temperature"] = temperature

        logger.info(
            "[STREAM] Creating chat completion stream",
            model=model,
            message_count=len(messages),
            last_message_preview=preview(messages[-1].content) if messages else "",
        )

        try:
            stream = await client.chat.completions.create(**params)
        except APIStatusError as e:
            logger.error(
                "[STREAM] OpenAI returned non-success status",
                status_code=e.status_code,
                error=str(e),
            )
            raise OpenAIUpstreamError(
                f"OpenAI returned status {e.status_code}",
                original_error=e,
                status_code=e.status_code,
            ) from e
        except APIConnectionError as e:
            logger.error("[STREAM] OpenAI request failed", error=str(e))
            raise OpenAIConnectionError(
                "Failed to get response from OpenAI", original_error=e
            ) from e

        logger.info("[STREAM] Stream created successfully, reading chunks")
        return self._iter_chunks(stream)

    async def _iter_chunks(
        self, stream: AsyncStream[ChatCompletionChunk]
    ) -> AsyncIterator[ChatStreamChunk]:
        """Translate SDK chunks into ChatStreamChunk, skipping empty deltas."""
        try:
            async for event in stream:
                if not event.choices:
                    continue
                choice = event.choices[0]
                content = choice.delta.content or ""
                if content or choice.finish_reason:
                    yield ChatStreamChunk(
                        content=content, finish_reason=choice.finish_reason
                    )
        except APIError as e:
            logger.error("[STREAM] OpenAI stream interrupted", error=str(e))
            raise OpenAIUpstreamError(
                "OpenAI stream interrupted", original_error=e
            ) from e
        finally:
            await stream.close()
