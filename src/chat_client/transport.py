"""HTTP transport streaming completions from the completion endpoint."""

from typing import AsyncIterator

import httpx

from src.chat_client.config import ChatClientSettings, get_chat_client_settings
from src.chat_client.exceptions import CompletionConnectionError, CompletionRequestError
from src.utils.logger import logger


class CompletionTransport:
    """Posts the message log and yields the response body as text chunks."""

    def __init__(
        self,
        settings: ChatClientSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            settings: Client settings; defaults to the cached environment settings
            transport: Optional httpx transport (used in tests)
        """
        self.settings = settings or get_chat_client_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _ensure_client(self) -> None:
        """Ensure HTTP client is initialized."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.settings.request_timeout,
                transport=self._transport,
            )

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def stream_completion(
        self, messages: list[dict[str, str]]
    ) -> AsyncIterator[str]:
        """Stream the assistant's answer for a message log.

        Args:
            messages: Full message log as role/content dicts

        Yields:
            str: Text chunks in arrival order

        Raises:
            CompletionRequestError: If the endpoint answers with an error status
            CompletionConnectionError: If the endpoint is unreachable or the stream breaks
        """
        await self._ensure_client()

        try:
            async with self._client.stream(
                "POST", self.settings.chat_endpoint, json={"messages": messages}
            ) as response:
                logger.info(
                    "Chat response received",
                    status_code=response.status_code,
                    content_type=response.headers.get("content-type"),
                )
                if not response.is_success:
                    await response.aread()
                    raise CompletionRequestError(
                        _error_message(response), status_code=response.status_code
                    )

                async for chunk in response.aiter_text():
                    if chunk:
                        yield chunk
        except httpx.HTTPError as e:
            logger.error("Completion request failed", error=str(e))
            raise CompletionConnectionError(f"Failed to reach the chat service: {e}") from e


def _error_message(response: httpx.Response) -> str:
    """Pull the error string out of an error body, falling back to the status."""
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return body["error"]
    return f"Request failed with status {response.status_code}"
