"""Tests for the streaming chat completion endpoint."""

from typing import AsyncIterator

import pytest
from fastapi.testclient import TestClient

from src.ai.base import AIProvider, ChatMessage, ChatStreamChunk, MessageRole
from src.ai.chat.router import get_chat_service
from src.ai.chat.service import ChatCompletionService
from src.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIConnectionError,
    OpenAIUpstreamError,
)
from src.config import AppSettings, Environment, set_app_settings
from src.main import app

CHAT_URL = "/api/openai/chat"

SYSTEM = {"role": "system", "content": "You are an expert on Amsterdam restaurants."}
USER = {"role": "user", "content": "vegan food"}


class FakeProvider(AIProvider):
    """Provider returning canned chunks or raising a canned error."""

    def __init__(self, chunks: list[str] | None = None, error: Exception | None = None):
        self.chunks = chunks or []
        self.error = error
        self.received: list[ChatMessage] = []

    async def open_chat_stream(
        self, messages: list[ChatMessage], **kwargs
    ) -> AsyncIterator[ChatStreamChunk]:
        self.received = messages
        if self.error:
            raise self.error
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[ChatStreamChunk]:
        for chunk in self.chunks:
            yield ChatStreamChunk(content=chunk)
        yield ChatStreamChunk(finish_reason="stop")


@pytest.fixture
def provider():
    return FakeProvider(chunks=["De Groene Olifant, ", "Westerstraat 35", ", 1015 MN Amsterdam"])


@pytest.fixture
def environment():
    """Application environment used by the error handlers."""
    return Environment.DEVELOPMENT


@pytest.fixture
def client(provider, environment):
    """Create a test client with the chat service bound to the fake provider."""
    set_app_settings(AppSettings(environment=environment))
    service = ChatCompletionService(provider=provider)
    app.dependency_overrides[get_chat_service] = lambda: service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    set_app_settings(None)


class TestChatRoute:
    """Test suite for POST /api/openai/chat."""

    def test_streams_plain_text(self, client, provider):
        """Chunks are streamed back in order as a text body."""
        response = client.post(CHAT_URL, json={"messages": [SYSTEM, USER]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "De Groene Olifant, Westerstraat 35, 1015 MN Amsterdam"

    def test_forwards_full_message_log(self, client, provider):
        """The system message is forwarded along with the conversation."""
        client.post(CHAT_URL, json={"messages": [SYSTEM, USER]})

        assert [m.role for m in provider.received] == [
            MessageRole.SYSTEM,
            MessageRole.USER,
        ]
        assert provider.received[1].content == "vegan food"

    def test_unparsable_body_is_400(self, client):
        response = client.post(
            CHAT_URL,
            content="{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request body"

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"messages": []},
            {"messages": "hello"},
            {"messages": [{"role": "robot", "content": "hi"}]},
            {"messages": [{"role": "user"}]},
        ],
    )
    def test_invalid_messages_are_400(self, client, body):
        response = client.post(CHAT_URL, json=body)

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "provider",
        [FakeProvider(error=OpenAIConfigurationError("OpenAI API key not configured"))],
    )
    def test_missing_api_key_is_500(self, client, provider):
        response = client.post(CHAT_URL, json={"messages": [USER]})

        assert response.status_code == 500
        assert response.json() == {"error": "OpenAI API key not configured"}

    @pytest.mark.parametrize(
        "provider",
        [
            FakeProvider(error=OpenAIUpstreamError("OpenAI returned status 429", status_code=429)),
            FakeProvider(error=OpenAIConnectionError("Failed to get response from OpenAI")),
        ],
    )
    def test_upstream_failure_is_500_with_details(self, client, provider):
        response = client.post(CHAT_URL, json={"messages": [USER]})

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "Failed to get response from OpenAI"
        assert "details" in data

    @pytest.mark.parametrize("environment", [Environment.PRODUCTION])
    @pytest.mark.parametrize(
        "provider",
        [FakeProvider(error=OpenAIUpstreamError("OpenAI returned status 503", status_code=503))],
    )
    def test_production_hides_details(self, client, provider, environment):
        response = client.post(CHAT_URL, json={"messages": [USER]})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to get response from OpenAI"}

    @pytest.mark.parametrize("provider", [FakeProvider(error=RuntimeError("boom"))])
    def test_unhandled_error_is_500(self, client, provider):
        response = client.post(CHAT_URL, json={"messages": [USER]})

        assert response.status_code == 500
        data = response.json()
        assert data["error"] == "boom"
        assert data["details"]["name"] == "RuntimeError"


def test_healthcheck():
    with TestClient(app) as test_client:
        response = test_client.get("/healthcheck")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
