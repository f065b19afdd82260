"""
Configuration for the chat client.

Settings are read from DINEMAP_* environment variables or the .env file.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config import get_app_settings
from src.utils.logger import logger

DEFAULT_SYSTEM_PROMPT_FILE = Path(__file__).parent / "system_prompt.md"
FALLBACK_SYSTEM_PROMPT = "You are an expert on Amsterdam restaurants."


class ChatClientSettings(BaseSettings):
    """Chat client configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DINEMAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    chat_endpoint: str = Field(
        default_factory=lambda: get_app_settings().chat_endpoint_url,
        description="Completion endpoint the session posts the message log to",
    )
    request_timeout: float = Field(
        default=60.0, gt=0, description="Request timeout in seconds"
    )
    system_prompt_file: Path = Field(
        default=DEFAULT_SYSTEM_PROMPT_FILE,
        description="Markdown file holding the hidden system message",
    )


@lru_cache
def get_chat_client_settings() -> ChatClientSettings:
    """Get cached chat client settings instance.

    Returns:
        ChatClientSettings: Cached settings instance
    """
    return ChatClientSettings()


def load_system_prompt(settings: ChatClientSettings | None = None) -> str:
    """
    Load the system prompt from file.

    Returns:
        str: System prompt for the conversation
    """
    settings = settings or get_chat_client_settings()
    try:
        prompt = settings.system_prompt_file.read_text(encoding="utf-8").strip()
        logger.info("Loaded system prompt", file_name=settings.system_prompt_file.name)
    except Exception as e:
        logger.error("Failed to load system prompt file", error=str(e))
        prompt = ""

    return prompt or FALLBACK_SYSTEM_PROMPT
