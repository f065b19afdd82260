"""OpenAI API configuration."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAISettings(BaseSettings):
    """Settings for OpenAI API integration.

    Attributes:
        api_key: OpenAI API key for authentication. Optional at load time so a
            missing key is reported per request instead of at startup.
        model_name: Chat completion model
        temperature: Sampling temperature (0.0-2.0)
        request_timeout: HTTP request timeout in seconds
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="OpenAI API key",
    )
    model_name: str = Field(
        default="gpt-3.5-turbo",
        description="Chat completion model",
    )
    temperature: float | None = Field(
        default=None,
        ge=0.0,
        le=2.0,
        description="Sampling temperature; the model default is used when unset",
    )
    request_timeout: int = Field(
        default=60,
        gt=0,
        description="HTTP request timeout in seconds",
    )


@lru_cache
def get_openai_settings() -> OpenAISettings:
    """Get cached OpenAI settings instance.

    Returns:
        OpenAISettings: Cached settings instance
    """
    return OpenAISettings()
