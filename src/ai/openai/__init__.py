"""OpenAI module for AI operations."""

from src.ai.openai.config import OpenAISettings, get_openai_settings
from src.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIConnectionError,
    OpenAIError,
    OpenAIUpstreamError,
)

__all__ = [
    "OpenAISettings",
    "get_openai_settings",
    "OpenAIError",
    "OpenAIConfigurationError",
    "OpenAIConnectionError",
    "OpenAIUpstreamError",
]
