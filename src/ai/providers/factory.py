"""Selection of the provider that streams chat completions."""

import os
from enum import Enum

from src.ai.base import AIProvider
from src.ai.openai.config import OpenAISettings
from src.utils.logger import logger

PROVIDER_ENV_VAR = "AI_PROVIDER"


class AIProviderType(str, Enum):
    """Available AI provider types."""

    OPENAI = "openai"


def resolve_provider_type(provider_type: AIProviderType | str | None) -> AIProviderType:
    """Normalize a provider name, falling back to the AI_PROVIDER variable.

    Raises:
        ValueError: If the name is not a known provider
    """
    if isinstance(provider_type, AIProviderType):
        return provider_type
    name = provider_type or os.getenv(PROVIDER_ENV_VAR) or AIProviderType.OPENAI.value
    try:
        return AIProviderType(name.strip().lower())
    except ValueError as e:
        raise ValueError(f"Unsupported AI provider: {name}") from e


def create_ai_provider(
    provider_type: AIProviderType | str | None = None,
    openai_settings: OpenAISettings | None = None,
) -> AIProvider:
    """Create the provider used by the chat completion service.

    Args:
        provider_type: Provider to create; defaults to AI_PROVIDER, then OpenAI
        openai_settings: Settings override for the OpenAI provider

    Returns:
        AIProvider: Provider instance
    """
    resolved = resolve_provider_type(provider_type)
    logger.info("Creating AI provider", provider=resolved.value)

    from src.ai.providers.openai import OpenAIProvider

    return OpenAIProvider(settings=openai_settings)
