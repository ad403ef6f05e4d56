"""Factory for creating AI provider instances."""

import os
from enum import Enum

from carecoord.ai.base import AIProvider
from carecoord.ai.openai.config import OpenAISettings
from carecoord.utils.logger import logger


class AIProviderType(str, Enum):
    """Available AI provider types."""

    OPENAI = "openai"


def create_ai_provider(
    provider_type: AIProviderType | str | None = None,
    settings: OpenAISettings | None = None,
) -> AIProvider:
    """Create an AI provider instance.

    Args:
        provider_type: Type of provider to create. If None, uses the AI_PROVIDER
                      env var or defaults to the OpenAI-compatible gateway.
        settings: Gateway settings; read from the environment when None

    Returns:
        AIProvider: Instance of the specified provider

    Raises:
        ValueError: If provider type is not supported
    """
    if provider_type is None:
        provider_type = os.getenv("AI_PROVIDER", AIProviderType.OPENAI.value)

    if isinstance(provider_type, str):
        provider_type = AIProviderType(provider_type.lower())

    logger.debug(f"Creating AI provider: {provider_type.value}")

    if provider_type == AIProviderType.OPENAI:
        from carecoord.ai.providers.openai import OpenAIProvider

        return OpenAIProvider(settings=settings)
    raise ValueError(f"Unsupported AI provider: {provider_type}")
