"""AI provider implementations."""

from carecoord.ai.providers.factory import AIProviderType, create_ai_provider

__all__ = [
    "AIProviderType",
    "create_ai_provider",
]
