"""OpenAI-compatible chat-completion gateway configuration and errors."""

from carecoord.ai.openai.config import OpenAISettings, get_openai_settings
from carecoord.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIContentGenerationError,
    OpenAIError,
    OpenAIPaymentRequiredError,
    OpenAIRateLimitError,
)

__all__ = [
    "OpenAISettings",
    "get_openai_settings",
    "OpenAIError",
    "OpenAIConfigurationError",
    "OpenAIContentGenerationError",
    "OpenAIPaymentRequiredError",
    "OpenAIRateLimitError",
]
