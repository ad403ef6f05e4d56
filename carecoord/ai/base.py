"""Base classes for AI provider abstraction."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any

from pydantic import BaseModel


class PromptRole(str, Enum):
    """Roles accepted in a chat-completion conversation."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class PromptMessage(BaseModel):
    """One entry of the conversation sent to the model."""

    role: PromptRole
    content: str


class ContentGenerationResult(BaseModel):
    """Result from content generation."""

    text: str
    model: str | None = None
    usage: dict[str, Any] | None = None
    finish_reason: str | None = None


class AIProvider(ABC):
    """Abstract base class for AI providers.

    Provides a common interface for chat-completion backends so the chat
    proxy does not depend on a particular SDK.
    """

    @abstractmethod
    async def complete_chat(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
    ) -> ContentGenerationResult:
        """Run a single non-streaming chat completion.

        Args:
            messages: Full conversation, system instruction first
            model: Model identifier; provider default when None

        Returns:
            ContentGenerationResult: The assistant's reply

        Raises:
            OpenAIRateLimitError: The provider is rate limiting us
            OpenAIPaymentRequiredError: The provider account is out of credits
            OpenAIContentGenerationError: Any other provider failure
        """
        pass

    async def close(self) -> None:
        """Release network resources held by the provider."""
        return None
