"""OpenAI-compatible chat-completion provider."""

from openai import (
    APIConnectionError,
    APIStatusError,
    AsyncOpenAI,
    RateLimitError,
)
from openai.types.chat import ChatCompletion

from carecoord.ai.base import AIProvider, ContentGenerationResult, PromptMessage
from carecoord.ai.openai.config import OpenAISettings, get_openai_settings
from carecoord.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIContentGenerationError,
    OpenAIPaymentRequiredError,
    OpenAIRateLimitError,
)
from carecoord.utils.logger import logger

PAYMENT_REQUIRED_STATUS = 402


class OpenAIProvider(AIProvider):
    """Chat completions against an OpenAI-compatible gateway.

    Requests are non-streaming and never retried: the SDK's built-in retries
    are disabled so provider failures surface to the caller immediately.
    """

    def __init__(self, settings: OpenAISettings | None = None):
        """Initialize the provider.

        Args:
            settings: Gateway settings; read from the environment when None
        """
        self.settings = settings or get_openai_settings()
        self._client: AsyncOpenAI | None = None

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the SDK client.

        Raises:
            OpenAIConfigurationError: If no API key is configured
        """
        if self._client is None:
            if not self.settings.api_key:
                raise OpenAIConfigurationError("LLM_API_KEY is not configured")
            self._client = AsyncOpenAI(
                api_key=self.settings.api_key,
                base_url=self.settings.base_url,
                timeout=self.settings.request_timeout,
                max_retries=0,
            )
            logger.info(
                "[LLM] Client initialized",
                base_url=self.settings.base_url,
                timeout_seconds=self.settings.request_timeout,
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def complete_chat(
        self,
        messages: list[PromptMessage],
        model: str | None = None,
    ) -> ContentGenerationResult:
        """Run one chat completion and return the first choice's text.

        Args:
            messages: Full conversation, system instruction first
            model: Model identifier (default from settings)

        Returns:
            ContentGenerationResult: Assistant reply with usage and finish reason
        """
        client = self._get_client()
        model_name = model or self.settings.model_name

        logger.info(
            "[LLM] Requesting chat completion",
            model=model_name,
            message_count=len(messages),
        )

        try:
            completion: ChatCompletion = await client.chat.completions.create(
                model=model_name,
                messages=[message.model_dump(mode="json") for message in messages],
                stream=False,
            )
        except RateLimitError as e:
            logger.warning("[LLM] Rate limited by gateway", status_code=e.status_code)
            raise OpenAIRateLimitError(
                "Rate limit exceeded", e, status_code=e.status_code
            ) from e
        except APIStatusError as e:
            if e.status_code == PAYMENT_REQUIRED_STATUS:
                logger.warning("[LLM] Gateway requires payment", status_code=e.status_code)
                raise OpenAIPaymentRequiredError(
                    "Payment required", e, status_code=e.status_code
                ) from e
            logger.error(
                "[LLM] Gateway error",
                status_code=e.status_code,
                body=e.response.text,
            )
            raise OpenAIContentGenerationError(
                f"AI gateway error: {e.status_code}", e, status_code=e.status_code
            ) from e
        except APIConnectionError as e:
            logger.error("[LLM] Gateway unreachable", error=str(e))
            raise OpenAIContentGenerationError(f"AI gateway unreachable: {e}", e) from e

        return self._extract_result(completion)

    def _extract_result(self, completion: ChatCompletion) -> ContentGenerationResult:
        if not completion.choices:
            raise OpenAIContentGenerationError("AI gateway returned no choices")

        choice = completion.choices[0]
        text = choice.message.content
        if text is None:
            raise OpenAIContentGenerationError("AI gateway returned an empty message")

        result = ContentGenerationResult(
            text=text,
            model=completion.model,
            usage=completion.usage.model_dump() if completion.usage else None,
            finish_reason=choice.finish_reason,
        )
        logger.info(
            "[LLM] Chat completion complete",
            finish_reason=result.finish_reason,
            usage=result.usage,
        )
        return result
