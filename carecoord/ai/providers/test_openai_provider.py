"""
Unit tests for OpenAIProvider.

The SDK client is replaced with a mock so no request leaves the process.
"""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from openai import APIConnectionError, APIStatusError, RateLimitError
from openai.types.chat import ChatCompletion

from carecoord.ai.base import PromptMessage, PromptRole
from carecoord.ai.openai.config import OpenAISettings
from carecoord.ai.openai.exceptions import (
    OpenAIConfigurationError,
    OpenAIContentGenerationError,
    OpenAIPaymentRequiredError,
    OpenAIRateLimitError,
)
from carecoord.ai.providers.factory import AIProviderType, create_ai_provider
from carecoord.ai.providers.openai import OpenAIProvider

GATEWAY_URL = "https://gateway.example.com/v1/chat/completions"

MESSAGES = [
    PromptMessage(role=PromptRole.SYSTEM, content="You are helpful."),
    PromptMessage(role=PromptRole.USER, content="Hola"),
]


def gateway_response(status_code: int, text: str = "") -> httpx.Response:
    return httpx.Response(
        status_code, text=text, request=httpx.Request("POST", GATEWAY_URL)
    )


def completion(content: str | None) -> ChatCompletion:
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-1",
            "object": "chat.completion",
            "created": 1700000000,
            "model": "google/gemini-2.5-flash",
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
            "usage": {"prompt_tokens": 10, "completion_tokens": 3, "total_tokens": 13},
        }
    )


@pytest.fixture
def settings():
    return OpenAISettings(api_key="test-key", base_url="https://gateway.example.com/v1")


@pytest.fixture
def mock_create():
    return AsyncMock()


@pytest.fixture
def provider(settings, mock_create):
    """Provider whose SDK client is a mock."""
    provider = OpenAIProvider(settings=settings)
    client = MagicMock()
    client.chat.completions.create = mock_create
    client.close = AsyncMock()
    provider._client = client
    return provider


@pytest.mark.asyncio
async def test_complete_chat_returns_first_choice(provider, mock_create):
    mock_create.return_value = completion("¡Hola! ¿En qué puedo ayudar?")

    result = await provider.complete_chat(MESSAGES, model="google/gemini-2.5-flash")

    assert result.text == "¡Hola! ¿En qué puedo ayudar?"
    assert result.finish_reason == "stop"
    assert result.usage["total_tokens"] == 13
    kwargs = mock_create.call_args.kwargs
    assert kwargs["stream"] is False
    assert kwargs["messages"] == [
        {"role": "system", "content": "You are helpful."},
        {"role": "user", "content": "Hola"},
    ]


@pytest.mark.asyncio
async def test_rate_limit_is_mapped(provider, mock_create):
    mock_create.side_effect = RateLimitError(
        "rate limited", response=gateway_response(429), body=None
    )

    with pytest.raises(OpenAIRateLimitError) as exc_info:
        await provider.complete_chat(MESSAGES)

    assert exc_info.value.status_code == 429
    mock_create.assert_called_once()


@pytest.mark.asyncio
async def test_payment_required_is_mapped(provider, mock_create):
    mock_create.side_effect = APIStatusError(
        "payment required", response=gateway_response(402), body=None
    )

    with pytest.raises(OpenAIPaymentRequiredError):
        await provider.complete_chat(MESSAGES)


@pytest.mark.asyncio
async def test_other_status_becomes_gateway_error(provider, mock_create):
    mock_create.side_effect = APIStatusError(
        "unavailable",
        response=gateway_response(503, text="upstream down"),
        body=None,
    )

    with pytest.raises(OpenAIContentGenerationError, match="AI gateway error: 503"):
        await provider.complete_chat(MESSAGES)


@pytest.mark.asyncio
async def test_connection_error(provider, mock_create):
    mock_create.side_effect = APIConnectionError(
        request=httpx.Request("POST", GATEWAY_URL)
    )

    with pytest.raises(OpenAIContentGenerationError):
        await provider.complete_chat(MESSAGES)


@pytest.mark.asyncio
async def test_empty_message_is_an_error(provider, mock_create):
    mock_create.return_value = completion(None)

    with pytest.raises(OpenAIContentGenerationError):
        await provider.complete_chat(MESSAGES)


@pytest.mark.asyncio
async def test_missing_api_key():
    provider = OpenAIProvider(settings=OpenAISettings(api_key=None))

    with pytest.raises(OpenAIConfigurationError):
        await provider.complete_chat(MESSAGES)


@pytest.mark.asyncio
async def test_close_releases_client(provider):
    client = provider._client

    await provider.close()

    client.close.assert_awaited_once()
    assert provider._client is None


def test_factory_creates_openai_provider(settings):
    provider = create_ai_provider(AIProviderType.OPENAI, settings=settings)
    assert isinstance(provider, OpenAIProvider)


def test_factory_rejects_unknown_provider():
    with pytest.raises(ValueError):
        create_ai_provider("unknown")
