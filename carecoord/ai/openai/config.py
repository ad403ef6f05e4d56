"""Chat-completion gateway configuration."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OpenAISettings(BaseSettings):
    """Settings for the OpenAI-compatible chat-completion gateway.

    Attributes:
        api_key: Gateway API key; missing means every chat request fails
        base_url: Gateway base URL; ``/chat/completions`` is appended by the SDK
        model_name: Fixed model identifier sent with every completion
        request_timeout: Optional HTTP timeout in seconds; None waits indefinitely
    """

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        description="Gateway API key",
    )
    base_url: str = Field(
        default="https://ai.gateway.lovable.dev/v1",
        description="OpenAI-compatible gateway base URL",
    )
    model_name: str = Field(
        default="google/gemini-2.5-flash",
        description="Model identifier used for every chat completion",
    )
    request_timeout: float | None = Field(
        default=None,
        gt=0,
        description="HTTP request timeout in seconds (unset: no client-side timeout)",
    )


def get_openai_settings() -> OpenAISettings:
    """Read gateway settings from the environment.

    Not cached: the API key is looked up on every chat request.

    Returns:
        OpenAISettings: Fresh settings instance
    """
    return OpenAISettings()
