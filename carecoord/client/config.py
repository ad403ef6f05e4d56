"""Settings for the API client."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Where the API lives and how to authenticate against it."""

    model_config = SettingsConfigDict(
        env_prefix="CARECOORD_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the care coordination API",
    )
    access_token: str | None = Field(
        default=None,
        description="Bearer token sent with every request",
    )
    request_timeout: float | None = Field(
        default=120.0,
        description="Seconds to wait for a response; None waits indefinitely",
    )


def get_client_settings() -> ClientSettings:
    return ClientSettings()
