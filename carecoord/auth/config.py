"""
Configuration for bearer-token authentication.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from carecoord.utils.logger import logger


class AuthSettings(BaseSettings):
    """Settings for resolving a caller identity from a bearer token."""

    model_config = SettingsConfigDict(
        case_sensitive=False, extra="ignore", env_prefix="AUTH_"
    )

    jwt_secret: str | None = Field(
        default=None,
        description="Shared secret for verifying access tokens; unset means tokens are not verified",
    )
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    jwt_audience: str | None = Field(
        default="authenticated",
        description="Expected 'aud' claim, or None to skip the audience check",
    )


_auth_settings: AuthSettings | None = None


def get_auth_settings() -> AuthSettings:
    """Load AuthSettings once per process; also used as a FastAPI dependency."""
    global _auth_settings
    if _auth_settings is None:
        _auth_settings = AuthSettings()
        logger.info(
            "AuthSettings loaded",
            verify_tokens=_auth_settings.jwt_secret is not None,
        )
    return _auth_settings


def set_auth_settings(settings: AuthSettings | None) -> None:
    """Swap the process settings; None forces a reload from the environment."""
    global _auth_settings
    _auth_settings = settings
