from enum import Enum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environments."""

    DEVELOPMENT = "dev"
    STAGING = "staging"
    PRODUCTION = "prod"


DEFAULT_MISSION = (
    "a non-profit organization that serves food to disadvantaged people, elders, "
    "and homeless individuals. The organization serves food around 6-7pm in the "
    "street and relies on donations of rice, pasta, vegetables, tomato sauce, and "
    "other items."
)


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(case_sensitive=False, extra="ignore")

    environment: Environment = Field(
        default=Environment.DEVELOPMENT,
        description="Current environment (dev, staging, or prod)",
    )

    # Assistant persona
    organization_name: str = Field(
        default="Leli-Kelen",
        description="Organization the assistant works for",
    )
    organization_mission: str = Field(
        default=DEFAULT_MISSION,
        description="One-sentence description of what the organization does",
    )
    supported_languages: list[str] = Field(
        default=["English", "Spanish"],
        min_length=1,
        description="Languages the assistant answers in, mirroring the user's",
    )
    timezone: str = Field(
        default="UTC",
        description="IANA timezone used to decide what 'today' means for services",
    )

    # HTTP surface
    cors_allow_origins: list[str] = Field(
        default=["*"],
        description="Value(s) echoed in Access-Control-Allow-Origin",
    )

    # Realtime
    realtime_enabled: bool = Field(
        default=False,
        description=(
            "Bridge PostgreSQL LISTEN/NOTIFY into the change feed instead of "
            "publishing from in-process session commits"
        ),
    )
    change_stream_heartbeat_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Idle interval before a heartbeat is sent on change streams",
    )


_app_settings: AppSettings | None = None


def get_app_settings() -> AppSettings:
    global _app_settings
    if _app_settings is None:
        _app_settings = AppSettings()
    return _app_settings


def set_app_settings(settings: AppSettings | None) -> None:
    """Replace (or reset with None) the global app settings. Useful for testing."""
    global _app_settings
    _app_settings = settings
