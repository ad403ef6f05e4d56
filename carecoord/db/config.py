"""
Data store connection settings, read from DB_* environment variables.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

from carecoord.utils.logger import logger

ASYNC_DRIVER = "postgresql+asyncpg"
LISTENER_DRIVER = "postgresql"


class DatabaseSettings(BaseSettings):
    """Where the data store lives and how to authenticate against it."""

    model_config = SettingsConfigDict(
        env_prefix="DB_", case_sensitive=False, extra="ignore"
    )

    url: str = Field(
        description="Data store connection URL, e.g. postgresql://user@host:5432/db"
    )
    service_key: str | None = Field(
        default=None,
        description="Data store service credential, used as the password when the URL has none",
    )
    pool_size: int = Field(default=5, ge=1, description="Pooled connections kept open")
    max_overflow: int = Field(default=10, ge=0, description="Extra connections under load")
    echo: bool = Field(default=False, description="Log every SQL statement")

    def _url_with_credentials(self, drivername: str) -> str:
        url: URL = make_url(self.url)
        if self.service_key and not url.password:
            url = url.set(password=self.service_key)
        return url.set(drivername=drivername).render_as_string(hide_password=False)

    def get_async_url(self) -> str:
        """SQLAlchemy URL for the asyncpg engine."""
        return self._url_with_credentials(ASYNC_DRIVER)

    def get_listener_dsn(self) -> str:
        """Plain postgresql:// DSN for the dedicated LISTEN connection."""
        return self._url_with_credentials(LISTENER_DRIVER)


_db_settings: DatabaseSettings | None = None


def get_db_settings() -> DatabaseSettings:
    """
    Load DatabaseSettings once per process.

    Raises:
        ValidationError: If DB_URL is not set
    """
    global _db_settings
    if _db_settings is None:
        _db_settings = DatabaseSettings()
        url = make_url(_db_settings.url)
        logger.info(
            "Database settings loaded",
            host=url.host,
            port=url.port,
            database=url.database,
        )
    return _db_settings


def set_db_settings(settings: DatabaseSettings | None) -> None:
    """Swap the process settings; None forces a reload from the environment."""
    global _db_settings
    _db_settings = settings
