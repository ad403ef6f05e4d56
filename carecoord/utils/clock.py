"""Wall-clock helpers bound to the organization's configured timezone."""

from datetime import date, datetime
from zoneinfo import ZoneInfo

from carecoord.config import get_app_settings


def local_now() -> datetime:
    """Current time as an aware datetime in the configured timezone."""
    return datetime.now(ZoneInfo(get_app_settings().timezone))


def local_today() -> date:
    return local_now().date()
