"""Database layer: PostgreSQL models, repositories and the change feed."""

from carecoord.db.chat_messages.model import ChatMessage, ChatRole
from carecoord.db.config import DatabaseSettings, get_db_settings
from carecoord.db.database import Base, get_db
from carecoord.db.inventory.model import InventoryItem
from carecoord.db.schedule.model import ScheduleEvent, ServiceStatus

__all__ = [
    "Base",
    "ChatMessage",
    "ChatRole",
    "DatabaseSettings",
    "InventoryItem",
    "ScheduleEvent",
    "ServiceStatus",
    "get_db",
    "get_db_settings",
]
