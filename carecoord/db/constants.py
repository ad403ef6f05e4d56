"""
Table names and query caps shared by the API, the chat proxy and the views.
"""

from enum import Enum


class Table(str, Enum):
    """Tables that publish change notifications."""

    INVENTORY_ITEMS = "inventory_items"
    SERVICE_SCHEDULE = "service_schedule"
    CHAT_MESSAGES = "chat_messages"


UPCOMING_SERVICE_LIMIT = 10
COMPLETED_SERVICE_LIMIT = 5
CONTEXT_HISTORY_LIMIT = 20
TRANSCRIPT_HISTORY_LIMIT = 50
