"""
Presentation-agnostic dashboard view models.

Each watched view fetches its rows, subscribes to change notifications for
its table, and re-fetches everything on any change until stopped.
"""

from carecoord.views.chat import ChatInterface, ChatState, Notification, TranscriptEntry
from carecoord.views.inventory import InventoryView
from carecoord.views.schedule import ScheduleView
from carecoord.views.sources import DashboardDataSource, DatabaseDataSource
from carecoord.views.stats import StatsAggregator

__all__ = [
    "ChatInterface",
    "ChatState",
    "DashboardDataSource",
    "DatabaseDataSource",
    "InventoryView",
    "Notification",
    "ScheduleView",
    "StatsAggregator",
    "TranscriptEntry",
]
