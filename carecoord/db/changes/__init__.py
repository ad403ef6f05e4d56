"""Change-notification feed for the watched tables."""

from carecoord.db.changes.feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    Subscription,
    get_change_feed,
    set_change_feed,
    track_session_changes,
)

__all__ = [
    "ChangeEvent",
    "ChangeFeed",
    "ChangeType",
    "Subscription",
    "get_change_feed",
    "set_change_feed",
    "track_session_changes",
]
