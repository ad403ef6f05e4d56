"""
In-process change-notification feed.

Subscribers register a callback for a table and are called once per
insert/update/delete on that table. Events arrive either from SQLAlchemy
session commits in this process (see ``track_session_changes``) or from the
PostgreSQL LISTEN/NOTIFY bridge in ``carecoord.db.changes.listener``.
"""

import asyncio
import inspect
from collections import defaultdict
from collections.abc import Awaitable, Callable
from enum import Enum

from pydantic import BaseModel, Field
from sqlalchemy import event
from sqlalchemy.orm import Session

from carecoord.utils.logger import logger


class ChangeType(str, Enum):
    """Kind of row change."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    """A single row change on a watched table."""

    table: str = Field(..., description="Table name")
    event: ChangeType = Field(..., description="INSERT, UPDATE or DELETE")
    record_id: str | None = Field(None, description="Primary key of the changed row")


ChangeCallback = Callable[[ChangeEvent], Awaitable[None] | None]


class Subscription:
    """Handle returned by ``ChangeFeed.subscribe``; closing it stops delivery."""

    def __init__(self, feed: "ChangeFeed", table: str, callback: ChangeCallback):
        self._feed = feed
        self.table = table
        self.callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._feed._remove(self)
            self.active = False

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class ChangeFeed:
    """Fan-out of ChangeEvents to per-table subscribers."""

    def __init__(self) -> None:
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        """
        Call ``callback`` for every change on ``table`` until unsubscribed.

        Args:
            table: Table name to watch
            callback: Sync function or coroutine function taking a ChangeEvent

        Returns:
            Subscription: Handle used to stop delivery
        """
        subscription = Subscription(self, table, callback)
        self._subscriptions[table].append(subscription)
        logger.debug("Subscribed to table changes", table=table)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subscribers = self._subscriptions.get(subscription.table, [])
        if subscription in subscribers:
            subscribers.remove(subscription)
        logger.debug("Unsubscribed from table changes", table=subscription.table)

    def subscriber_count(self, table: str) -> int:
        return len(self._subscriptions.get(table, []))

    async def publish(self, change: ChangeEvent) -> None:
        """
        Deliver a change to every current subscriber of its table.

        A failing subscriber is logged and does not stop delivery to the rest.
        """
        for subscription in list(self._subscriptions.get(change.table, [])):
            try:
                result = subscription.callback(change)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.exception(
                    "Change subscriber failed",
                    table=change.table,
                    change_type=change.event.value,
                    error=str(e),
                )


_change_feed: ChangeFeed | None = None


def get_change_feed() -> ChangeFeed:
    """Get or create the process-wide change feed."""
    global _change_feed
    if _change_feed is None:
        _change_feed = ChangeFeed()
    return _change_feed


def set_change_feed(feed: ChangeFeed | None) -> None:
    """Replace (or reset with None) the process-wide change feed. Useful for testing."""
    global _change_feed
    _change_feed = feed


# ========== Session commit hooks ==========

_PENDING_KEY = "carecoord_pending_changes"
_tracked_feeds: dict[int, Callable[[], None]] = {}
_publish_tasks: set[asyncio.Task] = set()


def _collect_changes(session: Session) -> list[ChangeEvent]:
    changes = []
    for instances, change_type in (
        (session.new, ChangeType.INSERT),
        (session.dirty, ChangeType.UPDATE),
        (session.deleted, ChangeType.DELETE),
    ):
        for instance in instances:
            table = getattr(instance, "__tablename__", None)
            if table is None:
                continue
            record_id = getattr(instance, "id", None)
            changes.append(
                ChangeEvent(
                    table=table,
                    event=change_type,
                    record_id=str(record_id) if record_id is not None else None,
                )
            )
    return changes


def track_session_changes(feed: ChangeFeed) -> Callable[[], None]:
    """
    Publish committed ORM inserts/updates/deletes to ``feed``.

    Changes are collected after each flush and published only after the
    surrounding transaction commits; a rollback discards them.

    Returns:
        Callable: Detaches the session hooks again
    """
    if id(feed) in _tracked_feeds:
        return _tracked_feeds[id(feed)]

    def _after_flush(session: Session, flush_context) -> None:
        session.info.setdefault(_PENDING_KEY, []).extend(_collect_changes(session))

    def _after_commit(session: Session) -> None:
        changes = session.info.pop(_PENDING_KEY, [])
        if not changes:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "Commit outside an event loop; change notifications dropped",
                change_count=len(changes),
            )
            return
        for change in changes:
            # Hold a reference until the task finishes.
            task = loop.create_task(feed.publish(change))
            _publish_tasks.add(task)
            task.add_done_callback(_publish_tasks.discard)

    def _after_rollback(session: Session) -> None:
        session.info.pop(_PENDING_KEY, None)

    hooks = (
        ("after_flush", _after_flush),
        ("after_commit", _after_commit),
        ("after_rollback", _after_rollback),
    )
    for name, hook in hooks:
        event.listen(Session, name, hook)

    def untrack() -> None:
        if _tracked_feeds.pop(id(feed), None) is None:
            return
        for name, hook in hooks:
            event.remove(Session, name, hook)
        logger.info("Stopped publishing session commits to the change feed")

    _tracked_feeds[id(feed)] = untrack
    logger.info("Publishing in-process session commits to the change feed")
    return untrack
