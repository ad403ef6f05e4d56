"""Tests for the in-process change feed."""

import asyncio
from unittest.mock import MagicMock

import pytest
from sqlalchemy import String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from carecoord.db.changes.feed import (
    ChangeEvent,
    ChangeFeed,
    ChangeType,
    get_change_feed,
    track_session_changes,
)


def inventory_change(event: ChangeType = ChangeType.UPDATE) -> ChangeEvent:
    return ChangeEvent(table="inventory_items", event=event, record_id="item-1")


@pytest.mark.asyncio
async def test_subscribers_receive_changes_for_their_table():
    feed = ChangeFeed()
    inventory_callback = MagicMock()
    schedule_callback = MagicMock()
    feed.subscribe("inventory_items", inventory_callback)
    feed.subscribe("service_schedule", schedule_callback)

    change = inventory_change()
    await feed.publish(change)

    inventory_callback.assert_called_once_with(change)
    schedule_callback.assert_not_called()


@pytest.mark.asyncio
async def test_async_callbacks_are_awaited():
    feed = ChangeFeed()
    received = []

    async def callback(change):
        received.append(change.event)

    feed.subscribe("inventory_items", callback)
    await feed.publish(inventory_change(ChangeType.DELETE))

    assert received == [ChangeType.DELETE]


@pytest.mark.asyncio
async def test_no_delivery_after_unsubscribe():
    feed = ChangeFeed()
    callback = MagicMock()
    subscription = feed.subscribe("inventory_items", callback)

    subscription.unsubscribe()
    subscription.unsubscribe()
    await feed.publish(inventory_change())

    callback.assert_not_called()
    assert subscription.active is False
    assert feed.subscriber_count("inventory_items") == 0


@pytest.mark.asyncio
async def test_subscription_as_context_manager():
    feed = ChangeFeed()
    callback = MagicMock()

    with feed.subscribe("inventory_items", callback):
        assert feed.subscriber_count("inventory_items") == 1

    await feed.publish(inventory_change())
    callback.assert_not_called()


@pytest.mark.asyncio
async def test_failing_subscriber_does_not_block_others():
    feed = ChangeFeed()
    failing = MagicMock(side_effect=RuntimeError("boom"))
    healthy = MagicMock()
    feed.subscribe("inventory_items", failing)
    feed.subscribe("inventory_items", healthy)

    await feed.publish(inventory_change())

    healthy.assert_called_once()


def test_change_event_parses_notification_payload():
    change = ChangeEvent.model_validate_json(
        '{"table": "service_schedule", "event": "INSERT", "record_id": "abc"}'
    )

    assert change.event is ChangeType.INSERT
    assert change.record_id == "abc"


def test_global_feed_is_shared():
    assert get_change_feed() is get_change_feed()


# ========== Session commit hooks ==========


class TrackedBase(DeclarativeBase):
    pass


class Pantry(TrackedBase):
    __tablename__ = "pantries"

    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String)


@pytest.fixture
def sync_session():
    engine = create_engine("sqlite://")
    TrackedBase.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture
def tracked_feed():
    feed = ChangeFeed()
    untrack = track_session_changes(feed)
    yield feed
    untrack()


async def drain_publishes() -> None:
    for _ in range(3):
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_committed_changes_are_published(tracked_feed, sync_session):
    received = []
    tracked_feed.subscribe("pantries", received.append)

    sync_session.add(Pantry(id="p-1", name="North"))
    sync_session.commit()
    await drain_publishes()

    assert [(c.table, c.event, c.record_id) for c in received] == [
        ("pantries", ChangeType.INSERT, "p-1")
    ]

    pantry = sync_session.get(Pantry, "p-1")
    pantry.name = "North Side"
    sync_session.commit()
    sync_session.delete(pantry)
    sync_session.commit()
    await drain_publishes()

    assert [c.event for c in received] == [
        ChangeType.INSERT,
        ChangeType.UPDATE,
        ChangeType.DELETE,
    ]


@pytest.mark.asyncio
async def test_rollback_discards_flushed_changes(tracked_feed, sync_session):
    received = []
    tracked_feed.subscribe("pantries", received.append)

    sync_session.add(Pantry(id="p-1", name="North"))
    sync_session.flush()
    sync_session.rollback()
    sync_session.commit()
    await drain_publishes()

    assert received == []


def test_commit_outside_event_loop_is_dropped(tracked_feed, sync_session):
    received = []
    tracked_feed.subscribe("pantries", received.append)

    sync_session.add(Pantry(id="p-1", name="North"))
    sync_session.commit()

    assert received == []
    assert "carecoord_pending_changes" not in sync_session.info


@pytest.mark.asyncio
async def test_untrack_stops_publishing(sync_session):
    feed = ChangeFeed()
    received = []
    feed.subscribe("pantries", received.append)

    untrack = track_session_changes(feed)
    assert track_session_changes(feed) is untrack
    untrack()
    untrack()

    sync_session.add(Pantry(id="p-1", name="North"))
    sync_session.commit()
    await drain_publishes()

    assert received == []
