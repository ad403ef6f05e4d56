"""Tests for the LISTEN/NOTIFY bridge."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from carecoord.db.changes.feed import ChangeFeed, ChangeType
from carecoord.db.changes.listener import (
    NOTIFY_CHANNEL,
    PostgresChangeListener,
    install_change_triggers,
)


@pytest.mark.asyncio
async def test_notifications_are_republished():
    feed = ChangeFeed()
    received = []
    feed.subscribe("inventory_items", received.append)
    listener = PostgresChangeListener(feed, "postgresql://localhost/care")

    listener._on_notification(
        MagicMock(),
        1234,
        NOTIFY_CHANNEL,
        '{"table": "inventory_items", "event": "UPDATE", "record_id": "item-1"}',
    )
    await asyncio.sleep(0)

    assert [(c.event, c.record_id) for c in received] == [(ChangeType.UPDATE, "item-1")]


@pytest.mark.asyncio
async def test_malformed_notifications_are_ignored():
    feed = ChangeFeed()
    callback = MagicMock()
    feed.subscribe("inventory_items", callback)
    listener = PostgresChangeListener(feed, "postgresql://localhost/care")

    listener._on_notification(MagicMock(), 1, NOTIFY_CHANNEL, "not json")
    await asyncio.sleep(0)

    callback.assert_not_called()


@pytest.mark.asyncio
async def test_start_and_stop_manage_the_connection():
    connection = AsyncMock()
    listener = PostgresChangeListener(ChangeFeed(), "postgresql://localhost/care")

    with patch(
        "carecoord.db.changes.listener.asyncpg.connect",
        AsyncMock(return_value=connection),
    ) as connect:
        await listener.start()
        await listener.start()
        await listener.stop()

    connect.assert_awaited_once_with("postgresql://localhost/care")
    connection.add_listener.assert_awaited_once_with(
        NOTIFY_CHANNEL, listener._on_notification
    )
    connection.remove_listener.assert_awaited_once()
    connection.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_install_change_triggers_covers_every_table():
    conn = AsyncMock()

    await install_change_triggers(conn)

    statements = [c.args[0] for c in conn.exec_driver_sql.await_args_list]
    assert "carecoord_notify_table_change" in statements[0]
    for table in ("inventory_items", "service_schedule", "chat_messages"):
        assert any(f"CREATE TRIGGER {table}_notify_change" in s for s in statements)
