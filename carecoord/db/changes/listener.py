"""
PostgreSQL LISTEN/NOTIFY bridge for the change feed.

Row triggers on the watched tables ``pg_notify`` a JSON payload on a single
channel; ``PostgresChangeListener`` holds a dedicated asyncpg connection that
LISTENs on it and republishes each payload as a ChangeEvent. Unlike the
session hooks this sees every write, including ones made outside this
service.
"""

import asyncio

import asyncpg
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncConnection

from carecoord.db.changes.feed import ChangeEvent, ChangeFeed
from carecoord.db.constants import Table
from carecoord.utils.logger import logger

NOTIFY_CHANNEL = "carecoord_table_changes"

TRIGGER_FUNCTION_DDL = f"""
CREATE OR REPLACE FUNCTION carecoord_notify_table_change() RETURNS trigger AS $$
DECLARE
    changed_id text;
BEGIN
    IF TG_OP = 'DELETE' THEN
        changed_id := OLD.id::text;
    ELSE
        changed_id := NEW.id::text;
    END IF;
    PERFORM pg_notify(
        '{NOTIFY_CHANNEL}',
        json_build_object('table', TG_TABLE_NAME, 'event', TG_OP, 'record_id', changed_id)::text
    );
    RETURN NULL;
END;
$$ LANGUAGE plpgsql
"""


def _trigger_statements(table: str) -> list[str]:
    trigger = f"{table}_notify_change"
    return [
        f"DROP TRIGGER IF EXISTS {trigger} ON {table}",
        (
            f"CREATE TRIGGER {trigger} AFTER INSERT OR UPDATE OR DELETE ON {table} "
            "FOR EACH ROW EXECUTE FUNCTION carecoord_notify_table_change()"
        ),
    ]


async def install_change_triggers(conn: AsyncConnection) -> None:
    """
    Create the notify function and one row trigger per watched table.

    Args:
        conn: Open connection inside a transaction
    """
    await conn.exec_driver_sql(TRIGGER_FUNCTION_DDL)
    for table in Table:
        for statement in _trigger_statements(table.value):
            await conn.exec_driver_sql(statement)
    logger.info("Installed change-notification triggers", channel=NOTIFY_CHANNEL)


class PostgresChangeListener:
    """Republishes PostgreSQL notifications on NOTIFY_CHANNEL to a ChangeFeed."""

    def __init__(self, feed: ChangeFeed, dsn: str):
        """
        Args:
            feed: Feed to publish into
            dsn: Plain postgresql:// DSN for a dedicated connection
        """
        self.feed = feed
        self.dsn = dsn
        self._connection: asyncpg.Connection | None = None
        self._tasks: set[asyncio.Task] = set()

    async def start(self) -> None:
        if self._connection is not None:
            return
        self._connection = await asyncpg.connect(self.dsn)
        await self._connection.add_listener(NOTIFY_CHANNEL, self._on_notification)
        logger.info("Listening for table changes", channel=NOTIFY_CHANNEL)

    async def stop(self) -> None:
        if self._connection is None:
            return
        await self._connection.remove_listener(NOTIFY_CHANNEL, self._on_notification)
        await self._connection.close()
        self._connection = None
        logger.info("Stopped listening for table changes", channel=NOTIFY_CHANNEL)

    def _on_notification(
        self,
        connection: asyncpg.Connection,
        pid: int,
        channel: str,
        payload: str,
    ) -> None:
        try:
            change = ChangeEvent.model_validate_json(payload)
        except ValidationError as e:
            logger.warning(
                "Ignoring malformed change notification", payload=payload, error=str(e)
            )
            return

        task = asyncio.get_running_loop().create_task(self.feed.publish(change))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
