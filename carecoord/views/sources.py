"""Where the views read rows and change notifications from."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from carecoord.db.changes.feed import (
    ChangeCallback,
    ChangeFeed,
    Subscription,
    get_change_feed,
)
from carecoord.db.database import get_session_factory
from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.inventory.schemas import InventoryItemResponse
from carecoord.db.schedule.repository import ScheduleRepository
from carecoord.db.schedule.schemas import ScheduleEventResponse
from carecoord.utils.clock import local_today


class DashboardDataSource(Protocol):
    """Read access plus change subscriptions for the dashboard tables."""

    async def list_inventory(self) -> list[InventoryItemResponse]: ...

    async def list_upcoming(
        self, limit: int | None = None
    ) -> list[ScheduleEventResponse]: ...

    async def list_completed(
        self, limit: int | None = None
    ) -> list[ScheduleEventResponse]: ...

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription: ...


class DatabaseDataSource:
    """
    Reads straight from the database and watches the process change feed.

    Every read opens its own session so reads can run concurrently.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        feed: ChangeFeed | None = None,
    ):
        self._session_factory = session_factory
        self.feed = feed or get_change_feed()

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = get_session_factory()
        return self._session_factory

    async def list_inventory(self) -> list[InventoryItemResponse]:
        async with self.session_factory() as session:
            items = await InventoryRepository(session).list_items()
            return [InventoryItemResponse.model_validate(i) for i in items]

    async def list_upcoming(
        self, limit: int | None = None
    ) -> list[ScheduleEventResponse]:
        async with self.session_factory() as session:
            events = await ScheduleRepository(session).list_upcoming(
                local_today(), limit=limit
            )
            return [ScheduleEventResponse.model_validate(e) for e in events]

    async def list_completed(
        self, limit: int | None = None
    ) -> list[ScheduleEventResponse]:
        async with self.session_factory() as session:
            events = await ScheduleRepository(session).list_completed(limit=limit)
            return [ScheduleEventResponse.model_validate(e) for e in events]

    def subscribe(self, table: str, callback: ChangeCallback) -> Subscription:
        return self.feed.subscribe(table, callback)
