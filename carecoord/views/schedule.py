"""Live service schedule."""

import asyncio

from carecoord.db.constants import (
    COMPLETED_SERVICE_LIMIT,
    UPCOMING_SERVICE_LIMIT,
    Table,
)
from carecoord.db.schedule.schemas import ScheduleEventResponse
from carecoord.views.base import WatchedView
from carecoord.views.sources import DashboardDataSource


class ScheduleView(WatchedView):
    """Upcoming services plus recently completed ones with attendance."""

    table = Table.SERVICE_SCHEDULE

    def __init__(
        self,
        source: DashboardDataSource,
        upcoming_limit: int = UPCOMING_SERVICE_LIMIT,
        completed_limit: int = COMPLETED_SERVICE_LIMIT,
        on_update=None,
    ):
        super().__init__(source, on_update)
        self.upcoming_limit = upcoming_limit
        self.completed_limit = completed_limit
        self.upcoming: list[ScheduleEventResponse] = []
        self.completed: list[ScheduleEventResponse] = []

    @property
    def is_empty(self) -> bool:
        """No upcoming services to show."""
        return not self.upcoming

    async def _fetch(self) -> tuple[list[ScheduleEventResponse], list[ScheduleEventResponse]]:
        upcoming, completed = await asyncio.gather(
            self.source.list_upcoming(limit=self.upcoming_limit),
            self.source.list_completed(limit=self.completed_limit),
        )
        return upcoming, completed

    def _apply(self, rows) -> None:
        self.upcoming, self.completed = rows
