"""
Repository for service schedule reads.
"""

import datetime

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from carecoord.db.schedule.model import ScheduleEvent, ServiceStatus
from carecoord.utils.logger import logger


class ScheduleRepository:
    """Read access to the service_schedule table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_upcoming(
        self,
        today: datetime.date,
        limit: int | None = None,
    ) -> list[ScheduleEvent]:
        """
        List services dated today or later.

        Args:
            today: First date to include
            limit: Optional cap on the number of rows

        Returns:
            list[ScheduleEvent]: Events ordered by date then time, ascending
        """
        stmt = (
            select(ScheduleEvent)
            .where(ScheduleEvent.date >= today)
            .order_by(ScheduleEvent.date, ScheduleEvent.time)
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        events = list(result.scalars().all())

        logger.debug(
            f"[ScheduleRepository] Listed {len(events)} upcoming events from {today}"
        )
        return events

    async def list_completed(self, limit: int | None = None) -> list[ScheduleEvent]:
        """
        List completed services that have attendance recorded.

        Args:
            limit: Optional cap on the number of rows

        Returns:
            list[ScheduleEvent]: Events ordered by date, most recent first
        """
        stmt = (
            select(ScheduleEvent)
            .where(
                ScheduleEvent.status == ServiceStatus.COMPLETED.value,
                ScheduleEvent.attendance.is_not(None),
            )
            .order_by(desc(ScheduleEvent.date), desc(ScheduleEvent.time))
        )
        if limit is not None:
            stmt = stmt.limit(limit)

        result = await self.session.execute(stmt)
        events = list(result.scalars().all())

        logger.debug(f"[ScheduleRepository] Listed {len(events)} completed events")
        return events
