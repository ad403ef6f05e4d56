"""
Derivation of dashboard statistics.

The figures are computed from already-fetched rows so the same logic backs
the HTTP endpoint and the client-side StatsAggregator.
"""

import math
from collections.abc import Sequence

from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.inventory.schemas import InventoryItemResponse
from carecoord.db.schedule.repository import ScheduleRepository
from carecoord.db.schedule.schemas import ScheduleEventResponse
from carecoord.stats.schemas import DashboardStats
from carecoord.utils.clock import local_today
from carecoord.utils.logger import logger


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def average_attendance(completed: Sequence[ScheduleEventResponse]) -> int:
    """Mean of recorded attendance rounded half up; 0 when nothing is recorded."""
    counts = [
        event.recorded_attendance
        for event in completed
        if event.recorded_attendance is not None
    ]
    if not counts:
        return 0
    return round_half_up(sum(counts) / len(counts))


def compute_dashboard_stats(
    inventory: Sequence[InventoryItemResponse],
    upcoming: Sequence[ScheduleEventResponse],
    completed: Sequence[ScheduleEventResponse],
) -> DashboardStats:
    return DashboardStats(
        total_items=len(inventory),
        low_stock_items=sum(1 for item in inventory if item.is_low_stock),
        upcoming_events=len(upcoming),
        total_quantity=math.fsum(item.quantity for item in inventory),
        average_attendance=average_attendance(completed),
    )


class StatsService:
    """Reads the full inventory and schedule and derives DashboardStats."""

    def __init__(
        self,
        inventory_repository: InventoryRepository,
        schedule_repository: ScheduleRepository,
    ):
        self.inventory_repository = inventory_repository
        self.schedule_repository = schedule_repository

    async def get_stats(self) -> DashboardStats:
        # Both repositories share the request session, so reads are sequential.
        inventory = await self.inventory_repository.list_items()
        upcoming = await self.schedule_repository.list_upcoming(local_today())
        completed = await self.schedule_repository.list_completed()

        stats = compute_dashboard_stats(
            [InventoryItemResponse.model_validate(i) for i in inventory],
            [ScheduleEventResponse.model_validate(e) for e in upcoming],
            [ScheduleEventResponse.model_validate(e) for e in completed],
        )
        logger.debug("Computed dashboard stats", **stats.model_dump())
        return stats
