"""One-shot dashboard statistics."""

import asyncio

from carecoord.stats.schemas import DashboardStats
from carecoord.stats.service import compute_dashboard_stats
from carecoord.utils.logger import logger
from carecoord.views.sources import DashboardDataSource


class StatsAggregator:
    """
    Loads full inventory and schedule once and derives the summary figures.

    There is no live subscription: call ``load`` again to recompute.
    """

    def __init__(self, source: DashboardDataSource):
        self.source = source
        self.stats: DashboardStats | None = None

    async def load(self) -> DashboardStats:
        inventory, upcoming, completed = await asyncio.gather(
            self.source.list_inventory(),
            self.source.list_upcoming(),
            self.source.list_completed(),
        )
        self.stats = compute_dashboard_stats(inventory, upcoming, completed)
        logger.debug("Dashboard stats loaded", **self.stats.model_dump())
        return self.stats
