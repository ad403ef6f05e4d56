"""Router for dashboard statistics."""

from fastapi import APIRouter, Depends

from carecoord.auth.dependencies import get_caller
from carecoord.db.dependencies import get_inventory_repository, get_schedule_repository
from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.schedule.repository import ScheduleRepository
from carecoord.stats.schemas import DashboardStats
from carecoord.stats.service import StatsService

router = APIRouter(prefix="/stats", tags=["Stats"], dependencies=[Depends(get_caller)])


def get_stats_service(
    inventory_repository: InventoryRepository = Depends(get_inventory_repository),
    schedule_repository: ScheduleRepository = Depends(get_schedule_repository),
) -> StatsService:
    return StatsService(inventory_repository, schedule_repository)


@router.get("", response_model=DashboardStats)
async def get_dashboard_stats(
    stats_service: StatsService = Depends(get_stats_service),
) -> DashboardStats:
    """Totals, low-stock count, upcoming services and average attendance."""
    return await stats_service.get_stats()
