"""Router for service schedule reads."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from carecoord.auth.dependencies import get_caller
from carecoord.db.constants import COMPLETED_SERVICE_LIMIT, UPCOMING_SERVICE_LIMIT
from carecoord.db.dependencies import get_schedule_repository
from carecoord.db.schedule.repository import ScheduleRepository
from carecoord.db.schedule.schemas import ScheduleEventResponse, ScheduleListResponse
from carecoord.utils.clock import local_today

router = APIRouter(
    prefix="/schedule", tags=["Schedule"], dependencies=[Depends(get_caller)]
)


@router.get("/upcoming", response_model=ScheduleListResponse)
async def list_upcoming_services(
    schedule_repository: Annotated[
        ScheduleRepository, Depends(get_schedule_repository)
    ],
    limit: Annotated[int, Query(ge=1, le=100)] = UPCOMING_SERVICE_LIMIT,
) -> ScheduleListResponse:
    """Services dated today or later, soonest first."""
    events = await schedule_repository.list_upcoming(local_today(), limit=limit)
    return ScheduleListResponse(
        events=[ScheduleEventResponse.model_validate(e) for e in events],
        total=len(events),
    )


@router.get("/completed", response_model=ScheduleListResponse)
async def list_completed_services(
    schedule_repository: Annotated[
        ScheduleRepository, Depends(get_schedule_repository)
    ],
    limit: Annotated[int, Query(ge=1, le=100)] = COMPLETED_SERVICE_LIMIT,
) -> ScheduleListResponse:
    """Completed services with recorded attendance, most recent first."""
    events = await schedule_repository.list_completed(limit=limit)
    return ScheduleListResponse(
        events=[ScheduleEventResponse.model_validate(e) for e in events],
        total=len(events),
    )
