"""
Pydantic schemas for service schedule reads.
"""

import datetime

from pydantic import BaseModel, ConfigDict, Field

from carecoord.db.schedule.model import ServiceStatus


class ScheduleEventResponse(BaseModel):
    """Response model for a single scheduled service."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Event UUID")
    date: datetime.date = Field(..., description="Service date")
    time: datetime.time = Field(..., description="Local start time")
    location: str = Field(..., description="Where the service takes place")
    notes: str | None = Field(None, description="Free-form notes")
    status: ServiceStatus = Field(..., description="scheduled, completed or cancelled")
    attendance: int | None = Field(None, ge=0, description="People served")

    @property
    def recorded_attendance(self) -> int | None:
        """Attendance, but only for services that actually completed."""
        if self.status is not ServiceStatus.COMPLETED:
            return None
        return self.attendance


class ScheduleListResponse(BaseModel):
    """Response model for a list of scheduled services."""

    events: list[ScheduleEventResponse] = Field(..., description="Events")
    total: int = Field(..., description="Number of events")
