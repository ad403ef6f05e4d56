"""
SQLAlchemy model for the street food service schedule.
"""

import datetime
from enum import Enum

from sqlalchemy import Date, Index, Integer, String, Text, Time, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from carecoord.db.constants import Table
from carecoord.db.database import Base


class ServiceStatus(str, Enum):
    """Lifecycle of a scheduled service."""

    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ScheduleEvent(Base):
    """
    A single food service at a place and time.

    Attendance is only recorded once the service is completed.
    """

    __tablename__ = Table.SERVICE_SCHEDULE.value

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        comment="Event UUID",
    )

    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, comment="Service date")

    time: Mapped[datetime.time] = mapped_column(
        Time, nullable=False, comment="Local start time"
    )

    location: Mapped[str] = mapped_column(Text, nullable=False, comment="Where")

    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True, comment="Free-form notes"
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ServiceStatus.SCHEDULED.value,
        comment="scheduled, completed or cancelled",
    )

    attendance: Mapped[int | None] = mapped_column(
        Integer,
        nullable=True,
        comment="People served; only set for completed services",
    )

    __table_args__ = (
        Index("idx_service_schedule_date", "date"),
        Index("idx_service_schedule_status_date", "status", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduleEvent(id={self.id}, date={self.date}, time={self.time}, "
            f"status={self.status})>"
        )
