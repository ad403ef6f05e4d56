"""
Pydantic schemas for dashboard statistics.
"""

from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    """Summary figures shown on the dashboard overview."""

    total_items: int = Field(..., description="Number of inventory items")
    low_stock_items: int = Field(..., description="Items at or below their threshold")
    upcoming_events: int = Field(..., description="Services dated today or later")
    total_quantity: float = Field(..., description="Sum of all item quantities")
    average_attendance: int = Field(
        ..., description="Mean attendance over completed services, rounded half up"
    )
