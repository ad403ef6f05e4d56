"""
Pydantic schemas for inventory reads.
"""

from pydantic import BaseModel, ConfigDict, Field, computed_field


def is_low_stock(quantity: float, low_stock_threshold: float) -> bool:
    """An item is low on stock when its quantity is at or below its threshold."""
    return quantity <= low_stock_threshold


class InventoryItemResponse(BaseModel):
    """Response model for a single inventory item."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Item UUID")
    name: str = Field(..., description="Display name")
    category: str = Field(..., description="Open-ended category tag")
    quantity: float = Field(..., ge=0, description="Quantity on hand")
    unit: str = Field(..., description="Display unit")
    low_stock_threshold: float = Field(..., description="Low-stock threshold")

    @computed_field
    @property
    def is_low_stock(self) -> bool:
        return is_low_stock(self.quantity, self.low_stock_threshold)


class InventoryListResponse(BaseModel):
    """Response model for the full inventory."""

    items: list[InventoryItemResponse] = Field(..., description="Items ordered by name")
    total: int = Field(..., description="Number of items")
