"""Router for inventory reads."""

from typing import Annotated

from fastapi import APIRouter, Depends

from carecoord.auth.dependencies import get_caller
from carecoord.db.dependencies import get_inventory_repository
from carecoord.db.inventory.repository import InventoryRepository
from carecoord.db.inventory.schemas import InventoryItemResponse, InventoryListResponse

router = APIRouter(
    prefix="/inventory", tags=["Inventory"], dependencies=[Depends(get_caller)]
)


@router.get("", response_model=InventoryListResponse)
async def list_inventory(
    inventory_repository: Annotated[
        InventoryRepository, Depends(get_inventory_repository)
    ],
) -> InventoryListResponse:
    """All inventory items ordered by name, each flagged when low on stock."""
    items = await inventory_repository.list_items()
    return InventoryListResponse(
        items=[InventoryItemResponse.model_validate(item) for item in items],
        total=len(items),
    )
