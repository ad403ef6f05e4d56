"""
Repository for inventory reads.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from carecoord.db.inventory.model import InventoryItem
from carecoord.utils.logger import logger


class InventoryRepository:
    """Read access to the inventory_items table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_items(self) -> list[InventoryItem]:
        """
        List every inventory item.

        Returns:
            list[InventoryItem]: Items ordered by name
        """
        stmt = select(InventoryItem).order_by(InventoryItem.name)

        result = await self.session.execute(stmt)
        items = list(result.scalars().all())

        logger.debug(f"[InventoryRepository] Listed {len(items)} items")
        return items
