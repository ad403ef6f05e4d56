"""Live inventory list."""

from carecoord.db.constants import Table
from carecoord.db.inventory.schemas import InventoryItemResponse
from carecoord.views.base import WatchedView
from carecoord.views.sources import DashboardDataSource


class InventoryView(WatchedView):
    """All inventory items ordered by name, reloaded on every inventory change."""

    table = Table.INVENTORY_ITEMS

    def __init__(self, source: DashboardDataSource, on_update=None):
        super().__init__(source, on_update)
        self.items: list[InventoryItemResponse] = []

    @property
    def low_stock_items(self) -> list[InventoryItemResponse]:
        return [item for item in self.items if item.is_low_stock]

    async def _fetch(self) -> list[InventoryItemResponse]:
        return await self.source.list_inventory()

    def _apply(self, rows: list[InventoryItemResponse]) -> None:
        self.items = rows
