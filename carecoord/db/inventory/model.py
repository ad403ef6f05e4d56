"""
SQLAlchemy model for food-bank inventory items.
"""

from sqlalchemy import Numeric, String, Text, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from carecoord.db.constants import Table
from carecoord.db.database import Base


class InventoryItem(Base):
    """
    A stocked item such as rice or tomato sauce.

    Rows are maintained by administrators outside this service; the
    dashboard and the chat proxy only read them.
    """

    __tablename__ = Table.INVENTORY_ITEMS.value

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        server_default=text("gen_random_uuid()"),
        comment="Item UUID",
    )

    name: Mapped[str] = mapped_column(Text, nullable=False, comment="Display name")

    category: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Open-ended tag, e.g. grains, fresh, canned, oils",
    )

    quantity: Mapped[float] = mapped_column(
        Numeric(asdecimal=False),
        nullable=False,
        default=0,
        comment="Quantity on hand",
    )

    unit: Mapped[str] = mapped_column(
        String(32), nullable=False, comment="Display unit, e.g. kg, cans"
    )

    low_stock_threshold: Mapped[float] = mapped_column(
        Numeric(asdecimal=False),
        nullable=False,
        default=0,
        comment="Quantity at or below which the item counts as low stock",
    )

    def __repr__(self) -> str:
        return (
            f"<InventoryItem(id={self.id}, name={self.name}, "
            f"quantity={self.quantity} {self.unit})>"
        )
