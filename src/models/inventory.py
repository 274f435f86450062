"""Inventory management models."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field

InventoryCategory = Literal["produce", "meat", "dairy", "pantry", "beverage"]


class InventoryItem(BaseModel):
    """Ingredient stock line with its reorder point and cost basis."""

    id: str
    sku: str
    name: str
    quantity: float = Field(ge=0)
    unit: str
    threshold: float = Field(ge=0)
    price_per_unit: Decimal = Field(ge=0)
    category: InventoryCategory
    last_restocked: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_low_stock(self) -> bool:
        """Check if item is at or below its reorder point."""
        return self.quantity <= self.threshold

    @property
    def is_depleted(self) -> bool:
        """Check if item has run out."""
        return self.quantity <= 0

    @property
    def stock_value(self) -> Decimal:
        """Current stock valued at cost."""
        return Decimal(str(self.quantity)) * self.price_per_unit
