"""Order-related data models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field

from src.models.menu import Modifications


class OrderStatus(str, Enum):
    """Order status progression."""

    PENDING = "pending"
    PREPARING = "preparing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderItem(BaseModel):
    """Individual item in an order, snapshotted at the time of sale."""

    menu_item_id: str
    menu_item_name: str
    price: Decimal = Field(ge=0)
    quantity: int = Field(default=1, ge=1)
    removed_ingredients: str | None = None
    added_ingredients: str | None = None
    special_instructions: str | None = None

    @property
    def subtotal(self) -> Decimal:
        """Line total for this item."""
        return self.price * self.quantity


class Order(BaseModel):
    """Complete order details."""

    id: int = 0
    total: Decimal = Field(default=Decimal("0.00"), ge=0)
    customer_name: str = "Walk-in"
    allergies: str | None = None
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)
    items: list[OrderItem] = Field(default_factory=list)

    def calculate_total(self) -> Decimal:
        """Recalculate the order total from its items."""
        self.total = sum((item.subtotal for item in self.items), Decimal("0.00"))
        return self.total


class CartLine(BaseModel):
    """One line of a point-of-sale cart."""

    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    modifications: Modifications = Field(default_factory=Modifications)
    special_instructions: str | None = None


class BatchOrder(BaseModel):
    """Completed checkout kept in the rolling analysis buffer."""

    # One dish name per unit sold
    items: list[str] = Field(default_factory=list)
    total: Decimal = Decimal("0.00")
