"""Outputs of engine operations and derived read models."""

from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field


class RestockResult(BaseModel):
    """Outcome of a successful restock."""

    item_id: str
    item_name: str
    new_quantity: float
    cost: Decimal
    remaining_funds: Decimal


class FundsResult(BaseModel):
    """Outcome of a manual funds addition."""

    added: Decimal
    new_funds: Decimal


class SaleResult(BaseModel):
    """Outcome of a single-item sale."""

    success: bool = True
    order_id: int
    item_name: str
    quantity: int
    total: Decimal
    operating_funds: Decimal


class CheckoutLineResult(BaseModel):
    """Per-line outcome of a checkout."""

    menu_item_id: str
    success: bool
    total: Decimal = Decimal("0.00")
    reason: str | None = None


class CheckoutResult(BaseModel):
    """Outcome of a cart checkout; lines succeed or fail independently."""

    order_id: int | None = None
    lines: list[CheckoutLineResult] = Field(default_factory=list)
    total: Decimal = Decimal("0.00")
    success_count: int = 0
    operating_funds: Decimal
    batch_insight: str | None = None


class WasteResult(BaseModel):
    """Outcome of a reported dish failure."""

    menu_item_id: str
    outcome: Literal["remade", "blocked"]
    missing_ingredients: list[str] = Field(default_factory=list)
    lost_revenue: Decimal = Decimal("0.00")


class ForecastEntry(BaseModel):
    """Suggested target stock for an ingredient of a popular dish."""

    item_id: str
    name: str
    suggested_stock: int
    reason: str


class ChefPerformance(BaseModel):
    """Aggregated rating and sales proxy for one chef."""

    name: str
    rating: float
    sales: Decimal
    raise_suggested: bool


class LowStockLine(BaseModel):
    """Compact low-stock row for status reports."""

    name: str
    quantity: float
    unit: str
    threshold: float


class InventoryStatus(BaseModel):
    """Inventory health summary."""

    total_items: int
    low_stock_items: list[LowStockLine] = Field(default_factory=list)
    total_value: Decimal


class FinancialStatus(BaseModel):
    """Funds, revenue and cost summary."""

    operating_funds: Decimal
    total_revenue: Decimal
    total_cost: Decimal
    net_profit: Decimal
    low_stock_count: int = 0
    status: Literal["critical", "stable"]


class TopRatedItem(BaseModel):
    """Menu item highlight."""

    name: str
    rating: float
    price: Decimal


class MenuOverview(BaseModel):
    """Menu size, category counts and top rated dishes."""

    total_items: int
    categories: dict[str, int]
    top_rated: list[TopRatedItem] = Field(default_factory=list)


class MenuItemDetails(BaseModel):
    """Menu item with ingredient names resolved, for allergy-aware ordering."""

    id: str
    name: str
    description: str
    price: Decimal
    prep_time: str
    category: str
    ingredients: list[str]
    rating: float


class StrategicSummary(BaseModel):
    """High level snapshot for the assistant's insight tool."""

    recent_order_count: int
    low_stock_count: int
    low_stock_items: list[str]
    top_menu_items: list[str]
    insights: list[str] = Field(default_factory=list)
