"""Read-only views derived from current store state."""

import math
from collections import Counter
from decimal import Decimal

from src.engine.base import EngineComponent, money
from src.engine.errors import NotFoundError
from src.models.results import (
    ChefPerformance,
    FinancialStatus,
    ForecastEntry,
    InventoryStatus,
    LowStockLine,
    MenuItemDetails,
    MenuOverview,
    StrategicSummary,
    TopRatedItem,
)


class Analytics(EngineComponent):
    """Forecasts, chef performance and status reports. Nothing is cached."""

    async def get_demand_forecast(self) -> list[ForecastEntry]:
        """
        Suggested target stock for ingredients of popular dishes.

        A dish is popular when highly rated or frequently rated. Each
        ingredient appears once, credited to the first popular dish that
        uses it.
        """
        menu = await self.store.list_menu()
        inventory = {item.id: item for item in await self.store.list_inventory()}

        popular = [
            dish
            for dish in menu
            if dish.rating >= self.settings.popular_rating
            or dish.rating_count > self.settings.popular_rating_count
        ]

        forecast: dict[str, ForecastEntry] = {}
        for dish in popular:
            for ingredient in dish.ingredients:
                item = inventory.get(ingredient.inventory_id)
                if item is None or item.id in forecast:
                    continue
                forecast[item.id] = ForecastEntry(
                    item_id=item.id,
                    name=item.name,
                    suggested_stock=math.ceil(item.threshold * self.settings.forecast_multiplier),
                    reason=f"High demand for {dish.name} ({dish.rating:.1f}★)",
                )
        return list(forecast.values())

    async def get_chef_performance(self) -> list[ChefPerformance]:
        """Count-weighted rating and a sales proxy per chef."""
        stats: dict[str, dict] = {}
        for item in await self.store.list_menu():
            if not item.chef:
                continue
            chef = stats.setdefault(
                item.chef, {"rating_sum": 0.0, "count": 0, "sales": Decimal("0.00")}
            )
            chef["rating_sum"] += item.rating * item.rating_count
            chef["count"] += item.rating_count
            # Rating count stands in for units sold
            chef["sales"] += item.price * item.rating_count

        performance = []
        for name, chef in stats.items():
            rating = chef["rating_sum"] / chef["count"] if chef["count"] else 0.0
            sales = money(chef["sales"])
            performance.append(
                ChefPerformance(
                    name=name,
                    rating=rating,
                    sales=sales,
                    raise_suggested=rating > self.settings.chef_raise_rating
                    and sales > self.settings.chef_raise_sales,
                )
            )
        return performance

    async def get_insights(self) -> list[str]:
        return await self.store.get_insights()

    async def get_inventory_status(self) -> InventoryStatus:
        items = await self.store.list_inventory()
        total_value = sum((item.stock_value for item in items), Decimal("0.00"))
        return InventoryStatus(
            total_items=len(items),
            low_stock_items=[
                LowStockLine(
                    name=item.name,
                    quantity=item.quantity,
                    unit=item.unit,
                    threshold=item.threshold,
                )
                for item in items
                if item.is_low_stock
            ],
            total_value=money(total_value),
        )

    async def get_financial_status(self) -> FinancialStatus:
        ledger = await self.store.get_ledger()
        low_stock = [item for item in await self.store.list_inventory() if item.is_low_stock]
        return FinancialStatus(
            operating_funds=ledger.operating_funds,
            total_revenue=ledger.total_revenue,
            total_cost=ledger.total_cost,
            net_profit=ledger.net_profit,
            low_stock_count=len(low_stock),
            status="critical"
            if ledger.operating_funds < self.settings.funds_critical_threshold
            else "stable",
        )

    async def get_menu_overview(self) -> MenuOverview:
        menu = await self.store.list_menu()
        categories = Counter(item.category.value for item in menu)
        top_rated = sorted(menu, key=lambda m: m.rating, reverse=True)[:3]
        return MenuOverview(
            total_items=len(menu),
            categories=dict(categories),
            top_rated=[
                TopRatedItem(name=item.name, rating=item.rating, price=item.price)
                for item in top_rated
            ],
        )

    async def get_menu_item_details(self, name_fragment: str) -> MenuItemDetails:
        """First dish whose name contains the fragment, ingredients by name."""
        fragment = name_fragment.strip().lower()
        menu = await self.store.list_menu()
        menu_item = next((m for m in menu if fragment and fragment in m.name.lower()), None)
        if menu_item is None:
            raise NotFoundError(f'Menu item "{name_fragment}" not found.')

        inventory = {item.id: item for item in await self.store.list_inventory()}
        return MenuItemDetails(
            id=menu_item.id,
            name=menu_item.name,
            description=menu_item.description,
            price=menu_item.price,
            prep_time=menu_item.prep_time,
            category=menu_item.category.value,
            ingredients=[
                inventory[ing.inventory_id].name
                if ing.inventory_id in inventory
                else ing.inventory_id
                for ing in menu_item.ingredients
            ],
            rating=menu_item.rating,
        )

    async def get_strategic_summary(self) -> StrategicSummary:
        recent_orders = await self.store.list_recent_orders(limit=10)
        low_stock = [item for item in await self.store.list_inventory() if item.is_low_stock]
        menu = await self.store.list_menu()
        most_rated = sorted(menu, key=lambda m: m.rating_count, reverse=True)[:3]

        return StrategicSummary(
            recent_order_count=len(recent_orders),
            low_stock_count=len(low_stock),
            low_stock_items=[item.name for item in low_stock],
            top_menu_items=[item.name for item in most_rated],
            insights=await self.store.get_insights(),
        )
