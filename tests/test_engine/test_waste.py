"""Tests for waste handling."""

from decimal import Decimal

import pytest

from src.engine.errors import InvalidInputError, NotFoundError, OutOfStockError
from src.engine.service import RestaurantEngine
from src.models.ledger import LogType
from src.models.menu import MenuCategory, MenuItem, RecipeIngredient
from src.state.store import InMemoryEntityStore


@pytest.mark.asyncio
async def test_waste_with_stock_remakes_dish(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    result = await engine.record_waste("menu-1", "Burnt")

    assert result.outcome == "remade"
    assert result.missing_ingredients == []
    assert result.lost_revenue == Decimal("0.00")

    beef = await store.get_inventory_item("inv-1")
    assert beef.quantity == pytest.approx(49.8)

    ledger = await store.get_ledger()
    assert ledger.operating_funds == Decimal("5000.00")
    assert ledger.total_revenue == Decimal("0.00")

    waste = [entry for entry in await store.list_logs() if entry.type == LogType.WASTE]
    assert waste[0].message == (
        "Chef reported failure on Classic Cheeseburger: Burnt. "
        "Ingredients re-allocated for remake."
    )

    insights = await engine.get_insights()
    assert insights[0].startswith("LOSS ALERT: Waste recorded for Classic Cheeseburger.")
    assert insights[0].endswith("Cost Impact: Negligible (Stock available).")


@pytest.mark.asyncio
async def test_waste_without_stock_reports_lost_revenue(
    engine: RestaurantEngine, store: InMemoryEntityStore, captured_events: list, set_stock
) -> None:
    await set_stock("inv-1", quantity=0.1)

    result = await engine.record_waste("menu-1", "Dropped on floor")

    assert result.outcome == "blocked"
    assert result.missing_ingredients == ["Premium Ground Beef"]
    assert result.lost_revenue == Decimal("14.99")

    beef = await store.get_inventory_item("inv-1")
    buns = await store.get_inventory_item("inv-2")
    assert beef.quantity == pytest.approx(0.1)
    assert buns.quantity == 100

    waste = [entry for entry in await store.list_logs() if entry.type == LogType.WASTE]
    assert waste[0].message.endswith("insufficient stock to remake! Missing: Premium Ground Beef")

    insights = await engine.get_insights()
    assert insights[0].endswith(
        "Missing: Premium Ground Beef Revenue Opportunity Lost: $14.99"
    )

    blocked = [event for event in captured_events if event.kind == "waste_blocked"]
    assert blocked[0].severity == "critical"


@pytest.mark.asyncio
async def test_remake_needs_whole_recipe(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    """A remake needs the whole recipe."""
    await set_stock("inv-3", quantity=1)

    result = await engine.record_waste("menu-1", "Wrong order")

    assert result.outcome == "blocked"
    assert result.missing_ingredients == ["Cheddar Cheese"]


@pytest.mark.asyncio
async def test_waste_requires_reason_and_known_dish(engine: RestaurantEngine) -> None:
    with pytest.raises(InvalidInputError):
        await engine.record_waste("menu-1", "   ")

    with pytest.raises(NotFoundError):
        await engine.record_waste("menu-404", "Burnt")


async def save_double_beef_dish(store: InMemoryEntityStore) -> None:
    """A dish whose recipe lists beef on two lines."""
    await store.save_menu_items(
        [
            MenuItem(
                id="menu-double",
                name="Double Patty Melt",
                price=Decimal("16.99"),
                category=MenuCategory.MAIN,
                ingredients=[
                    RecipeIngredient(inventory_id="inv-1", quantity=1.0),
                    RecipeIngredient(inventory_id="inv-1", quantity=1.0),
                ],
            )
        ]
    )


@pytest.mark.asyncio
async def test_remake_sums_repeated_ingredient(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    await save_double_beef_dish(store)
    await set_stock("inv-1", quantity=1.5)

    with pytest.raises(OutOfStockError):
        await engine.sell("menu-double")

    result = await engine.record_waste("menu-double", "Overcooked")

    assert result.outcome == "blocked"
    assert result.missing_ingredients == ["Premium Ground Beef"]
    assert (await store.get_inventory_item("inv-1")).quantity == pytest.approx(1.5)


@pytest.mark.asyncio
async def test_remake_draws_repeated_ingredient_in_full(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    await save_double_beef_dish(store)
    await set_stock("inv-1", quantity=2.5)

    result = await engine.record_waste("menu-double", "Overcooked")

    assert result.outcome == "remade"
    assert (await store.get_inventory_item("inv-1")).quantity == pytest.approx(0.5)
