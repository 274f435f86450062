"""Tests for sales, checkout and batch analysis."""

import asyncio
from decimal import Decimal

import pytest
import pytest_asyncio

from src.config import Settings
from src.engine.errors import InvalidInputError, NotFoundError, OutOfStockError
from src.engine.events import EventBus
from src.engine.service import RestaurantEngine
from src.models.ledger import Ledger, LogType
from src.models.menu import Modifications
from src.models.order import CartLine, Order, OrderStatus
from src.state.store import InMemoryEntityStore


async def sale_logs(store: InMemoryEntityStore) -> list:
    return [entry for entry in await store.list_logs() if entry.type == LogType.SALE]


@pytest.mark.asyncio
async def test_sale_deducts_recipe_and_credits_funds(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    """One Classic Cheeseburger draws its recipe and adds its price to funds."""
    result = await engine.sell("menu-1")

    assert result.success is True
    assert result.order_id == 1
    assert result.total == Decimal("14.99")
    assert result.operating_funds == Decimal("5014.99")

    beef = await store.get_inventory_item("inv-1")
    buns = await store.get_inventory_item("inv-2")
    cheddar = await store.get_inventory_item("inv-3")
    assert beef.quantity == pytest.approx(49.8)
    assert buns.quantity == 99
    assert cheddar.quantity == 38

    ledger = await store.get_ledger()
    assert ledger.total_revenue == Decimal("14.99")

    logs = await sale_logs(store)
    assert len(logs) == 1
    assert logs[0].amount == Decimal("14.99")
    assert logs[0].message == "Order #1: 1x Classic Cheeseburger for Walk-in"


@pytest.mark.asyncio
async def test_sale_creates_pending_order_snapshot(engine: RestaurantEngine) -> None:
    await engine.sell("menu-2", quantity=2, customer_name="Ana", allergies="nuts")

    orders = await engine.list_recent_orders()
    assert len(orders) == 1
    order = orders[0]
    assert order.status == OrderStatus.PENDING
    assert order.customer_name == "Ana"
    assert order.allergies == "nuts"
    assert order.total == Decimal("37.98")
    assert order.items[0].menu_item_name == "Double Smash Burger"
    assert order.items[0].quantity == 2


@pytest.mark.asyncio
async def test_sale_quantity_multiplies_draw(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    result = await engine.sell("menu-1", quantity=3)

    assert result.total == Decimal("44.97")
    beef = await store.get_inventory_item("inv-1")
    assert beef.quantity == pytest.approx(49.4)


@pytest.mark.asyncio
async def test_removed_ingredient_is_not_drawn(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    await engine.sell("menu-1", modifications=Modifications(remove=["cheese"]))

    cheddar = await store.get_inventory_item("inv-3")
    assert cheddar.quantity == 40

    logs = await sale_logs(store)
    assert logs[0].message == "Order #1: 1x Classic Cheeseburger (Mods: -cheese +) for Walk-in"


@pytest.mark.asyncio
async def test_removed_ingredient_does_not_block_sale(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    await set_stock("inv-3", quantity=0)

    result = await engine.sell("menu-1", modifications=Modifications(remove=["Cheddar"]))

    assert result.success is True


@pytest.mark.asyncio
async def test_add_on_charges_surcharge_without_drawing_stock(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    result = await engine.sell("menu-1", modifications=Modifications(add=["bacon"]))

    assert result.total == Decimal("16.99")
    bacon = await store.get_inventory_item("inv-23")
    assert bacon.quantity == 25


@pytest.mark.asyncio
async def test_out_of_stock_sale_changes_nothing(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    await set_stock("inv-1", quantity=0.1)
    logs_before = await store.list_logs()

    with pytest.raises(OutOfStockError) as exc_info:
        await engine.sell("menu-1")

    assert exc_info.value.missing == ["Premium Ground Beef"]
    assert "Premium Ground Beef" in exc_info.value.reason

    buns = await store.get_inventory_item("inv-2")
    assert buns.quantity == 100
    ledger = await store.get_ledger()
    assert ledger.operating_funds == Decimal("5000.00")
    assert await store.list_recent_orders() == []
    assert len(await store.list_logs()) == len(logs_before)


@pytest.mark.asyncio
async def test_unknown_menu_item_and_bad_quantity(engine: RestaurantEngine) -> None:
    with pytest.raises(NotFoundError):
        await engine.sell("menu-99")

    with pytest.raises(InvalidInputError):
        await engine.sell("menu-1", quantity=0)


@pytest.mark.asyncio
async def test_stock_reaches_zero_but_never_negative(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    await set_stock("inv-11", quantity=0.1)

    await engine.sell("menu-5")

    pickles = await store.get_inventory_item("inv-11")
    assert pickles.quantity == 0

    with pytest.raises(OutOfStockError):
        await engine.sell("menu-5")
    pickles = await store.get_inventory_item("inv-11")
    assert pickles.quantity == 0


@pytest.mark.asyncio
async def test_concurrent_sales_never_oversell(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    """Beef for exactly five burgers: eight concurrent sales, five succeed."""
    await set_stock("inv-1", quantity=1.0)

    results = await asyncio.gather(
        *(engine.sell("menu-1") for _ in range(8)), return_exceptions=True
    )

    sold = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, OutOfStockError)]
    assert len(sold) == 5
    assert len(rejected) == 3

    beef = await store.get_inventory_item("inv-1")
    assert beef.quantity == 0
    ledger = await store.get_ledger()
    assert ledger.operating_funds == Decimal("5000.00") + 5 * Decimal("14.99")


@pytest.mark.asyncio
async def test_checkout_partial_success(
    engine: RestaurantEngine, store: InMemoryEntityStore, set_stock
) -> None:
    await set_stock("inv-6", quantity=0)

    result = await engine.checkout(
        [CartLine(menu_item_id="menu-1"), CartLine(menu_item_id="menu-3")],
        customer_name="Table 4",
    )

    assert result.success_count == 1
    assert result.total == Decimal("14.99")
    assert result.lines[0].success is True
    assert result.lines[1].success is False
    assert "Russet Potatoes" in result.lines[1].reason

    order = await store.get_order(result.order_id)
    assert [item.menu_item_id for item in order.items] == ["menu-1"]
    assert order.customer_name == "Table 4"

    logs = await sale_logs(store)
    assert len(logs) == 1
    assert logs[0].message.endswith("for Table 4")


@pytest.mark.asyncio
async def test_checkout_groups_lines_into_one_order(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    result = await engine.checkout(
        [
            CartLine(menu_item_id="menu-1", quantity=2),
            CartLine(menu_item_id="menu-7"),
        ]
    )

    assert result.success_count == 2
    assert result.total == Decimal("35.48")
    assert result.operating_funds == Decimal("5035.48")
    assert len(await store.list_recent_orders()) == 1
    assert len(await sale_logs(store)) == 2


@pytest.mark.asyncio
async def test_checkout_with_every_line_failing(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    result = await engine.checkout([CartLine(menu_item_id="menu-99")])

    assert result.order_id is None
    assert result.success_count == 0
    assert result.lines[0].reason == "Menu item menu-99 not found."
    assert result.operating_funds == Decimal("5000.00")
    assert await store.get_order_buffer() == []


@pytest.mark.asyncio
async def test_empty_cart_is_rejected(engine: RestaurantEngine) -> None:
    with pytest.raises(InvalidInputError):
        await engine.checkout([])


@pytest.mark.asyncio
async def test_batch_analysis_after_ten_checkouts(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    for _ in range(9):
        result = await engine.checkout([CartLine(menu_item_id="menu-1")])
        assert result.batch_insight is None

    result = await engine.checkout([CartLine(menu_item_id="menu-1")])

    assert result.batch_insight == (
        "BATCH ANALYSIS (Last 10 Orders): Avg Order Value: $14.99. "
        "Top Seller: Classic Cheeseburger (10 sold). "
        "Restock priority: Classic Cheeseburger ingredients."
    )
    assert (await engine.get_insights())[0] == result.batch_insight
    assert await store.get_order_buffer() == []

    await engine.checkout([CartLine(menu_item_id="menu-1")])
    assert len(await store.get_order_buffer()) == 1


@pytest.mark.asyncio
async def test_single_sales_do_not_feed_batch_buffer(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    await engine.sell("menu-1")

    assert await store.get_order_buffer() == []


@pytest.mark.asyncio
async def test_low_funds_checkout_pushes_critical_insight(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    await store.save_ledger(Ledger(operating_funds=Decimal("500.00")))

    await engine.checkout([CartLine(menu_item_id="menu-1")])

    insights = await engine.get_insights()
    assert insights[0] == "CRITICAL: Operating funds low (<$1000). Restock carefully."


@pytest.mark.asyncio
async def test_insights_feed_is_capped(
    engine: RestaurantEngine, store: InMemoryEntityStore
) -> None:
    await store.save_ledger(Ledger(operating_funds=Decimal("10.00")))

    for _ in range(7):
        await engine.checkout([CartLine(menu_item_id="menu-7")])

    assert len(await engine.get_insights()) == 5


@pytest.mark.asyncio
async def test_update_order_status(engine: RestaurantEngine) -> None:
    sale = await engine.sell("menu-1")

    order = await engine.update_order_status(sale.order_id, OrderStatus.PREPARING)

    assert order.status == OrderStatus.PREPARING
    orders = await engine.list_recent_orders()
    assert orders[0].status == OrderStatus.PREPARING

    with pytest.raises(NotFoundError):
        await engine.update_order_status(999, OrderStatus.COMPLETED)


@pytest.mark.asyncio
async def test_log_failure_does_not_roll_back_sale(
    engine: RestaurantEngine,
    store: InMemoryEntityStore,
    captured_events: list,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    async def broken_append(entry):
        raise RuntimeError("log backend down")

    monkeypatch.setattr(store, "append_log", broken_append)

    result = await engine.sell("menu-1")

    assert result.success is True
    ledger = await store.get_ledger()
    assert ledger.operating_funds == Decimal("5014.99")
    beef = await store.get_inventory_item("inv-1")
    assert beef.quantity == pytest.approx(49.8)
    assert "log_append_failed" in [event.kind for event in captured_events]


@pytest.mark.asyncio
async def test_sale_publishes_event(engine: RestaurantEngine, captured_events: list) -> None:
    await engine.sell("menu-1")

    assert captured_events[-1].kind == "sale_processed"
    assert captured_events[-1].description == "Sold 1x Classic Cheeseburger for $14.99."


@pytest.mark.asyncio
async def test_rejected_sale_publishes_warning(
    engine: RestaurantEngine, captured_events: list, set_stock
) -> None:
    await set_stock("inv-1", quantity=0)

    with pytest.raises(OutOfStockError):
        await engine.sell("menu-1")

    assert captured_events[-1].kind == "sale_rejected"
    assert captured_events[-1].severity == "warning"


@pytest.mark.asyncio
async def test_batch_analysis_counts_units(
    store: InMemoryEntityStore, settings: Settings, events: EventBus
) -> None:
    engine = RestaurantEngine(store, settings.model_copy(update={"batch_size": 2}), events)
    await engine.seed()

    await engine.checkout([CartLine(menu_item_id="menu-3", quantity=3)])
    result = await engine.checkout([CartLine(menu_item_id="menu-1")])

    assert "Top Seller: Crispy Fries (3 sold)." in result.batch_insight


class FailingOrderStore(InMemoryEntityStore):
    """Store whose order table rejects every insert."""

    async def create_order(self, order: Order) -> Order:
        raise RuntimeError("order table unavailable")


@pytest_asyncio.fixture
async def failing_engine(settings: Settings, events: EventBus) -> RestaurantEngine:
    engine = RestaurantEngine(FailingOrderStore(), settings, events)
    await engine.seed()
    return engine


@pytest.mark.asyncio
async def test_failed_order_write_rolls_back_sale(failing_engine: RestaurantEngine) -> None:
    store = failing_engine.store
    logs_before = await store.list_logs()

    with pytest.raises(RuntimeError):
        await failing_engine.sell("menu-1")

    assert (await store.get_inventory_item("inv-1")).quantity == 50
    ledger = await store.get_ledger()
    assert ledger.operating_funds == Decimal("5000.00")
    assert ledger.total_revenue == Decimal("0.00")
    assert await store.list_recent_orders() == []
    assert await store.list_logs() == logs_before


@pytest.mark.asyncio
async def test_failed_checkout_rolls_back_and_drops_events(
    failing_engine: RestaurantEngine, captured_events: list
) -> None:
    captured_events.clear()

    with pytest.raises(RuntimeError):
        await failing_engine.checkout(
            [CartLine(menu_item_id="menu-99"), CartLine(menu_item_id="menu-1")]
        )

    store = failing_engine.store
    assert (await store.get_inventory_item("inv-1")).quantity == 50
    assert (await store.get_ledger()).operating_funds == Decimal("5000.00")
    assert await store.get_order_buffer() == []
    assert captured_events == []
