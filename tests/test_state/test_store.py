"""Tests for the in-memory entity store."""

import asyncio
from decimal import Decimal

import pytest

from src.config import Settings
from src.engine.seed import sample_inventory, sample_menu
from src.models.ledger import Ledger, LogEntry, LogType
from src.models.order import BatchOrder, Order, OrderItem
from src.state import InMemoryEntityStore, RedisEntityStore, create_store


def make_order(name: str = "Walk-in") -> Order:
    return Order(
        customer_name=name,
        items=[
            OrderItem(
                menu_item_id="menu-1",
                menu_item_name="Classic Cheeseburger",
                price=Decimal("14.99"),
            )
        ],
        total=Decimal("14.99"),
    )


@pytest.mark.asyncio
async def test_reads_return_detached_copies(store: InMemoryEntityStore) -> None:
    await store.save_inventory_items(sample_inventory())

    beef = await store.get_inventory_item("inv-1")
    beef.quantity = 0

    assert (await store.get_inventory_item("inv-1")).quantity == 50

    ledger = await store.get_ledger()
    ledger.operating_funds = Decimal("1.00")
    assert (await store.get_ledger()).operating_funds == Decimal("0.00")


@pytest.mark.asyncio
async def test_is_empty_until_inventory_saved(store: InMemoryEntityStore) -> None:
    assert await store.is_empty() is True

    await store.save_inventory_items(sample_inventory())

    assert await store.is_empty() is False


@pytest.mark.asyncio
async def test_listing_order(store: InMemoryEntityStore) -> None:
    await store.save_inventory_items(sample_inventory())
    await store.save_menu_items(sample_menu())

    names = [item.name for item in await store.list_inventory()]
    assert names == sorted(names)

    menu = await store.list_menu()
    assert menu[0].name == "Caesar Salad"
    assert menu[-1].name == "Truffle Mushroom Swiss"


@pytest.mark.asyncio
async def test_order_ids_are_sequential(store: InMemoryEntityStore) -> None:
    first = await store.create_order(make_order("Ana"))
    second = await store.create_order(make_order("Ben"))

    assert (first.id, second.id) == (1, 2)
    recent = await store.list_recent_orders()
    assert [order.customer_name for order in recent] == ["Ben", "Ana"]
    assert await store.get_order(99) is None


@pytest.mark.asyncio
async def test_logs_are_newest_first_and_capped() -> None:
    store = InMemoryEntityStore(max_log_entries=3)

    for i in range(5):
        await store.append_log(LogEntry(type=LogType.SYSTEM, message=f"entry {i}"))

    logs = await store.list_logs()
    assert [entry.message for entry in logs] == ["entry 4", "entry 3", "entry 2"]
    assert len(await store.list_logs(limit=1)) == 1


@pytest.mark.asyncio
async def test_insights_are_capped(store: InMemoryEntityStore) -> None:
    for i in range(4):
        await store.push_insight(f"insight {i}", cap=3)

    assert await store.get_insights() == ["insight 3", "insight 2", "insight 1"]


@pytest.mark.asyncio
async def test_order_buffer_roundtrip(store: InMemoryEntityStore) -> None:
    await store.save_order_buffer([BatchOrder(items=["Crispy Fries"], total=Decimal("5.99"))])

    buffer = await store.get_order_buffer()

    assert buffer[0].items == ["Crispy Fries"]
    await store.save_order_buffer([])
    assert await store.get_order_buffer() == []


@pytest.mark.asyncio
async def test_transaction_serialises_writers(store: InMemoryEntityStore) -> None:
    await store.save_ledger(Ledger(operating_funds=Decimal("0.00")))

    async def increment() -> None:
        async with store.transaction():
            ledger = await store.get_ledger()
            await asyncio.sleep(0)
            ledger.operating_funds += Decimal("1.00")
            await store.save_ledger(ledger)

    await asyncio.gather(*(increment() for _ in range(20)))

    assert (await store.get_ledger()).operating_funds == Decimal("20.00")


def test_create_store_selects_backend() -> None:
    memory = create_store(Settings(_env_file=None, storage_backend="memory"))
    redis_store = create_store(
        Settings(_env_file=None, storage_backend="redis", redis_key_prefix="test")
    )

    assert isinstance(memory, InMemoryEntityStore)
    assert isinstance(redis_store, RedisEntityStore)
    assert redis_store.state.key("menu") == "test:menu"


@pytest.mark.asyncio
async def test_transaction_rolls_back_on_error(store: InMemoryEntityStore) -> None:
    await store.save_inventory_items(sample_inventory())

    with pytest.raises(RuntimeError):
        async with store.transaction():
            beef = await store.get_inventory_item("inv-1")
            beef.quantity = 1
            await store.save_inventory_items([beef])
            await store.save_ledger(Ledger(operating_funds=Decimal("9.99")))
            await store.append_log(LogEntry(type=LogType.SYSTEM, message="partial"))
            await store.create_order(make_order())
            await store.push_insight("partial", cap=5)
            await store.create_conversation("Kept")
            raise RuntimeError("write failed")

    assert (await store.get_inventory_item("inv-1")).quantity == 50
    assert (await store.get_ledger()).operating_funds == Decimal("0.00")
    assert await store.list_logs() == []
    assert await store.list_recent_orders() == []
    assert await store.get_insights() == []
    assert [c.title for c in await store.list_conversations()] == ["Kept"]

    # The rolled-back order id is reused
    assert (await store.create_order(make_order())).id == 1
