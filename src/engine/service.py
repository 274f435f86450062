"""RestaurantEngine: the single entry point for API routes and the assistant."""

from decimal import Decimal
from typing import Awaitable, Callable, TypeVar

from src.config import Settings, get_settings
from src.engine.analytics import Analytics
from src.engine.base import money
from src.engine.errors import NotFoundError, OperationError
from src.engine.events import EngineEvent, EventBus
from src.engine.ledger import InventoryLedger
from src.engine.ratings import RatingEngine
from src.engine.resolver import IngredientResolver, SubstringIngredientResolver
from src.engine.sales import SalesEngine
from src.engine.seed import sample_inventory, sample_menu
from src.engine.waste import WasteHandler
from src.models.inventory import InventoryItem
from src.models.ledger import Ledger, LogEntry, LogType
from src.models.menu import MenuItem, Modifications
from src.models.order import CartLine, Order, OrderStatus
from src.models.results import (
    ChefPerformance,
    CheckoutResult,
    FinancialStatus,
    ForecastEntry,
    FundsResult,
    InventoryStatus,
    MenuItemDetails,
    MenuOverview,
    RestockResult,
    SaleResult,
    StrategicSummary,
    WasteResult,
)
from src.state.store import EntityStore
from src.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class RestaurantEngine:
    """
    Inventory, funds and order consistency engine.

    Every mutating operation runs inside one store transaction, re-checks
    low-stock alerts before releasing it, then hands its own events to
    observers. A rejected operation raises an ``OperationError`` and leaves
    the store as it was; any other failure rolls the transaction back and
    its events are dropped.
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Settings | None = None,
        events: EventBus | None = None,
        resolver: IngredientResolver | None = None,
    ):
        self.store = store
        self.settings = settings or get_settings()
        self.events = events or EventBus()
        self.resolver = resolver or SubstringIngredientResolver()

        self.ledger = InventoryLedger(store, self.settings, self.events)
        self.sales = SalesEngine(store, self.settings, self.events, self.resolver)
        self.waste = WasteHandler(store, self.settings, self.events)
        self.ratings = RatingEngine(store, self.settings, self.events)
        self.analytics = Analytics(store, self.settings, self.events)

    async def _mutate(self, operation: Callable[[], Awaitable[T]]) -> T:
        pending: list[EngineEvent] = []
        try:
            with self.events.collect(pending):
                async with self.store.transaction():
                    result = await operation()
                    await self.ledger.emit_low_stock_alerts()
        except OperationError:
            await self.events.publish(pending)
            raise
        except Exception as e:
            # Store rolled back; none of the queued events hold.
            logger.error(
                "operation_rolled_back",
                error=str(e),
                discarded_events=[event.kind for event in pending],
            )
            raise
        await self.events.publish(pending)
        return result

    # Setup

    async def seed(self) -> bool:
        """Load the sample restaurant into an empty store. Returns False if already seeded."""

        async def _seed() -> bool:
            if not await self.store.is_empty():
                return False
            await self.store.save_inventory_items(sample_inventory())
            await self.store.save_menu_items(sample_menu())
            await self.store.save_ledger(
                Ledger(operating_funds=money(self.settings.initial_operating_funds))
            )
            await self.store.append_log(
                LogEntry(type=LogType.SYSTEM, message="Restaurant data initialised")
            )
            self.events.emit(
                EngineEvent(
                    kind="store_seeded",
                    title="Database Initialized",
                    description="Sample inventory and menu loaded.",
                )
            )
            return True

        seeded = await self._mutate(_seed)
        logger.info("store_seed_checked", seeded=seeded)
        return seeded

    # Inventory and funds

    async def list_inventory(self) -> list[InventoryItem]:
        return await self.store.list_inventory()

    async def get_low_stock(self) -> list[InventoryItem]:
        return await self.ledger.get_low_stock_items()

    async def restock(self, item_id: str, amount: float) -> RestockResult:
        return await self._mutate(lambda: self.ledger.restock(item_id, amount))

    async def add_funds(self, amount: Decimal | float) -> FundsResult:
        return await self._mutate(lambda: self.ledger.add_funds(amount))

    async def get_ledger(self) -> Ledger:
        return await self.ledger.get_ledger()

    # Menu

    async def list_menu(self) -> list[MenuItem]:
        return await self.store.list_menu()

    async def get_menu_item(self, menu_item_id: str) -> MenuItem:
        menu_item = await self.store.get_menu_item(menu_item_id)
        if not menu_item:
            raise NotFoundError(f"Menu item {menu_item_id} not found.")
        return menu_item

    async def rate(self, menu_item_id: str, rating: float) -> MenuItem:
        return await self._mutate(lambda: self.ratings.rate(menu_item_id, rating))

    # Sales and kitchen

    async def sell(
        self,
        menu_item_id: str,
        modifications: Modifications | None = None,
        quantity: int = 1,
        customer_name: str | None = None,
        allergies: str | None = None,
        special_instructions: str | None = None,
    ) -> SaleResult:
        return await self._mutate(
            lambda: self.sales.sell(
                menu_item_id,
                modifications=modifications,
                quantity=quantity,
                customer_name=customer_name,
                allergies=allergies,
                special_instructions=special_instructions,
            )
        )

    async def checkout(
        self,
        lines: list[CartLine],
        customer_name: str | None = None,
        allergies: str | None = None,
    ) -> CheckoutResult:
        return await self._mutate(
            lambda: self.sales.checkout(lines, customer_name=customer_name, allergies=allergies)
        )

    async def record_waste(self, menu_item_id: str, reason: str) -> WasteResult:
        return await self._mutate(lambda: self.waste.record_waste(menu_item_id, reason))

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Order:
        return await self._mutate(lambda: self.sales.update_order_status(order_id, status))

    async def list_recent_orders(self, limit: int = 10) -> list[Order]:
        return await self.sales.list_recent_orders(limit=limit)

    # Reads

    async def list_logs(self, limit: int = 500) -> list[LogEntry]:
        return await self.store.list_logs(limit=limit)

    async def get_forecast(self) -> list[ForecastEntry]:
        return await self.analytics.get_demand_forecast()

    async def get_chef_performance(self) -> list[ChefPerformance]:
        return await self.analytics.get_chef_performance()

    async def get_insights(self) -> list[str]:
        return await self.analytics.get_insights()

    async def get_financial_status(self) -> FinancialStatus:
        return await self.analytics.get_financial_status()

    async def get_inventory_status(self) -> InventoryStatus:
        return await self.analytics.get_inventory_status()

    async def get_menu_overview(self) -> MenuOverview:
        return await self.analytics.get_menu_overview()

    async def get_menu_item_details(self, name_fragment: str) -> MenuItemDetails:
        return await self.analytics.get_menu_item_details(name_fragment)

    async def get_strategic_summary(self) -> StrategicSummary:
        return await self.analytics.get_strategic_summary()

    async def close(self) -> None:
        await self.store.close()
