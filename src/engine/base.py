"""Shared plumbing for engine components."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Callable

from src.config import Settings
from src.engine.errors import NotFoundError, OutOfStockError
from src.engine.events import EngineEvent, EventBus, Severity
from src.models.inventory import InventoryItem
from src.models.ledger import LogEntry, LogType
from src.models.menu import MenuItem
from src.state.store import EntityStore
from src.utils.logging import get_logger

CENTS = Decimal("0.01")

# Stock quantities are floats; rounding after each change keeps
# 0.1 + 0.2 style drift out of availability checks.
QUANTITY_PRECISION = 6


def money(value: Decimal | float | int | str) -> Decimal:
    """Round an amount to cents."""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def clamp_quantity(value: float) -> float:
    """Non-negative stock quantity at storage precision."""
    return max(0.0, round(value, QUANTITY_PRECISION))


class EngineComponent:
    """
    Base class for the rule components of the engine.

    Components assume the caller already holds ``store.transaction()``; they
    never open one themselves, so several of them can be combined inside a
    single atomic operation.
    """

    def __init__(self, store: EntityStore, settings: Settings, events: EventBus):
        self.store = store
        self.settings = settings
        self.events = events
        self.logger = get_logger(self.__class__.__module__)

    async def _get_menu_item(self, menu_item_id: str) -> MenuItem:
        menu_item = await self.store.get_menu_item(menu_item_id)
        if not menu_item:
            raise NotFoundError(f"Menu item {menu_item_id} not found.")
        return menu_item

    async def _get_inventory_item(self, item_id: str) -> InventoryItem:
        item = await self.store.get_inventory_item(item_id)
        if not item:
            raise NotFoundError(f"Inventory item {item_id} not found.")
        return item

    async def _plan_draws(
        self,
        menu_item: MenuItem,
        quantity: int = 1,
        skip: Callable[[InventoryItem], bool] | None = None,
    ) -> list[tuple[InventoryItem, float]]:
        """
        Inventory items and amounts ``quantity`` of a dish would consume.

        Recipe lines naming the same inventory item are summed before the
        stock check. Items for which ``skip`` returns True are left out.

        Raises:
            OutOfStockError: naming every short ingredient; nothing has been
                written at that point
        """
        needed: dict[str, float] = {}
        for ingredient in menu_item.ingredients:
            needed[ingredient.inventory_id] = (
                needed.get(ingredient.inventory_id, 0.0) + ingredient.quantity * quantity
            )

        draws: list[tuple[InventoryItem, float]] = []
        missing: list[str] = []

        for inventory_id, amount in needed.items():
            item = await self.store.get_inventory_item(inventory_id)
            if item is None:
                missing.append(inventory_id)
                continue
            if skip and skip(item):
                continue
            if item.quantity < amount:
                missing.append(item.name)
            else:
                draws.append((item, amount))

        if missing:
            raise OutOfStockError(
                f"Insufficient stock for {menu_item.name}. Missing: {', '.join(missing)}",
                missing=missing,
            )
        return draws

    async def _apply_draws(self, draws: list[tuple[InventoryItem, float]]) -> None:
        updated = []
        for item, amount in draws:
            item.quantity = clamp_quantity(item.quantity - amount)
            updated.append(item)
        if updated:
            await self.store.save_inventory_items(updated)

    async def _log(
        self,
        log_type: LogType,
        message: str,
        amount: Decimal = Decimal("0.00"),
    ) -> LogEntry | None:
        """
        Append an activity log entry.

        Logs are an observational record rather than part of the mutation:
        a failed append is reported as a warning and the operation stands.
        """
        entry = LogEntry(type=log_type, message=message, amount=money(amount))
        try:
            await self.store.append_log(entry)
        except Exception as e:
            self.logger.warning("log_append_failed", log_type=log_type.value, error=str(e))
            self.events.emit(
                EngineEvent(
                    kind="log_append_failed",
                    title="Activity log unavailable",
                    description=f"Could not record: {message}",
                    severity=Severity.WARNING,
                )
            )
            return None

        if log_type == LogType.EMAIL:
            self.events.emit(
                EngineEvent(
                    kind="email_notification",
                    title="Email Notification Sent",
                    description=f"Stock Manager notified: {message}",
                )
            )
        return entry

    async def _push_insight(self, insight: str) -> None:
        await self.store.push_insight(insight, cap=self.settings.max_insights)
