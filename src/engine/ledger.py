"""Inventory ledger: restocks, operating funds and low-stock alerts."""

from datetime import datetime
from decimal import Decimal

from src.engine.base import EngineComponent, clamp_quantity, money
from src.engine.errors import InsufficientFundsError, InvalidInputError
from src.engine.events import EngineEvent, Severity
from src.models.inventory import InventoryItem
from src.models.ledger import Ledger, LogType
from src.models.results import FundsResult, RestockResult


class InventoryLedger(EngineComponent):
    """
    Keeps stock levels and the shared operating balance consistent.

    Every restock is paid for out of operating funds; capital injections
    raise funds without counting as revenue.
    """

    async def get_ledger(self) -> Ledger:
        return await self.store.get_ledger()

    async def restock(self, item_id: str, amount: float) -> RestockResult:
        """
        Buy ``amount`` units of an inventory item.

        Raises:
            InvalidInputError: amount is not positive
            NotFoundError: unknown item
            InsufficientFundsError: cost exceeds operating funds
        """
        if amount <= 0:
            raise InvalidInputError("Restock amount must be greater than zero.")

        item = await self._get_inventory_item(item_id)
        ledger = await self.store.get_ledger()
        cost = money(item.price_per_unit * Decimal(str(amount)))

        if cost > ledger.operating_funds:
            self.events.emit(
                EngineEvent(
                    kind="restock_rejected",
                    title="Insufficient Funds",
                    description=f"Cannot afford ${cost:.2f} for {item.name}.",
                    severity=Severity.WARNING,
                )
            )
            raise InsufficientFundsError(required=cost, available=ledger.operating_funds)

        item.quantity = clamp_quantity(item.quantity + amount)
        item.last_restocked = datetime.utcnow()
        ledger.operating_funds -= cost
        ledger.total_cost += cost

        await self.store.save_inventory_items([item])
        await self.store.save_ledger(ledger)

        await self._log(
            LogType.RESTOCK,
            f"Replenished {amount:g}{item.unit} of {item.name}",
            amount=-cost,
        )
        await self._log(
            LogType.EMAIL,
            f"RESTOCK NOTIFICATION: {item.name} has been replenished by {amount:g} {item.unit}",
        )

        self.events.emit(
            EngineEvent(
                kind="inventory_restocked",
                title="Inventory Restocked",
                description=f"Added {amount:g} {item.unit} of {item.name} for ${cost:.2f}.",
            )
        )
        self.logger.info(
            "inventory_restocked",
            item_id=item.id,
            amount=amount,
            cost=str(cost),
            remaining_funds=str(ledger.operating_funds),
        )

        return RestockResult(
            item_id=item.id,
            item_name=item.name,
            new_quantity=item.quantity,
            cost=cost,
            remaining_funds=ledger.operating_funds,
        )

    async def add_funds(self, amount: Decimal | float) -> FundsResult:
        """Credit operating funds. Not counted as revenue."""
        added = money(amount)
        if added <= 0:
            raise InvalidInputError("Amount must be greater than zero.")

        ledger = await self.store.get_ledger()
        ledger.operating_funds += added
        await self.store.save_ledger(ledger)

        await self._log(LogType.SYSTEM, f"Funds Added: ${added:.2f}")
        self.events.emit(
            EngineEvent(
                kind="funds_added",
                title="Funds Added",
                description=f"${added:.2f} added to operating funds.",
            )
        )
        self.logger.info("funds_added", amount=str(added), new_funds=str(ledger.operating_funds))

        return FundsResult(added=added, new_funds=ledger.operating_funds)

    async def get_low_stock_items(self) -> list[InventoryItem]:
        """Items at or below their threshold, by name."""
        items = await self.store.list_inventory()
        return sorted((item for item in items if item.is_low_stock), key=lambda i: i.name)

    async def emit_low_stock_alerts(self) -> list[str]:
        """
        Email the stock manager about low or depleted items.

        An alert is skipped when one of the last few log entries already
        names the same item and status, so repeated mutations on a low item
        do not flood the log. Returns the alert messages written.
        """
        low_items = await self.get_low_stock_items()
        if not low_items:
            return []

        recent = await self.store.list_logs(limit=self.settings.alert_dedup_window)
        sent: list[str] = []

        for item in low_items:
            status = "DEPLETED" if item.is_depleted else "LOW STOCK"
            already_alerted = any(
                item.name in entry.message and status in entry.message for entry in recent
            )
            if already_alerted:
                continue

            message = f"ALERT: {item.name} is {status} ({item.quantity:.2f} {item.unit} remaining)"
            await self._log(LogType.EMAIL, message)
            self.events.emit(
                EngineEvent(
                    kind="low_stock_alert",
                    title=f"{item.name} is {status.lower()}",
                    description=message,
                    severity=Severity.CRITICAL if item.is_depleted else Severity.WARNING,
                )
            )
            self.logger.warning(
                "low_stock_alert", item_id=item.id, status=status, quantity=item.quantity
            )
            sent.append(message)

        return sent
