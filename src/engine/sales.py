"""Point-of-sale: single sales, cart checkout and batch analysis."""

from collections import Counter
from decimal import Decimal

from src.config import Settings
from src.engine.base import EngineComponent, money
from src.engine.errors import (
    InvalidInputError,
    NotFoundError,
    OperationError,
    OutOfStockError,
)
from src.engine.events import EngineEvent, EventBus, Severity
from src.engine.resolver import IngredientResolver
from src.models.ledger import LogType
from src.models.menu import MenuItem, Modifications
from src.models.order import BatchOrder, CartLine, Order, OrderItem, OrderStatus
from src.models.results import CheckoutLineResult, CheckoutResult, SaleResult
from src.state.store import EntityStore


class SalesEngine(EngineComponent):
    """
    Turns dishes into revenue.

    A sale checks every non-removed recipe ingredient before touching
    anything, then deducts stock, credits the ledger, records the order
    and logs it.
    """

    def __init__(
        self,
        store: EntityStore,
        settings: Settings,
        events: EventBus,
        resolver: IngredientResolver,
    ):
        super().__init__(store, settings, events)
        self.resolver = resolver

    async def sell(
        self,
        menu_item_id: str,
        modifications: Modifications | None = None,
        quantity: int = 1,
        customer_name: str | None = None,
        allergies: str | None = None,
        special_instructions: str | None = None,
    ) -> SaleResult:
        """Sell ``quantity`` of one dish as a single-line order."""
        modifications = modifications or Modifications()
        menu_item = await self._get_menu_item(menu_item_id)

        try:
            line = await self._fulfil_line(menu_item, quantity, modifications, special_instructions)
        except OutOfStockError as e:
            self._emit_rejected(menu_item, e)
            raise

        ledger = await self.store.get_ledger()
        ledger.operating_funds += line.subtotal
        ledger.total_revenue += line.subtotal
        await self.store.save_ledger(ledger)

        order = Order(
            customer_name=customer_name or "Walk-in",
            allergies=allergies,
            items=[line],
        )
        order.calculate_total()
        order = await self.store.create_order(order)

        await self._log(
            LogType.SALE,
            self._sale_message(order, line, modifications),
            amount=line.subtotal,
        )
        self.events.emit(
            EngineEvent(
                kind="sale_processed",
                title="Order Processed",
                description=f"Sold {line.quantity}x {menu_item.name} for ${order.total:.2f}.",
            )
        )
        self.logger.info(
            "sale_processed",
            order_id=order.id,
            menu_item_id=menu_item.id,
            quantity=quantity,
            total=str(order.total),
        )

        return SaleResult(
            order_id=order.id,
            item_name=menu_item.name,
            quantity=line.quantity,
            total=order.total,
            operating_funds=ledger.operating_funds,
        )

    async def checkout(
        self,
        lines: list[CartLine],
        customer_name: str | None = None,
        allergies: str | None = None,
    ) -> CheckoutResult:
        """
        Process a cart.

        Each line succeeds or fails on its own; successful lines are grouped
        into one order. Every completed checkout feeds the batch analysis
        buffer.
        """
        if not lines:
            raise InvalidInputError("Cart is empty.")

        customer = customer_name or "Walk-in"
        results: list[CheckoutLineResult] = []
        sold: list[tuple[OrderItem, Modifications]] = []

        for cart_line in lines:
            try:
                menu_item = await self._get_menu_item(cart_line.menu_item_id)
                order_item = await self._fulfil_line(
                    menu_item,
                    cart_line.quantity,
                    cart_line.modifications,
                    cart_line.special_instructions,
                )
            except OperationError as e:
                results.append(
                    CheckoutLineResult(
                        menu_item_id=cart_line.menu_item_id, success=False, reason=e.reason
                    )
                )
                self.events.emit(
                    EngineEvent(
                        kind="sale_rejected",
                        title="Order Failed",
                        description=e.reason,
                        severity=Severity.WARNING,
                    )
                )
                continue

            results.append(
                CheckoutLineResult(
                    menu_item_id=cart_line.menu_item_id,
                    success=True,
                    total=order_item.subtotal,
                )
            )
            sold.append((order_item, cart_line.modifications))

        ledger = await self.store.get_ledger()
        if not sold:
            self.logger.info("checkout_failed", lines=len(lines))
            return CheckoutResult(lines=results, operating_funds=ledger.operating_funds)

        order = Order(
            customer_name=customer,
            allergies=allergies,
            items=[order_item for order_item, _ in sold],
        )
        order.calculate_total()

        ledger.operating_funds += order.total
        ledger.total_revenue += order.total
        await self.store.save_ledger(ledger)
        order = await self.store.create_order(order)

        for order_item, modifications in sold:
            await self._log(
                LogType.SALE,
                self._sale_message(order, order_item, modifications),
                amount=order_item.subtotal,
            )

        batch_insight = await self._record_batch(
            BatchOrder(
                items=[
                    item.menu_item_name for item in order.items for _ in range(item.quantity)
                ],
                total=order.total,
            )
        )

        if ledger.operating_funds < self.settings.funds_critical_threshold:
            await self._push_insight(
                f"CRITICAL: Operating funds low (<${self.settings.funds_critical_threshold:.0f}). "
                "Restock carefully."
            )
            self.events.emit(
                EngineEvent(
                    kind="funds_critical",
                    title="Operating Funds Low",
                    description=f"Operating funds at ${ledger.operating_funds:.2f}.",
                    severity=Severity.CRITICAL,
                )
            )

        self.events.emit(
            EngineEvent(
                kind="checkout_completed",
                title="Order Processed",
                description=f"Processed {len(sold)} of {len(lines)} items. "
                f"Revenue: ${order.total:.2f}.",
            )
        )
        self.logger.info(
            "checkout_completed",
            order_id=order.id,
            success_count=len(sold),
            lines=len(lines),
            total=str(order.total),
        )

        return CheckoutResult(
            order_id=order.id,
            lines=results,
            total=order.total,
            success_count=len(sold),
            operating_funds=ledger.operating_funds,
            batch_insight=batch_insight,
        )

    async def update_order_status(self, order_id: int, status: OrderStatus) -> Order:
        """Move an order through the kitchen workflow."""
        order = await self.store.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order #{order_id} not found.")

        previous = order.status
        order.status = status
        await self.store.save_order(order)

        await self._log(LogType.SYSTEM, f"Order #{order.id} marked {status.value}")
        self.logger.info(
            "order_status_updated",
            order_id=order.id,
            previous=previous.value,
            status=status.value,
        )
        return order

    async def list_recent_orders(self, limit: int = 10) -> list[Order]:
        return await self.store.list_recent_orders(limit=limit)

    async def _fulfil_line(
        self,
        menu_item: MenuItem,
        quantity: int,
        modifications: Modifications,
        special_instructions: str | None = None,
    ) -> OrderItem:
        """Check availability, deduct stock and build the order line."""
        if quantity < 1:
            raise InvalidInputError("Quantity must be at least 1.")

        draws = await self._plan_draws(
            menu_item,
            quantity,
            skip=lambda item: self.resolver.is_removed(item, modifications.remove),
        )
        await self._apply_draws(draws)

        unit_price = money(
            menu_item.price + self.settings.addon_surcharge * len(modifications.add)
        )
        return OrderItem(
            menu_item_id=menu_item.id,
            menu_item_name=menu_item.name,
            price=unit_price,
            quantity=quantity,
            removed_ingredients=", ".join(modifications.remove) or None,
            added_ingredients=", ".join(modifications.add) or None,
            special_instructions=special_instructions,
        )

    async def _record_batch(self, entry: BatchOrder) -> str | None:
        """Buffer a checkout; analyse and reset once the batch is full."""
        buffer = await self.store.get_order_buffer()
        buffer.append(entry)

        if len(buffer) < self.settings.batch_size:
            await self.store.save_order_buffer(buffer)
            return None

        total = sum((order.total for order in buffer), Decimal("0.00"))
        average = money(total / len(buffer))
        counts = Counter(name for order in buffer for name in order.items)
        top_seller, top_count = counts.most_common(1)[0] if counts else ("N/A", 0)

        insight = (
            f"BATCH ANALYSIS (Last {len(buffer)} Orders): "
            f"Avg Order Value: ${average:.2f}. "
            f"Top Seller: {top_seller} ({top_count} sold). "
            f"Restock priority: {top_seller} ingredients."
        )
        await self._push_insight(insight)
        await self.store.save_order_buffer([])

        self.events.emit(
            EngineEvent(kind="batch_analysis", title="Batch Analysis", description=insight)
        )
        self.logger.info("batch_analysed", orders=len(buffer), average=str(average))
        return insight

    def _emit_rejected(self, menu_item: MenuItem, error: OutOfStockError) -> None:
        self.events.emit(
            EngineEvent(
                kind="sale_rejected",
                title="Out of Stock",
                description=f"Cannot make {menu_item.name}. Missing ingredients.",
                severity=Severity.WARNING,
            )
        )
        self.logger.info("sale_rejected", menu_item_id=menu_item.id, missing=error.missing)

    @staticmethod
    def _sale_message(order: Order, line: OrderItem, modifications: Modifications) -> str:
        return (
            f"Order #{order.id}: {line.quantity}x {line.menu_item_name}"
            f"{modifications.summary()} for {order.customer_name}"
        )
