"""Kitchen failures: remake from stock or record the lost sale."""

from src.engine.base import EngineComponent
from src.engine.errors import InvalidInputError, OutOfStockError
from src.engine.events import EngineEvent, Severity
from src.models.ledger import LogType
from src.models.results import WasteResult


class WasteHandler(EngineComponent):
    """
    Records a failed dish.

    When the full recipe is in stock the ingredients are drawn again for a
    remake; otherwise nothing is deducted and the dish price is reported as
    lost revenue. Operating funds are never touched.
    """

    async def record_waste(self, menu_item_id: str, reason: str) -> WasteResult:
        reason = (reason or "").strip()
        if not reason:
            raise InvalidInputError("A reason is required to record waste.")

        menu_item = await self._get_menu_item(menu_item_id)

        # Removals never apply to a remake; the whole recipe is checked.
        try:
            draws = await self._plan_draws(menu_item)
        except OutOfStockError as e:
            missing = e.missing
        else:
            await self._apply_draws(draws)

            await self._log(
                LogType.WASTE,
                f"Chef reported failure on {menu_item.name}: {reason}. "
                "Ingredients re-allocated for remake.",
            )
            await self._push_insight(
                f"LOSS ALERT: Waste recorded for {menu_item.name}. Reason: {reason}. "
                "Ingredients re-allocated. Cost Impact: Negligible (Stock available)."
            )
            self.events.emit(
                EngineEvent(
                    kind="waste_remade",
                    title="Waste Recorded",
                    description=f"{menu_item.name} remade. Ingredients re-allocated.",
                )
            )
            self.logger.info("waste_remade", menu_item_id=menu_item.id, reason=reason)
            return WasteResult(menu_item_id=menu_item.id, outcome="remade")

        missing_names = ", ".join(missing)
        await self._log(
            LogType.WASTE,
            f"Chef reported failure on {menu_item.name}, but insufficient stock to remake! "
            f"Missing: {missing_names}",
        )
        await self._push_insight(
            f"LOSS ALERT: Waste recorded for {menu_item.name}. Reason: {reason}. "
            f"Missing: {missing_names} Revenue Opportunity Lost: ${menu_item.price:.2f}"
        )
        self.events.emit(
            EngineEvent(
                kind="waste_blocked",
                title="Remake Blocked",
                description=f"Cannot remake {menu_item.name}. Missing: {missing_names}",
                severity=Severity.CRITICAL,
            )
        )
        self.logger.warning(
            "waste_blocked", menu_item_id=menu_item.id, reason=reason, missing=missing
        )
        return WasteResult(
            menu_item_id=menu_item.id,
            outcome="blocked",
            missing_ingredients=missing,
            lost_revenue=menu_item.price,
        )
