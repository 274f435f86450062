"""Customer ratings and the demand-driven safety stock ratchet."""

import math

from src.engine.base import EngineComponent
from src.engine.errors import InvalidInputError
from src.engine.events import EngineEvent
from src.models.ledger import LogType
from src.models.menu import MenuItem


class RatingEngine(EngineComponent):
    """
    Folds ratings into each dish's running average.

    A high rating permanently raises the reorder threshold of every
    ingredient in the dish by ``threshold_boost_factor``, rounded up. There
    is no decay: repeated praise compounds.
    """

    async def rate(self, menu_item_id: str, rating: float) -> MenuItem:
        if not 1 <= rating <= 5:
            raise InvalidInputError("Rating must be between 1 and 5.")

        menu_item = await self._get_menu_item(menu_item_id)

        count = menu_item.rating_count
        menu_item.rating = (menu_item.rating * count + rating) / (count + 1)
        menu_item.rating_count = count + 1
        await self.store.save_menu_items([menu_item])

        if rating >= self.settings.high_rating_cutoff:
            adjusted = []
            for inventory_id in dict.fromkeys(ing.inventory_id for ing in menu_item.ingredients):
                item = await self.store.get_inventory_item(inventory_id)
                if item is None:
                    continue
                item.threshold = float(
                    math.ceil(item.threshold * self.settings.threshold_boost_factor)
                )
                adjusted.append(item)
            if adjusted:
                await self.store.save_inventory_items(adjusted)

            await self._log(
                LogType.SYSTEM,
                f"High rating ({rating:g}/5) for {menu_item.name}. "
                "Adjusting ingredient safety thresholds for increased demand.",
            )
            self.logger.info(
                "thresholds_adjusted",
                menu_item_id=menu_item.id,
                items=[item.id for item in adjusted],
            )

        await self._log(
            LogType.SYSTEM,
            f"New rating for {menu_item.name} (Chef: {menu_item.chef}): {rating:g}/5",
        )
        self.events.emit(
            EngineEvent(
                kind="rating_submitted",
                title="Rating Submitted",
                description=f"{menu_item.name} rated {rating:g}/5.",
            )
        )
        self.logger.info(
            "rating_submitted",
            menu_item_id=menu_item.id,
            rating=rating,
            average=menu_item.rating,
            count=menu_item.rating_count,
        )
        return menu_item
