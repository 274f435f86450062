"""Matching free-text ingredient names to inventory items."""

from typing import Iterable, Protocol

from src.models.inventory import InventoryItem


class IngredientResolver(Protocol):
    """Decides which inventory items a customer's free-text request refers to."""

    def resolve(
        self, name_fragment: str, items: Iterable[InventoryItem]
    ) -> InventoryItem | None:
        """First item the fragment refers to, if any."""
        ...

    def is_removed(self, item: InventoryItem, fragments: Iterable[str]) -> bool:
        """Check whether any removal request refers to the item."""
        ...


def normalize_fragments(fragments: Iterable[str] | str | None) -> list[str]:
    """
    Lower-case, trimmed, non-empty fragments.

    Accepts a list or a comma separated string such as ``"onions, cheese"``,
    the form removal requests take when typed by a customer.
    """
    if fragments is None:
        return []
    if isinstance(fragments, str):
        fragments = fragments.split(",")
    return [f.strip().lower() for f in fragments if f and f.strip()]


class SubstringIngredientResolver:
    """
    Case-insensitive containment of the fragment in the item name.

    ``"cheese"`` matches both "Cheddar Cheese" and "Parmesan Cheese"; a
    removal request therefore skips every ingredient whose name contains it.
    """

    def matches(self, item: InventoryItem, fragment: str) -> bool:
        """Check one fragment against one item."""
        fragment = fragment.strip().lower()
        return bool(fragment) and fragment in item.name.lower()

    def resolve(
        self, name_fragment: str, items: Iterable[InventoryItem]
    ) -> InventoryItem | None:
        for item in items:
            if self.matches(item, name_fragment):
                return item
        return None

    def is_removed(self, item: InventoryItem, fragments: Iterable[str]) -> bool:
        return any(self.matches(item, fragment) for fragment in normalize_fragments(fragments))
