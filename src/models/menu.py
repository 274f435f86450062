"""Menu and recipe models."""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class MenuCategory(str, Enum):
    """Menu sections."""

    MAIN = "main"
    APPETIZER = "appetizer"
    DESSERT = "dessert"
    DRINK = "drink"


class RecipeIngredient(BaseModel):
    """Amount of one inventory item consumed per unit sold."""

    inventory_id: str
    quantity: float = Field(gt=0)


class MenuItem(BaseModel):
    """Sellable dish with its recipe and running rating."""

    id: str
    name: str
    description: str = ""
    price: Decimal = Field(ge=0)
    prep_time: str = ""
    category: MenuCategory
    rating: float = Field(default=0.0, ge=0, le=5)
    rating_count: int = Field(default=0, ge=0)
    chef: str | None = None
    ingredients: list[RecipeIngredient] = Field(default_factory=list)


class Modifications(BaseModel):
    """Customer changes to a dish: ingredient names removed or added."""

    remove: list[str] = Field(default_factory=list)
    add: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check whether the dish is unmodified."""
        return not self.remove and not self.add

    def summary(self) -> str:
        """Short text used in sale log messages."""
        if self.is_empty:
            return ""
        return f" (Mods: -{','.join(self.remove)} +{','.join(self.add)})"
