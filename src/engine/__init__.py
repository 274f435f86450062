"""Inventory, funds and order consistency engine."""

from src.engine.errors import (
    ErrorKind,
    InsufficientFundsError,
    InvalidInputError,
    NotFoundError,
    OperationError,
    OutOfStockError,
)
from src.engine.events import EngineEvent, EventBus, Severity
from src.engine.resolver import IngredientResolver, SubstringIngredientResolver
from src.engine.service import RestaurantEngine

__all__ = [
    "RestaurantEngine",
    # Errors
    "ErrorKind",
    "OperationError",
    "NotFoundError",
    "OutOfStockError",
    "InsufficientFundsError",
    "InvalidInputError",
    # Events
    "EngineEvent",
    "EventBus",
    "Severity",
    # Ingredient matching
    "IngredientResolver",
    "SubstringIngredientResolver",
]
