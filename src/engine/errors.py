"""Operation errors surfaced to the API and the assistant."""

from decimal import Decimal
from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories of engine operations."""

    NOT_FOUND = "not_found"
    OUT_OF_STOCK = "out_of_stock"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INVALID_INPUT = "invalid_input"


class OperationError(Exception):
    """
    Base error for a rejected operation.

    The ``reason`` is human-readable and is shown verbatim to end users, both
    in API responses and in assistant replies. A rejected operation never
    leaves partial state behind.
    """

    kind: ErrorKind

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class NotFoundError(OperationError):
    """Unknown inventory item, menu item or order."""

    kind = ErrorKind.NOT_FOUND


class OutOfStockError(OperationError):
    """Not enough ingredients to make a dish."""

    kind = ErrorKind.OUT_OF_STOCK

    def __init__(self, reason: str, missing: list[str]):
        super().__init__(reason)
        self.missing = missing


class InsufficientFundsError(OperationError):
    """Restock cost exceeds operating funds."""

    kind = ErrorKind.INSUFFICIENT_FUNDS

    def __init__(self, required: Decimal, available: Decimal):
        super().__init__(
            f"Insufficient funds. Need ${required:.2f} but only have ${available:.2f}."
        )
        self.required = required
        self.available = available


class InvalidInputError(OperationError):
    """Non-positive amount, rating out of range, empty cart and similar."""

    kind = ErrorKind.INVALID_INPUT
