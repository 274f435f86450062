"""Operating funds and activity log models."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, Field


class LogType(str, Enum):
    """Activity log categories."""

    SALE = "sale"
    RESTOCK = "restock"
    WASTE = "waste"
    SYSTEM = "system"
    EMAIL = "email"


class LogEntry(BaseModel):
    """Append-only activity record. Positive amounts are revenue."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    type: LogType
    message: str
    amount: Decimal = Decimal("0.00")


class Ledger(BaseModel):
    """Shared operating balance plus running revenue and cost totals."""

    operating_funds: Decimal = Decimal("0.00")
    total_revenue: Decimal = Decimal("0.00")
    total_cost: Decimal = Decimal("0.00")

    @property
    def net_profit(self) -> Decimal:
        """Revenue minus restock spend."""
        return self.total_revenue - self.total_cost
