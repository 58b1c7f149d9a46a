"""Position, order and trade models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class OrderSide(str, Enum):
    """Order side enum."""

    BUY = "buy"
    SELL = "sell"


class Position(BaseModel):
    """A long-only holding in one instrument.

    Owned by the external position collaborator; the core only reads it.
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    shares_held: int = Field(default=0, ge=0)
    average_cost: float = 0.0
    current_price: float = 0.0

    @property
    def total_value(self) -> float:
        return self.shares_held * self.current_price

    @property
    def total_cost(self) -> float:
        return self.shares_held * self.average_cost

    @property
    def pnl(self) -> float:
        """Unrealized profit/loss in currency units."""
        return self.total_value - self.total_cost

    @property
    def pnl_percent(self) -> float:
        if self.total_cost <= 0:
            return 0.0
        return self.pnl / self.total_cost * 100

    @property
    def is_profitable(self) -> bool:
        return self.pnl >= 0


class OrderConfirmation(BaseModel):
    """Acknowledgement returned by an order submitter for a filled order."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    filled_price: float | None = None


class Trade(BaseModel):
    """A confirmed trade created from an executed decision."""

    model_config = ConfigDict(frozen=True)

    id: str
    instrument: str
    side: OrderSide
    quantity: int = Field(gt=0)
    price: float
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    signal_name: str  # Signal that triggered the trade (e.g. "momentum_20")

    @property
    def total_value(self) -> float:
        return self.quantity * self.price
