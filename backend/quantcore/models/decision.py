"""Trade decision models."""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from quantcore.models.position import OrderSide
from quantcore.models.signal import AlphaSignal


class TradeAction(str, Enum):
    """Action to take for an instrument in one decision cycle."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"

    @property
    def order_side(self) -> OrderSide | None:
        """Order side for actionable decisions, None for HOLD."""
        if self is TradeAction.BUY:
            return OrderSide.BUY
        if self is TradeAction.SELL:
            return OrderSide.SELL
        return None


class TradeDecision(BaseModel):
    """A bounded trade decision for one instrument in one cycle.

    HOLD always carries quantity 0 and BUY/SELL always a positive quantity.
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    action: TradeAction
    quantity: int = Field(default=0, ge=0)
    triggering_signal: AlphaSignal
    rationale: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def _validate_quantity(self):
        if self.action == TradeAction.HOLD and self.quantity != 0:
            raise ValueError("HOLD decisions must have quantity 0")
        if self.action != TradeAction.HOLD and self.quantity == 0:
            raise ValueError(f"{self.action.name} decisions need a positive quantity")
        return self

    @property
    def is_actionable(self) -> bool:
        return self.action != TradeAction.HOLD
