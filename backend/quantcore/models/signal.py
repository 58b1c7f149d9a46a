"""Alpha signal data models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from quantcore.models.bar import to_utc

# Score thresholds separating BUY / HOLD / SELL
BUY_SCORE = 0.5
SELL_SCORE = -0.5


class SignalClass(str, Enum):
    """Direction implied by a signal score."""

    BUY = "buy"
    SELL = "sell"
    HOLD = "hold"


class AlphaSignal(BaseModel):
    """A bounded opinion about future price direction for one instrument."""

    model_config = ConfigDict(frozen=True)

    name: str  # e.g. "momentum_20", "rsi_14"
    instrument: str
    score: float = Field(ge=-1.0, le=1.0)
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return to_utc(value)

    @property
    def signal_class(self) -> SignalClass:
        if self.score > BUY_SCORE:
            return SignalClass.BUY
        if self.score < SELL_SCORE:
            return SignalClass.SELL
        return SignalClass.HOLD

    @property
    def label(self) -> str:
        """Human-readable signal label ("BUY", "SELL" or "HOLD")."""
        return self.signal_class.name

    @property
    def strength(self) -> float:
        return abs(self.score)
