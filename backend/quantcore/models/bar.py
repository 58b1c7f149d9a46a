"""Price bar (OHLCV) data model."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class PriceBar(BaseModel):
    """One OHLCV sample for one instrument.

    The usual high >= max(open, close) >= min(open, close) >= low ordering
    is not enforced; upstream data may violate it.
    """

    model_config = ConfigDict(frozen=True)

    instrument: str
    timestamp: datetime
    open: float = Field(ge=0, allow_inf_nan=False)
    high: float = Field(ge=0, allow_inf_nan=False)
    low: float = Field(ge=0, allow_inf_nan=False)
    close: float = Field(ge=0, allow_inf_nan=False)
    volume: int = Field(default=0, ge=0)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return to_utc(value)

    @property
    def change(self) -> float:
        """Price change from open to close."""
        return self.close - self.open

    @property
    def change_percent(self) -> float:
        """Price change as a percentage of the open."""
        if self.open <= 0:
            return 0.0
        return self.change / self.open * 100

    @property
    def is_bullish(self) -> bool:
        """Check if the bar closed at or above its open."""
        return self.close >= self.open


def closes(bars: list[PriceBar]) -> list[float]:
    """Get list of close prices."""
    return [bar.close for bar in bars]
