"""Risk configuration model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_UNIVERSE: list[str] = ["AAPL", "MSFT", "GOOGL"]


class RiskConfig(BaseModel):
    """Auto-trading risk configuration.

    An immutable snapshot used for one evaluation cycle; reloaded between
    cycles by the scheduler.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = False

    # BUY when the strongest score > buy_threshold, in (0, 1]
    buy_threshold: float = Field(default=0.7, gt=0.0, le=1.0)
    # SELL when the strongest score < sell_threshold, in [-1, 0)
    sell_threshold: float = Field(default=-0.7, ge=-1.0, lt=0.0)

    # Position limits
    max_position_size: int = Field(default=100, gt=0)  # shares
    max_position_value: float = Field(default=10000.0, gt=0.0, allow_inf_nan=False)

    instrument_universe: list[str] = Field(default_factory=lambda: list(DEFAULT_UNIVERSE))

    @field_validator("instrument_universe")
    @classmethod
    def _dedupe_universe(cls, value: list[str]) -> list[str]:
        # Ordered set: keep first occurrence, drop blanks
        seen: dict[str, None] = {}
        for instrument in value:
            instrument = instrument.strip()
            if instrument:
                seen.setdefault(instrument, None)
        return list(seen)

    @classmethod
    def disabled_default(cls) -> RiskConfig:
        """Safe fallback used when a configuration cannot be loaded."""
        return cls(enabled=False)

    def with_changes(self, **changes: Any) -> RiskConfig:
        """Return a validated copy with the given fields replaced."""
        return RiskConfig.model_validate({**self.model_dump(), **changes})
