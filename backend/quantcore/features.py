"""Feature vectors for model scoring.

FeatureCalculator turns a close-price history into named indicator
series; the latest row becomes a FeatureVector. Models receive features
as a plain ordered list of floats: the caller resolves feature names
once via ``FeatureVector.resolve`` in the order the model expects.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol, Sequence, runtime_checkable

from quantcore.indicators import (
    bollinger_bands,
    is_undefined,
    lag,
    log_returns,
    macd,
    momentum,
    returns,
    rolling_skew,
    rolling_std,
    rsi,
    sma,
)

# Prediction thresholds for labelling model output
BULLISH_THRESHOLD = 0.5
BEARISH_THRESHOLD = -0.5


@dataclass(frozen=True)
class FeatureVector:
    """Ordered named feature values for a single bar."""

    names: tuple[str, ...]
    values: tuple[float, ...]

    def __post_init__(self) -> None:
        if len(self.names) != len(self.values):
            raise ValueError(
                f"{len(self.names)} feature names for {len(self.values)} values"
            )

    def __len__(self) -> int:
        return len(self.names)

    def as_dict(self) -> dict[str, float]:
        return dict(zip(self.names, self.values))

    def resolve(self, names: Sequence[str]) -> list[float]:
        """Return values in the given name order.

        Raises:
            KeyError: If a requested feature is missing.
        """
        lookup = self.as_dict()
        missing = [name for name in names if name not in lookup]
        if missing:
            raise KeyError(f"Missing features: {', '.join(missing)}")
        return [lookup[name] for name in names]


@runtime_checkable
class ScoringModel(Protocol):
    """Opaque scoring capability (e.g. an exported ML model)."""

    @property
    def name(self) -> str:
        """Model identifier, used to name the resulting alpha signal."""
        ...

    @property
    def feature_names(self) -> list[str]:
        """Feature names in the order ``predict`` expects them."""
        ...

    def predict(self, values: Sequence[float]) -> float:
        """Score one feature row; expected to lie in [-1, 1]."""
        ...


@dataclass(frozen=True)
class MlPrediction:
    """Model prediction for one instrument."""

    value: float
    model_name: str
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def label(self) -> str:
        if self.value > BULLISH_THRESHOLD:
            return "Bullish"
        if self.value < BEARISH_THRESHOLD:
            return "Bearish"
        return "Neutral"

    @property
    def is_bullish(self) -> bool:
        return self.value > 0


def _ratio_to(values: Sequence[float], baseline: Sequence[float]) -> list[float]:
    """values / baseline - 1, NaN where baseline is undefined or zero."""
    result = []
    for value, base in zip(values, baseline):
        if is_undefined(base) or base == 0:
            result.append(math.nan)
        else:
            result.append(value / base - 1)
    return result


def _percent_b(
    prices: Sequence[float], upper: Sequence[float], lower: Sequence[float]
) -> list[float]:
    """Position of price within the Bollinger Bands (0 = lower, 1 = upper)."""
    result = []
    for price, up, low in zip(prices, upper, lower):
        if is_undefined(up) or is_undefined(low):
            result.append(math.nan)
        elif up == low:
            result.append(0.5)
        else:
            result.append((price - low) / (up - low))
    return result


class FeatureCalculator:
    """Calculator for the named feature set fed to scoring models."""

    FEATURE_NAMES: tuple[str, ...] = (
        "return_1",
        "log_return_1",
        "return_lag_1",
        "momentum_5",
        "momentum_10",
        "momentum_20",
        "rsi_14",
        "macd",
        "macd_signal",
        "macd_hist",
        "bb_pct_b",
        "volatility_20",
        "skew_20",
        "sma_ratio_10",
        "sma_ratio_20",
    )

    def __init__(
        self,
        rsi_period: int = 14,
        bb_period: int = 20,
        volatility_period: int = 20,
    ):
        self.rsi_period = rsi_period
        self.bb_period = bb_period
        self.volatility_period = volatility_period

    def calculate_all(self, closes: Sequence[float]) -> dict[str, list[float]]:
        """
        Calculate every feature series for the given close prices.

        Returns:
            Dict of feature name -> series aligned with ``closes``
        """
        rets = returns(closes)
        macd_result = macd(closes)
        bands = bollinger_bands(closes, self.bb_period)

        return {
            "return_1": rets,
            "log_return_1": log_returns(closes),
            "return_lag_1": lag(rets, 1),
            "momentum_5": momentum(closes, 5),
            "momentum_10": momentum(closes, 10),
            "momentum_20": momentum(closes, 20),
            "rsi_14": rsi(closes, self.rsi_period),
            "macd": macd_result.macd,
            "macd_signal": macd_result.signal,
            "macd_hist": macd_result.histogram,
            "bb_pct_b": _percent_b(closes, bands.upper, bands.lower),
            "volatility_20": rolling_std(rets, self.volatility_period),
            "skew_20": rolling_skew(rets, self.volatility_period),
            "sma_ratio_10": _ratio_to(closes, sma(closes, 10)),
            "sma_ratio_20": _ratio_to(closes, sma(closes, 20)),
        }

    def calculate_latest(self, closes: Sequence[float]) -> FeatureVector | None:
        """
        Calculate the feature vector for the latest bar only.

        Returns:
            FeatureVector, or None if any feature is still in its warm-up period
        """
        if not closes:
            return None

        all_features = self.calculate_all(closes)
        values = tuple(all_features[name][-1] for name in self.FEATURE_NAMES)
        if any(is_undefined(v) for v in values):
            return None

        return FeatureVector(names=self.FEATURE_NAMES, values=values)
