"""Technical indicators (pure math, no I/O)."""

from quantcore.indicators.indicators import (
    UNDEFINED,
    BollingerBands,
    MacdResult,
    bollinger_bands,
    ema,
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

__all__ = [
    "UNDEFINED",
    "BollingerBands",
    "MacdResult",
    "bollinger_bands",
    "ema",
    "is_undefined",
    "lag",
    "log_returns",
    "macd",
    "momentum",
    "returns",
    "rolling_skew",
    "rolling_std",
    "rsi",
    "sma",
]
