"""Technical indicators for feature engineering and signal generation.

Every function takes a sequence of floats and returns a list of the same
length. Positions inside an indicator's warm-up period hold ``NaN`` rather
than zero. The functions are total: short, empty or degenerate input yields
``NaN``/zero according to the conventions documented on each function and
never raises.
"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence

import numpy as np

UNDEFINED = float("nan")

# Relative std below which a window counts as flat
_FLAT_STD_TOLERANCE = 1e-12


class MacdResult(NamedTuple):
    """MACD line, signal line and histogram, index-aligned with the input."""

    macd: list[float]
    signal: list[float]
    histogram: list[float]


class BollingerBands(NamedTuple):
    """Upper, middle and lower bands, index-aligned with the input."""

    upper: list[float]
    middle: list[float]
    lower: list[float]


def is_undefined(value) -> bool:
    """Check if an indicator value is undefined (None or NaN)."""
    if value is None:
        return True
    return isinstance(value, float) and math.isnan(value)


def _to_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray([float(v) for v in values], dtype=np.float64)


def _undefined(n: int) -> list[float]:
    return [UNDEFINED] * n


def sma(prices: Sequence[float], period: int) -> list[float]:
    """
    Calculate Simple Moving Average.

    Args:
        prices: Sequence of price values
        period: SMA window length

    Returns:
        List of SMA values (NaN for indices < period - 1)
    """
    n = len(prices)
    if period <= 0 or n < period:
        return _undefined(n)

    arr = _to_array(prices)
    result = np.full(n, np.nan)
    for i in range(period - 1, n):
        result[i] = np.mean(arr[i - period + 1 : i + 1])

    return result.tolist()


def ema(prices: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    The seed value is the SMA of the first ``period`` defined values;
    thereafter ``ema[i] = (price[i] - ema[i-1]) * 2/(period+1) + ema[i-1]``.
    Leading NaN inputs (e.g. the warm-up region of another indicator) are
    skipped, so the window only starts filling once the input is defined.

    Args:
        prices: Sequence of price values, possibly with leading NaN
        period: EMA period

    Returns:
        List of EMA values (same length as input, with NaN for initial values)
    """
    n = len(prices)
    if period <= 0 or n == 0:
        return _undefined(n)

    arr = _to_array(prices)
    defined = np.flatnonzero(~np.isnan(arr))
    if defined.size == 0:
        return _undefined(n)

    start = int(defined[0])
    seed_index = start + period - 1
    if seed_index >= n:
        return _undefined(n)

    multiplier = 2.0 / (period + 1)
    result = np.full(n, np.nan)
    result[seed_index] = np.mean(arr[start : seed_index + 1])

    for i in range(seed_index + 1, n):
        prev = result[i - 1]
        result[i] = (arr[i] - prev) * multiplier + prev

    return result.tolist()


def rsi(prices: Sequence[float], period: int = 14) -> list[float]:
    """
    Calculate Relative Strength Index with Wilder smoothing.

    The first value, at index ``period``, uses the simple average of the
    first ``period`` gains and losses. Later values smooth the running
    averages: ``avg = (avg * (period - 1) + current) / period``. The
    averages are carried forward directly rather than recovered from the
    previous RSI value.

    Returns 100 whenever the average loss is zero.

    Args:
        prices: Sequence of price values
        period: RSI period

    Returns:
        List of RSI values in [0, 100] (NaN for indices < period)
    """
    n = len(prices)
    if period <= 0 or n <= period:
        return _undefined(n)

    arr = _to_array(prices)
    changes = np.diff(arr)
    gains = np.where(changes > 0, changes, 0.0)
    losses = np.where(changes < 0, -changes, 0.0)

    result = np.full(n, np.nan)
    avg_gain = float(np.sum(gains[:period])) / period
    avg_loss = float(np.sum(losses[:period])) / period
    result[period] = _rsi_value(avg_gain, avg_loss)

    # changes[i - 1] is the move from prices[i - 1] to prices[i]
    for i in range(period + 1, n):
        avg_gain = (avg_gain * (period - 1) + gains[i - 1]) / period
        avg_loss = (avg_loss * (period - 1) + losses[i - 1]) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result.tolist()


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def macd(
    prices: Sequence[float],
    fast_period: int = 12,
    slow_period: int = 26,
    signal_period: int = 9,
) -> MacdResult:
    """
    Calculate MACD (Moving Average Convergence Divergence).

    macd = EMA(fast) - EMA(slow); signal = EMA(macd, signal_period), seeded
    from the first ``signal_period`` defined MACD values;
    histogram = macd - signal.

    Args:
        prices: Sequence of price values
        fast_period: Fast EMA period
        slow_period: Slow EMA period
        signal_period: Signal line EMA period

    Returns:
        MacdResult of (macd, signal, histogram) lists
    """
    fast = np.asarray(ema(prices, fast_period), dtype=np.float64)
    slow = np.asarray(ema(prices, slow_period), dtype=np.float64)

    # NaN in either operand propagates
    macd_line = fast - slow
    signal_line = np.asarray(ema(macd_line.tolist(), signal_period), dtype=np.float64)
    histogram = macd_line - signal_line

    return MacdResult(macd_line.tolist(), signal_line.tolist(), histogram.tolist())


def bollinger_bands(
    prices: Sequence[float],
    period: int = 20,
    std_dev: float = 2.0,
) -> BollingerBands:
    """
    Calculate Bollinger Bands.

    middle = SMA(period); half width = std_dev * population standard
    deviation of the trailing window (divides by ``period``).

    Args:
        prices: Sequence of price values
        period: Window length
        std_dev: Standard deviation multiplier

    Returns:
        BollingerBands of (upper, middle, lower) lists
    """
    n = len(prices)
    middle = sma(prices, period)
    if period <= 0 or n < period:
        return BollingerBands(_undefined(n), middle, _undefined(n))

    arr = _to_array(prices)
    upper = np.full(n, np.nan)
    lower = np.full(n, np.nan)

    for i in range(period - 1, n):
        window = arr[i - period + 1 : i + 1]
        std = math.sqrt(float(np.sum((window - middle[i]) ** 2)) / period)
        upper[i] = middle[i] + std_dev * std
        lower[i] = middle[i] - std_dev * std

    return BollingerBands(upper.tolist(), middle, lower.tolist())


def rolling_std(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate population standard deviation over a rolling window.

    Variance is computed as E[x^2] - E[x]^2 and clamped at zero before the
    square root, since rounding can push it slightly negative.
    """
    n = len(values)
    if period <= 0 or n < period:
        return _undefined(n)

    arr = _to_array(values)
    result = np.full(n, np.nan)
    for i in range(period - 1, n):
        window = arr[i - period + 1 : i + 1]
        mean = float(np.sum(window)) / period
        variance = float(np.sum(window * window)) / period - mean * mean
        result[i] = math.sqrt(max(variance, 0.0)) if not math.isnan(variance) else np.nan

    return result.tolist()


def returns(prices: Sequence[float]) -> list[float]:
    """
    Calculate simple percentage returns ``(p[i] - p[i-1]) / p[i-1]``.

    The first element is NaN. A zero previous price yields 0.
    """
    n = len(prices)
    if n == 0:
        return []

    result = [UNDEFINED]
    for i in range(1, n):
        prev = float(prices[i - 1])
        if prev == 0:
            result.append(0.0)
        else:
            result.append((float(prices[i]) - prev) / prev)
    return result


def log_returns(prices: Sequence[float]) -> list[float]:
    """
    Calculate log returns ``ln(p[i] / p[i-1])``.

    The first element is NaN. Returns 0 when either price is <= 0.
    """
    n = len(prices)
    if n == 0:
        return []

    result = [UNDEFINED]
    for i in range(1, n):
        prev = float(prices[i - 1])
        curr = float(prices[i])
        if prev <= 0 or curr <= 0:
            result.append(0.0)
        else:
            result.append(math.log(curr / prev))
    return result


def lag(values: Sequence[float], periods: int) -> list[float]:
    """Shift a series right by ``periods``; the first ``periods`` entries are NaN."""
    n = len(values)
    if periods == 0:
        return [float(v) for v in values]
    if periods < 0:
        return _undefined(n)

    return [UNDEFINED if i < periods else float(values[i - periods]) for i in range(n)]


def momentum(prices: Sequence[float], period: int) -> list[float]:
    """
    Calculate price momentum ``p[i] / p[i-period] - 1``.

    NaN for indices < period; 0 when the lagged price is 0.
    """
    n = len(prices)
    if period <= 0:
        return _undefined(n)

    result = []
    for i in range(n):
        if i < period:
            result.append(UNDEFINED)
            continue
        base = float(prices[i - period])
        if base == 0:
            result.append(0.0)
        else:
            result.append(float(prices[i]) / base - 1)
    return result


def rolling_skew(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate rolling skewness (third standardized moment).

    Uses the population standard deviation of each window. A constant
    window yields exactly 0, including windows whose mean is not exactly
    representable and leave rounding-sized deviations behind.
    """
    n = len(values)
    if period <= 0 or n < period:
        return _undefined(n)

    arr = _to_array(values)
    result = np.full(n, np.nan)
    for i in range(period - 1, n):
        window = arr[i - period + 1 : i + 1]
        mean = float(np.sum(window)) / period
        deviations = window - mean
        std = math.sqrt(float(np.sum(deviations * deviations)) / period)
        if np.ptp(window) == 0 or std <= _FLAT_STD_TOLERANCE * max(1.0, abs(mean)):
            result[i] = 0.0
        else:
            result[i] = float(np.sum((deviations / std) ** 3)) / period

    return result.tolist()
