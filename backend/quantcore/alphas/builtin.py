"""Built-in alpha signals computed from close prices.

- momentum_20: total return over the available window
- rsi_14: RSI(14) of the last bar, mapped from [0, 100] onto [-1, 1]
- ma_crossover: distance of the last close from its 10-bar SMA
"""

from typing import Sequence

from quantcore.alphas.registry import register_alpha
from quantcore.indicators import is_undefined, rsi, sma
from quantcore.models import PriceBar, closes

RSI_PERIOD = 14
MA_PERIOD = 10


@register_alpha("momentum_20")
def momentum_20(bars: Sequence[PriceBar]) -> float | None:
    if not bars:
        return None
    first_close = bars[0].close
    last_close = bars[-1].close
    if first_close == 0:
        return 0.0
    return (last_close - first_close) / first_close


@register_alpha("rsi_14")
def rsi_14(bars: Sequence[PriceBar]) -> float | None:
    """RSI(14) of the last close mapped onto [-1, 1].

    The first RSI value needs RSI_PERIOD + 1 closes (RSI_PERIOD price
    changes), so exactly 14 bars yields None and the signal is omitted
    rather than reported as a neutral 0.
    """
    values = rsi(closes(list(bars)), RSI_PERIOD)
    if not values or is_undefined(values[-1]):
        return None
    return (values[-1] - 50) / 50


@register_alpha("ma_crossover")
def ma_crossover(bars: Sequence[PriceBar]) -> float | None:
    if len(bars) < MA_PERIOD:
        return None
    ma = sma(closes(list(bars)), MA_PERIOD)[-1]
    if is_undefined(ma):
        return None
    if ma == 0:
        return 0.0
    return (bars[-1].close - ma) / ma
