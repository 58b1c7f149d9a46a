"""Data models."""

from quantcore.models.bar import PriceBar, closes, to_utc
from quantcore.models.config import DEFAULT_UNIVERSE, RiskConfig
from quantcore.models.decision import TradeAction, TradeDecision
from quantcore.models.position import OrderConfirmation, OrderSide, Position, Trade
from quantcore.models.signal import AlphaSignal, SignalClass

__all__ = [
    "AlphaSignal",
    "DEFAULT_UNIVERSE",
    "OrderConfirmation",
    "OrderSide",
    "Position",
    "PriceBar",
    "RiskConfig",
    "SignalClass",
    "Trade",
    "TradeAction",
    "TradeDecision",
    "closes",
    "to_utc",
]
