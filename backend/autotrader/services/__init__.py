"""Business services."""

from autotrader.services.paper_broker import PaperBroker, iter_csv_bars
from autotrader.services.trading_scheduler import SchedulerState, TradingScheduler

__all__ = [
    "PaperBroker",
    "iter_csv_bars",
    "SchedulerState",
    "TradingScheduler",
]
