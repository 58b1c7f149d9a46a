"""Main application entry point.

Wires the paper broker, signal generator, decision engine and trading
scheduler together and runs until interrupted:

    python -m autotrader.main
"""

import asyncio
import logging
import signal

from autotrader.config import Settings, get_settings
from autotrader.risk_config import load_risk_config
from autotrader.services import PaperBroker, TradingScheduler
from quantcore.alphas import SignalGenerator
from quantcore.decision_engine import TradeDecisionEngine
from quantcore.models import TradeDecision

logger = logging.getLogger(__name__)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    logging.getLogger("asyncio").setLevel(logging.WARNING)


def build_scheduler(settings: Settings, broker: PaperBroker) -> TradingScheduler:
    """Create a scheduler trading against the given broker."""
    return TradingScheduler(
        engine=TradeDecisionEngine(quote_provider=broker),
        signal_generator=SignalGenerator(),
        history_provider=broker,
        position_provider=broker,
        order_submitter=broker,
        config_loader=lambda: load_risk_config(settings.risk_config_path),
        interval=settings.evaluation_interval_seconds,
        history_size=settings.decision_history_size,
        trade_history_size=settings.trade_history_size,
        lookback=settings.history_lookback,
    )


async def on_decision(decision: TradeDecision) -> None:
    """Log each published decision for audit."""
    signal_ = decision.triggering_signal
    logger.info(
        "Decision %s %s x%d via %s (%.2f %s)",
        decision.instrument,
        decision.action.name,
        decision.quantity,
        signal_.name,
        signal_.score,
        signal_.label,
    )


async def run(settings: Settings) -> None:
    broker = PaperBroker.from_csv_dir(
        settings.paper_data_dir, starting_cash=settings.paper_starting_cash
    )
    scheduler = build_scheduler(settings, broker)
    scheduler.on_decision(on_decision)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # Windows: rely on KeyboardInterrupt
            pass

    await scheduler.start()
    try:
        await stop_event.wait()
    finally:
        await scheduler.stop()
        logger.info(
            "Shutdown: %d decisions, %d trades, cash $%.2f",
            len(scheduler.recent_decisions),
            len(scheduler.recent_trades),
            broker.cash,
        )


def main() -> None:
    settings = get_settings()
    configure_logging(settings.log_level)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
