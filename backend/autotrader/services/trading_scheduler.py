"""Trading scheduler: periodic signal evaluation and order submission.

Runs one evaluation pass over the configured instrument universe on start
and then on a fixed interval. Each pass, per instrument:
1. Fetches price history and generates alpha signals
2. Asks the decision engine for a trade decision
3. Records the decision in a bounded history and notifies observers
4. Submits an order for BUY/SELL decisions and records confirmed trades

A failure for one instrument is logged and does not stop the pass.
"""

import asyncio
import logging
from collections import deque
from enum import Enum
from typing import Callable

from autotrader.risk_config import load_risk_config
from quantcore.alphas import SignalGenerator
from quantcore.decision_engine import TradeDecisionEngine
from quantcore.models import RiskConfig, Trade, TradeDecision
from quantcore.protocols import (
    DecisionObserver,
    OrderSubmitter,
    PositionProvider,
    PriceHistoryProvider,
)

logger = logging.getLogger(__name__)

ConfigLoader = Callable[[], RiskConfig]

DEFAULT_INTERVAL_SECONDS = 300.0
DEFAULT_DECISION_HISTORY = 20
DEFAULT_TRADE_HISTORY = 100
DEFAULT_LOOKBACK = 20


class SchedulerState(str, Enum):
    """Scheduler lifecycle state."""

    STOPPED = "stopped"
    RUNNING = "running"


class TradingScheduler:
    """
    Run trade decisions on a fixed cadence.

    State machine:
    - STOPPED -> RUNNING via start(). Loads the risk config; when disabled
      the scheduler is RUNNING but idle (no passes scheduled).
    - RUNNING -> STOPPED via stop(). No new pass starts afterwards; a pass
      already in flight is allowed to finish.
    - reload_config() starts evaluation when the config becomes enabled
      and stops the scheduler when it becomes disabled.

    Decision and trade histories are bounded FIFO buffers; readers get
    snapshot copies.
    """

    def __init__(
        self,
        engine: TradeDecisionEngine,
        signal_generator: SignalGenerator,
        history_provider: PriceHistoryProvider,
        position_provider: PositionProvider,
        order_submitter: OrderSubmitter,
        config_loader: ConfigLoader | None = None,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        history_size: int = DEFAULT_DECISION_HISTORY,
        trade_history_size: int = DEFAULT_TRADE_HISTORY,
        lookback: int = DEFAULT_LOOKBACK,
    ):
        """
        Args:
            engine: Decision engine (owns the quote provider)
            signal_generator: Alpha signal generator
            history_provider: Source of price history
            position_provider: Source of current holdings
            order_submitter: Order submission capability
            config_loader: Returns the current RiskConfig (risk.yaml if None)
            interval: Seconds between evaluation passes
            history_size: Number of recent decisions kept
            trade_history_size: Number of recent trades kept
            lookback: Bars of history requested per instrument
        """
        self.engine = engine
        self.signal_generator = signal_generator
        self.history_provider = history_provider
        self.position_provider = position_provider
        self.order_submitter = order_submitter
        self._config_loader = config_loader or load_risk_config
        self.interval = interval
        self.lookback = lookback

        self._state = SchedulerState.STOPPED
        self._config = RiskConfig.disabled_default()
        self._task: asyncio.Task | None = None
        self._stop_event: asyncio.Event | None = None

        self._decisions: deque[TradeDecision] = deque(maxlen=history_size)
        self._trades: deque[Trade] = deque(maxlen=trade_history_size)
        self._observers: list[DecisionObserver] = []

        # Serializes history appends
        self._lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state == SchedulerState.RUNNING

    @property
    def is_evaluating(self) -> bool:
        """True when a recurring evaluation timer is armed."""
        return self._task is not None

    @property
    def config(self) -> RiskConfig:
        return self._config

    @property
    def recent_decisions(self) -> list[TradeDecision]:
        """Snapshot of recent decisions, oldest first."""
        return list(self._decisions)

    @property
    def recent_trades(self) -> list[Trade]:
        """Snapshot of recent confirmed trades, oldest first."""
        return list(self._trades)

    def on_decision(self, callback: DecisionObserver) -> None:
        """Register callback for new decisions.

        Note: Duplicate callbacks are ignored.
        """
        if callback not in self._observers:
            self._observers.append(callback)

    def off_decision(self, callback: DecisionObserver) -> None:
        """Unregister callback for new decisions."""
        if callback in self._observers:
            self._observers.remove(callback)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the scheduler. Calling start() while running is a no-op."""
        if self._state == SchedulerState.RUNNING:
            logger.debug("Trading scheduler already running")
            return

        self._state = SchedulerState.RUNNING
        self._config = self._load_config()

        if not self._config.enabled:
            logger.info("Trading scheduler: auto-trading disabled, idle")
            return

        logger.info(
            "Trading scheduler starting: buy>%.2f sell<%.2f every %.0fs, instruments=%s",
            self._config.buy_threshold,
            self._config.sell_threshold,
            self.interval,
            ", ".join(self._config.instrument_universe),
        )
        await self._activate()

    async def stop(self) -> None:
        """Stop the scheduler. Idempotent."""
        task, self._task = self._task, None
        if self._stop_event is not None:
            self._stop_event.set()

        was_running = self._state == SchedulerState.RUNNING
        self._state = SchedulerState.STOPPED

        # Let an in-flight pass finish
        if task is not None and task is not asyncio.current_task():
            await task

        if was_running:
            logger.info("Trading scheduler stopped")

    async def reload_config(self) -> None:
        """Re-read the risk config and start or stop evaluation to match."""
        self._config = self._load_config()

        if self._config.enabled and self._task is None:
            logger.info("Risk config enabled, starting evaluation")
            self._state = SchedulerState.RUNNING
            await self._activate()
        elif not self._config.enabled and self._task is not None:
            logger.info("Risk config disabled, stopping evaluation")
            await self.stop()

    def _load_config(self) -> RiskConfig:
        try:
            return self._config_loader()
        except Exception as e:
            logger.warning("Failed to load risk config, auto-trading disabled: %s", e)
            return RiskConfig.disabled_default()

    async def _activate(self) -> None:
        """Run one pass immediately, then arm the recurring timer."""
        stop_event = asyncio.Event()
        self._stop_event = stop_event

        await self.run_once()

        # stop() may have been called during the first pass
        if stop_event.is_set() or self._state != SchedulerState.RUNNING:
            return
        self._task = asyncio.create_task(self._run_loop(stop_event))

    async def _run_loop(self, stop_event: asyncio.Event) -> None:
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass

            try:
                await self.run_once()
            except Exception:
                logger.exception("Evaluation pass failed")

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def run_once(self) -> list[TradeDecision]:
        """Run one evaluation pass over the instrument universe.

        Returns:
            Decisions made in this pass (instruments that failed are omitted)
        """
        config = self._config
        if not config.enabled:
            return []

        logger.info(
            "Evaluating %d instruments", len(config.instrument_universe)
        )

        decisions = []
        for instrument in config.instrument_universe:
            try:
                decision = await self.evaluate_instrument(instrument, config)
                await self._record(decision)
                decisions.append(decision)

                if decision.is_actionable:
                    await self._execute(decision)
            except Exception:
                logger.exception("%s: evaluation failed", instrument)

        return decisions

    async def evaluate_instrument(
        self,
        instrument: str,
        config: RiskConfig | None = None,
    ) -> TradeDecision:
        """Evaluate a single instrument and return a trade decision."""
        if config is None:
            config = self._config

        history = await self.history_provider.get_history(instrument, self.lookback)
        signals = self.signal_generator.generate_signals(instrument, history)
        position = await self.position_provider.get_position(instrument)

        decision = await self.engine.evaluate(instrument, signals, position, config)
        logger.info(
            "%s: %s %d (%s)",
            instrument,
            decision.action.name,
            decision.quantity,
            decision.rationale,
        )
        return decision

    async def _record(self, decision: TradeDecision) -> None:
        async with self._lock:
            self._decisions.append(decision)

        for callback in list(self._observers):
            try:
                await callback(decision)
            except Exception:
                logger.exception("Decision observer failed for %s", decision.instrument)

    async def _execute(self, decision: TradeDecision) -> Trade | None:
        """Submit an order for a BUY/SELL decision.

        Returns:
            The trade record, or None if the submission was not confirmed
        """
        side = decision.action.order_side
        if side is None or decision.quantity <= 0:
            return None

        logger.info(
            "Executing %s %d %s: %s",
            side.value,
            decision.quantity,
            decision.instrument,
            decision.rationale,
        )
        confirmation = await self.order_submitter.submit(
            decision.instrument, side, decision.quantity
        )
        if confirmation is None:
            logger.warning(
                "%s: order submission failed, no trade recorded", decision.instrument
            )
            return None

        trade = Trade(
            id=confirmation.order_id,
            instrument=decision.instrument,
            side=side,
            quantity=decision.quantity,
            price=confirmation.filled_price or 0.0,
            signal_name=decision.triggering_signal.name,
        )
        async with self._lock:
            self._trades.append(trade)

        logger.info(
            "Trade executed: %s %d %s @ %.2f",
            trade.side.value,
            trade.quantity,
            trade.instrument,
            trade.price,
        )
        return trade
