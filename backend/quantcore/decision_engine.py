"""Trade decision engine.

Turns the alpha signals for one instrument into a single bounded trade
decision under the position limits of a RiskConfig. The only external
call is the quote lookup needed to size a BUY; a failed lookup degrades
to HOLD instead of raising.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Sequence

from quantcore.models import (
    AlphaSignal,
    Position,
    PriceBar,
    RiskConfig,
    TradeAction,
    TradeDecision,
)
from quantcore.protocols import QuoteProvider

logger = logging.getLogger(__name__)

# Rationale strings
NO_SIGNALS = "No signals available"
NO_QUOTE = "Cannot get quote"
POSITION_LIMIT = "Position limit reached"
NO_POSITION = "No position to sell"


def strongest_signal(signals: Sequence[AlphaSignal]) -> AlphaSignal:
    """Return the signal with the largest absolute score.

    Ties go to the signal that comes first in ``signals``.
    """
    best = signals[0]
    for signal in signals[1:]:
        if abs(signal.score) > abs(best.score):
            best = signal
    return best


class TradeDecisionEngine:
    """
    Produce BUY / SELL / HOLD decisions from alpha signals.

    Rules, applied to the strongest signal:
    - score > buy_threshold: buy up to the smaller of the value cap
      (max_position_value / quote close) and the remaining share limit
      (max_position_size - shares held)
    - score < sell_threshold: sell the entire position
    - otherwise: hold
    """

    def __init__(self, quote_provider: QuoteProvider):
        self.quote_provider = quote_provider

    async def evaluate(
        self,
        instrument: str,
        signals: Sequence[AlphaSignal],
        position: Position | None,
        risk_config: RiskConfig,
    ) -> TradeDecision:
        """
        Evaluate one instrument.

        Args:
            instrument: Instrument identifier
            signals: Alpha signals for this cycle (input order is the tie-break)
            position: Current holding, or None if nothing is held
            risk_config: Risk configuration snapshot for this cycle

        Returns:
            TradeDecision for this instrument
        """
        if not signals:
            return self._hold(instrument, _placeholder_signal(instrument), NO_SIGNALS)

        signal = strongest_signal(signals)
        shares_held = position.shares_held if position else 0

        if signal.score > risk_config.buy_threshold:
            quote = await self._latest_quote(instrument)
            if quote is None:
                return self._hold(instrument, signal, NO_QUOTE)

            max_by_value = math.floor(risk_config.max_position_value / quote.close)
            max_by_limit = risk_config.max_position_size - shares_held
            shares_to_buy = max(0, min(max_by_value, max_by_limit))

            if shares_to_buy <= 0:
                return self._hold(instrument, signal, POSITION_LIMIT)

            return TradeDecision(
                instrument=instrument,
                action=TradeAction.BUY,
                quantity=shares_to_buy,
                triggering_signal=signal,
                rationale=f"Strong buy signal ({signal.name}: {signal.score:.2f})",
            )

        if signal.score < risk_config.sell_threshold:
            if shares_held <= 0:
                return self._hold(instrument, signal, NO_POSITION)

            # Full exit; partial exits are not supported
            return TradeDecision(
                instrument=instrument,
                action=TradeAction.SELL,
                quantity=shares_held,
                triggering_signal=signal,
                rationale=f"Strong sell signal ({signal.name}: {signal.score:.2f})",
            )

        return self._hold(
            instrument,
            signal,
            f"Signal not strong enough ({signal.name}: {signal.score:.2f})",
        )

    async def _latest_quote(self, instrument: str) -> PriceBar | None:
        """Fetch a quote usable for sizing, or None."""
        try:
            quote = await self.quote_provider.get_latest_quote(instrument)
        except Exception as e:
            logger.warning("%s: quote lookup failed: %s", instrument, e)
            return None

        if quote is None:
            logger.warning("%s: no quote available", instrument)
            return None
        if quote.close <= 0:
            logger.warning("%s: unusable quote close %s", instrument, quote.close)
            return None
        return quote

    @staticmethod
    def _hold(instrument: str, signal: AlphaSignal, rationale: str) -> TradeDecision:
        return TradeDecision(
            instrument=instrument,
            action=TradeAction.HOLD,
            quantity=0,
            triggering_signal=signal,
            rationale=rationale,
        )


def _placeholder_signal(instrument: str) -> AlphaSignal:
    return AlphaSignal(
        name="none",
        instrument=instrument,
        score=0.0,
        timestamp=datetime.now(timezone.utc),
    )
