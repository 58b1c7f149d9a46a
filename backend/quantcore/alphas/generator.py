"""Signal generator turning price history into named alpha signals.

This module is pure business logic with no I/O dependencies. Price
history is passed in by the caller; optional scoring models are injected
at construction.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Sequence

from quantcore.alphas.registry import get_alpha
from quantcore.features import FeatureCalculator, ScoringModel
from quantcore.models import AlphaSignal, PriceBar, closes

logger = logging.getLogger(__name__)

MIN_HISTORY_BARS = 14
DEFAULT_ALPHAS: tuple[str, ...] = ("momentum_20", "rsi_14", "ma_crossover")

# Display-only spacing between successive signals in one evaluation
_DISPLAY_OFFSET = timedelta(hours=1)


def clamp_score(value: float) -> float:
    """Clamp a raw score into [-1, 1]; NaN maps to 0."""
    if math.isnan(value):
        return 0.0
    return max(-1.0, min(1.0, value))


class SignalGenerator:
    """
    Generate alpha signals for one instrument from its price history.

    Requires at least MIN_HISTORY_BARS bars; shorter history yields an
    empty list, which callers must treat as insufficient data rather than
    as a neutral opinion.

    Each configured alpha is computed independently and omitted if it
    cannot be computed. Scoring models, if given, each add an
    ``ml_<model name>`` signal.

    Signal timestamps are offset one hour apart in output order. The
    offset only conveys relative ordering for display.
    """

    def __init__(
        self,
        alpha_names: Sequence[str] = DEFAULT_ALPHAS,
        models: Sequence[ScoringModel] = (),
        feature_calculator: FeatureCalculator | None = None,
        min_bars: int = MIN_HISTORY_BARS,
    ):
        # Resolve eagerly so an unknown name fails at construction
        self._alphas = [(name, get_alpha(name)) for name in alpha_names]
        self._models = list(models)
        self.feature_calc = feature_calculator or FeatureCalculator()
        self.min_bars = min_bars

    @property
    def alpha_names(self) -> list[str]:
        return [name for name, _ in self._alphas]

    def generate_signals(
        self,
        instrument: str,
        price_history: Sequence[PriceBar],
        now: datetime | None = None,
    ) -> list[AlphaSignal]:
        """
        Compute all alpha signals for an instrument.

        Args:
            instrument: Instrument identifier
            price_history: Bars ordered oldest first
            now: Evaluation time (defaults to current UTC time)

        Returns:
            List of AlphaSignal with scores in [-1, 1]; empty if history is too short
        """
        if len(price_history) < self.min_bars:
            logger.debug(
                "%s: %d bars, need %d for signals",
                instrument,
                len(price_history),
                self.min_bars,
            )
            return []

        now = now or datetime.now(timezone.utc)
        scores: list[tuple[str, float]] = []

        for name, alpha in self._alphas:
            raw = alpha(price_history)
            if raw is None:
                logger.debug("%s: alpha %s not computable", instrument, name)
                continue
            scores.append((name, clamp_score(raw)))

        scores.extend(self._score_models(instrument, price_history))

        return [
            AlphaSignal(
                name=name,
                instrument=instrument,
                score=score,
                timestamp=now - _DISPLAY_OFFSET * i,
            )
            for i, (name, score) in enumerate(scores)
        ]

    def _score_models(
        self,
        instrument: str,
        price_history: Sequence[PriceBar],
    ) -> list[tuple[str, float]]:
        if not self._models:
            return []

        vector = self.feature_calc.calculate_latest(closes(list(price_history)))
        if vector is None:
            logger.debug("%s: not enough history for model features", instrument)
            return []

        results = []
        for model in self._models:
            try:
                prediction = float(model.predict(vector.resolve(model.feature_names)))
            except Exception as e:
                logger.warning("%s: model %s failed: %s", instrument, model.name, e)
                continue
            if not math.isfinite(prediction):
                logger.warning(
                    "%s: model %s returned non-finite score %s",
                    instrument,
                    model.name,
                    prediction,
                )
                continue
            results.append((f"ml_{model.name}", clamp_score(prediction)))
        return results
