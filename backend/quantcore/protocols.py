"""Protocols for the external collaborators the core depends on.

This module provides:
- PriceHistoryProvider: ordered OHLCV history per instrument
- QuoteProvider: latest quote per instrument
- PositionProvider: current holding per instrument
- OrderSubmitter: opaque order submission capability
- DecisionObserver: callback type for published trade decisions

All provider calls are coroutines; implementations own their timeouts.
"""

from __future__ import annotations

from typing import Awaitable, Callable, Protocol, runtime_checkable

from quantcore.models import (
    OrderConfirmation,
    OrderSide,
    Position,
    PriceBar,
    TradeDecision,
)

DecisionObserver = Callable[[TradeDecision], Awaitable[None]]


@runtime_checkable
class PriceHistoryProvider(Protocol):
    """Source of price history."""

    async def get_history(self, instrument: str, lookback: int) -> list[PriceBar]:
        """Return up to ``lookback`` bars, oldest first.

        May return fewer bars than requested, never out of order.
        """
        ...


@runtime_checkable
class QuoteProvider(Protocol):
    """Source of the latest quote."""

    async def get_latest_quote(self, instrument: str) -> PriceBar | None:
        """Return the latest bar for the instrument, or None if unavailable."""
        ...


@runtime_checkable
class PositionProvider(Protocol):
    """Read access to current holdings."""

    async def get_position(self, instrument: str) -> Position | None:
        """Return the current position, or None when nothing is held."""
        ...


@runtime_checkable
class OrderSubmitter(Protocol):
    """Opaque order submission capability."""

    async def submit(
        self,
        instrument: str,
        side: OrderSide,
        quantity: int,
    ) -> OrderConfirmation | None:
        """Submit a market order.

        Returns:
            Confirmation with the fill price, or None if the order failed.
        """
        ...
