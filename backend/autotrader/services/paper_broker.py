"""Paper broker: in-memory market data, positions and simulated fills.

Implements PriceHistoryProvider, QuoteProvider, PositionProvider and
OrderSubmitter without touching a real broker. Market orders fill at the
latest close. Orders that cannot be filled return None, the same as a
failed submission to a real broker.
"""

from __future__ import annotations

import asyncio
import csv
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Iterator

from quantcore.models import OrderConfirmation, OrderSide, Position, PriceBar

logger = logging.getLogger(__name__)


def _parse_timestamp(value: str) -> datetime:
    """Parse epoch milliseconds or an ISO-8601 timestamp."""
    value = value.strip()
    if value.isdigit():
        return datetime.fromtimestamp(int(value) / 1000, tz=timezone.utc)
    return datetime.fromisoformat(value)


def iter_csv_bars(path: Path, instrument: str) -> Iterator[PriceBar]:
    """Stream parse a CSV file with timestamp,open,high,low,close,volume columns."""
    skipped = 0
    with open(path, newline="") as f:
        for row in csv.DictReader(f):
            try:
                yield PriceBar(
                    instrument=instrument,
                    timestamp=_parse_timestamp(row["timestamp"]),
                    open=float(row["open"]),
                    high=float(row["high"]),
                    low=float(row["low"]),
                    close=float(row["close"]),
                    volume=int(float(row.get("volume") or 0)),
                )
            except (KeyError, TypeError, ValueError):
                skipped += 1
    if skipped:
        logger.warning("%s: skipped %d malformed rows in %s", instrument, skipped, path)


class PaperBroker:
    """
    Simulated broker for paper trading.

    Holds bars per instrument (oldest first), a cash balance and long-only
    positions with average cost.
    """

    def __init__(self, starting_cash: float = 100000.0):
        self.cash = starting_cash
        self._bars: dict[str, list[PriceBar]] = {}
        self._positions: dict[str, Position] = {}
        self._lock = asyncio.Lock()

    @classmethod
    def from_csv_dir(cls, data_dir: Path, starting_cash: float = 100000.0) -> PaperBroker:
        """Load ``<INSTRUMENT>.csv`` files from a directory."""
        broker = cls(starting_cash=starting_cash)
        if not data_dir.is_dir():
            logger.warning("Paper data directory %s not found, no market data", data_dir)
            return broker

        for path in sorted(data_dir.glob("*.csv")):
            instrument = path.stem.upper()
            broker.add_bars(instrument, iter_csv_bars(path, instrument))
            logger.info(
                "Loaded %d bars for %s", len(broker._bars.get(instrument, [])), instrument
            )
        return broker

    # ------------------------------------------------------------------
    # Market data
    # ------------------------------------------------------------------

    def add_bars(self, instrument: str, bars: Iterable[PriceBar]) -> None:
        """Append bars, keeping history sorted and free of duplicate timestamps."""
        merged = {bar.timestamp: bar for bar in self._bars.get(instrument, [])}
        for bar in bars:
            merged[bar.timestamp] = bar
        self._bars[instrument] = [merged[ts] for ts in sorted(merged)]

    async def get_history(self, instrument: str, lookback: int) -> list[PriceBar]:
        if lookback <= 0:
            return []
        return list(self._bars.get(instrument, [])[-lookback:])

    async def get_latest_quote(self, instrument: str) -> PriceBar | None:
        bars = self._bars.get(instrument)
        return bars[-1] if bars else None

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def set_position(self, instrument: str, shares: int, average_cost: float) -> None:
        """Seed a holding (e.g. for a demo or a test)."""
        self._positions[instrument] = Position(
            instrument=instrument,
            shares_held=shares,
            average_cost=average_cost,
            current_price=average_cost,
        )

    async def get_position(self, instrument: str) -> Position | None:
        position = self._positions.get(instrument)
        if position is None or position.shares_held == 0:
            return None

        quote = await self.get_latest_quote(instrument)
        if quote is None:
            return position
        return position.model_copy(update={"current_price": quote.close})

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    async def submit(
        self,
        instrument: str,
        side: OrderSide,
        quantity: int,
    ) -> OrderConfirmation | None:
        """Fill a market order at the latest close, or return None."""
        if quantity <= 0:
            logger.warning("Paper order rejected: non-positive quantity %d", quantity)
            return None

        quote = await self.get_latest_quote(instrument)
        if quote is None or quote.close <= 0:
            logger.warning("Paper order rejected: no price for %s", instrument)
            return None

        price = quote.close
        async with self._lock:
            held = self._positions.get(instrument)
            shares = held.shares_held if held else 0
            cost = held.average_cost if held else 0.0

            if side == OrderSide.BUY:
                notional = price * quantity
                if notional > self.cash:
                    logger.warning(
                        "Paper order rejected: %s buy %d needs $%.2f, cash $%.2f",
                        instrument,
                        quantity,
                        notional,
                        self.cash,
                    )
                    return None
                new_shares = shares + quantity
                new_cost = (cost * shares + notional) / new_shares
                self.cash -= notional
            else:
                if quantity > shares:
                    logger.warning(
                        "Paper order rejected: %s sell %d, only %d held",
                        instrument,
                        quantity,
                        shares,
                    )
                    return None
                new_shares = shares - quantity
                new_cost = cost if new_shares else 0.0
                self.cash += price * quantity

            self._positions[instrument] = Position(
                instrument=instrument,
                shares_held=new_shares,
                average_cost=new_cost,
                current_price=price,
            )

        order_id = uuid.uuid4().hex
        logger.info(
            "Paper fill %s: %s %d %s @ %.2f", order_id, side.value, quantity, instrument, price
        )
        return OrderConfirmation(order_id=order_id, filled_price=price)
