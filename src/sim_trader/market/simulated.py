"""Seeded random-walk market — an in-process QuoteSource for simulation and demos."""

import logging
from datetime import UTC, date, datetime, timedelta

import numpy as np

from sim_trader.domain.errors import DataUnavailable
from sim_trader.domain.models import PriceSample, Quote

logger = logging.getLogger(__name__)

# symbol -> (price, day change, volume)
SEED_QUOTES: dict[str, tuple[float, float, float]] = {
    "NVDA": (875.23, 45.67, 15_200_000),
    "GOOGL": (2850.45, -15.80, 1_800_000),
    "MSFT": (415.75, 8.20, 22_500_000),
    "AAPL": (189.50, 3.25, 28_500_000),
    "TSLA": (248.50, 12.30, 45_600_000),
    "META": (485.20, -8.95, 18_900_000),
    "AMD": (165.80, 6.45, 35_200_000),
    "AMZN": (155.75, 2.85, 24_800_000),
    "CRM": (265.40, 4.20, 3_200_000),
    "NFLX": (485.60, -2.15, 4_500_000),
}


class SimulatedMarket:
    """Implements the QuoteSource port over a synthetic daily history.

    Each symbol gets ``history_length`` bars generated backwards from its
    seed price, so the last close equals the current quote. ``step()``
    appends one bar per symbol using a Gaussian return with standard
    deviation ``step_volatility``, dropping the oldest bar so each
    history stays at most ``history_length`` long.
    """

    def __init__(
        self,
        seeds: dict[str, tuple[float, float, float]] | None = None,
        *,
        history_length: int = 60,
        step_volatility: float = 0.01,
        rng: np.random.Generator | None = None,
        start: date | None = None,
    ) -> None:
        self._rng = rng or np.random.default_rng()
        self._step_volatility = step_volatility
        self._max_history = max(history_length, 1)
        self._quotes: dict[str, Quote] = {}
        self._history: dict[str, list[PriceSample]] = {}
        self._today = start or datetime.now(UTC).date()

        for symbol, (price, change, volume) in (seeds or SEED_QUOTES).items():
            self._history[symbol] = self._backfill(price, volume, history_length)
            previous_close = price - change
            self._quotes[symbol] = Quote(
                symbol=symbol,
                price=price,
                change=change,
                change_percent=change / previous_close * 100 if previous_close else 0.0,
                volume=volume,
                high=max(price, previous_close),
                low=min(price, previous_close),
                open=previous_close,
                previous_close=previous_close,
            )

    @property
    def symbols(self) -> list[str]:
        return list(self._quotes)

    # ── QuoteSource protocol ───────────────────────────────────

    def get_quote(self, symbol: str) -> Quote:
        try:
            return self._quotes[symbol]
        except KeyError:
            raise DataUnavailable(symbol, "no quote available") from None

    def get_history(self, symbol: str) -> list[PriceSample]:
        try:
            return list(self._history[symbol])
        except KeyError:
            raise DataUnavailable(symbol, "no price history available") from None

    # ── Simulation ─────────────────────────────────────────────

    def step(self) -> None:
        """Advance every symbol by one daily bar."""
        self._today += timedelta(days=1)
        for symbol, quote in self._quotes.items():
            ret = float(self._rng.normal(0.0, self._step_volatility))
            self._append_bar(symbol, quote.price, quote.price * (1 + ret), quote.volume)
        logger.debug("Simulated market advanced to %s", self._today.isoformat())

    def set_price(self, symbol: str, price: float) -> None:
        """Move ``symbol`` to ``price`` as a new bar."""
        quote = self.get_quote(symbol)
        self._today += timedelta(days=1)
        self._append_bar(symbol, quote.price, price, quote.volume)

    def _append_bar(self, symbol: str, open_: float, close: float, base_volume: float) -> None:
        volume = float(round(base_volume * self._rng.uniform(0.8, 1.2)))
        history = self._history[symbol]
        history.append(
            PriceSample(
                date=self._today.isoformat(),
                open=open_,
                high=max(open_, close),
                low=min(open_, close),
                close=close,
                volume=volume,
            )
        )
        del history[: -self._max_history]
        self._quotes[symbol] = Quote(
            symbol=symbol,
            price=close,
            change=close - open_,
            change_percent=(close - open_) / open_ * 100 if open_ else 0.0,
            volume=volume,
            high=max(open_, close),
            low=min(open_, close),
            open=open_,
            previous_close=open_,
        )

    def _backfill(self, price: float, volume: float, length: int) -> list[PriceSample]:
        if length <= 0:
            return []
        returns = self._rng.normal(0.0, self._step_volatility, size=length - 1)
        closes = [price]
        for ret in returns[::-1]:
            closes.append(closes[-1] / (1 + float(ret)))
        closes.reverse()

        samples: list[PriceSample] = []
        for i, close in enumerate(closes):
            open_ = closes[i - 1] if i else close
            samples.append(
                PriceSample(
                    date=(self._today - timedelta(days=len(closes) - 1 - i)).isoformat(),
                    open=open_,
                    high=max(open_, close),
                    low=min(open_, close),
                    close=close,
                    volume=float(round(volume * self._rng.uniform(0.5, 1.5))),
                )
            )
        return samples
