"""Market analyzer — turns a price history into a cached MarketAnalysis."""

import logging
import time
from collections.abc import Callable, Sequence

import numpy as np

from sim_trader.domain.errors import DataUnavailable
from sim_trader.domain.models import MarketAnalysis, PriceSample, Sentiment, TechnicalIndicators
from sim_trader.engine import indicators
from sim_trader.engine.cache import TTLCache

logger = logging.getLogger(__name__)

# Sentiment flips when the last five closes moved more than this fraction.
SENTIMENT_THRESHOLD = 0.015

VOLATILITY_FLOOR = 0.1


class MarketAnalyzer:
    """Computes sentiment, volatility, momentum and indicators for one symbol.

    Results are memoized per ``(symbol, current_price)`` for ``cache_ttl``
    seconds; a hit returns the stored object untouched. The sentiment
    perturbation is drawn from ``rng`` and disabled when ``sentiment_noise``
    is zero.
    """

    def __init__(
        self,
        *,
        window: int = 20,
        cache_ttl: float = 30.0,
        sentiment_noise: float = 0.0,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window
        self._sentiment_noise = sentiment_noise
        self._rng = rng or np.random.default_rng()
        self._cache: TTLCache[MarketAnalysis] = TTLCache(cache_ttl, clock=clock)

    def analyze(
        self, symbol: str, history: Sequence[PriceSample], current_price: float
    ) -> MarketAnalysis:
        cache_key = (symbol, current_price)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        if len(history) < self._window:
            raise DataUnavailable(
                symbol, f"need {self._window} price samples, got {len(history)}"
            )

        recent = history[-self._window :]
        closes = np.array([s.close for s in recent], dtype=float)
        bundle = indicators.compute_all(closes)

        analysis = MarketAnalysis(
            sentiment=self._classify_sentiment(closes),
            volatility=max(VOLATILITY_FLOOR, indicators.volatility(closes)),
            momentum=indicators.momentum(closes),
            volume=float(recent[-1].volume),
            indicators=TechnicalIndicators(
                rsi=min(100.0, max(0.0, bundle["rsi"])),
                macd=bundle["macd"],
                sma=bundle["sma"],
                ema=bundle["ema"],
            ),
        )
        logger.debug(
            "Analyzed %s @ %.2f: sentiment=%s rsi=%.1f vol=%.3f momentum=%+.4f",
            symbol,
            current_price,
            analysis.sentiment.value,
            analysis.indicators.rsi,
            analysis.volatility,
            analysis.momentum,
        )

        self._cache.set(cache_key, analysis)
        return analysis

    def clear_cache(self) -> None:
        self._cache.clear()

    def _classify_sentiment(self, closes: np.ndarray) -> Sentiment:
        last_five = closes[-5:]
        first = float(last_five[0])
        change = (float(last_five[-1]) - first) / first if first else 0.0

        if self._sentiment_noise:
            change += (self._rng.random() - 0.5) * self._sentiment_noise

        if change > SENTIMENT_THRESHOLD:
            return Sentiment.POSITIVE
        if change < -SENTIMENT_THRESHOLD:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL
