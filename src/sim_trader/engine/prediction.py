"""Prediction generator — weighted rule accumulation over a MarketAnalysis.

Each rule nudges the expected fractional price change (``delta``), adds to a
base confidence of 50, and records a human-readable signal. The rules run in
a fixed order and only the first four signals are kept, in that order.
"""

import logging
import time
from collections.abc import Callable

import numpy as np

from sim_trader.domain.models import MarketAnalysis, Sentiment, StockPrediction, Trend
from sim_trader.engine.cache import TTLCache

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 50.0
MIN_CONFIDENCE = 45.0
MAX_CONFIDENCE = 95.0
MAX_SIGNALS = 4
TREND_THRESHOLD = 0.01
PREDICTION_TIMEFRAME = "24-48 hours"


class _Accumulator:
    def __init__(self) -> None:
        self.delta = 0.0
        self.confidence = BASE_CONFIDENCE
        self.signals: list[str] = []

    def add(self, signal: str, *, delta: float = 0.0, confidence: float = 0.0) -> None:
        self.delta += delta
        self.confidence += confidence
        self.signals.append(signal)


def _apply_rules(analysis: MarketAnalysis) -> _Accumulator:
    acc = _Accumulator()
    rsi = analysis.indicators.rsi
    macd = analysis.indicators.macd

    # RSI
    if rsi > 75:
        acc.add("Strongly Overbought (RSI > 75)", delta=-0.04, confidence=20)
    elif rsi > 70:
        acc.add("Overbought Signal", delta=-0.02, confidence=15)
    elif rsi < 25:
        acc.add("Severely Oversold (RSI < 25)", delta=0.05, confidence=25)
    elif rsi < 30:
        acc.add("Oversold Opportunity", delta=0.03, confidence=20)

    # MACD
    if macd > 2:
        acc.add("Strong Bullish Momentum", delta=0.025, confidence=15)
    elif macd > 0:
        acc.add("Bullish MACD Signal", delta=0.015, confidence=10)
    elif macd < -2:
        acc.add("Strong Bearish Momentum", delta=-0.025, confidence=15)
    else:
        acc.add("Bearish MACD Signal", delta=-0.01, confidence=8)

    # Sentiment
    if analysis.sentiment == Sentiment.POSITIVE:
        acc.add("Positive Market Sentiment", delta=0.03, confidence=18)
    elif analysis.sentiment == Sentiment.NEGATIVE:
        acc.add("Negative Market Pressure", delta=-0.025, confidence=15)

    # Momentum
    if analysis.momentum > 0.02:
        acc.add("Strong Upward Momentum", delta=0.02, confidence=12)
    elif analysis.momentum > 0.005:
        acc.add("Positive Momentum", delta=0.01, confidence=8)
    elif analysis.momentum < -0.02:
        acc.add("Strong Downward Pressure", delta=-0.015, confidence=10)

    # Volume only moves confidence
    if analysis.volume > 2_000_000:
        acc.add("High Volume Confirmation", confidence=8)
    elif analysis.volume > 1_000_000:
        acc.add("Good Volume Support", confidence=5)

    # Volatility
    if analysis.volatility > 0.4:
        acc.add("High Volatility Warning", confidence=-5)
    elif analysis.volatility < 0.15:
        acc.add("Low Volatility Environment", confidence=3)

    return acc


def classify_trend(delta: float) -> Trend:
    if delta > TREND_THRESHOLD:
        return Trend.BULLISH
    if delta < -TREND_THRESHOLD:
        return Trend.BEARISH
    return Trend.NEUTRAL


def build_rationale(analysis: MarketAnalysis) -> str:
    """Templated explanation assembled from the analysis alone."""
    rsi = analysis.indicators.rsi
    macd = analysis.indicators.macd
    parts: list[str] = []

    if rsi > 75:
        parts.append("Critical overbought levels suggest imminent correction.")
    elif rsi > 70:
        parts.append("Overbought conditions indicate potential selling pressure.")
    elif rsi < 25:
        parts.append("Extreme oversold levels present strong rebound opportunity.")
    elif rsi < 30:
        parts.append("Oversold conditions suggest potential upward reversal.")
    else:
        parts.append("RSI levels indicate balanced market conditions.")

    if abs(macd) > 2:
        direction = "bullish" if macd > 0 else "bearish"
        parts.append(f"Strong MACD signal ({direction}) confirms trend direction.")
    elif macd > 0:
        parts.append("Positive MACD supports upward price action.")
    else:
        parts.append("Negative MACD indicates bearish momentum.")

    volatility_tier = "elevated" if analysis.volatility > 0.3 else "moderate"
    parts.append(
        f"Overall market sentiment is {analysis.sentiment.value} "
        f"with {volatility_tier} volatility."
    )

    if analysis.volume > 1_500_000:
        parts.append("High trading volume provides strong signal confirmation.")
    else:
        parts.append("Moderate volume suggests cautious market participation.")

    return " ".join(parts)


class PredictionGenerator:
    """Produces StockPredictions, memoized per ``(symbol, price, tick)``.

    ``tick`` defaults to the current clock bucket of ``tick_seconds`` so that
    repeated calls within one timer tick share a prediction.
    """

    def __init__(
        self,
        *,
        tick_seconds: float = 1.0,
        prediction_noise: float = 0.0,
        rng: np.random.Generator | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._tick_seconds = tick_seconds
        self._prediction_noise = prediction_noise
        self._rng = rng or np.random.default_rng()
        self._clock = clock
        # Entries live for one tick width.
        self._cache: TTLCache[StockPrediction] = TTLCache(tick_seconds, clock=clock)

    def generate(
        self,
        symbol: str,
        analysis: MarketAnalysis,
        current_price: float,
        *,
        tick: int | None = None,
    ) -> StockPrediction:
        if tick is None:
            tick = int(self._clock() // self._tick_seconds)
        cache_key = (symbol, current_price, tick)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        acc = _apply_rules(analysis)
        delta = acc.delta
        if self._prediction_noise:
            delta += (self._rng.random() - 0.5) * self._prediction_noise

        prediction = StockPrediction(
            symbol=symbol,
            current_price=current_price,
            predicted_price=current_price * (1 + delta),
            confidence=min(max(acc.confidence, MIN_CONFIDENCE), MAX_CONFIDENCE),
            timeframe=PREDICTION_TIMEFRAME,
            trend=classify_trend(delta),
            signals=acc.signals[:MAX_SIGNALS],
            rationale=build_rationale(analysis),
        )
        logger.debug(
            "Prediction %s: %.2f -> %.2f (%s, confidence %.0f)",
            symbol,
            current_price,
            prediction.predicted_price,
            prediction.trend.value,
            prediction.confidence,
        )

        self._cache.set(cache_key, prediction)
        return prediction

    def clear_cache(self) -> None:
        self._cache.clear()
