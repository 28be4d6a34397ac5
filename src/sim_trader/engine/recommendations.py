"""Recommendation engine — scans a symbol universe and ranks trade ideas."""

import logging
import time
from collections.abc import Callable

from sim_trader.domain.errors import DataUnavailable
from sim_trader.domain.models import (
    BotAnalysis,
    MarketAnalysis,
    MarketSentiment,
    Quote,
    RiskLevel,
    StockPrediction,
    TradeAction,
    TradingRecommendation,
)
from sim_trader.domain.ports import QuoteSource
from sim_trader.engine.analyzer import MarketAnalyzer
from sim_trader.engine.cache import TTLCache
from sim_trader.engine.prediction import PredictionGenerator

logger = logging.getLogger(__name__)

DEFAULT_UNIVERSE = ["NVDA", "GOOGL", "MSFT", "AAPL", "TSLA", "META", "AMD", "AMZN"]

# Fixed exits as fractions of the current price: (target, stop).
_EXIT_LEVELS: dict[TradeAction, tuple[float, float]] = {
    TradeAction.BUY: (1.10, 0.95),
    TradeAction.SELL: (0.95, 1.05),
    TradeAction.HOLD: (1.0, 1.0),
}


# ── Rules ────────────────────────────────────────────────────────


def profit_potential(prediction: StockPrediction, current_price: float) -> float:
    """Signed expected move in percent."""
    return (prediction.predicted_price - current_price) / current_price * 100


def assess_risk(volatility: float, potential: float) -> RiskLevel:
    if volatility > 0.4 or abs(potential) > 15:
        return RiskLevel.HIGH
    if volatility > 0.25 or abs(potential) > 8:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def decide_action(potential: float, confidence: float) -> TradeAction:
    if potential > 5 and confidence > 70:
        return TradeAction.BUY
    if potential < -3 and confidence > 70:
        return TradeAction.SELL
    return TradeAction.HOLD


def classify_market(buy_count: int, universe_size: int) -> MarketSentiment:
    bullish_ratio = buy_count / universe_size if universe_size else 0.0
    if bullish_ratio > 0.6:
        return MarketSentiment.BULLISH
    if bullish_ratio < 0.3:
        return MarketSentiment.BEARISH
    return MarketSentiment.NEUTRAL


def build_recommendation(
    symbol: str,
    prediction: StockPrediction,
    analysis: MarketAnalysis,
    current_price: float,
) -> TradingRecommendation:
    potential = profit_potential(prediction, current_price)
    action = decide_action(potential, prediction.confidence)
    target_mult, stop_mult = _EXIT_LEVELS[action]

    rationale = (
        f"AI analysis suggests {action.value} based on {prediction.confidence:.0f}% confidence. "
        f"Expected profit potential: {potential:.1f}%. "
        f"Technical indicators show {prediction.trend.value} trend "
        f"with {analysis.sentiment.value} market sentiment."
    )

    return TradingRecommendation(
        symbol=symbol,
        action=action,
        confidence=prediction.confidence,
        rationale=rationale,
        current_price=current_price,
        target_price=current_price * target_mult,
        stop_loss=current_price * stop_mult,
        potential_profit=abs(potential),
        risk_level=assess_risk(analysis.volatility, potential),
        timeframe=prediction.timeframe,
    )


def summarize(
    sentiment: MarketSentiment,
    volatility_index: float,
    recommendations: list[TradingRecommendation],
) -> str:
    buy_count = sum(1 for r in recommendations if r.action == TradeAction.BUY)
    sell_count = sum(1 for r in recommendations if r.action == TradeAction.SELL)
    return (
        f"Market sentiment is {sentiment.value.lower()} with {volatility_index:.1f}% volatility. "
        f"AI recommends {buy_count} BUY signals and {sell_count} SELL signals. "
        "Focus on high-confidence, low-risk opportunities for optimal returns."
    )


# ── Engine ───────────────────────────────────────────────────────


class RecommendationEngine:
    """Runs analyzer + generator over a universe and aggregates a BotAnalysis.

    The aggregate is memoized for ``cache_ttl`` seconds, keyed by the
    ``(symbol, price)`` pairs of the universe, so a price move always
    triggers a fresh pass.
    """

    def __init__(
        self,
        quotes: QuoteSource,
        analyzer: MarketAnalyzer,
        generator: PredictionGenerator,
        *,
        universe: list[str] | None = None,
        cache_ttl: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._quotes = quotes
        self._analyzer = analyzer
        self._generator = generator
        self._universe = list(universe) if universe is not None else list(DEFAULT_UNIVERSE)
        self._cache: TTLCache[BotAnalysis] = TTLCache(cache_ttl, clock=clock)

    @property
    def universe(self) -> list[str]:
        return list(self._universe)

    def generate_recommendations(self, universe: list[str] | None = None) -> BotAnalysis:
        symbols = list(universe) if universe is not None else self._universe
        quotes = self._fetch_quotes(symbols)

        cache_key = tuple((q.symbol, q.price) for q in quotes)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Using cached bot analysis for %d symbols", len(quotes))
            return cached

        recommendations: list[TradingRecommendation] = []
        risk_warnings: list[str] = []
        total_volatility = 0.0

        for quote in quotes:
            try:
                history = self._quotes.get_history(quote.symbol)
                analysis = self._analyzer.analyze(quote.symbol, history, quote.price)
            except DataUnavailable as e:
                logger.warning("Skipping %s: %s", quote.symbol, e.detail)
                continue

            prediction = self._generator.generate(quote.symbol, analysis, quote.price)
            recommendation = build_recommendation(quote.symbol, prediction, analysis, quote.price)
            recommendations.append(recommendation)

            total_volatility += analysis.volatility
            if recommendation.risk_level == RiskLevel.HIGH:
                risk_warnings.append(
                    f"High risk detected for {quote.symbol} - proceed with caution"
                )

        buy_count = sum(1 for r in recommendations if r.action == TradeAction.BUY)
        market_sentiment = classify_market(buy_count, len(symbols))
        volatility_index = total_volatility / len(symbols) * 100 if symbols else 0.0

        recommendations.sort(key=lambda r: r.potential_profit, reverse=True)

        result = BotAnalysis(
            market_sentiment=market_sentiment,
            volatility_index=volatility_index,
            recommendations=recommendations,
            summary=summarize(market_sentiment, volatility_index, recommendations),
            risk_warnings=risk_warnings,
        )
        logger.info(
            "Bot analysis: %s, volatility index %.1f, %d recommendations (%d BUY, %d SELL)",
            market_sentiment.value,
            volatility_index,
            len(recommendations),
            len(result.buys),
            len(result.sells),
        )

        self._cache.set(cache_key, result)
        return result

    def clear_cache(self) -> None:
        """Drop the aggregate, analysis, and prediction caches."""
        self._cache.clear()
        self._analyzer.clear_cache()
        self._generator.clear_cache()

    def _fetch_quotes(self, symbols: list[str]) -> list[Quote]:
        quotes: list[Quote] = []
        for symbol in symbols:
            try:
                quotes.append(self._quotes.get_quote(symbol))
            except DataUnavailable as e:
                logger.warning("No quote for %s: %s", symbol, e.detail)
        return quotes
