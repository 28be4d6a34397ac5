"""Tests for the recommendation rules and the RecommendationEngine."""

import pytest
from conftest import make_analysis

from sim_trader.domain.models import (
    MarketSentiment,
    RiskLevel,
    Sentiment,
    StockPrediction,
    TradeAction,
    Trend,
)
from sim_trader.engine.analyzer import MarketAnalyzer
from sim_trader.engine.prediction import PredictionGenerator
from sim_trader.engine.recommendations import (
    DEFAULT_UNIVERSE,
    RecommendationEngine,
    assess_risk,
    build_recommendation,
    classify_market,
    decide_action,
    summarize,
)

# Deep oversold slide with a five-bar rebound: rules net +5.5% at 95% confidence.
REBOUND = [200.0] * 6 + [190.0 - 10 * i for i in range(10)] + [102.0, 104.0, 106.0, 108.0]
# Sharp rally that stalled flat: RSI 100 with no momentum, nets -5%.
TOPPED = [100.0] * 6 + [120.0, 140.0, 160.0, 180.0, 200.0] + [200.0] * 9
# Steady climb: overbought and positive sentiment cancel out.
RISING = [100.0 + i for i in range(20)]


def make_prediction(predicted: float, confidence: float, current: float = 100.0):
    return StockPrediction(
        symbol="AAPL",
        current_price=current,
        predicted_price=predicted,
        confidence=confidence,
        timeframe="24-48 hours",
        trend=Trend.BULLISH if predicted > current else Trend.BEARISH,
        signals=[],
        rationale="",
    )


class TestAssessRisk:
    @pytest.mark.parametrize(
        ("volatility", "potential", "expected"),
        [
            (0.1, 0.0, RiskLevel.LOW),
            (0.25, 8.0, RiskLevel.LOW),
            (0.26, 0.0, RiskLevel.MEDIUM),
            (0.1, 8.5, RiskLevel.MEDIUM),
            (0.1, -9.0, RiskLevel.MEDIUM),
            (0.41, 0.0, RiskLevel.HIGH),
            (0.1, 15.5, RiskLevel.HIGH),
            (0.1, -16.0, RiskLevel.HIGH),
        ],
    )
    def test_levels(self, volatility, potential, expected):
        assert assess_risk(volatility, potential) == expected


class TestDecideAction:
    @pytest.mark.parametrize(
        ("potential", "confidence", "expected"),
        [
            (5.1, 71, TradeAction.BUY),
            (5.0, 90, TradeAction.HOLD),
            (10.0, 70, TradeAction.HOLD),
            (-3.1, 71, TradeAction.SELL),
            (-3.0, 90, TradeAction.HOLD),
            (-10.0, 70, TradeAction.HOLD),
            (0.0, 95, TradeAction.HOLD),
        ],
    )
    def test_thresholds(self, potential, confidence, expected):
        assert decide_action(potential, confidence) == expected


class TestClassifyMarket:
    def test_bullish_above_sixty_percent(self):
        assert classify_market(5, 8) == MarketSentiment.BULLISH

    def test_exactly_sixty_percent_is_neutral(self):
        assert classify_market(3, 5) == MarketSentiment.NEUTRAL

    def test_bearish_below_thirty_percent(self):
        assert classify_market(2, 8) == MarketSentiment.BEARISH

    def test_exactly_thirty_percent_is_neutral(self):
        assert classify_market(3, 10) == MarketSentiment.NEUTRAL

    def test_empty_universe(self):
        assert classify_market(0, 0) == MarketSentiment.BEARISH


class TestBuildRecommendation:
    def test_buy_exit_levels(self):
        rec = build_recommendation(
            "AAPL", make_prediction(110.0, 80), make_analysis(volatility=0.1), 100.0
        )
        assert rec.action == TradeAction.BUY
        assert rec.target_price == pytest.approx(110.0)
        assert rec.stop_loss == pytest.approx(95.0)
        assert rec.potential_profit == pytest.approx(10.0)
        assert rec.risk_level == RiskLevel.MEDIUM
        assert rec.current_price == 100.0

    def test_sell_exit_levels(self):
        rec = build_recommendation(
            "AAPL", make_prediction(94.0, 80), make_analysis(volatility=0.1), 100.0
        )
        assert rec.action == TradeAction.SELL
        assert rec.target_price == pytest.approx(95.0)
        assert rec.stop_loss == pytest.approx(105.0)
        # Magnitude only
        assert rec.potential_profit == pytest.approx(6.0)

    def test_hold_exit_levels(self):
        rec = build_recommendation("AAPL", make_prediction(101.0, 60), make_analysis(), 100.0)
        assert rec.action == TradeAction.HOLD
        assert rec.target_price == 100.0
        assert rec.stop_loss == 100.0

    def test_rationale_text(self):
        rec = build_recommendation(
            "AAPL",
            make_prediction(110.0, 80),
            make_analysis(sentiment=Sentiment.POSITIVE),
            100.0,
        )
        assert rec.rationale == (
            "AI analysis suggests BUY based on 80% confidence. "
            "Expected profit potential: 10.0%. "
            "Technical indicators show bullish trend with positive market sentiment."
        )

    def test_timeframe_carried_from_prediction(self):
        rec = build_recommendation("AAPL", make_prediction(101.0, 60), make_analysis(), 100.0)
        assert rec.timeframe == "24-48 hours"


class TestSummarize:
    def test_counts_and_volatility(self):
        recs = [
            build_recommendation("A", make_prediction(110.0, 80), make_analysis(), 100.0),
            build_recommendation("B", make_prediction(90.0, 80), make_analysis(), 100.0),
            build_recommendation("C", make_prediction(110.0, 80), make_analysis(), 100.0),
        ]
        text = summarize(MarketSentiment.BULLISH, 23.456, recs)
        assert text.startswith("Market sentiment is bullish with 23.5% volatility.")
        assert "AI recommends 2 BUY signals and 1 SELL signals." in text


@pytest.fixture
def engine_factory(quotes, clock):
    def build(universe: list[str], cache_ttl: float = 60.0) -> RecommendationEngine:
        return RecommendationEngine(
            quotes,
            MarketAnalyzer(window=20, cache_ttl=30, clock=clock),
            PredictionGenerator(tick_seconds=1.0, clock=clock),
            universe=universe,
            cache_ttl=cache_ttl,
            clock=clock,
        )

    return build


@pytest.fixture
def mixed_market(quotes):
    quotes.set_quote("UP", 108.0)
    quotes.set_history("UP", REBOUND)
    quotes.set_quote("DOWN", 200.0)
    quotes.set_history("DOWN", TOPPED)
    quotes.set_quote("FLAT", 119.0)
    quotes.set_history("FLAT", RISING)
    return quotes


class TestRecommendationEngine:
    def test_default_universe(self, quotes):
        engine = RecommendationEngine(quotes, MarketAnalyzer(), PredictionGenerator())
        assert engine.universe == DEFAULT_UNIVERSE

    def test_actions_per_symbol(self, engine_factory, mixed_market):
        analysis = engine_factory(["UP", "DOWN", "FLAT"]).generate_recommendations()
        actions = {r.symbol: r.action for r in analysis.recommendations}
        assert actions == {
            "UP": TradeAction.BUY,
            "DOWN": TradeAction.SELL,
            "FLAT": TradeAction.HOLD,
        }

    def test_ranked_by_potential_profit(self, engine_factory, mixed_market):
        analysis = engine_factory(["FLAT", "DOWN", "UP"]).generate_recommendations()
        assert [r.symbol for r in analysis.recommendations] == ["UP", "DOWN", "FLAT"]
        profits = [r.potential_profit for r in analysis.recommendations]
        assert profits == sorted(profits, reverse=True)

    def test_aggregate_fields(self, engine_factory, mixed_market):
        analysis = engine_factory(["UP", "DOWN", "FLAT"]).generate_recommendations()

        # One BUY out of three symbols
        assert analysis.market_sentiment == MarketSentiment.NEUTRAL
        assert len(analysis.buys) == 1
        assert len(analysis.sells) == 1
        assert len(analysis.holds) == 1
        assert "AI recommends 1 BUY signals and 1 SELL signals." in analysis.summary
        assert analysis.volatility_index > 0

    def test_risk_warnings_for_high_risk(self, engine_factory, mixed_market):
        analysis = engine_factory(["UP", "DOWN", "FLAT"]).generate_recommendations()
        assert analysis.risk_warnings == [
            "High risk detected for UP - proceed with caution",
            "High risk detected for DOWN - proceed with caution",
        ]

    def test_bullish_market(self, engine_factory, quotes):
        for symbol in ("A", "B", "C"):
            quotes.set_quote(symbol, 108.0)
            quotes.set_history(symbol, REBOUND)
        analysis = engine_factory(["A", "B", "C"]).generate_recommendations()
        assert analysis.market_sentiment == MarketSentiment.BULLISH

    def test_bearish_market(self, engine_factory, quotes):
        quotes.set_quote("A", 119.0)
        quotes.set_history("A", RISING)
        analysis = engine_factory(["A"]).generate_recommendations()
        assert analysis.market_sentiment == MarketSentiment.BEARISH
        assert analysis.risk_warnings == []

    def test_skips_symbols_without_data(self, engine_factory, mixed_market):
        mixed_market.set_quote("SHORT", 50.0)
        mixed_market.set_history("SHORT", [50.0] * 5)
        analysis = engine_factory(["UP", "MISSING", "SHORT"]).generate_recommendations()
        assert [r.symbol for r in analysis.recommendations] == ["UP"]

    def test_volatility_index_divides_by_universe_size(self, engine_factory, mixed_market):
        alone = engine_factory(["FLAT"]).generate_recommendations()
        diluted = engine_factory(["FLAT", "MISSING"]).generate_recommendations()
        assert diluted.volatility_index == pytest.approx(alone.volatility_index / 2)

    def test_empty_universe(self, engine_factory):
        analysis = engine_factory([]).generate_recommendations()
        assert analysis.recommendations == []
        assert analysis.volatility_index == 0.0
        assert analysis.market_sentiment == MarketSentiment.BEARISH

    def test_universe_override(self, engine_factory, mixed_market):
        engine = engine_factory(["UP", "DOWN", "FLAT"])
        analysis = engine.generate_recommendations(["DOWN"])
        assert [r.symbol for r in analysis.recommendations] == ["DOWN"]


class TestRecommendationCaching:
    def test_unchanged_prices_hit_cache(self, engine_factory, mixed_market, clock):
        engine = engine_factory(["UP", "DOWN"])
        first = engine.generate_recommendations()
        clock.advance(59)
        assert engine.generate_recommendations() is first

    def test_expires_after_ttl(self, engine_factory, mixed_market, clock):
        engine = engine_factory(["UP", "DOWN"])
        first = engine.generate_recommendations()
        clock.advance(60)
        assert engine.generate_recommendations() is not first

    def test_price_move_invalidates(self, engine_factory, mixed_market):
        engine = engine_factory(["UP", "DOWN"])
        first = engine.generate_recommendations()
        mixed_market.set_quote("DOWN", 201.0)
        second = engine.generate_recommendations()
        assert second is not first
        down = next(r for r in second.recommendations if r.symbol == "DOWN")
        assert down.current_price == 201.0

    def test_clear_cache(self, engine_factory, mixed_market):
        engine = engine_factory(["UP", "DOWN"])
        first = engine.generate_recommendations()
        engine.clear_cache()
        assert engine.generate_recommendations() is not first
