"""Shared test doubles and builders: a static quote source, a manual clock, model factories."""

import pytest

from sim_trader.domain.errors import DataUnavailable
from sim_trader.domain.models import (
    MarketAnalysis,
    PriceSample,
    Quote,
    RiskLevel,
    Sentiment,
    TechnicalIndicators,
    TradeAction,
    TradingRecommendation,
)


class StaticQuotes:
    """QuoteSource with prices and histories set directly by the test."""

    def __init__(self) -> None:
        self.quotes: dict[str, Quote] = {}
        self.histories: dict[str, list[PriceSample]] = {}

    def set_quote(self, symbol: str, price: float, change: float = 0.0) -> None:
        self.quotes[symbol] = Quote(symbol=symbol, price=price, change=change)

    def set_history(self, symbol: str, closes: list[float], volume: float = 500_000) -> None:
        self.histories[symbol] = make_history(closes, volume)

    def get_quote(self, symbol: str) -> Quote:
        if symbol not in self.quotes:
            raise DataUnavailable(symbol, "no quote available")
        return self.quotes[symbol]

    def get_history(self, symbol: str) -> list[PriceSample]:
        if symbol not in self.histories:
            raise DataUnavailable(symbol, "no price history available")
        return list(self.histories[symbol])


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_history(closes: list[float], volume: float = 500_000) -> list[PriceSample]:
    return [
        PriceSample(
            date=f"2024-01-{i + 1:02d}",
            open=c,
            high=c,
            low=c,
            close=c,
            volume=volume,
        )
        for i, c in enumerate(closes)
    ]


def make_analysis(
    *,
    rsi: float = 50.0,
    macd: float = 0.0,
    sentiment: Sentiment = Sentiment.NEUTRAL,
    momentum: float = 0.0,
    volume: float = 500_000,
    volatility: float = 0.2,
) -> MarketAnalysis:
    return MarketAnalysis(
        sentiment=sentiment,
        volatility=volatility,
        momentum=momentum,
        volume=volume,
        indicators=TechnicalIndicators(rsi=rsi, macd=macd, sma=100.0, ema=100.0),
    )


def make_recommendation(
    symbol: str, action: TradeAction, price: float = 100.0
) -> TradingRecommendation:
    return TradingRecommendation(
        symbol=symbol,
        action=action,
        confidence=80.0,
        rationale="test",
        current_price=price,
        target_price=price * 1.1,
        stop_loss=price * 0.95,
        potential_profit=6.0,
        risk_level=RiskLevel.LOW,
        timeframe="24-48 hours",
    )


@pytest.fixture
def quotes() -> StaticQuotes:
    return StaticQuotes()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
