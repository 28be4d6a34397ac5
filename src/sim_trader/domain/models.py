"""Domain models — market data, analysis results, recommendations, and ledger state."""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


def _utcnow() -> datetime:
    return datetime.now(UTC)


# ── Market Data ────────────────────────────────────────────────


class PriceSample(BaseModel):
    """One OHLCV bar of a price history (histories are ordered ascending by date)."""

    model_config = ConfigDict(frozen=True)

    date: str
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


class Quote(BaseModel):
    """Latest quote for a symbol."""

    symbol: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0
    volume: float = 0.0
    high: float = 0.0
    low: float = 0.0
    open: float = 0.0
    previous_close: float = 0.0
    timestamp: datetime = Field(default_factory=_utcnow)


# ── Analysis ────────────────────────────────────────────────────


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class Trend(str, Enum):
    BULLISH = "bullish"
    BEARISH = "bearish"
    NEUTRAL = "neutral"


class TechnicalIndicators(BaseModel):
    rsi: float = Field(ge=0.0, le=100.0)
    macd: float
    sma: float
    ema: float


class MarketAnalysis(BaseModel):
    """Per-symbol market snapshot produced by the analyzer."""

    sentiment: Sentiment
    volatility: float = Field(ge=0.1, description="Annualized volatility, floored at 0.1")
    momentum: float
    volume: float
    indicators: TechnicalIndicators


class StockPrediction(BaseModel):
    """Short-horizon price prediction for one symbol."""

    symbol: str
    current_price: float
    predicted_price: float
    confidence: float = Field(ge=45.0, le=95.0)
    timeframe: str
    trend: Trend
    signals: list[str] = Field(default_factory=list, max_length=4)
    rationale: str
    generated_at: datetime = Field(default_factory=_utcnow)


# ── Recommendations ─────────────────────────────────────────────


class TradeAction(str, Enum):
    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"


class RiskLevel(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class MarketSentiment(str, Enum):
    BULLISH = "BULLISH"
    BEARISH = "BEARISH"
    NEUTRAL = "NEUTRAL"


class TradingRecommendation(BaseModel):
    """An actionable recommendation derived from a prediction."""

    symbol: str
    action: TradeAction
    confidence: float
    rationale: str
    current_price: float
    target_price: float
    stop_loss: float
    potential_profit: float = Field(ge=0.0, description="Absolute expected move, in percent")
    risk_level: RiskLevel
    timeframe: str
    generated_at: datetime = Field(default_factory=_utcnow)


class BotAnalysis(BaseModel):
    """Market-wide result of one recommendation pass."""

    market_sentiment: MarketSentiment
    volatility_index: float
    recommendations: list[TradingRecommendation] = Field(default_factory=list)
    summary: str = ""
    risk_warnings: list[str] = Field(default_factory=list)
    generated_at: datetime = Field(default_factory=_utcnow)

    @property
    def buys(self) -> list[TradingRecommendation]:
        return [r for r in self.recommendations if r.action == TradeAction.BUY]

    @property
    def sells(self) -> list[TradingRecommendation]:
        return [r for r in self.recommendations if r.action == TradeAction.SELL]

    @property
    def holds(self) -> list[TradingRecommendation]:
        return [r for r in self.recommendations if r.action == TradeAction.HOLD]


# ── Orders & Portfolio ──────────────────────────────────────────


class OrderSide(str, Enum):
    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"


class TimeInForce(str, Enum):
    GTC = "GTC"
    IOC = "IOC"
    FOK = "FOK"


class OrderStatus(str, Enum):
    PENDING = "pending"
    FILLED = "filled"
    CANCELLED = "cancelled"


class RejectionReason(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_SHARES = "insufficient_shares"
    INVALID_QUANTITY = "invalid_quantity"
    INVALID_PRICE = "invalid_price"
    DATA_UNAVAILABLE = "data_unavailable"


class Order(BaseModel):
    """A filled order in the ledger history. Never mutated once recorded."""

    model_config = ConfigDict(frozen=True)

    id: str
    symbol: str
    side: OrderSide
    order_type: OrderType
    quantity: int = Field(gt=0)
    price: float | None = None
    stop_price: float | None = None
    fill_price: float
    commission: float
    time_in_force: TimeInForce = TimeInForce.GTC
    status: OrderStatus = OrderStatus.FILLED
    timestamp: datetime = Field(default_factory=_utcnow)


class OrderResult(BaseModel):
    """Outcome of an order submission: accepted with an id, or rejected with a reason."""

    success: bool
    order_id: str | None = None
    reason: RejectionReason | None = None
    message: str = ""

    @classmethod
    def accepted(cls, order_id: str, message: str = "") -> "OrderResult":
        return cls(success=True, order_id=order_id, message=message)

    @classmethod
    def rejected(cls, reason: RejectionReason, message: str) -> "OrderResult":
        return cls(success=False, reason=reason, message=message)


class Position(BaseModel):
    """An open position marked at the latest known price."""

    symbol: str
    quantity: int = Field(ge=0)
    avg_price: float = Field(gt=0.0)
    current_price: float
    total_value: float
    unrealized_pnl: float
    unrealized_pnl_percent: float


class Portfolio(BaseModel):
    """Read-only snapshot of the ledger, derived from cash and positions."""

    cash_balance: float
    positions: list[Position] = Field(default_factory=list)
    orders: list[Order] = Field(default_factory=list)
    total_value: float
    total_pnl: float
    total_pnl_percent: float
    day_change: float
    day_change_percent: float

    @property
    def positions_value(self) -> float:
        return sum(p.total_value for p in self.positions)
