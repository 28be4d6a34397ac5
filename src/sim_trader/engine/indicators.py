"""Technical indicators — pure computation over a price series, no I/O.

Every function accepts an ascending sequence of prices (list or numpy array)
and returns a plain float. Short or empty input yields a neutral default
instead of raising, so callers never have to guard against edge cases.
"""

from collections.abc import Sequence

import numpy as np

TRADING_DAYS_PER_YEAR = 252

_RSI_PERIOD = 14
_MOMENTUM_WINDOW = 5


def compute_all(prices: Sequence[float] | np.ndarray) -> dict[str, float]:
    """Compute the indicator bundle consumed by the market analyzer."""
    closes = np.asarray(prices, dtype=float)
    return {
        "rsi": rsi(closes),
        "macd": macd(closes),
        "sma": sma(closes, period=10),
        "ema": ema(closes, period=10),
    }


# ── Individual Indicator Functions ──────────────────────────────


def rsi(prices: Sequence[float] | np.ndarray) -> float:
    """Relative Strength Index over the most recent 14 deltas."""
    closes = np.asarray(prices, dtype=float)
    if len(closes) < _RSI_PERIOD:
        return 50.0

    deltas = np.diff(closes[-(_RSI_PERIOD + 1) :])
    avg_gain = float(np.sum(deltas[deltas > 0])) / _RSI_PERIOD
    avg_loss = float(-np.sum(deltas[deltas < 0])) / _RSI_PERIOD

    if avg_loss == 0:
        return 100.0

    rs = avg_gain / avg_loss
    return 100.0 - (100.0 / (1.0 + rs))


def ema(prices: Sequence[float] | np.ndarray, period: int) -> float:
    """Exponential Moving Average, seeded with the first price."""
    closes = np.asarray(prices, dtype=float)
    if len(closes) == 0:
        return 0.0

    alpha = 2.0 / (period + 1)
    value = float(closes[0])
    for price in closes[1:]:
        value = float(price) * alpha + value * (1.0 - alpha)
    return value


def sma(prices: Sequence[float] | np.ndarray, period: int) -> float:
    """Simple Moving Average of the last ``period`` prices (or all of them)."""
    closes = np.asarray(prices, dtype=float)
    if len(closes) == 0:
        return 0.0
    return float(np.mean(closes[-period:]))


def macd(prices: Sequence[float] | np.ndarray, fast: int = 12, slow: int = 26) -> float:
    """MACD line: fast EMA minus slow EMA. Zero until ``slow`` prices exist."""
    closes = np.asarray(prices, dtype=float)
    if len(closes) < slow:
        return 0.0
    return ema(closes, fast) - ema(closes, slow)


def volatility(prices: Sequence[float] | np.ndarray) -> float:
    """Annualized standard deviation of simple returns."""
    closes = np.asarray(prices, dtype=float)
    if len(closes) < 2:
        return 0.0

    previous = closes[:-1]
    with np.errstate(divide="ignore", invalid="ignore"):
        returns = np.where(previous != 0, np.diff(closes) / previous, 0.0)
    return float(np.std(returns) * np.sqrt(TRADING_DAYS_PER_YEAR))


def momentum(prices: Sequence[float] | np.ndarray) -> float:
    """Relative change of the last 5-price mean against the 5 before it."""
    closes = np.asarray(prices, dtype=float)
    if len(closes) < 2 * _MOMENTUM_WINDOW:
        return 0.0

    recent = float(np.mean(closes[-_MOMENTUM_WINDOW:]))
    prior = float(np.mean(closes[-2 * _MOMENTUM_WINDOW : -_MOMENTUM_WINDOW]))
    if prior == 0:
        return 0.0
    return (recent - prior) / prior
