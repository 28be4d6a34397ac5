"""Order execution logic — translates accepted recommendations into ledger orders."""

import logging
import math
from typing import Any

from sim_trader.domain.models import BotAnalysis, OrderSide, TradingRecommendation
from sim_trader.trading.ledger import OrderLedger

logger = logging.getLogger(__name__)


class RecommendationExecutor:
    """Executes BUY/SELL recommendations against the ledger."""

    def __init__(
        self,
        ledger: OrderLedger,
        *,
        max_position_pct: float,
        max_simultaneous_positions: int,
        commission_rate: float = 0.001,
    ) -> None:
        self._ledger = ledger
        self._max_position_pct = max_position_pct
        self._max_simultaneous_positions = max_simultaneous_positions
        self._commission_rate = commission_rate

    def execute_analysis(self, analysis: BotAnalysis) -> list[dict[str, Any]]:
        """Execute all actionable recommendations, returning one result per order."""
        results: list[dict[str, Any]] = []

        # Execute sells first (free up capital)
        for rec in analysis.sells:
            results.append(self._execute_sell(rec))

        open_count = len(self._ledger.get_portfolio().positions)
        for rec in analysis.buys:
            already_held = self._ledger.get_position(rec.symbol) is not None
            if not already_held and open_count >= self._max_simultaneous_positions:
                msg = (
                    f"Max simultaneous positions ({self._max_simultaneous_positions}) "
                    f"reached — skipping BUY {rec.symbol}"
                )
                logger.warning(msg)
                results.append(_result(rec, "skipped", reason=msg))
                continue

            result = self._execute_buy(rec)
            if result["status"] == "filled" and not already_held:
                open_count += 1
            results.append(result)

        return results

    def _execute_buy(self, rec: TradingRecommendation) -> dict[str, Any]:
        """Buy up to ``max_position_pct`` of portfolio value in ``rec.symbol``."""
        portfolio = self._ledger.get_portfolio()
        held = self._ledger.get_position(rec.symbol)
        held_value = held.total_value if held else 0.0

        budget = portfolio.total_value * self._max_position_pct - held_value
        budget = min(budget, portfolio.cash_balance)
        unit_cost = rec.current_price * (1 + self._commission_rate)
        quantity = math.floor(budget / unit_cost) if unit_cost > 0 else 0

        if quantity <= 0:
            msg = f"Position limit reached or no cash available for {rec.symbol}"
            logger.info(msg)
            return _result(rec, "skipped", reason=msg)

        outcome = self._ledger.submit(rec.symbol, OrderSide.BUY, quantity)
        if not outcome.success:
            return _result(rec, "rejected", quantity=quantity, reason=outcome.message)

        logger.info(
            "BUY %s x%d (confidence %.0f%%, target $%.2f, stop $%.2f)",
            rec.symbol,
            quantity,
            rec.confidence,
            rec.target_price,
            rec.stop_loss,
        )
        return _result(rec, "filled", quantity=quantity, order_id=outcome.order_id)

    def _execute_sell(self, rec: TradingRecommendation) -> dict[str, Any]:
        """Close the whole position in ``rec.symbol``."""
        held = self._ledger.get_position(rec.symbol)
        if held is None:
            return _result(rec, "skipped", reason=f"No open position in {rec.symbol}")

        outcome = self._ledger.submit(rec.symbol, OrderSide.SELL, held.quantity)
        if not outcome.success:
            return _result(rec, "rejected", quantity=held.quantity, reason=outcome.message)

        logger.info("SELL %s x%d (confidence %.0f%%)", rec.symbol, held.quantity, rec.confidence)
        return _result(rec, "filled", quantity=held.quantity, order_id=outcome.order_id)


def _result(rec: TradingRecommendation, status: str, **extra: Any) -> dict[str, Any]:
    return {"symbol": rec.symbol, "action": rec.action.value, "status": status, **extra}
