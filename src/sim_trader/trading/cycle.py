"""Trading cycle — analyzes the universe and executes the resulting recommendations."""

import logging

from sim_trader.domain.models import BotAnalysis
from sim_trader.engine.recommendations import RecommendationEngine
from sim_trader.trading.executor import RecommendationExecutor
from sim_trader.trading.ledger import OrderLedger

logger = logging.getLogger(__name__)


class TradingCycleService:
    """Runs a single trading cycle: risk check, recommend, execute.

    Kept apart from the scheduler so the cycle logic is testable without a
    timer loop.
    """

    def __init__(
        self,
        engine: RecommendationEngine,
        executor: RecommendationExecutor,
        ledger: OrderLedger,
        *,
        daily_loss_limit: float,
    ) -> None:
        self._engine = engine
        self._executor = executor
        self._ledger = ledger
        self._daily_loss_limit = daily_loss_limit

    def should_halt_trading(self) -> bool:
        """Check whether the portfolio has lost ``daily_loss_limit`` of its initial cash."""
        starting = self._ledger.initial_cash
        pnl = self._ledger.get_portfolio().total_value - starting
        loss_pct = abs(pnl) / starting if pnl < 0 and starting else 0.0

        if loss_pct >= self._daily_loss_limit:
            logger.warning(
                "Loss limit breached: %.2f%% (limit: %.2f%%)",
                loss_pct * 100,
                self._daily_loss_limit * 100,
            )
            return True
        return False

    def run_cycle(self) -> BotAnalysis | None:
        """Execute one complete trading cycle.

        Returns the bot analysis that drove the cycle, or None when the cycle
        was halted or failed.
        """
        logger.info("=== TRADING CYCLE ===")
        try:
            if self.should_halt_trading():
                logger.warning("Loss limit reached — halting trades")
                return None

            analysis = self._engine.generate_recommendations()
            logger.info("Market summary: %s", analysis.summary)
            for warning in analysis.risk_warnings:
                logger.warning(warning)

            if analysis.buys or analysis.sells:
                for r in self._executor.execute_analysis(analysis):
                    logger.info("Execution result: %s", r)
            else:
                logger.info("No trades to execute this cycle")

            portfolio = self._ledger.get_portfolio()
            logger.info(
                "Portfolio: value $%.2f, cash $%.2f, P&L $%+.2f (%+.2f%%)",
                portfolio.total_value,
                portfolio.cash_balance,
                portfolio.total_pnl,
                portfolio.total_pnl_percent,
            )
            return analysis

        except Exception as e:
            logger.error("Trading cycle failed: %s", e, exc_info=True)
            return None
