"""Trading bot — composition root and fixed-interval cycle loop."""

import logging
import time

import numpy as np

from sim_trader.config import Settings, get_settings
from sim_trader.domain.models import BotAnalysis
from sim_trader.engine.analyzer import MarketAnalyzer
from sim_trader.engine.prediction import PredictionGenerator
from sim_trader.engine.recommendations import RecommendationEngine
from sim_trader.market.simulated import SimulatedMarket
from sim_trader.trading.cycle import TradingCycleService
from sim_trader.trading.executor import RecommendationExecutor
from sim_trader.trading.ledger import OrderLedger

logger = logging.getLogger(__name__)


class TradingBot:
    """Composition root — wires the engine and ledger over a simulated market.

    Every component is owned by this instance; nothing is shared through
    module-level state, so several bots can coexist in one process.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        market: SimulatedMarket | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        rng = np.random.default_rng(self.settings.random_seed)

        self.market = market or SimulatedMarket(
            history_length=self.settings.simulated_history_length,
            step_volatility=self.settings.simulated_step_volatility,
            rng=rng,
        )

        analyzer = MarketAnalyzer(
            window=self.settings.analysis_window,
            cache_ttl=self.settings.analysis_cache_ttl_seconds,
            sentiment_noise=self.settings.sentiment_noise,
            rng=rng,
        )
        generator = PredictionGenerator(
            tick_seconds=self.settings.prediction_tick_seconds,
            prediction_noise=self.settings.prediction_noise,
            rng=rng,
        )
        self.engine = RecommendationEngine(
            self.market,
            analyzer,
            generator,
            universe=self.settings.tracked_symbols,
            cache_ttl=self.settings.recommendation_cache_ttl_seconds,
        )

        self.ledger = OrderLedger(
            self.market,
            initial_cash=self.settings.initial_cash,
            commission_rate=self.settings.commission_rate,
        )
        executor = RecommendationExecutor(
            self.ledger,
            max_position_pct=self.settings.max_position_pct,
            max_simultaneous_positions=self.settings.max_simultaneous_positions,
            commission_rate=self.settings.commission_rate,
        )
        self._cycle_service = TradingCycleService(
            self.engine,
            executor,
            self.ledger,
            daily_loss_limit=self.settings.daily_loss_limit,
        )
        self._running = False

    def run_once(self) -> BotAnalysis | None:
        """Advance the market one bar and run a single trading cycle."""
        self.market.step()
        return self._cycle_service.run_cycle()

    def run(self, cycles: int | None = None, *, interval: float | None = None) -> None:
        """Run ``cycles`` trading cycles (forever when None), ``interval`` seconds apart."""
        interval = self.settings.trading_interval_seconds if interval is None else interval
        self._running = True
        completed = 0

        logger.info(
            "Trading bot started — interval: %.1fs, universe: %s, cash: $%.2f",
            interval,
            ", ".join(self.engine.universe),
            self.ledger.cash_balance,
        )

        try:
            while self._running and (cycles is None or completed < cycles):
                cycle_start = time.monotonic()
                self.run_once()
                completed += 1

                if cycles is not None and completed >= cycles:
                    break

                elapsed = time.monotonic() - cycle_start
                sleep_time = max(0.0, interval - elapsed)
                if sleep_time > 0:
                    logger.debug(
                        "Cycle took %.2fs, sleeping %.2fs until next cycle", elapsed, sleep_time
                    )
                    time.sleep(sleep_time)
                elif interval > 0:
                    logger.warning(
                        "Cycle took %.2fs (exceeds %.1fs interval), running next immediately",
                        elapsed,
                        interval,
                    )
        except KeyboardInterrupt:
            logger.info("Trading bot interrupted")
        finally:
            self._running = False
            logger.info("Trading bot stopped after %d cycles", completed)

    def stop(self) -> None:
        self._running = False
