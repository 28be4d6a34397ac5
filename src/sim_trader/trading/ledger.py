"""Order execution ledger — cash, positions, and order history with cost-basis accounting."""

from __future__ import annotations

import logging
import math
import threading
import uuid
from dataclasses import dataclass

from sim_trader.domain.errors import DataUnavailable
from sim_trader.domain.models import (
    Order,
    OrderResult,
    OrderSide,
    OrderType,
    Portfolio,
    Position,
    RejectionReason,
    TimeInForce,
)
from sim_trader.domain.ports import QuoteSource

logger = logging.getLogger(__name__)


def _is_valid_price(value: float) -> bool:
    return math.isfinite(value) and value > 0


@dataclass
class _Holding:
    symbol: str
    quantity: int
    avg_price: float
    last_price: float


class OrderLedger:
    """Single-owner store of cash, open positions and filled orders.

    Orders fill immediately and completely against the latest quote (market)
    or the requested price (limit/stop). Each submission is validated before
    any state is touched and applied under a lock, so a rejection leaves the
    ledger unchanged. Portfolio figures are derived on every read.
    """

    def __init__(
        self,
        quotes: QuoteSource,
        *,
        initial_cash: float = 100_000.0,
        commission_rate: float = 0.001,
    ) -> None:
        self._quotes = quotes
        self._initial_cash = initial_cash
        self._commission_rate = commission_rate
        self._cash = initial_cash
        self._holdings: dict[str, _Holding] = {}
        self._orders: list[Order] = []
        self._lock = threading.RLock()

    @property
    def initial_cash(self) -> float:
        return self._initial_cash

    @property
    def cash_balance(self) -> float:
        with self._lock:
            return self._cash

    @property
    def orders(self) -> list[Order]:
        with self._lock:
            return list(self._orders)

    # ── Submission ─────────────────────────────────────────────

    def submit(
        self,
        symbol: str,
        side: OrderSide,
        quantity: int,
        order_type: OrderType = OrderType.MARKET,
        price: float | None = None,
        stop_price: float | None = None,
        time_in_force: TimeInForce = TimeInForce.GTC,
    ) -> OrderResult:
        """Validate and apply an order. Rejections are returned, never raised."""
        side = OrderSide(side)
        order_type = OrderType(order_type)

        # Whole shares only; bool is an int subclass
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            return self._reject(
                symbol, RejectionReason.INVALID_QUANTITY, "Quantity must be a positive integer"
            )
        if price is not None and not _is_valid_price(price):
            return self._reject(symbol, RejectionReason.INVALID_PRICE, "Price must be positive")
        if stop_price is not None and not _is_valid_price(stop_price):
            return self._reject(
                symbol, RejectionReason.INVALID_PRICE, "Stop price must be positive"
            )

        try:
            quote = self._quotes.get_quote(symbol)
        except DataUnavailable as e:
            return self._reject(symbol, RejectionReason.DATA_UNAVAILABLE, str(e))

        fill_price = quote.price if order_type == OrderType.MARKET else (price or quote.price)
        if not _is_valid_price(fill_price):
            return self._reject(
                symbol, RejectionReason.INVALID_PRICE, f"No valid fill price for {symbol}"
            )
        notional = quantity * fill_price
        commission = notional * self._commission_rate

        # Validated before any state changes
        order = Order(
            id=uuid.uuid4().hex,
            symbol=symbol,
            side=side,
            order_type=order_type,
            quantity=quantity,
            price=price,
            stop_price=stop_price,
            fill_price=fill_price,
            commission=commission,
            time_in_force=time_in_force,
        )

        with self._lock:
            if side == OrderSide.BUY:
                if self._cash < notional + commission:
                    return self._reject(
                        symbol,
                        RejectionReason.INSUFFICIENT_FUNDS,
                        f"Insufficient funds: need ${notional + commission:,.2f}, "
                        f"have ${self._cash:,.2f}",
                    )
                self._apply_buy(symbol, quantity, fill_price, notional, commission)
            else:
                holding = self._holdings.get(symbol)
                held = holding.quantity if holding else 0
                if held < quantity:
                    return self._reject(
                        symbol,
                        RejectionReason.INSUFFICIENT_SHARES,
                        f"Insufficient shares to sell: have {held}, requested {quantity}",
                    )
                self._apply_sell(symbol, quantity, fill_price, notional, commission)

            self._orders.append(order)

        logger.info(
            "%s %s x%d filled @ $%.2f (commission $%.2f, cash $%.2f)",
            side.value.upper(),
            symbol,
            quantity,
            fill_price,
            commission,
            self._cash,
            extra={
                "order_id": order.id,
                "symbol": symbol,
                "side": side.value,
                "quantity": quantity,
                "fill_price": fill_price,
            },
        )
        return OrderResult.accepted(order.id, f"{side.value.upper()} order executed successfully")

    def _apply_buy(
        self, symbol: str, quantity: int, fill_price: float, notional: float, commission: float
    ) -> None:
        self._cash -= notional + commission
        holding = self._holdings.get(symbol)
        if holding is None:
            self._holdings[symbol] = _Holding(symbol, quantity, fill_price, fill_price)
            return

        new_quantity = holding.quantity + quantity
        holding.avg_price = (holding.avg_price * holding.quantity + notional) / new_quantity
        holding.quantity = new_quantity
        holding.last_price = fill_price

    def _apply_sell(
        self, symbol: str, quantity: int, fill_price: float, notional: float, commission: float
    ) -> None:
        self._cash += notional - commission
        holding = self._holdings[symbol]
        holding.quantity -= quantity
        holding.last_price = fill_price
        if holding.quantity == 0:
            del self._holdings[symbol]

    def _reject(self, symbol: str, reason: RejectionReason, message: str) -> OrderResult:
        logger.warning(
            "Order for %s rejected: %s",
            symbol,
            message,
            extra={"symbol": symbol, "reason": reason.value},
        )
        return OrderResult.rejected(reason, message)

    # ── Queries ────────────────────────────────────────────────

    def get_position(self, symbol: str) -> Position | None:
        with self._lock:
            holding = self._holdings.get(symbol)
            if holding is None:
                return None
            position, _ = self._mark(holding)
            return position

    def get_portfolio(self) -> Portfolio:
        """Derive a read-only snapshot from cash, holdings and the latest quotes."""
        with self._lock:
            positions: list[Position] = []
            day_change = 0.0
            for holding in self._holdings.values():
                position, change = self._mark(holding)
                positions.append(position)
                day_change += holding.quantity * change

            positions_value = sum(p.total_value for p in positions)
            total_value = self._cash + positions_value
            total_pnl = sum(p.unrealized_pnl for p in positions)

            cost_basis = positions_value - total_pnl
            total_pnl_percent = total_pnl / cost_basis * 100 if cost_basis else 0.0

            previous_value = total_value - day_change
            day_change_percent = day_change / previous_value * 100 if previous_value else 0.0

            return Portfolio(
                cash_balance=self._cash,
                positions=positions,
                orders=list(self._orders),
                total_value=total_value,
                total_pnl=total_pnl,
                total_pnl_percent=total_pnl_percent,
                day_change=day_change,
                day_change_percent=day_change_percent,
            )

    def _mark(self, holding: _Holding) -> tuple[Position, float]:
        """Value a holding at its latest quote; returns the position and the quote's day change."""
        try:
            quote = self._quotes.get_quote(holding.symbol)
            current_price, change = quote.price, quote.change
        except DataUnavailable:
            logger.debug("No quote for %s, marking at last fill", holding.symbol)
            current_price, change = holding.last_price, 0.0

        unrealized = (current_price - holding.avg_price) * holding.quantity
        position = Position(
            symbol=holding.symbol,
            quantity=holding.quantity,
            avg_price=holding.avg_price,
            current_price=current_price,
            total_value=holding.quantity * current_price,
            unrealized_pnl=unrealized,
            unrealized_pnl_percent=(current_price - holding.avg_price) / holding.avg_price * 100,
        )
        return position, change
