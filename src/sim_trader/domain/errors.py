"""Exceptions raised inside the engine."""


class SimTraderError(Exception):
    """Base class for engine errors."""


class DataUnavailable(SimTraderError):
    """A quote or enough price history is not available for a symbol."""

    def __init__(self, symbol: str, detail: str) -> None:
        super().__init__(f"{symbol}: {detail}")
        self.symbol = symbol
        self.detail = detail
