"""Port interfaces (Protocols) that the engine depends on.

Market-data adapters implement these protocols so that analysis and ledger
code never couples to a specific provider or simulator.
"""

from typing import Protocol

from sim_trader.domain.models import PriceSample, Quote


class QuoteSource(Protocol):
    """Abstraction over a quote and price-history provider.

    Implementations raise ``DataUnavailable`` for unknown symbols.
    """

    def get_quote(self, symbol: str) -> Quote: ...
    def get_history(self, symbol: str) -> list[PriceSample]: ...
