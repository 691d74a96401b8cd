"""Abstract trade executor interface for live mode.

The live trader depends only on this interface. Implementations are
read-only as far as the core is concerned: prices, history, balances.
Order placement is left to whoever acts on the emitted Trade.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from trader.exchange.types import AccountBalances, MarketDataRequest
from trader.models import PriceSeries


class TradeExecutor(ABC):
    """Abstract base class for live market access."""

    @abstractmethod
    async def get_current_price(self, symbol: str) -> Decimal:
        """Latest traded price for ``symbol``."""
        ...

    @abstractmethod
    async def get_market_data(self, request: MarketDataRequest) -> PriceSeries:
        """Daily history for ``request.symbol``, oldest first."""
        ...

    @abstractmethod
    async def get_account_balances(self, symbol: str) -> AccountBalances:
        """Free quote-currency capital and base-asset holdings for ``symbol``."""
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        ...
