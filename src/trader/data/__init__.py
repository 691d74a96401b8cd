"""Historical data layer -- provider interface, in-memory and ccxt sources."""

from trader.data.ccxt_provider import CcxtDataProvider
from trader.data.provider import HistoricalDataProvider, InMemoryDataProvider, daily_series

__all__ = [
    "CcxtDataProvider",
    "HistoricalDataProvider",
    "InMemoryDataProvider",
    "daily_series",
]
