"""Historical data provider interface and an in-memory implementation.

The backtester depends only on HistoricalDataProvider, so a recorded
dataset, a test fixture, or a live exchange adapter can be swapped in
without touching the engine.
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from trader.exceptions import PreconditionError
from trader.models import MS_PER_DAY, PriceSeries


class HistoricalDataProvider(ABC):
    """Abstract source of daily price/volume history."""

    @abstractmethod
    async def get_historical_data(self, symbol: str, days: int) -> PriceSeries:
        """Return the last ``days`` daily bars for ``symbol``, oldest first."""
        ...


def daily_series(
    symbol: str,
    prices: list[Decimal],
    volumes: list[Decimal],
    end_ms: int,
) -> PriceSeries:
    """Build a PriceSeries with one bar per day ending at ``end_ms``."""
    n = len(prices)
    timestamps = [end_ms - (n - 1 - i) * MS_PER_DAY for i in range(n)]
    return PriceSeries(symbol=symbol, timestamps_ms=timestamps, prices=prices, volumes=volumes)


class InMemoryDataProvider(HistoricalDataProvider):
    """Serves preloaded series, trimmed to the requested number of days.

    Args:
        series: Complete history per symbol.
    """

    def __init__(self, series: dict[str, PriceSeries]) -> None:
        self._series = dict(series)

    def add(self, series: PriceSeries) -> None:
        """Register or replace the history for ``series.symbol``."""
        self._series[series.symbol] = series

    async def get_historical_data(self, symbol: str, days: int) -> PriceSeries:
        try:
            full = self._series[symbol]
        except KeyError:
            raise PreconditionError(f"No history loaded for {symbol}") from None
        return full.tail(days)
