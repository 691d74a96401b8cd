"""Historical data provider backed by a ccxt exchange.

Fetches daily OHLCV candles with pagination via the ``since`` parameter
and converts them to a PriceSeries of closes and volumes.
"""

from __future__ import annotations

import time
from collections.abc import Callable

import ccxt.async_support as ccxt_async
from ccxt.base.errors import BaseError as CcxtBaseError

from trader.config import ExchangeSettings
from trader.data.provider import HistoricalDataProvider
from trader.exceptions import ExchangeError
from trader.exchange.ccxt_executor import create_exchange
from trader.exchange.types import ohlcv_to_series
from trader.logging import get_logger
from trader.models import MS_PER_DAY, PriceSeries

logger = get_logger(__name__)


class CcxtDataProvider(HistoricalDataProvider):
    """Daily history from a ccxt exchange.

    Args:
        settings: Exchange id, credentials, and timeframe.
        exchange: Pre-built ccxt exchange (tests inject a mock).
        page_limit: Maximum candles requested per call.
        now_fn: Clock in milliseconds; defaults to wall time.
    """

    def __init__(
        self,
        settings: ExchangeSettings,
        exchange: ccxt_async.Exchange | None = None,
        page_limit: int = 300,
        now_fn: Callable[[], int] | None = None,
    ) -> None:
        self._settings = settings
        self._exchange = exchange if exchange is not None else create_exchange(settings)
        self._page_limit = page_limit
        self._now_fn = now_fn or (lambda: int(time.time() * 1000))

    async def get_historical_data(self, symbol: str, days: int) -> PriceSeries:
        """Fetch ``days`` daily candles ending now, oldest first."""
        since = self._now_fn() - days * MS_PER_DAY
        candles: dict[int, list] = {}

        while len(candles) < days:
            try:
                page = await self._exchange.fetch_ohlcv(
                    symbol,
                    timeframe=self._settings.timeframe,
                    since=since,
                    limit=min(self._page_limit, days - len(candles)),
                )
            except CcxtBaseError as e:
                raise ExchangeError(f"fetch_ohlcv failed for {symbol}: {e}") from e

            if not page:
                break
            for row in page:
                candles[int(row[0])] = row
            next_since = int(page[-1][0]) + MS_PER_DAY
            if next_since <= since:
                break
            since = next_since

        series = ohlcv_to_series(symbol, list(candles.values())).tail(days)
        logger.info("historical_data_fetched", symbol=symbol, requested=days, bars=len(series))
        return series

    async def close(self) -> None:
        """Clean up ccxt async resources."""
        await self._exchange.close()
