"""ccxt-backed trade executor (prices, history, balances).

Wraps a ccxt.async_support exchange chosen by ExchangeSettings.exchange_id.
All numeric values are converted to Decimal via str().
"""

from __future__ import annotations

from decimal import Decimal

import ccxt.async_support as ccxt_async
from ccxt.base.errors import BaseError as CcxtBaseError

from trader.config import ExchangeSettings
from trader.exceptions import ExchangeError
from trader.exchange.client import TradeExecutor
from trader.exchange.types import AccountBalances, MarketDataRequest, ohlcv_to_series
from trader.logging import get_logger
from trader.models import PriceSeries

logger = get_logger(__name__)


def create_exchange(settings: ExchangeSettings) -> ccxt_async.Exchange:
    """Instantiate the configured ccxt async exchange.

    Raises:
        ExchangeError: If ccxt has no exchange with that id.
    """
    exchange_cls = getattr(ccxt_async, settings.exchange_id, None)
    if exchange_cls is None:
        raise ExchangeError(f"Unknown ccxt exchange id: {settings.exchange_id}")

    config: dict = {"enableRateLimit": True}
    if settings.api_key.get_secret_value():
        config["apiKey"] = settings.api_key.get_secret_value()
        config["secret"] = settings.api_secret.get_secret_value()

    exchange = exchange_cls(config)
    if settings.sandbox:
        exchange.set_sandbox_mode(True)
    return exchange


class CcxtTradeExecutor(TradeExecutor):
    """Live market access through ccxt.

    Args:
        settings: Exchange id, credentials, quote currency, timeframe.
        exchange: Pre-built ccxt exchange (tests inject a mock).
    """

    def __init__(
        self,
        settings: ExchangeSettings,
        exchange: ccxt_async.Exchange | None = None,
    ) -> None:
        self._settings = settings
        self._exchange = exchange if exchange is not None else create_exchange(settings)

    async def get_current_price(self, symbol: str) -> Decimal:
        try:
            ticker = await self._exchange.fetch_ticker(symbol)
        except CcxtBaseError as e:
            raise ExchangeError(f"fetch_ticker failed for {symbol}: {e}") from e

        last = ticker.get("last") or ticker.get("close")
        if last is None:
            raise ExchangeError(f"Ticker for {symbol} has no last price")
        return Decimal(str(last))

    async def get_market_data(self, request: MarketDataRequest) -> PriceSeries:
        try:
            candles = await self._exchange.fetch_ohlcv(
                request.symbol, timeframe=request.timeframe, limit=request.days
            )
        except CcxtBaseError as e:
            raise ExchangeError(f"fetch_ohlcv failed for {request.symbol}: {e}") from e

        series = ohlcv_to_series(request.symbol, candles)
        logger.debug("market_data_fetched", symbol=request.symbol, bars=len(series))
        return series

    async def get_account_balances(self, symbol: str) -> AccountBalances:
        base = symbol.split("/")[0]
        quote = self._settings.quote_currency
        try:
            balance = await self._exchange.fetch_balance()
        except CcxtBaseError as e:
            raise ExchangeError(f"fetch_balance failed: {e}") from e

        free = balance.get("free", {}) or {}
        balances = AccountBalances(
            capital=Decimal(str(free.get(quote) or 0)),
            holdings=Decimal(str(free.get(base) or 0)),
        )
        logger.info(
            "account_balances",
            quote=quote,
            capital=str(balances.capital),
            base=base,
            holdings=str(balances.holdings),
        )
        return balances

    async def close(self) -> None:
        """Clean up ccxt async resources. Must be called to avoid resource leaks."""
        await self._exchange.close()
