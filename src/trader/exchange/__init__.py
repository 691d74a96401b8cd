"""Exchange layer -- live prices, history, and balances via ccxt."""

from trader.exchange.ccxt_executor import CcxtTradeExecutor, create_exchange
from trader.exchange.client import TradeExecutor
from trader.exchange.types import AccountBalances, MarketDataRequest, ohlcv_to_series

__all__ = [
    "AccountBalances",
    "CcxtTradeExecutor",
    "MarketDataRequest",
    "TradeExecutor",
    "create_exchange",
    "ohlcv_to_series",
]
