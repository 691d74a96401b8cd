"""Exchange-facing value types and OHLCV conversion."""

from dataclasses import dataclass
from decimal import Decimal

from trader.models import PriceSeries

# ccxt OHLCV row layout: [timestamp_ms, open, high, low, close, volume]
_TS, _CLOSE, _VOLUME = 0, 4, 5


@dataclass(frozen=True)
class MarketDataRequest:
    """Parameters for a market data fetch."""

    symbol: str
    days: int
    timeframe: str = "1d"


@dataclass(frozen=True)
class AccountBalances:
    """Spendable quote currency and held base asset."""

    capital: Decimal
    holdings: Decimal


def ohlcv_to_series(symbol: str, candles: list[list]) -> PriceSeries:
    """Convert ccxt OHLCV rows to a PriceSeries of closes and volumes.

    Numeric values go through str() so float noise from the exchange JSON
    is not amplified by Decimal conversion. Missing volumes become 0.
    """
    rows = sorted(candles, key=lambda row: row[_TS])
    return PriceSeries(
        symbol=symbol,
        timestamps_ms=[int(row[_TS]) for row in rows],
        prices=[Decimal(str(row[_CLOSE])) for row in rows],
        volumes=[Decimal(str(row[_VOLUME] or 0)) for row in rows],
    )
