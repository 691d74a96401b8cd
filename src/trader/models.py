"""Shared data models for the trade decision engine.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from trader.exceptions import SeriesMismatchError

MS_PER_DAY = 86_400_000


class TradeType(str, Enum):
    """Trade direction."""

    BUY = "buy"
    SELL = "sell"


class StrategyType(str, Enum):
    """Market regime driving which rule set is active."""

    MOMENTUM = "momentum"
    MEAN_REVERSION = "mean_reversion"
    BREAKOUT = "breakout"
    TREND_FOLLOWING = "trend_following"


def days_between(start_ms: int, end_ms: int) -> Decimal:
    """Elapsed days between two millisecond timestamps (fractional)."""
    return Decimal(end_ms - start_ms) / Decimal(MS_PER_DAY)


@dataclass
class PriceSeries:
    """Daily closes and volumes for one asset, oldest first.

    Attributes:
        symbol: Market symbol, e.g. "BTC/USD".
        timestamps_ms: Candle open times in milliseconds.
        prices: Closing prices.
        volumes: Traded volume per day.
    """

    symbol: str
    timestamps_ms: list[int]
    prices: list[Decimal]
    volumes: list[Decimal]

    def __post_init__(self) -> None:
        if not (len(self.timestamps_ms) == len(self.prices) == len(self.volumes)):
            raise SeriesMismatchError(
                f"{self.symbol}: timestamps/prices/volumes lengths differ "
                f"({len(self.timestamps_ms)}/{len(self.prices)}/{len(self.volumes)})"
            )

    def __len__(self) -> int:
        return len(self.prices)

    @property
    def latest_price(self) -> Decimal:
        return self.prices[-1]

    def tail(self, days: int) -> PriceSeries:
        """Return the most recent ``days`` entries as a new series."""
        start = max(0, len(self) - days)
        return PriceSeries(
            symbol=self.symbol,
            timestamps_ms=self.timestamps_ms[start:],
            prices=self.prices[start:],
            volumes=self.volumes[start:],
        )

    def check_aligned(self, other: PriceSeries) -> None:
        """Raise SeriesMismatchError unless both series share length and timestamps."""
        if len(self) != len(other):
            raise SeriesMismatchError(
                f"{self.symbol} has {len(self)} entries but {other.symbol} has {len(other)}"
            )
        if self.timestamps_ms != other.timestamps_ms:
            raise SeriesMismatchError(
                f"{self.symbol} and {other.symbol} timestamps are not aligned"
            )


@dataclass(frozen=True)
class Trade:
    """An executed (or simulated) buy or sell. Never mutated after creation.

    Attributes:
        trade_type: BUY or SELL.
        price: Effective fill price after slippage.
        timestamp_ms: Decision time in milliseconds.
        asset_amount: Units of the asset bought or sold.
        usd_value: Cash spent (buy) or proceeds net of commission (sell).
        buy_price: Entry price of the position being closed (sells only).
        strategy: Strategy active when the trade was emitted.
        confidence: Prediction confidence at decision time.
    """

    trade_type: TradeType
    price: Decimal
    timestamp_ms: int
    asset_amount: Decimal
    usd_value: Decimal
    buy_price: Decimal | None = None
    strategy: StrategyType | None = None
    confidence: Decimal = Decimal("0")

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        return {
            "type": self.trade_type.value,
            "price": str(self.price),
            "timestamp_ms": self.timestamp_ms,
            "asset_amount": str(self.asset_amount),
            "usd_value": str(self.usd_value),
            "buy_price": str(self.buy_price) if self.buy_price is not None else None,
            "strategy": self.strategy.value if self.strategy is not None else None,
            "confidence": str(self.confidence),
        }


@dataclass
class PositionState:
    """Open-position bookkeeping for one run.

    Owned by the decision loop (backtester or live trader). Mutated only
    when a trade executes, except peak_price which tracks the running high
    while holdings are positive.
    """

    holdings: Decimal = Decimal("0")
    last_buy_price: Decimal = Decimal("0")
    peak_price: Decimal = Decimal("0")
    buy_timestamp_ms: int | None = None
    win_streak: int = 0

    @property
    def is_open(self) -> bool:
        return self.holdings > Decimal("0")

    def update_peak(self, price: Decimal) -> None:
        """Raise peak_price to ``price`` while a position is open."""
        if self.is_open and price > self.peak_price:
            self.peak_price = price

    def days_held(self, now_ms: int) -> Decimal:
        """Days since the current position was opened (0 when flat)."""
        if self.buy_timestamp_ms is None:
            return Decimal("0")
        return days_between(self.buy_timestamp_ms, now_ms)

    def adopt(self, price: Decimal, timestamp_ms: int) -> None:
        """Start tracking holdings that were not bought by this loop.

        The entry clock starts at ``timestamp_ms``. A known cost basis is
        kept; otherwise ``price`` becomes the buy price.
        """
        if self.last_buy_price <= Decimal("0"):
            self.last_buy_price = price
        if price > self.peak_price:
            self.peak_price = price
        self.buy_timestamp_ms = timestamp_ms

    def apply_buy(self, trade: Trade) -> None:
        """Record a buy fill."""
        self.holdings += trade.asset_amount
        self.last_buy_price = trade.price
        self.peak_price = trade.price
        self.buy_timestamp_ms = trade.timestamp_ms

    def apply_sell(self, trade: Trade) -> Decimal:
        """Record a full-position sell and return its realized P&L.

        Realized P&L is sale proceeds minus the position's cost at the
        recorded buy price. Updates the consecutive-win streak.
        """
        realized = trade.usd_value - self.holdings * self.last_buy_price
        self.win_streak = self.win_streak + 1 if realized > Decimal("0") else 0
        self.holdings = Decimal("0")
        self.last_buy_price = Decimal("0")
        self.peak_price = Decimal("0")
        self.buy_timestamp_ms = None
        return realized
