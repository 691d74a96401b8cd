"""Volatility indicators: ATR and Bollinger bands.

ATR here is the mean absolute close-to-close move (daily closes only, no
high/low data), expressed in price units.
"""

from decimal import Decimal

from trader.indicators.averages import mean, population_std

_ZERO = Decimal("0")

#: Returned by atr() when there are fewer than period + 1 prices.
DEFAULT_ATR_FLOOR = Decimal("0.01")


def atr(
    prices: list[Decimal],
    period: int = 14,
    floor: Decimal = DEFAULT_ATR_FLOOR,
) -> Decimal:
    """Average true range over the last ``period`` moves.

    Args:
        prices: Closing prices, oldest first.
        period: Number of day-over-day moves to average.
        floor: Value returned on underflow.

    Returns:
        Mean of |p[i] - p[i-1]| over the window, or ``floor`` when the
        window holds fewer than ``period + 1`` prices.
    """
    if len(prices) < period + 1:
        return floor
    window = prices[-(period + 1) :]
    return mean([abs(b - a) for a, b in zip(window, window[1:])])


def atr_series(
    prices: list[Decimal],
    period: int = 14,
    count: int = 14,
    floor: Decimal = DEFAULT_ATR_FLOOR,
) -> list[Decimal]:
    """ATR at each of the last ``count`` prefixes that have a full window.

    Returns fewer than ``count`` values (possibly none) when history is short.
    """
    first_end = max(period + 1, len(prices) - count + 1)
    return [atr(prices[:end], period, floor) for end in range(first_end, len(prices) + 1)]


def bollinger_bands(
    prices: list[Decimal],
    period: int = 20,
    width: Decimal = Decimal("2"),
) -> tuple[Decimal, Decimal, Decimal]:
    """Upper, middle, and lower Bollinger bands.

    Middle = SMA(period); bands are ``width`` population standard deviations
    away. On underflow all three collapse to the latest price (0 if empty).
    """
    if len(prices) < period:
        last = prices[-1] if prices else _ZERO
        return last, last, last
    window = prices[-period:]
    middle = mean(window)
    spread = population_std(window) * width
    return middle + spread, middle, middle - spread
