"""Volume-based indicators: OBV, volume oscillator, VWAP."""

from decimal import Decimal

from trader.indicators.averages import sma

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def obv_series(prices: list[Decimal], volumes: list[Decimal]) -> list[Decimal]:
    """On-balance volume after every bar; the first bar starts at 0."""
    n = min(len(prices), len(volumes))
    if n == 0:
        return []
    values = [_ZERO]
    for i in range(1, n):
        if prices[i] > prices[i - 1]:
            values.append(values[-1] + volumes[i])
        elif prices[i] < prices[i - 1]:
            values.append(values[-1] - volumes[i])
        else:
            values.append(values[-1])
    return values


def obv(prices: list[Decimal], volumes: list[Decimal]) -> Decimal:
    """On-balance volume: running sum of volume signed by price direction."""
    values = obv_series(prices, volumes)
    return values[-1] if values else _ZERO


def obv_position(
    prices: list[Decimal],
    volumes: list[Decimal],
    period: int = 30,
) -> Decimal:
    """Latest OBV scaled into its trailing ``period``-bar range.

    (obv - min) / (max - min) over the last ``period`` OBV values: 1 at a
    fresh accumulation high, 0 at a fresh low, and 0 when the range is flat.
    """
    window = obv_series(prices, volumes)[-period:]
    if not window:
        return _ZERO
    low, high = min(window), max(window)
    if high == low:
        return _ZERO
    return (window[-1] - low) / (high - low)


def volume_oscillator(
    volumes: list[Decimal],
    short_period: int = 5,
    long_period: int = 14,
) -> Decimal:
    """Percent gap between short and long volume SMAs.

    (SMA_short - SMA_long) / SMA_long * 100; 0 on underflow or zero volume.
    """
    if len(volumes) < long_period:
        return _ZERO
    long_avg = sma(volumes, long_period)
    if long_avg == _ZERO:
        return _ZERO
    return (sma(volumes, short_period) - long_avg) / long_avg * _HUNDRED


def vwap(prices: list[Decimal], volumes: list[Decimal], period: int = 7) -> Decimal:
    """Volume-weighted average price over the trailing ``period`` days.

    Falls back to the latest price on underflow or when the window traded
    no volume.
    """
    if not prices:
        return _ZERO
    if len(prices) < period or len(volumes) < period:
        return prices[-1]
    window_p = prices[-period:]
    window_v = volumes[-period:]
    total_volume = sum(window_v, _ZERO)
    if total_volume == _ZERO:
        return prices[-1]
    return sum((p * v for p, v in zip(window_p, window_v)), _ZERO) / total_volume
