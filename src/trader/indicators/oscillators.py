"""RSI and Stochastic RSI with Wilder smoothing.

Both return the neutral reading (50) when the window is too short, so
callers never have to special-case warm-up.
"""

from decimal import Decimal

from trader.indicators.averages import mean

_ZERO = Decimal("0")
_NEUTRAL = Decimal("50")
_HUNDRED = Decimal("100")


def _rsi_from_averages(avg_gain: Decimal, avg_loss: Decimal) -> Decimal:
    if avg_loss == _ZERO:
        return _HUNDRED if avg_gain > _ZERO else _NEUTRAL
    rs = avg_gain / avg_loss
    return _HUNDRED - _HUNDRED / (Decimal("1") + rs)


def rsi_series(prices: list[Decimal], period: int = 14) -> list[Decimal]:
    """RSI at every index from ``period`` onward (Wilder smoothing).

    The first value averages the first ``period`` changes; later values use
    avg = (avg * (period - 1) + current) / period.

    Returns:
        ``len(prices) - period`` values, or an empty list on underflow.
    """
    if len(prices) < period + 1:
        return []

    changes = [b - a for a, b in zip(prices, prices[1:])]
    gains = [c if c > _ZERO else _ZERO for c in changes]
    losses = [-c if c < _ZERO else _ZERO for c in changes]

    p = Decimal(period)
    avg_gain = mean(gains[:period])
    avg_loss = mean(losses[:period])
    result = [_rsi_from_averages(avg_gain, avg_loss)]

    for gain, loss in zip(gains[period:], losses[period:]):
        avg_gain = (avg_gain * (p - 1) + gain) / p
        avg_loss = (avg_loss * (p - 1) + loss) / p
        result.append(_rsi_from_averages(avg_gain, avg_loss))

    return result


def rsi(prices: list[Decimal], period: int = 14) -> Decimal:
    """Latest RSI (0-100); 50 when fewer than ``period + 1`` prices."""
    series = rsi_series(prices, period)
    return series[-1] if series else _NEUTRAL


def stoch_rsi(
    prices: list[Decimal],
    rsi_period: int = 14,
    stoch_period: int = 14,
    smooth: int = 3,
) -> tuple[Decimal, Decimal]:
    """Stochastic RSI %K and %D, both on a 0-100 scale.

    Raw value = (RSI - min RSI) / (max RSI - min RSI) over ``stoch_period``
    RSI readings; %K smooths raw over ``smooth`` values and %D smooths %K.
    Returns (50, 50) on underflow; a flat RSI range reads as 50.
    """
    needed = stoch_period + 2 * (smooth - 1)
    series = rsi_series(prices, rsi_period)
    if len(series) < needed:
        return _NEUTRAL, _NEUTRAL

    window = series[-needed:]
    raw: list[Decimal] = []
    for end in range(stoch_period, needed + 1):
        chunk = window[end - stoch_period : end]
        low, high = min(chunk), max(chunk)
        if high == low:
            raw.append(_NEUTRAL)
        else:
            raw.append((chunk[-1] - low) / (high - low) * _HUNDRED)

    k_values = [mean(raw[i : i + smooth]) for i in range(len(raw) - smooth + 1)]
    return k_values[-1], mean(k_values[-smooth:])
