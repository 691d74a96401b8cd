"""Moving averages and MACD over Decimal price windows.

Uses Decimal arithmetic with quantize to prevent precision explosion in
recursive EMA computations.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

_ZERO = Decimal("0")

#: Precision limit for EMA intermediate results (12 decimal places).
_EMA_QUANTIZE = Decimal("0.000000000001")


def mean(values: list[Decimal]) -> Decimal:
    """Arithmetic mean; 0 for an empty list."""
    if not values:
        return _ZERO
    return sum(values, _ZERO) / Decimal(len(values))


def population_std(values: list[Decimal]) -> Decimal:
    """Population standard deviation (N denominator); 0 for fewer than 2 values."""
    if len(values) < 2:
        return _ZERO
    avg = mean(values)
    variance = sum(((v - avg) ** 2 for v in values), _ZERO) / Decimal(len(values))
    return variance.sqrt()


def sma(values: list[Decimal], period: int) -> Decimal:
    """Simple moving average of the last ``period`` values.

    Falls back to the mean of everything available when the window is
    shorter than ``period``, and 0 for an empty window.
    """
    return mean(values[-period:])


def ema_series(values: list[Decimal], span: int) -> list[Decimal]:
    """Compute Exponential Moving Average over a list of Decimal values.

    Uses the standard recursive formula:
        alpha = 2 / (span + 1)
        EMA_t = alpha * value_t + (1 - alpha) * EMA_{t-1}

    First EMA value = first input value. Each intermediate result is
    quantized to 12 decimal places.

    Args:
        values: Ordered list of Decimal values (oldest first).
        span: Number of periods for EMA smoothing.

    Returns:
        List of EMA values, same length as input. Empty list if input is empty.
    """
    if not values:
        return []

    alpha = Decimal("2") / (Decimal(span) + Decimal("1"))
    one_minus_alpha = Decimal("1") - alpha

    result = [values[0].quantize(_EMA_QUANTIZE)]
    for v in values[1:]:
        result.append((alpha * v + one_minus_alpha * result[-1]).quantize(_EMA_QUANTIZE))
    return result


def ema(values: list[Decimal], period: int) -> Decimal:
    """EMA over the trailing ``period`` values, seeded with the window's first value.

    Returns 0 for an empty window.
    """
    window = values[-period:]
    if not window:
        return _ZERO
    return ema_series(window, period)[-1]


def macd(
    prices: list[Decimal],
    fast: int = 12,
    slow: int = 26,
    signal: int = 9,
) -> tuple[Decimal, Decimal]:
    """MACD line (fast EMA - slow EMA) and its signal-line EMA.

    Returns (0, 0) when there are fewer than ``slow`` prices.
    """
    if len(prices) < slow:
        return _ZERO, _ZERO

    fast_ema = ema_series(prices, fast)
    slow_ema = ema_series(prices, slow)
    # Only compare once the slow EMA has seen a full window
    line = [f - s for f, s in zip(fast_ema[slow - 1 :], slow_ema[slow - 1 :])]
    signal_line = ema_series(line, signal)
    return line[-1], signal_line[-1]
