"""Fibonacci retracement levels over a trailing high/low range."""

from dataclasses import dataclass
from decimal import Decimal

_RATIOS = (Decimal("0.236"), Decimal("0.382"), Decimal("0.5"), Decimal("0.618"))


@dataclass(frozen=True)
class FibonacciLevels:
    """Retracement levels between the window low and high.

    ``levels`` holds the 23.6%, 38.2%, 50%, and 61.8% retracements followed
    by the high itself.
    """

    levels: tuple[Decimal, ...]
    high: Decimal
    low: Decimal

    @property
    def golden(self) -> Decimal:
        """The 61.8% level."""
        return self.levels[3]


def fibonacci_levels(prices: list[Decimal], period: int = 30) -> FibonacciLevels:
    """Retracement levels over the last ``period`` prices.

    On underflow all levels are 0, high is the latest price and low the
    oldest (0 for an empty list).
    """
    zero = Decimal("0")
    if len(prices) < period:
        return FibonacciLevels(
            levels=(zero,) * 5,
            high=prices[-1] if prices else zero,
            low=prices[0] if prices else zero,
        )

    window = prices[-period:]
    high, low = max(window), min(window)
    span = high - low
    return FibonacciLevels(
        levels=tuple(low + span * r for r in _RATIOS) + (high,),
        high=high,
        low=low,
    )
