"""Derived feature computation shared by the predictor and strategy layer.

The momentum lookback adapts to volatility: the more the asset moves per
day relative to its price, the shorter the window. All features are pure
functions of the price prefix they are given.

CRITICAL: All computations use Decimal. Never use float.
"""

from decimal import Decimal

from trader.config import IndicatorSettings
from trader.indicators.averages import mean
from trader.indicators.volatility import atr, atr_series
from trader.signals.models import FeatureSnapshot

_ZERO = Decimal("0")

#: (atr_ratio above, momentum window) pairs, checked in order.
_MOMENTUM_WINDOWS: tuple[tuple[Decimal, int], ...] = (
    (Decimal("0.05"), 5),
    (Decimal("0.02"), 10),
    (Decimal("0.01"), 14),
)
_CALM_MOMENTUM_WINDOW = 20


def momentum_window(atr_ratio: Decimal) -> int:
    """Lookback length for momentum given ATR relative to price."""
    for threshold, window in _MOMENTUM_WINDOWS:
        if atr_ratio > threshold:
            return window
    return _CALM_MOMENTUM_WINDOW


def relative_change(prices: list[Decimal], window: int) -> Decimal:
    """(last - first) / first over the trailing ``window`` prices; 0 if undefined."""
    recent = prices[-window:]
    if len(recent) < 2 or recent[0] == _ZERO:
        return _ZERO
    return (recent[-1] - recent[0]) / recent[0]


def compute_feature_snapshot(
    prices: list[Decimal],
    settings: IndicatorSettings | None = None,
) -> FeatureSnapshot:
    """Derive momentum, trend, and volatility features for the last bar.

    Args:
        prices: Closing prices, oldest first, ending at the decision bar.
        settings: Indicator windows and ATR floor.

    Returns:
        FeatureSnapshot. With fewer than two prices every momentum and trend
        value is 0; atr carries the underflow floor.
    """
    if settings is None:
        settings = IndicatorSettings()

    price = prices[-1] if prices else _ZERO
    current_atr = atr(prices, settings.atr_period, settings.atr_floor)
    atr_ratio = current_atr / price if price > _ZERO else _ZERO

    window = momentum_window(atr_ratio)
    momentum = relative_change(prices, window)
    short_momentum = relative_change(prices, settings.short_momentum_window)

    span = min(window, len(prices)) - 1
    trend_slope = momentum / Decimal(span) if span > 0 else _ZERO

    volatility_adjusted = momentum / (atr_ratio if atr_ratio > _ZERO else settings.atr_floor)
    trend_strength = trend_slope * volatility_adjusted

    history = atr_series(
        prices, settings.atr_period, settings.atr_breakout_period, settings.atr_floor
    )
    # Short history: the current ATR stands in for its own average
    baseline = mean(history) if len(history) >= settings.atr_breakout_period else current_atr
    atr_breakout = current_atr / baseline if baseline > _ZERO else _ZERO

    return FeatureSnapshot(
        price=price,
        momentum=momentum,
        short_momentum=short_momentum,
        trend_slope=trend_slope,
        atr=current_atr,
        atr_ratio=atr_ratio,
        momentum_divergence=short_momentum - momentum,
        volatility_adjusted_momentum=volatility_adjusted,
        trend_strength=trend_strength,
        atr_breakout=atr_breakout,
    )
