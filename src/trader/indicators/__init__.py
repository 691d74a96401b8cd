"""Indicator library -- pure Decimal functions over trailing price/volume windows.

Every function returns a documented neutral default when its window is
too short, so downstream code never sees a missing value.
"""

from trader.indicators.averages import ema, ema_series, macd, mean, sma
from trader.indicators.levels import FibonacciLevels, fibonacci_levels
from trader.indicators.oscillators import rsi, rsi_series, stoch_rsi
from trader.indicators.patterns import (
    is_double_top,
    is_head_and_shoulders,
    is_triple_bottom,
    is_triple_top,
)
from trader.indicators.snapshot import (
    FEATURE_ROW_LENGTH,
    IndicatorSnapshot,
    compute_indicator_snapshot,
)
from trader.indicators.volatility import atr, atr_series, bollinger_bands
from trader.indicators.volume import obv, obv_position, obv_series, volume_oscillator, vwap

__all__ = [
    "FEATURE_ROW_LENGTH",
    "FibonacciLevels",
    "IndicatorSnapshot",
    "atr",
    "atr_series",
    "bollinger_bands",
    "compute_indicator_snapshot",
    "ema",
    "ema_series",
    "fibonacci_levels",
    "is_double_top",
    "is_head_and_shoulders",
    "is_triple_bottom",
    "is_triple_top",
    "macd",
    "mean",
    "obv",
    "obv_position",
    "obv_series",
    "rsi",
    "rsi_series",
    "sma",
    "stoch_rsi",
    "volume_oscillator",
    "vwap",
]
