"""Per-timestep indicator bundle used to build model input rows.

compute_indicator_snapshot() evaluates every indicator over one prefix of
a price/volume series. IndicatorSnapshot.to_feature_row() turns it into a
fixed-order float row; price-level indicators are expressed relative to
the latest price so rows stay comparable across assets and eras.
"""

from dataclasses import dataclass
from decimal import Decimal

from trader.config import IndicatorSettings
from trader.indicators.averages import macd, sma
from trader.indicators.levels import fibonacci_levels
from trader.indicators.oscillators import rsi, stoch_rsi
from trader.indicators.patterns import (
    is_double_top,
    is_head_and_shoulders,
    is_triple_bottom,
    is_triple_top,
)
from trader.indicators.volatility import atr, bollinger_bands
from trader.indicators.volume import obv_position, volume_oscillator, vwap

_ZERO = Decimal("0")
_ONE = Decimal("1")


@dataclass(frozen=True)
class IndicatorSnapshot:
    """All indicator readings for the last bar of a prefix."""

    price: Decimal
    rsi: Decimal
    sma_short: Decimal
    sma_long: Decimal
    macd: Decimal
    macd_signal: Decimal
    bollinger_upper: Decimal
    bollinger_lower: Decimal
    atr: Decimal
    vwap: Decimal
    stoch_k: Decimal
    stoch_d: Decimal
    fibonacci_golden: Decimal
    obv_position: Decimal  # 0..1 within the trailing OBV range
    volume_oscillator: Decimal
    price_change_pct: Decimal
    double_top: bool
    triple_top: bool
    head_and_shoulders: bool
    triple_bottom: bool

    def _relative(self, level: Decimal) -> float:
        if self.price == _ZERO:
            return 0.0
        return float(level / self.price - _ONE)

    def to_feature_row(self) -> list[float]:
        """Fixed-order model input row; length is FEATURE_ROW_LENGTH."""
        return [
            float(self.rsi) / 100.0,
            self._relative(self.sma_short),
            self._relative(self.sma_long),
            self._relative(self.price + self.macd),
            self._relative(self.price + self.macd_signal),
            self._relative(self.bollinger_upper),
            self._relative(self.bollinger_lower),
            self._relative(self.price + self.atr),
            self._relative(self.vwap),
            float(self.stoch_k) / 100.0,
            float(self.stoch_d) / 100.0,
            self._relative(self.fibonacci_golden) if self.fibonacci_golden else 0.0,
            float(self.obv_position),
            float(self.volume_oscillator) / 100.0,
            float(self.price_change_pct) / 100.0,
            1.0 if self.double_top else 0.0,
            1.0 if self.triple_top else 0.0,
            1.0 if self.head_and_shoulders else 0.0,
            1.0 if self.triple_bottom else 0.0,
        ]


#: Number of floats produced by IndicatorSnapshot.to_feature_row().
FEATURE_ROW_LENGTH = 19


def compute_indicator_snapshot(
    prices: list[Decimal],
    volumes: list[Decimal],
    settings: IndicatorSettings | None = None,
) -> IndicatorSnapshot:
    """Evaluate every indicator over the given prefix.

    Args:
        prices: Closing prices up to and including the bar of interest.
        volumes: Matching volumes.
        settings: Indicator windows. Defaults to IndicatorSettings().

    Returns:
        IndicatorSnapshot for the last bar. Underflowing indicators carry
        their neutral defaults.
    """
    if settings is None:
        settings = IndicatorSettings()

    price = prices[-1] if prices else _ZERO
    previous = prices[-2] if len(prices) > 1 else _ZERO
    change_pct = (price - previous) / previous * Decimal("100") if previous else _ZERO

    macd_line, macd_signal = macd(
        prices, settings.ema_fast, settings.ema_slow, settings.macd_signal
    )
    upper, _, lower = bollinger_bands(
        prices, settings.bollinger_period, settings.bollinger_width
    )
    stoch_k, stoch_d = stoch_rsi(
        prices, settings.rsi_period, settings.stoch_period, settings.stoch_smooth
    )

    return IndicatorSnapshot(
        price=price,
        rsi=rsi(prices, settings.rsi_period),
        sma_short=sma(prices, settings.sma_short),
        sma_long=sma(prices, settings.sma_long),
        macd=macd_line,
        macd_signal=macd_signal,
        bollinger_upper=upper,
        bollinger_lower=lower,
        atr=atr(prices, settings.atr_period, settings.atr_floor),
        vwap=vwap(prices, volumes, settings.vwap_period),
        stoch_k=stoch_k,
        stoch_d=stoch_d,
        fibonacci_golden=fibonacci_levels(prices, settings.fibonacci_period).golden,
        obv_position=obv_position(prices, volumes, settings.obv_period),
        volume_oscillator=volume_oscillator(
            volumes, settings.volume_sma_short, settings.volume_sma_long
        ),
        price_change_pct=change_pct,
        double_top=is_double_top(prices, volumes, settings.pattern_lookback),
        triple_top=is_triple_top(prices, volumes, settings.pattern_lookback),
        head_and_shoulders=is_head_and_shoulders(prices, volumes, settings.pattern_lookback),
        triple_bottom=is_triple_bottom(prices, volumes),
    )
