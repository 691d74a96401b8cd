"""Regime classifier with a persistence guard.

Each step the selector pushes the latest FeatureSnapshot into the rolling
history, then either keeps the active strategy (persistence guard) or
classifies the regime from 3-step feature averages in priority order:
TrendFollowing, Momentum, Breakout, MeanReversion. MeanReversion is also
the fallback when nothing else matches.
"""

from dataclasses import dataclass
from decimal import Decimal

from trader.config import IndicatorSettings, RegimeSettings
from trader.indicators.averages import ema, mean, sma
from trader.logging import get_logger
from trader.models import StrategyType, days_between
from trader.signals.models import FeatureName, Prediction
from trader.strategy.models import FeatureHistory, StrategyState
from trader.strategy.profiles import STRATEGY_PROFILES, StrategyProfile, get_profile

logger = get_logger(__name__)

_ZERO = Decimal("0")


@dataclass(frozen=True)
class MarketContext:
    """Price/volume readings the regime rules need besides the features."""

    price: Decimal
    ema_short: Decimal
    ema_long: Decimal
    deviation: Decimal  # (price - SMA) / SMA
    volume: Decimal
    average_volume: Decimal

    @property
    def ema_bullish(self) -> bool:
        return self.ema_short > self.ema_long


def compute_market_context(
    prices: list[Decimal],
    volumes: list[Decimal],
    regime: RegimeSettings,
    indicators: IndicatorSettings,
) -> MarketContext:
    """Build the MarketContext for the last bar of the given prefix."""
    price = prices[-1] if prices else _ZERO
    baseline = sma(prices, indicators.sma_deviation)
    deviation = (price - baseline) / baseline if baseline > _ZERO else _ZERO
    volume = volumes[-1] if volumes else _ZERO
    previous = volumes[-(indicators.sma_deviation + 1) : -1]
    return MarketContext(
        price=price,
        ema_short=ema(prices, regime.ema_short_period),
        ema_long=ema(prices, regime.ema_long_period),
        deviation=deviation,
        volume=volume,
        average_volume=mean(previous) if previous else volume,
    )


class StrategySelector:
    """Maps smoothed features to one of four strategies, with hysteresis.

    Args:
        settings: Regime thresholds and persistence guard.
        indicator_settings: Windows for the SMA deviation baseline.
        profiles: Strategy profile table. Defaults to STRATEGY_PROFILES.
    """

    def __init__(
        self,
        settings: RegimeSettings | None = None,
        indicator_settings: IndicatorSettings | None = None,
        profiles: dict[StrategyType, StrategyProfile] | None = None,
    ) -> None:
        self._settings = settings or RegimeSettings()
        self._indicators = indicator_settings or IndicatorSettings()
        self._profiles = profiles or STRATEGY_PROFILES

    @property
    def settings(self) -> RegimeSettings:
        return self._settings

    def profile_for(self, state: StrategyState) -> StrategyProfile:
        """Profile of the active strategy."""
        return get_profile(state.current, self._profiles)

    def context(self, prices: list[Decimal], volumes: list[Decimal]) -> MarketContext:
        return compute_market_context(prices, volumes, self._settings, self._indicators)

    def should_persist(
        self, state: StrategyState, confidence: Decimal, now_ms: int
    ) -> bool:
        """True when the active strategy is too young to replace.

        Young means fewer than persistence_trades trades or persistence_days
        days since activation. High confidence overrides the guard. A
        strategy that was never activated is not guarded.
        """
        if state.start_timestamp_ms is None:
            return False
        days_active = days_between(state.start_timestamp_ms, now_ms)
        young = (
            state.trade_count < self._settings.persistence_trades
            or days_active < Decimal(self._settings.persistence_days)
        )
        return young and confidence < self._settings.override_confidence

    def breakout_threshold(self, days_since_trade: Decimal | None) -> Decimal:
        """ATR-breakout threshold, relaxed after idle_days without a trade."""
        if days_since_trade is None or days_since_trade > Decimal(self._settings.idle_days):
            return self._settings.idle_breakout_threshold
        return self._settings.breakout_threshold

    def classify(
        self,
        history: FeatureHistory,
        context: MarketContext,
        days_since_trade: Decimal | None = None,
    ) -> StrategyType:
        """Pick the regime from smoothed features, in priority order."""
        s = self._settings
        slope = history.average(FeatureName.TREND_SLOPE)
        strength = history.average(FeatureName.TREND_STRENGTH)
        short_mom = history.average(FeatureName.SHORT_MOMENTUM)
        vol_mom = history.average(FeatureName.VOLATILITY_ADJUSTED_MOMENTUM)
        breakout = history.average(FeatureName.ATR_BREAKOUT)

        if (
            abs(slope) > s.trend_slope_threshold
            and context.ema_bullish
            and strength > s.trend_strength_threshold
        ):
            return StrategyType.TREND_FOLLOWING

        if (
            short_mom > s.short_momentum_threshold
            and vol_mom > s.volatility_momentum_threshold
            and strength > _ZERO
            and context.ema_bullish
        ):
            return StrategyType.MOMENTUM

        if (
            breakout > self.breakout_threshold(days_since_trade)
            and context.volume > context.average_volume * s.volume_multiplier
            and short_mom > _ZERO
        ):
            return StrategyType.BREAKOUT

        if self.mean_reversion_signal(history, context):
            return StrategyType.MEAN_REVERSION

        logger.debug("regime_fallback", deviation=str(context.deviation))
        return StrategyType.MEAN_REVERSION

    def mean_reversion_signal(self, history: FeatureHistory, context: MarketContext) -> bool:
        """Stretched price, quiet momentum, and a live short/long divergence."""
        s = self._settings
        return (
            abs(context.deviation) > s.deviation_threshold
            and abs(history.average(FeatureName.MOMENTUM)) < s.momentum_ceiling
            and history.average(FeatureName.MOMENTUM_DIVERGENCE) != _ZERO
        )

    def select(
        self,
        state: StrategyState,
        prediction: Prediction,
        context: MarketContext,
        now_ms: int,
        days_since_trade: Decimal | None = None,
    ) -> StrategyType:
        """Update ``state`` for this step and return the active strategy."""
        state.history.push(prediction.features)

        if self.should_persist(state, prediction.confidence, now_ms):
            return state.current

        chosen = self.classify(state.history, context, days_since_trade)
        if chosen != state.current:
            logger.info(
                "strategy_transition",
                previous=state.current.value,
                current=chosen.value,
                confidence=str(prediction.confidence),
                trades_in_previous=state.trade_count,
                profile=get_profile(chosen, self._profiles).to_dict(),
            )
            state.current = chosen
            state.start_timestamp_ms = now_ms
            state.trade_count = 0
            state.transitions += 1
        elif state.start_timestamp_ms is None:
            state.start_timestamp_ms = now_ms

        return state.current

    @staticmethod
    def record_trade(state: StrategyState) -> None:
        """Count a trade against the active strategy."""
        state.trade_count += 1
