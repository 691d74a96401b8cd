"""Per-strategy risk and threshold bundles.

One frozen profile per regime, enumerated explicitly. The selector loads
the active profile on every transition; the risk manager and decision
engine read all strategy-specific numbers from it.
"""

from dataclasses import dataclass
from decimal import Decimal

from trader.exceptions import UnknownStrategyError
from trader.models import StrategyType


@dataclass(frozen=True)
class StrategyProfile:
    """Thresholds and multipliers for one strategy.

    Attributes:
        min_hold_days: Base minimum hold before any sell, scaled up by ATR.
        hold_floor_days: Hard lower bound on the ATR-adjusted hold.
        stop_loss_multiplier: Stop distance in ATRs below the buy price.
        trailing_stop_fraction: Trailing stop distance below the peak.
        profit_take_multiplier: Profit target distance in ATRs above the buy price.
        min_confidence: Minimum prediction confidence to enter.
        buy_prob_threshold: buy_prob must exceed this to enter.
        sell_prob_threshold: sell_prob above this exits.
        max_position_size: Largest fraction of capital per entry.
        momentum_exit: Exit when momentum falls below this.
        short_momentum_exit: Exit when short momentum falls below this.
        trend_reversal_exit: Exit when trend strength falls below this.
    """

    min_hold_days: int
    hold_floor_days: int
    stop_loss_multiplier: Decimal
    trailing_stop_fraction: Decimal
    profit_take_multiplier: Decimal
    min_confidence: Decimal
    buy_prob_threshold: Decimal
    sell_prob_threshold: Decimal
    max_position_size: Decimal
    momentum_exit: Decimal
    short_momentum_exit: Decimal
    trend_reversal_exit: Decimal

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output, Decimals as strings."""
        return {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in self.__dict__.items()
        }


STRATEGY_PROFILES: dict[StrategyType, StrategyProfile] = {
    StrategyType.MOMENTUM: StrategyProfile(
        min_hold_days=3,
        hold_floor_days=5,
        stop_loss_multiplier=Decimal("2.5"),
        trailing_stop_fraction=Decimal("0.06"),
        profit_take_multiplier=Decimal("2.5"),
        min_confidence=Decimal("0.55"),
        buy_prob_threshold=Decimal("0.6"),
        sell_prob_threshold=Decimal("0.6"),
        max_position_size=Decimal("0.25"),
        momentum_exit=Decimal("-0.025"),
        short_momentum_exit=Decimal("-0.008"),
        trend_reversal_exit=Decimal("-0.015"),
    ),
    StrategyType.MEAN_REVERSION: StrategyProfile(
        min_hold_days=2,
        hold_floor_days=3,
        stop_loss_multiplier=Decimal("2.0"),
        trailing_stop_fraction=Decimal("0.05"),
        profit_take_multiplier=Decimal("1.5"),
        min_confidence=Decimal("0.5"),
        buy_prob_threshold=Decimal("0.55"),
        sell_prob_threshold=Decimal("0.55"),
        max_position_size=Decimal("0.2"),
        momentum_exit=Decimal("-0.03"),
        short_momentum_exit=Decimal("-0.01"),
        trend_reversal_exit=Decimal("-0.02"),
    ),
    StrategyType.BREAKOUT: StrategyProfile(
        min_hold_days=3,
        hold_floor_days=5,
        stop_loss_multiplier=Decimal("3.0"),
        trailing_stop_fraction=Decimal("0.08"),
        profit_take_multiplier=Decimal("3.0"),
        min_confidence=Decimal("0.55"),
        buy_prob_threshold=Decimal("0.6"),
        sell_prob_threshold=Decimal("0.6"),
        max_position_size=Decimal("0.25"),
        momentum_exit=Decimal("-0.025"),
        short_momentum_exit=Decimal("-0.008"),
        trend_reversal_exit=Decimal("-0.015"),
    ),
    StrategyType.TREND_FOLLOWING: StrategyProfile(
        min_hold_days=5,
        hold_floor_days=5,
        stop_loss_multiplier=Decimal("3.5"),
        trailing_stop_fraction=Decimal("0.1"),
        profit_take_multiplier=Decimal("3.0"),
        min_confidence=Decimal("0.5"),
        buy_prob_threshold=Decimal("0.55"),
        sell_prob_threshold=Decimal("0.6"),
        max_position_size=Decimal("0.3"),
        momentum_exit=Decimal("-0.02"),
        short_momentum_exit=Decimal("-0.01"),
        trend_reversal_exit=Decimal("-0.015"),
    ),
}


def get_profile(
    strategy: StrategyType,
    profiles: dict[StrategyType, StrategyProfile] | None = None,
) -> StrategyProfile:
    """Look up the profile for ``strategy``.

    Raises:
        UnknownStrategyError: If no profile is registered for the value.
    """
    table = STRATEGY_PROFILES if profiles is None else profiles
    try:
        return table[strategy]
    except KeyError:
        raise UnknownStrategyError(f"No profile for strategy {strategy!r}") from None
