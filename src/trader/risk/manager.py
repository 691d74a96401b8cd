"""Volatility-scaled exits and position sizing.

Stop-loss, trailing-stop, and profit-take levels scale with ATR, with
multipliers taken from the active StrategyProfile and nudged by confidence
and momentum. Position size scales inversely with volatility, then with
trend, confidence, win streak, and conviction, and is always clamped to
the strategy's maximum fraction of capital.

CRITICAL: All computations use Decimal. Never use float.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from trader.config import RiskSettings
from trader.models import PositionState, StrategyType
from trader.strategy.profiles import StrategyProfile

_ZERO = Decimal("0")
_ONE = Decimal("1")


@dataclass(frozen=True)
class RiskLevels:
    """Exit levels for an open position at one step.

    trailing_stop is None while the trailing stop is not armed.
    """

    stop_loss: Decimal
    trailing_stop: Decimal | None
    profit_take: Decimal
    min_hold_days: Decimal

    def to_dict(self) -> dict:
        return {
            "stop_loss": str(self.stop_loss),
            "trailing_stop": str(self.trailing_stop) if self.trailing_stop is not None else None,
            "profit_take": str(self.profit_take),
            "min_hold_days": str(self.min_hold_days),
        }


class RiskManager:
    """Computes exit levels and entry sizes for the active strategy.

    Args:
        settings: Global risk multipliers and caps.
        atr_floor: Lower bound on ATR ratio when sizing.
    """

    def __init__(
        self,
        settings: RiskSettings | None = None,
        atr_floor: Decimal = Decimal("0.01"),
    ) -> None:
        self._settings = settings or RiskSettings()
        self._atr_floor = atr_floor

    @property
    def settings(self) -> RiskSettings:
        return self._settings

    # ------------------------------------------------------------------
    # Exits
    # ------------------------------------------------------------------

    def stop_loss_multiplier(self, profile: StrategyProfile, confidence: Decimal) -> Decimal:
        """Profile multiplier, tightened when confidence is high."""
        if confidence > self._settings.high_confidence:
            return profile.stop_loss_multiplier * self._settings.stop_loss_tighten
        return profile.stop_loss_multiplier

    def stop_loss_distance(
        self, profile: StrategyProfile, confidence: Decimal, atr: Decimal
    ) -> Decimal:
        """Stop distance below the buy price, in price units."""
        return atr * self.stop_loss_multiplier(profile, confidence)

    def stop_loss_price(
        self,
        position: PositionState,
        profile: StrategyProfile,
        confidence: Decimal,
        atr: Decimal,
    ) -> Decimal:
        return position.last_buy_price - self.stop_loss_distance(profile, confidence, atr)

    def trailing_stop_price(
        self,
        position: PositionState,
        price: Decimal,
        profile: StrategyProfile,
        momentum: Decimal,
    ) -> Decimal | None:
        """Trailing stop below the peak, or None until the gain threshold is reached."""
        if position.last_buy_price <= _ZERO:
            return None
        gain = (price - position.last_buy_price) / position.last_buy_price
        if gain < self._settings.min_profit_threshold:
            return None
        fraction = profile.trailing_stop_fraction
        if momentum > self._settings.strong_momentum:
            fraction *= self._settings.trailing_tighten
        return position.peak_price * (_ONE - fraction)

    def profit_take_multiplier(self, profile: StrategyProfile, momentum: Decimal) -> Decimal:
        """Profile multiplier, boosted on strong momentum and capped."""
        multiplier = profile.profit_take_multiplier
        if momentum > self._settings.profit_take_momentum:
            multiplier *= self._settings.profit_take_boost
        return min(multiplier, self._settings.max_profit_take)

    def profit_take_price(
        self,
        position: PositionState,
        profile: StrategyProfile,
        momentum: Decimal,
        atr: Decimal,
    ) -> Decimal:
        return position.last_buy_price + atr * self.profit_take_multiplier(profile, momentum)

    def min_hold_days(self, profile: StrategyProfile, atr_ratio: Decimal) -> Decimal:
        """ATR-adjusted minimum hold, between the profile floor and max_hold_days."""
        scaled = Decimal(profile.min_hold_days) * (_ONE + atr_ratio)
        capped = min(Decimal(self._settings.max_hold_days), scaled)
        return max(Decimal(profile.hold_floor_days), capped)

    def levels(
        self,
        position: PositionState,
        price: Decimal,
        profile: StrategyProfile,
        confidence: Decimal,
        momentum: Decimal,
        atr: Decimal,
        atr_ratio: Decimal,
    ) -> RiskLevels:
        """All exit levels for an open position at ``price``."""
        return RiskLevels(
            stop_loss=self.stop_loss_price(position, profile, confidence, atr),
            trailing_stop=self.trailing_stop_price(position, price, profile, momentum),
            profit_take=self.profit_take_price(position, profile, momentum, atr),
            min_hold_days=self.min_hold_days(profile, atr_ratio),
        )

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    def max_size(self, profile: StrategyProfile, atr_ratio: Decimal) -> Decimal:
        """Largest fraction of capital allowed for this entry."""
        cap = min(profile.max_position_size, self._settings.max_position_fraction)
        if atr_ratio > self._settings.high_atr_ratio:
            cap = min(cap, self._settings.high_atr_max_size)
        return cap

    def position_size(
        self,
        strategy: StrategyType,
        profile: StrategyProfile,
        atr_ratio: Decimal,
        trend_slope: Decimal,
        confidence: Decimal,
        buy_prob: Decimal,
        win_streak: int = 0,
    ) -> Decimal:
        """Fraction of capital to commit, in (0, max_size].

        base / max(atr_ratio, floor), capped, then boosted by trend slope,
        confidence, Momentum win streak, and buy_prob over its threshold.
        The result is clamped to max_size again after the boosts.
        """
        s = self._settings
        cap = self.max_size(profile, atr_ratio)
        size = min(s.base_position_size / max(atr_ratio, self._atr_floor), cap)

        if trend_slope > s.trend_boost_slope:
            size *= s.trend_boost
        if confidence > s.high_confidence:
            size *= s.confidence_boost
        if strategy == StrategyType.MOMENTUM and win_streak > 1:
            size *= _ONE + s.win_streak_step * Decimal(win_streak)

        if profile.buy_prob_threshold > _ZERO:
            conviction = min(buy_prob / profile.buy_prob_threshold, s.buy_prob_cap_multiplier)
        else:
            conviction = s.buy_prob_cap_multiplier
        size *= conviction

        return min(size, cap)
