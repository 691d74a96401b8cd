"""Single-step buy/sell/hold decision.

Combines the strategy selector, the risk manager, and the current position
into one decision per bar:

  1. Global pre-filter: low confidence or extreme volatility -> no trade.
  2. Strategy selection (persistence guard, then regime rules).
  3. Holding: respect the ATR-adjusted minimum hold, then sell on the first
     true exit condition of the active strategy.
  4. Flat: buy when the strategy's entry conjunction, the trade-quality
     filter, and the profit-potential filter all pass.

Only the selector mutates StrategyState; PositionState is read here and
updated by the caller once a trade is applied.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from trader.exceptions import UnknownStrategyError
from trader.logging import get_logger
from trader.models import PositionState, StrategyType, Trade, TradeType
from trader.risk.manager import RiskLevels, RiskManager
from trader.signals.models import Prediction
from trader.strategy.models import StrategyState
from trader.strategy.profiles import StrategyProfile
from trader.strategy.selector import MarketContext, StrategySelector

logger = get_logger(__name__)

_ZERO = Decimal("0")
_ONE = Decimal("1")
_TREND_SELL_MARGIN = Decimal("0.05")


@dataclass(frozen=True)
class Decision:
    """Outcome of one decision step.

    Attributes:
        trade: Emitted trade, or None for hold/no-trade.
        confidence: Prediction confidence.
        buy_prob: Prediction buy probability.
        sell_prob: Prediction sell probability.
        strategy: Active strategy after selection (None when pre-filtered).
        reason: Short label for why the step ended as it did.
    """

    trade: Trade | None
    confidence: Decimal
    buy_prob: Decimal
    sell_prob: Decimal
    strategy: StrategyType | None = None
    reason: str = "hold"

    def to_dict(self) -> dict:
        return {
            "trade": self.trade.to_dict() if self.trade is not None else None,
            "confidence": str(self.confidence),
            "buy_prob": str(self.buy_prob),
            "sell_prob": str(self.sell_prob),
            "strategy": self.strategy.value if self.strategy is not None else None,
            "reason": self.reason,
        }


class TradeDecisionEngine:
    """Turns a Prediction plus position/strategy state into one Decision.

    Args:
        selector: Strategy selector (owns StrategyState transitions).
        risk_manager: Exit levels and position sizing.
    """

    def __init__(
        self,
        selector: StrategySelector | None = None,
        risk_manager: RiskManager | None = None,
    ) -> None:
        self._selector = selector or StrategySelector()
        self._risk = risk_manager or RiskManager()

    @property
    def selector(self) -> StrategySelector:
        return self._selector

    @property
    def risk_manager(self) -> RiskManager:
        return self._risk

    def decide(
        self,
        prediction: Prediction,
        position: PositionState,
        strategy_state: StrategyState,
        capital: Decimal,
        prices: list[Decimal],
        volumes: list[Decimal],
        timestamp_ms: int,
    ) -> Decision:
        """Decide buy, sell, or hold for the latest bar.

        Args:
            prediction: Model output with embedded features for this bar.
            position: Current position (read only).
            strategy_state: Selector state for this run.
            capital: Available cash in quote currency.
            prices: Price prefix ending at this bar.
            volumes: Matching volumes.
            timestamp_ms: Time of this bar.

        Returns:
            Decision carrying the trade (if any) and the prediction summary.
        """
        features = prediction.features
        risk = self._risk.settings

        if (
            prediction.confidence < risk.min_confidence
            or features.atr_ratio > risk.max_atr_ratio
        ):
            return self._no_trade(prediction, None, "filtered")

        context = self._selector.context(prices, volumes)
        days_since_trade = (
            position.days_held(timestamp_ms) if position.buy_timestamp_ms is not None else None
        )
        strategy = self._selector.select(
            strategy_state, prediction, context, timestamp_ms, days_since_trade
        )
        profile = self._selector.profile_for(strategy_state)

        if position.is_open:
            return self._decide_exit(
                prediction, position, strategy_state, strategy, profile, context, timestamp_ms
            )
        return self._decide_entry(
            prediction, strategy_state, strategy, profile, context, capital,
            days_since_trade, timestamp_ms, position.win_streak,
        )

    # ------------------------------------------------------------------
    # Exits
    # ------------------------------------------------------------------

    def _decide_exit(
        self,
        prediction: Prediction,
        position: PositionState,
        strategy_state: StrategyState,
        strategy: StrategyType,
        profile: StrategyProfile,
        context: MarketContext,
        timestamp_ms: int,
    ) -> Decision:
        levels = self.exit_levels(prediction, position, profile, context.price)
        if position.days_held(timestamp_ms) < levels.min_hold_days:
            return self._no_trade(prediction, strategy, "min_hold")

        reason = self.sell_reason(prediction, position, strategy, profile, context)
        if reason is None:
            return self._no_trade(prediction, strategy, "hold")

        s = self._risk.settings
        effective_price = context.price * (_ONE - s.slippage)
        proceeds = position.holdings * effective_price - s.commission
        trade = Trade(
            trade_type=TradeType.SELL,
            price=effective_price,
            timestamp_ms=timestamp_ms,
            asset_amount=position.holdings,
            usd_value=proceeds,
            buy_price=position.last_buy_price,
            strategy=strategy,
            confidence=prediction.confidence,
        )
        self._selector.record_trade(strategy_state)
        logger.info(
            "sell_signal",
            strategy=strategy.value,
            reason=reason,
            price=str(effective_price),
            amount=str(position.holdings),
            proceeds=str(proceeds),
            levels=levels.to_dict(),
        )
        return Decision(
            trade=trade,
            confidence=prediction.confidence,
            buy_prob=prediction.buy_prob,
            sell_prob=prediction.sell_prob,
            strategy=strategy,
            reason=reason,
        )

    def exit_levels(
        self,
        prediction: Prediction,
        position: PositionState,
        profile: StrategyProfile,
        price: Decimal,
    ) -> RiskLevels:
        """Stop, trailing stop, profit target, and minimum hold for this bar."""
        f = prediction.features
        return self._risk.levels(
            position, price, profile, prediction.confidence, f.momentum, f.atr, f.atr_ratio
        )

    def sell_reason(
        self,
        prediction: Prediction,
        position: PositionState,
        strategy: StrategyType,
        profile: StrategyProfile,
        context: MarketContext,
    ) -> str | None:
        """Name of the first exit condition that holds, or None.

        Raises:
            UnknownStrategyError: If ``strategy`` has no exit rules.
        """
        f = prediction.features
        price = context.price

        levels = self.exit_levels(prediction, position, profile, price)
        if price <= levels.stop_loss:
            return "stop_loss"
        if levels.trailing_stop is not None and price <= levels.trailing_stop:
            return "trailing_stop"
        if price >= levels.profit_take:
            return "profit_take"

        sell_threshold = profile.sell_prob_threshold
        if strategy in (StrategyType.MOMENTUM, StrategyType.TREND_FOLLOWING):
            sell_threshold += _TREND_SELL_MARGIN
        if prediction.sell_prob > sell_threshold:
            return "sell_probability"

        if f.momentum < profile.momentum_exit:
            return "momentum_exit"
        if f.short_momentum < profile.short_momentum_exit:
            return "short_momentum_exit"

        if strategy in (StrategyType.MOMENTUM, StrategyType.TREND_FOLLOWING):
            if f.trend_strength < profile.trend_reversal_exit:
                return "trend_reversal"
        elif strategy == StrategyType.BREAKOUT:
            if f.atr_breakout < _ONE and f.short_momentum < _ZERO:
                return "breakout_failed"
        elif strategy == StrategyType.MEAN_REVERSION:
            if context.deviation > _ZERO and price > position.last_buy_price:
                return "mean_reverted"
        else:
            raise UnknownStrategyError(f"No exit rules for strategy {strategy!r}")

        return None

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _decide_entry(
        self,
        prediction: Prediction,
        strategy_state: StrategyState,
        strategy: StrategyType,
        profile: StrategyProfile,
        context: MarketContext,
        capital: Decimal,
        days_since_trade: Decimal | None,
        timestamp_ms: int,
        win_streak: int,
    ) -> Decision:
        if capital <= _ZERO:
            return self._no_trade(prediction, strategy, "no_capital")
        if not self.buy_conditions_met(prediction, strategy, profile, context, days_since_trade):
            return self._no_trade(prediction, strategy, "hold")

        s = self._risk.settings
        f = prediction.features
        if prediction.buy_prob * prediction.confidence <= s.min_trade_quality:
            return self._no_trade(prediction, strategy, "low_quality")

        profit_multiplier = self._risk.profit_take_multiplier(profile, f.momentum)
        if context.price <= _ZERO or f.atr * profit_multiplier / context.price < s.min_profit_potential:
            return self._no_trade(prediction, strategy, "low_profit_potential")

        size = self._risk.position_size(
            strategy=strategy,
            profile=profile,
            atr_ratio=f.atr_ratio,
            trend_slope=f.trend_slope,
            confidence=prediction.confidence,
            buy_prob=prediction.buy_prob,
            win_streak=win_streak,
        )
        spend = capital * size
        if spend <= s.commission:
            return self._no_trade(prediction, strategy, "below_commission")

        effective_price = context.price * (_ONE + s.slippage)
        amount = (spend - s.commission) / effective_price
        trade = Trade(
            trade_type=TradeType.BUY,
            price=effective_price,
            timestamp_ms=timestamp_ms,
            asset_amount=amount,
            usd_value=spend,
            strategy=strategy,
            confidence=prediction.confidence,
        )
        self._selector.record_trade(strategy_state)
        logger.info(
            "buy_signal",
            strategy=strategy.value,
            price=str(effective_price),
            amount=str(amount),
            spend=str(spend),
            position_size=str(size),
        )
        return Decision(
            trade=trade,
            confidence=prediction.confidence,
            buy_prob=prediction.buy_prob,
            sell_prob=prediction.sell_prob,
            strategy=strategy,
            reason="buy_conditions",
        )

    def buy_conditions_met(
        self,
        prediction: Prediction,
        strategy: StrategyType,
        profile: StrategyProfile,
        context: MarketContext,
        days_since_trade: Decimal | None = None,
    ) -> bool:
        """Entry conjunction for the active strategy.

        Raises:
            UnknownStrategyError: If ``strategy`` has no entry rules.
        """
        f = prediction.features
        regime = self._selector.settings

        if not (
            prediction.buy_prob > profile.buy_prob_threshold
            and prediction.confidence >= profile.min_confidence
        ):
            return False

        if strategy == StrategyType.MOMENTUM:
            return (
                f.short_momentum > regime.short_momentum_threshold
                and f.volatility_adjusted_momentum > regime.volatility_momentum_threshold
                and context.ema_bullish
            )
        if strategy == StrategyType.MEAN_REVERSION:
            return (
                context.deviation < -regime.deviation_threshold
                and f.short_momentum > -regime.momentum_ceiling
                and f.momentum < regime.momentum_ceiling
            )
        if strategy == StrategyType.BREAKOUT:
            return (
                f.atr_breakout > self._selector.breakout_threshold(days_since_trade)
                and context.volume > context.average_volume * regime.volume_multiplier
                and f.short_momentum > _ZERO
            )
        if strategy == StrategyType.TREND_FOLLOWING:
            return (
                f.trend_slope > regime.trend_slope_threshold
                and f.trend_strength > regime.trend_strength_threshold
                and context.ema_bullish
            )
        raise UnknownStrategyError(f"No entry rules for strategy {strategy!r}")

    @staticmethod
    def _no_trade(
        prediction: Prediction, strategy: StrategyType | None, reason: str
    ) -> Decision:
        logger.debug(
            "no_trade",
            reason=reason,
            strategy=strategy.value if strategy is not None else None,
            confidence=str(prediction.confidence),
        )
        return Decision(
            trade=None,
            confidence=prediction.confidence,
            buy_prob=prediction.buy_prob,
            sell_prob=prediction.sell_prob,
            strategy=strategy,
            reason=reason,
        )
