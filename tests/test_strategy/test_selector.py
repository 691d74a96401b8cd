"""Tests for StrategySelector: regime rules, persistence guard, transitions."""

from decimal import Decimal

import pytest

from trader.config import IndicatorSettings, RegimeSettings
from trader.models import MS_PER_DAY, StrategyType
from trader.signals.models import FeatureSnapshot, Prediction
from trader.strategy.models import FeatureHistory, StrategyState
from trader.strategy.selector import MarketContext, StrategySelector, compute_market_context

T0 = 1_700_000_000_000


def _features(
    trend_slope: str = "0",
    trend_strength: str = "0",
    short_momentum: str = "0",
    volatility_adjusted_momentum: str = "0",
    atr_breakout: str = "0",
    momentum: str = "0",
    momentum_divergence: str = "0",
) -> FeatureSnapshot:
    return FeatureSnapshot(
        price=Decimal("100"),
        momentum=Decimal(momentum),
        short_momentum=Decimal(short_momentum),
        trend_slope=Decimal(trend_slope),
        atr=Decimal("1"),
        atr_ratio=Decimal("0.01"),
        momentum_divergence=Decimal(momentum_divergence),
        volatility_adjusted_momentum=Decimal(volatility_adjusted_momentum),
        trend_strength=Decimal(trend_strength),
        atr_breakout=Decimal(atr_breakout),
    )


_TREND = {"trend_slope": "0.008", "trend_strength": "0.1", "short_momentum": "0.02"}
_MOMENTUM = {
    "trend_slope": "0.001",
    "trend_strength": "0.001",
    "short_momentum": "0.02",
    "volatility_adjusted_momentum": "1",
}
_BREAKOUT = {"short_momentum": "0.005", "atr_breakout": "1.5"}
_REVERTING = {"momentum": "0.01", "momentum_divergence": "-0.004"}


def _context(
    bullish: bool = True,
    volume: str = "100",
    average_volume: str = "100",
    deviation: str = "0",
) -> MarketContext:
    return MarketContext(
        price=Decimal("100"),
        ema_short=Decimal("101") if bullish else Decimal("99"),
        ema_long=Decimal("100"),
        deviation=Decimal(deviation),
        volume=Decimal(volume),
        average_volume=Decimal(average_volume),
    )


def _history(**features: str) -> FeatureHistory:
    history = FeatureHistory()
    history.push(_features(**features))
    return history


def _prediction(confidence: str = "0.6", **features: str) -> Prediction:
    return Prediction(
        buy_prob=Decimal(confidence),
        sell_prob=Decimal("0.1"),
        features=_features(**features),
    )


@pytest.fixture
def selector() -> StrategySelector:
    return StrategySelector(RegimeSettings(), IndicatorSettings())


class TestClassify:
    """Priority order TrendFollowing > Momentum > Breakout > MeanReversion."""

    def test_trend_following(self, selector: StrategySelector) -> None:
        assert selector.classify(_history(**_TREND), _context()) == StrategyType.TREND_FOLLOWING

    def test_trend_needs_bullish_emas(self, selector: StrategySelector) -> None:
        result = selector.classify(_history(**_TREND), _context(bullish=False))
        assert result == StrategyType.MEAN_REVERSION

    def test_momentum(self, selector: StrategySelector) -> None:
        assert selector.classify(_history(**_MOMENTUM), _context()) == StrategyType.MOMENTUM

    def test_breakout(self, selector: StrategySelector) -> None:
        result = selector.classify(
            _history(**_BREAKOUT), _context(volume="200", average_volume="100"), Decimal("1")
        )
        assert result == StrategyType.BREAKOUT

    def test_breakout_needs_volume(self, selector: StrategySelector) -> None:
        result = selector.classify(
            _history(**_BREAKOUT), _context(volume="110", average_volume="100"), Decimal("1")
        )
        assert result == StrategyType.MEAN_REVERSION

    def test_idle_relaxes_breakout_threshold(self, selector: StrategySelector) -> None:
        features = {"short_momentum": "0.005", "atr_breakout": "1.1"}
        context = _context(volume="200", average_volume="100")
        assert selector.classify(_history(**features), context, Decimal("1")) == StrategyType.MEAN_REVERSION
        assert selector.classify(_history(**features), context, Decimal("4")) == StrategyType.BREAKOUT

    def test_default_is_mean_reversion(self, selector: StrategySelector) -> None:
        assert selector.classify(FeatureHistory(), _context()) == StrategyType.MEAN_REVERSION

    def test_uses_smoothed_features(self, selector: StrategySelector) -> None:
        """One trending step among flat ones averages below the thresholds."""
        history = FeatureHistory()
        history.push(_features())
        history.push(_features())
        history.push(_features(**_TREND))
        assert selector.classify(history, _context()) == StrategyType.MEAN_REVERSION

    def test_stretched_quiet_market_is_mean_reversion(self, selector: StrategySelector) -> None:
        result = selector.classify(_history(**_REVERTING), _context(deviation="-0.05"))
        assert result == StrategyType.MEAN_REVERSION


class TestMeanReversionSignal:
    """Explicit MeanReversion rule on deviation, momentum, and divergence."""

    def test_matches(self, selector: StrategySelector) -> None:
        assert selector.mean_reversion_signal(_history(**_REVERTING), _context(deviation="0.05"))
        assert selector.mean_reversion_signal(_history(**_REVERTING), _context(deviation="-0.05"))

    def test_small_deviation(self, selector: StrategySelector) -> None:
        assert not selector.mean_reversion_signal(
            _history(**_REVERTING), _context(deviation="0.02")
        )

    def test_strong_momentum(self, selector: StrategySelector) -> None:
        history = _history(momentum="-0.05", momentum_divergence="-0.004")
        assert not selector.mean_reversion_signal(history, _context(deviation="-0.05"))

    def test_needs_divergence(self, selector: StrategySelector) -> None:
        history = _history(momentum="0.01", momentum_divergence="0")
        assert not selector.mean_reversion_signal(history, _context(deviation="-0.05"))

    def test_uses_averaged_divergence(self, selector: StrategySelector) -> None:
        """Divergences that cancel over the window do not count."""
        history = FeatureHistory()
        history.push(_features(momentum_divergence="0.002"))
        history.push(_features(momentum_divergence="-0.004"))
        history.push(_features(momentum_divergence="0.002"))
        assert not selector.mean_reversion_signal(history, _context(deviation="0.05"))

    def test_empty_history(self, selector: StrategySelector) -> None:
        assert not selector.mean_reversion_signal(FeatureHistory(), _context(deviation="0.05"))


class TestBreakoutThreshold:
    """Relaxation after idle days."""

    @pytest.mark.parametrize(
        ("days", "expected"),
        [(None, "1.05"), ("0", "1.2"), ("3", "1.2"), ("3.5", "1.05")],
    )
    def test_threshold(self, selector: StrategySelector, days: str | None, expected: str) -> None:
        value = Decimal(days) if days is not None else None
        assert selector.breakout_threshold(value) == Decimal(expected)


class TestShouldPersist:
    """Persistence guard."""

    def test_never_activated_is_not_guarded(self, selector: StrategySelector) -> None:
        assert selector.should_persist(StrategyState(), Decimal("0.5"), T0) is False

    def test_young_by_trades(self, selector: StrategySelector) -> None:
        state = StrategyState(start_timestamp_ms=T0, trade_count=1)
        assert selector.should_persist(state, Decimal("0.5"), T0 + 30 * MS_PER_DAY) is True

    def test_young_by_days(self, selector: StrategySelector) -> None:
        state = StrategyState(start_timestamp_ms=T0, trade_count=10)
        assert selector.should_persist(state, Decimal("0.5"), T0 + 2 * MS_PER_DAY) is True

    def test_mature(self, selector: StrategySelector) -> None:
        state = StrategyState(start_timestamp_ms=T0, trade_count=3)
        assert selector.should_persist(state, Decimal("0.5"), T0 + 5 * MS_PER_DAY) is False

    def test_high_confidence_overrides(self, selector: StrategySelector) -> None:
        state = StrategyState(start_timestamp_ms=T0, trade_count=0)
        assert selector.should_persist(state, Decimal("0.8"), T0 + MS_PER_DAY) is False


class TestSelect:
    """select() mutates StrategyState."""

    def test_transition(self, selector: StrategySelector) -> None:
        state = StrategyState()
        result = selector.select(state, _prediction(**_TREND), _context(), T0)

        assert result == StrategyType.TREND_FOLLOWING
        assert state.current == StrategyType.TREND_FOLLOWING
        assert state.start_timestamp_ms == T0
        assert state.trade_count == 0
        assert state.transitions == 1
        assert len(state.history) == 1

    def test_first_selection_without_transition_starts_clock(self, selector: StrategySelector) -> None:
        state = StrategyState()
        assert selector.select(state, _prediction(), _context(), T0) == StrategyType.MEAN_REVERSION
        assert state.start_timestamp_ms == T0
        assert state.transitions == 0

    def test_guard_holds_young_strategy(self, selector: StrategySelector) -> None:
        state = StrategyState()
        selector.select(state, _prediction(**_TREND), _context(), T0)
        # Flat features for three steps would classify as MeanReversion
        for day in (1, 2, 3):
            result = selector.select(state, _prediction("0.6"), _context(), T0 + day * MS_PER_DAY)
            assert result == StrategyType.TREND_FOLLOWING
        assert state.transitions == 1

    def test_high_confidence_switches_young_strategy(self, selector: StrategySelector) -> None:
        state = StrategyState()
        selector.select(state, _prediction(**_TREND), _context(), T0)
        for day in (1, 2, 3):
            result = selector.select(state, _prediction("0.9"), _context(), T0 + day * MS_PER_DAY)
        assert result == StrategyType.MEAN_REVERSION
        assert state.transitions == 2

    def test_history_updated_even_when_guarded(self, selector: StrategySelector) -> None:
        state = StrategyState()
        selector.select(state, _prediction(**_TREND), _context(), T0)
        selector.select(state, _prediction(), _context(), T0 + MS_PER_DAY)
        assert len(state.history) == 2

    def test_record_trade(self, selector: StrategySelector) -> None:
        state = StrategyState()
        selector.record_trade(state)
        assert state.trade_count == 1


class TestMarketContext:
    """compute_market_context()."""

    def test_rising_series(self, rising_prices: list[Decimal]) -> None:
        volumes = [Decimal("100")] * 59 + [Decimal("300")]
        context = compute_market_context(
            rising_prices, volumes, RegimeSettings(), IndicatorSettings()
        )
        assert context.ema_bullish
        assert context.deviation > 0
        assert context.volume == Decimal("300")
        assert context.average_volume == Decimal("100")

    def test_flat_series(self, flat_prices: list[Decimal]) -> None:
        volumes = [Decimal("100")] * len(flat_prices)
        context = compute_market_context(
            flat_prices, volumes, RegimeSettings(), IndicatorSettings()
        )
        assert not context.ema_bullish
        assert context.deviation == 0

    def test_single_bar_uses_own_volume(self) -> None:
        context = compute_market_context(
            [Decimal("10")], [Decimal("5")], RegimeSettings(), IndicatorSettings()
        )
        assert context.average_volume == Decimal("5")
