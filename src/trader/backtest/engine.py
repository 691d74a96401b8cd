"""Walk-forward backtest engine.

Replays the decision loop one bar at a time over historical data:

  1. Slice history up to the current bar (no look-ahead).
  2. Predictor -> TradeDecisionEngine with the run's position/strategy state.
  3. Apply the emitted trade to cash and holdings.
  4. Record the marked-to-market portfolio value.

Each step depends on the state mutated by the previous one, so the loop is
strictly sequential. Predictor errors are not caught: a failed step fails
the run, since skipping it would corrupt the return and drawdown series.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
CRITICAL: Never use wall-clock time inside the loop -- always use bar timestamps.
"""

from decimal import Decimal

from trader.analytics.metrics import (
    annualized_return,
    daily_returns,
    max_drawdown,
    sharpe_ratio,
    win_rate,
)
from trader.backtest.models import (
    BacktestConfig,
    BacktestMetrics,
    BacktestResult,
    PortfolioPoint,
)
from trader.data.provider import HistoricalDataProvider
from trader.decision.engine import TradeDecisionEngine
from trader.exceptions import InsufficientHistoryError
from trader.logging import get_logger
from trader.models import PositionState, PriceSeries, Trade, TradeType, days_between
from trader.signals.predictor import Predictor
from trader.strategy.models import StrategyState

logger = get_logger(__name__)

_ZERO = Decimal("0")


class BacktestEngine:
    """Drives the TradeDecisionEngine across a historical window.

    Args:
        config: Window, capital, and warm-up configuration.
        provider: Source of primary and reference history.
        predictor: Prediction source (model-backed or a deterministic stub).
        decision_engine: Decision logic. Defaults to TradeDecisionEngine().
    """

    def __init__(
        self,
        config: BacktestConfig,
        provider: HistoricalDataProvider,
        predictor: Predictor,
        decision_engine: TradeDecisionEngine | None = None,
    ) -> None:
        self._config = config
        self._provider = provider
        self._predictor = predictor
        self._decision_engine = decision_engine or TradeDecisionEngine()

    async def load_series(self) -> tuple[PriceSeries, PriceSeries]:
        """Fetch and validate the primary and reference series.

        Raises:
            SeriesMismatchError: If the series differ in length or timestamps.
        """
        primary = await self._provider.get_historical_data(
            self._config.symbol, self._config.start_days_ago
        )
        reference = await self._provider.get_historical_data(
            self._config.reference_symbol, self._config.start_days_ago
        )
        primary.check_aligned(reference)
        return primary, reference

    def step_range(self, length: int) -> range:
        """Bar indices the loop visits for a series of ``length`` bars.

        Raises:
            InsufficientHistoryError: If no bar is left after warm-up and margins.
        """
        c = self._config
        stop = length - c.end_days_ago - c.safety_margin_days
        if c.warmup_days >= stop:
            raise InsufficientHistoryError(
                f"{length} bars leave nothing to test after {c.warmup_days} warm-up, "
                f"{c.end_days_ago} end offset and {c.safety_margin_days} safety margin"
            )
        return range(c.warmup_days, stop, max(1, c.step_days))

    def periods_per_year(self) -> Decimal:
        """Sharpe annualization for returns sampled every ``step_days`` bars."""
        c = self._config
        return Decimal(c.annualization_days) / Decimal(max(1, c.step_days))

    async def run(self) -> BacktestResult:
        """Execute the backtest and return its result.

        Raises:
            PreconditionError: On misaligned or too-short history.
            TraderError: Whatever the predictor raises, unchanged.
        """
        c = self._config
        primary, reference = await self.load_series()
        steps = self.step_range(len(primary))

        cash = c.initial_capital
        position = PositionState()
        strategy_state = StrategyState()
        trades: list[Trade] = []
        history: list[PortfolioPoint] = []
        realized: list[Decimal] = []
        holding_days: list[Decimal] = []

        logger.info(
            "backtest_starting",
            symbol=c.symbol,
            reference_symbol=c.reference_symbol,
            bars=len(primary),
            first_step=steps.start,
            last_step=steps[-1],
            initial_capital=str(c.initial_capital),
        )

        for i in steps:
            end = i + 1
            prices = primary.prices[:end]
            volumes = primary.volumes[:end]
            timestamp_ms = primary.timestamps_ms[i]
            price = prices[-1]

            position.update_peak(price)

            prediction = await self._predictor.predict(
                prices, volumes, reference.prices[:end], reference.volumes[:end]
            )
            decision = self._decision_engine.decide(
                prediction, position, strategy_state, cash, prices, volumes, timestamp_ms
            )

            trade = decision.trade
            if trade is not None and trade.trade_type == TradeType.BUY:
                cash -= trade.usd_value
                position.apply_buy(trade)
                trades.append(trade)
            elif trade is not None and trade.trade_type == TradeType.SELL:
                holding_days.append(position.days_held(timestamp_ms))
                cash += trade.usd_value
                realized.append(position.apply_sell(trade))
                trades.append(trade)

            history.append(
                PortfolioPoint(timestamp_ms=timestamp_ms, value=cash + position.holdings * price)
            )

        result = self._build_result(history, trades, realized, holding_days)
        logger.info(
            "backtest_complete",
            symbol=c.symbol,
            total_trades=result.metrics.total_trades,
            total_return=str(result.metrics.total_return),
            sharpe_ratio=str(result.metrics.sharpe_ratio),
            max_drawdown=str(result.metrics.max_drawdown),
            strategy_transitions=strategy_state.transitions,
        )
        return result

    def _build_result(
        self,
        history: list[PortfolioPoint],
        trades: list[Trade],
        realized: list[Decimal],
        holding_days: list[Decimal],
    ) -> BacktestResult:
        c = self._config
        values = [p.value for p in history]
        returns = daily_returns(values)
        final_value = values[-1] if values else c.initial_capital
        total_return = (
            (final_value - c.initial_capital) / c.initial_capital
            if c.initial_capital > _ZERO
            else _ZERO
        )
        duration = (
            days_between(history[0].timestamp_ms, history[-1].timestamp_ms) if history else _ZERO
        )
        wins = sum(1 for pnl in realized if pnl > _ZERO)

        metrics = BacktestMetrics(
            final_value=final_value,
            total_return=total_return,
            annualized_return=annualized_return(total_return, duration),
            total_trades=len(trades),
            completed_trades=len(realized),
            winning_trades=wins,
            losing_trades=len(realized) - wins,
            win_rate=win_rate(realized),
            sharpe_ratio=sharpe_ratio(returns, self.periods_per_year()),
            max_drawdown=max_drawdown(values),
            average_holding_days=(
                sum(holding_days, _ZERO) / Decimal(len(holding_days)) if holding_days else _ZERO
            ),
            duration_days=duration,
        )
        return BacktestResult(
            config=c,
            metrics=metrics,
            portfolio_history=history,
            daily_returns=returns,
            trades=trades,
        )
