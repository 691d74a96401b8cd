"""High-level entry points for running backtests.

Provides build_decision_engine() for wiring components from AppSettings,
run_backtest() for a single run, run_periods() for rerunning one setup over
several history windows, and format_period_summary() for console output.
"""

import time
from decimal import Decimal

from trader.backtest.engine import BacktestEngine
from trader.backtest.models import BacktestConfig, BacktestResult, PeriodResult
from trader.config import AppSettings
from trader.data.provider import HistoricalDataProvider
from trader.decision.engine import TradeDecisionEngine
from trader.exceptions import TraderError
from trader.logging import bind_run_context, clear_run_context, get_logger
from trader.risk.manager import RiskManager
from trader.signals.predictor import Predictor
from trader.strategy.selector import StrategySelector

logger = get_logger(__name__)


def build_decision_engine(settings: AppSettings | None = None) -> TradeDecisionEngine:
    """Wire selector and risk manager from application settings."""
    if settings is None:
        settings = AppSettings()
    selector = StrategySelector(
        settings=settings.regime,
        indicator_settings=settings.indicators,
    )
    risk_manager = RiskManager(
        settings=settings.risk,
        atr_floor=settings.indicators.atr_floor,
    )
    return TradeDecisionEngine(selector=selector, risk_manager=risk_manager)


async def run_backtest(
    config: BacktestConfig,
    provider: HistoricalDataProvider,
    predictor: Predictor,
    settings: AppSettings | None = None,
) -> BacktestResult:
    """Run a single backtest with the given configuration.

    Args:
        config: Symbols, window, and capital.
        provider: Historical data source.
        predictor: Prediction source.
        settings: Thresholds for selector and risk manager. Defaults to AppSettings().

    Returns:
        BacktestResult with portfolio history and metrics.

    Raises:
        PreconditionError: On misaligned or too-short history.
        PredictionError: When the predictor fails on any step.
    """
    start_time = time.monotonic()
    bind_run_context(symbol=config.symbol, start_days_ago=config.start_days_ago)

    logger.info(
        "run_backtest_starting",
        reference_symbol=config.reference_symbol,
        end_days_ago=config.end_days_ago,
        step_days=config.step_days,
        initial_capital=str(config.initial_capital),
    )

    try:
        engine = BacktestEngine(
            config=config,
            provider=provider,
            predictor=predictor,
            decision_engine=build_decision_engine(settings),
        )
        result = await engine.run()

        elapsed = time.monotonic() - start_time
        logger.info(
            "run_backtest_complete",
            total_trades=result.metrics.total_trades,
            total_return=str(result.metrics.total_return),
            portfolio_points=len(result.portfolio_history),
            elapsed_seconds=round(elapsed, 2),
        )
        return result
    finally:
        clear_run_context()


async def run_periods(
    base_config: BacktestConfig,
    periods: list[tuple[int, int]],
    provider: HistoricalDataProvider,
    predictor: Predictor,
    settings: AppSettings | None = None,
) -> PeriodResult:
    """Run the same setup over several (start_days_ago, end_days_ago) windows.

    Each window runs independently. A failing window is recorded with its
    error message and does not abort the remaining windows.
    """
    logger.info("run_periods_starting", symbol=base_config.symbol, total=len(periods))
    start_time = time.monotonic()
    results: list[tuple[tuple[int, int], BacktestResult | None, str | None]] = []

    for start_days_ago, end_days_ago in periods:
        config = base_config.with_overrides(
            start_days_ago=start_days_ago, end_days_ago=end_days_ago
        )
        try:
            result = await run_backtest(config, provider, predictor, settings)
            results.append(((start_days_ago, end_days_ago), result, None))
        except TraderError as e:
            logger.warning(
                "period_run_error",
                start_days_ago=start_days_ago,
                end_days_ago=end_days_ago,
                error=str(e),
            )
            results.append(((start_days_ago, end_days_ago), None, str(e)))

    elapsed = time.monotonic() - start_time
    logger.info("run_periods_complete", total=len(periods), elapsed_seconds=round(elapsed, 2))
    return PeriodResult(base_config=base_config, results=results)


def format_period_summary(period_result: PeriodResult) -> str:
    """Format a text table of per-window results.

    Args:
        period_result: The completed multi-window run.

    Returns:
        Formatted string suitable for console output.
    """
    if not period_result.results:
        return "No period results to display."

    lines: list[str] = []
    lines.append("=" * 80)
    lines.append(f"PERIOD RESULTS: {period_result.base_config.symbol}")
    lines.append("=" * 80)

    header = " | ".join([
        f"{'Window':>12s}",
        f"{'Return':>9s}",
        f"{'Sharpe':>8s}",
        f"{'Max DD':>8s}",
        f"{'Win Rate':>9s}",
        f"{'Trades':>7s}",
    ])
    lines.append(header)
    lines.append("-" * len(header))

    for (start, end), result, error in period_result.results:
        window = f"{start}->{end}"
        if result is None:
            lines.append(f"{window:>12s} | ERROR: {error}")
            continue
        m = result.metrics
        lines.append(" | ".join([
            f"{window:>12s}",
            f"{m.total_return * 100:>8.2f}%",
            f"{m.sharpe_ratio:>8.2f}",
            f"{m.max_drawdown * 100:>7.2f}%",
            f"{m.win_rate * 100:>8.1f}%",
            f"{m.total_trades:>7d}",
        ]))

    lines.append("-" * len(header))
    lines.append(
        f"Successful: {period_result.successful_count}/{len(period_result.results)}"
        f"  Profitable: {period_result.profitable_count}"
    )
    returns = [r.total_return for _, r, _ in period_result.results if r is not None]
    if returns:
        average = sum(returns, Decimal("0")) / Decimal(len(returns))
        lines.append(f"Average return: {average * 100:.2f}%")
    lines.append("=" * 80)
    return "\n".join(lines)
