"""Backtest engine package.

Replays the live decision path (Predictor -> TradeDecisionEngine) bar by
bar over historical data and reports portfolio metrics.
"""

from trader.backtest.engine import BacktestEngine
from trader.backtest.models import (
    BacktestConfig,
    BacktestMetrics,
    BacktestResult,
    PeriodResult,
    PortfolioPoint,
    confidence_distribution,
    strategy_distribution,
)
from trader.backtest.runner import (
    build_decision_engine,
    format_period_summary,
    run_backtest,
    run_periods,
)

__all__ = [
    "BacktestConfig",
    "BacktestEngine",
    "BacktestMetrics",
    "BacktestResult",
    "PeriodResult",
    "PortfolioPoint",
    "build_decision_engine",
    "confidence_distribution",
    "format_period_summary",
    "run_backtest",
    "run_periods",
    "strategy_distribution",
]
