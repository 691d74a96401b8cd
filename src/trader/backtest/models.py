"""Data models for the backtest engine.

Defines the run configuration, the per-step portfolio point, aggregate
metrics, and the complete result of a single run or a set of period runs.

CRITICAL: All monetary values use Decimal. Never use float for prices, quantities, or fees.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal

from trader.config import BacktestSettings
from trader.models import Trade, TradeType

_ZERO = Decimal("0")

#: Upper bounds (exclusive) for buy-confidence buckets; the rest is "high".
_CONFIDENCE_BUCKETS: tuple[tuple[str, Decimal], ...] = (
    ("low", Decimal("0.5")),
    ("medium", Decimal("0.7")),
)


@dataclass
class BacktestConfig:
    """Configuration for a single backtest run.

    The run fetches ``start_days_ago`` days of history for both symbols,
    skips ``warmup_days`` bars for indicator warm-up, and stops
    ``safety_margin_days`` bars before the bar ``end_days_ago`` days back.
    """

    symbol: str  # e.g., "BTC/USD"
    reference_symbol: str  # correlated macro asset, e.g., "ETH/USD"
    start_days_ago: int
    end_days_ago: int = 0
    step_days: int = 1
    initial_capital: Decimal = Decimal("10000")
    warmup_days: int = 50
    safety_margin_days: int = 5
    annualization_days: int = 365

    @classmethod
    def from_settings(
        cls,
        symbol: str,
        reference_symbol: str,
        start_days_ago: int,
        settings: BacktestSettings | None = None,
        **kwargs: object,
    ) -> BacktestConfig:
        """Build a config with defaults taken from BacktestSettings."""
        settings = settings or BacktestSettings()
        values: dict = {
            "initial_capital": settings.default_initial_capital,
            "warmup_days": settings.warmup_days,
            "safety_margin_days": settings.safety_margin_days,
            "annualization_days": settings.annualization_days,
        }
        values.update(kwargs)
        return cls(
            symbol=symbol,
            reference_symbol=reference_symbol,
            start_days_ago=start_days_ago,
            **values,
        )

    def with_overrides(self, **kwargs: object) -> BacktestConfig:
        """Return a new BacktestConfig with specified fields overridden."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output, Decimals as strings."""
        return {
            "symbol": self.symbol,
            "reference_symbol": self.reference_symbol,
            "start_days_ago": self.start_days_ago,
            "end_days_ago": self.end_days_ago,
            "step_days": self.step_days,
            "initial_capital": str(self.initial_capital),
            "warmup_days": self.warmup_days,
            "safety_margin_days": self.safety_margin_days,
            "annualization_days": self.annualization_days,
        }


@dataclass(frozen=True)
class PortfolioPoint:
    """Portfolio value after one backtest step.

    Attributes:
        timestamp_ms: Bar time in milliseconds.
        value: Cash plus holdings marked at the bar's close.
    """

    timestamp_ms: int
    value: Decimal


@dataclass
class BacktestMetrics:
    """Aggregate metrics from a completed backtest run.

    total_trades counts buys and sells; completed_trades counts closed
    round trips, which is the win-rate denominator.
    """

    final_value: Decimal
    total_return: Decimal
    annualized_return: Decimal
    total_trades: int
    completed_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: Decimal
    sharpe_ratio: Decimal
    max_drawdown: Decimal
    average_holding_days: Decimal
    duration_days: Decimal

    def to_dict(self) -> dict:
        return {
            "final_value": str(self.final_value),
            "total_return": str(self.total_return),
            "annualized_return": str(self.annualized_return),
            "total_trades": self.total_trades,
            "completed_trades": self.completed_trades,
            "winning_trades": self.winning_trades,
            "losing_trades": self.losing_trades,
            "win_rate": str(self.win_rate),
            "sharpe_ratio": str(self.sharpe_ratio),
            "max_drawdown": str(self.max_drawdown),
            "average_holding_days": str(self.average_holding_days),
            "duration_days": str(self.duration_days),
        }


def strategy_distribution(trades: list[Trade]) -> dict[str, int]:
    """Number of trades emitted under each strategy, sorted by name."""
    counts: dict[str, int] = {}
    for trade in trades:
        if trade.strategy is not None:
            counts[trade.strategy.value] = counts.get(trade.strategy.value, 0) + 1
    return dict(sorted(counts.items()))


def confidence_distribution(trades: list[Trade]) -> dict[str, int]:
    """Buy trades bucketed into low/medium/high prediction confidence."""
    counts = {name: 0 for name, _ in _CONFIDENCE_BUCKETS}
    counts["high"] = 0
    for trade in trades:
        if trade.trade_type != TradeType.BUY:
            continue
        for name, upper in _CONFIDENCE_BUCKETS:
            if trade.confidence < upper:
                counts[name] += 1
                break
        else:
            counts["high"] += 1
    return counts


@dataclass
class BacktestResult:
    """Complete result of a single backtest run."""

    config: BacktestConfig
    metrics: BacktestMetrics
    portfolio_history: list[PortfolioPoint] = field(default_factory=list)
    daily_returns: list[Decimal] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)

    @property
    def total_return(self) -> Decimal:
        return self.metrics.total_return

    @property
    def total_trades(self) -> int:
        return self.metrics.total_trades

    @property
    def win_rate(self) -> Decimal:
        return self.metrics.win_rate

    @property
    def sharpe_ratio(self) -> Decimal:
        return self.metrics.sharpe_ratio

    @property
    def max_drawdown(self) -> Decimal:
        return self.metrics.max_drawdown

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output.

        Returns:
            Dict with config, metrics, portfolio history, returns, trades,
            and trade distributions.
        """
        return {
            "config": self.config.to_dict(),
            "metrics": self.metrics.to_dict(),
            "portfolio_history": [
                {"timestamp_ms": p.timestamp_ms, "value": str(p.value)}
                for p in self.portfolio_history
            ],
            "daily_returns": [str(r) for r in self.daily_returns],
            "trades": [t.to_dict() for t in self.trades],
            "strategy_distribution": strategy_distribution(self.trades),
            "confidence_distribution": confidence_distribution(self.trades),
        }


@dataclass
class PeriodResult:
    """Results from running the same setup over several history windows."""

    base_config: BacktestConfig
    results: list[tuple[tuple[int, int], BacktestResult | None, str | None]]
    # Each tuple: ((start_days_ago, end_days_ago), result_or_None, error_or_None)

    @property
    def successful_count(self) -> int:
        return sum(1 for _, r, _ in self.results if r is not None)

    @property
    def profitable_count(self) -> int:
        return sum(1 for _, r, _ in self.results if r and r.total_return > _ZERO)

    def to_dict(self) -> dict:
        items = []
        for (start, end), result, error in self.results:
            items.append({
                "start_days_ago": start,
                "end_days_ago": end,
                "error": error,
                "metrics": result.metrics.to_dict() if result else None,
            })
        return {
            "config": self.base_config.to_dict(),
            "results": items,
            "successful_count": self.successful_count,
            "profitable_count": self.profitable_count,
        }
