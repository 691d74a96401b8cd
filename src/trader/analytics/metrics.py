"""Performance analytics over a backtest's portfolio history.

Pure Decimal analytics: daily_returns, sharpe_ratio, max_drawdown,
win_rate, annualized_return. No external dependencies (no pandas,
numpy, quantstats).
"""

from decimal import ROUND_HALF_UP, Decimal

_ZERO = Decimal("0")
_ONE = Decimal("1")
_RATIO_QUANTIZE = Decimal("0.001")


def daily_returns(values: list[Decimal]) -> list[Decimal]:
    """Step-over-step returns between consecutive portfolio values.

    A step whose previous value is 0 contributes a 0 return.
    """
    return [
        (current - previous) / previous if previous != _ZERO else _ZERO
        for previous, current in zip(values, values[1:])
    ]


def sharpe_ratio(
    returns: list[Decimal],
    annualization_factor: int | Decimal = 365,
    risk_free_rate: Decimal = _ZERO,
) -> Decimal:
    """Annualized Sharpe ratio from per-period returns.

    Sharpe = ((mean_return - risk_free) / sample_std_dev) * sqrt(annualization)

    Args:
        returns: Per-period returns.
        annualization_factor: Periods per year (365 for calendar-day series,
            365 / step for returns sampled every ``step`` days).
        risk_free_rate: Risk-free rate per period (default 0).

    Returns:
        Sharpe ratio, or 0 with fewer than 2 returns or zero variance.
    """
    if len(returns) < 2:
        return _ZERO

    n = Decimal(len(returns))
    mean = sum(returns, _ZERO) / n

    # Sample standard deviation (N-1 denominator)
    variance = sum(((r - mean) ** 2 for r in returns), _ZERO) / (n - _ONE)
    std_dev = variance.sqrt()

    if std_dev == _ZERO:
        return _ZERO

    return ((mean - risk_free_rate) / std_dev) * Decimal(annualization_factor).sqrt()


def max_drawdown(values: list[Decimal]) -> Decimal:
    """Largest fractional decline from a running peak.

    max over t of (peak_t - value_t) / peak_t, where peak_t is the highest
    value seen up to t. 0 for an empty or never-declining history.
    """
    peak = _ZERO
    worst = _ZERO
    for value in values:
        if value > peak:
            peak = value
        if peak > _ZERO:
            drawdown = (peak - value) / peak
            if drawdown > worst:
                worst = drawdown
    return worst


def win_rate(realized_pnls: list[Decimal]) -> Decimal:
    """Fraction of completed round trips with positive P&L.

    Returns:
        Win rate rounded to 3 places, or 0 when nothing was closed.
    """
    if not realized_pnls:
        return _ZERO
    wins = sum(1 for pnl in realized_pnls if pnl > _ZERO)
    rate = Decimal(wins) / Decimal(len(realized_pnls))
    return rate.quantize(_RATIO_QUANTIZE, rounding=ROUND_HALF_UP)


def annualized_return(total_return: Decimal, days: Decimal) -> Decimal:
    """Compound a total return over ``days`` to a yearly rate.

    (1 + total)^(365 / days) - 1; 0 for non-positive spans or a total loss.
    """
    if days <= _ZERO or total_return <= -_ONE:
        return _ZERO
    growth = _ONE + total_return
    exponent = Decimal(365) / days
    return (growth.ln() * exponent).exp() - _ONE
