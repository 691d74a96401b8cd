"""Tests for portfolio performance analytics.

Covers normal operation and degenerate inputs for: daily_returns,
sharpe_ratio, max_drawdown, win_rate, annualized_return.
"""

from decimal import Decimal

from trader.analytics.metrics import (
    annualized_return,
    daily_returns,
    max_drawdown,
    sharpe_ratio,
    win_rate,
)


def _d(*values: str) -> list[Decimal]:
    return [Decimal(v) for v in values]


# ===========================================================================
# daily_returns tests
# ===========================================================================


class TestDailyReturns:
    """Tests for daily_returns(values)."""

    def test_consecutive_returns(self) -> None:
        assert daily_returns(_d("100", "110", "99")) == [Decimal("0.1"), Decimal("-0.1")]

    def test_single_value_has_no_returns(self) -> None:
        assert daily_returns(_d("100")) == []

    def test_zero_previous_value(self) -> None:
        assert daily_returns(_d("0", "5")) == [Decimal("0")]


# ===========================================================================
# sharpe_ratio tests
# ===========================================================================


class TestSharpeRatio:
    """Tests for sharpe_ratio(returns, annualization_factor, risk_free_rate)."""

    def test_known_values(self) -> None:
        """Returns [0.1, 0.05, 0.15]: mean 0.1, sample std 0.05 -> 2."""
        assert sharpe_ratio(_d("0.1", "0.05", "0.15"), annualization_factor=1) == Decimal("2")

    def test_annualization(self) -> None:
        """Annualization factor scales the result by sqrt(factor)."""
        assert sharpe_ratio(_d("0.1", "0.05", "0.15"), annualization_factor=4) == Decimal("4")

    def test_fractional_periods_per_year(self) -> None:
        """Stepped sampling gives a non-integer period count."""
        result = sharpe_ratio(_d("0.1", "0.05", "0.15"), annualization_factor=Decimal("2.25"))
        assert result == Decimal("3")

    def test_default_is_calendar_days(self) -> None:
        result = sharpe_ratio(_d("0.1", "0.05", "0.15"))
        assert result == Decimal("2") * Decimal(365).sqrt()

    def test_with_risk_free_rate(self) -> None:
        result = sharpe_ratio(
            _d("0.1", "0.05", "0.15"), annualization_factor=1, risk_free_rate=Decimal("0.05")
        )
        assert result == Decimal("1")

    def test_identical_returns_is_zero(self) -> None:
        """Zero variance -> 0."""
        assert sharpe_ratio(_d("0.01", "0.01", "0.01")) == Decimal("0")

    def test_fewer_than_two_returns_is_zero(self) -> None:
        assert sharpe_ratio([]) == Decimal("0")
        assert sharpe_ratio(_d("0.5")) == Decimal("0")


# ===========================================================================
# max_drawdown tests
# ===========================================================================


class TestMaxDrawdown:
    """Tests for max_drawdown(values)."""

    def test_largest_peak_to_trough(self) -> None:
        """Peak 120 -> 90 is 25%; later 130 -> 104 is only 20%."""
        assert max_drawdown(_d("100", "120", "90", "130", "104")) == Decimal("0.25")

    def test_strictly_increasing_is_zero(self) -> None:
        assert max_drawdown(_d("100", "101", "105", "200")) == Decimal("0")

    def test_empty_is_zero(self) -> None:
        assert max_drawdown([]) == Decimal("0")

    def test_never_recovers(self) -> None:
        assert max_drawdown(_d("100", "80", "50")) == Decimal("0.5")


# ===========================================================================
# win_rate tests
# ===========================================================================


class TestWinRate:
    """Tests for win_rate(realized_pnls)."""

    def test_rounded_to_three_places(self) -> None:
        assert win_rate(_d("10", "-5", "3")) == Decimal("0.667")

    def test_breakeven_is_not_a_win(self) -> None:
        assert win_rate(_d("0", "5")) == Decimal("0.5")

    def test_empty_is_zero(self) -> None:
        assert win_rate([]) == Decimal("0")


# ===========================================================================
# annualized_return tests
# ===========================================================================


class TestAnnualizedReturn:
    """Tests for annualized_return(total_return, days)."""

    def test_one_year_is_unchanged(self) -> None:
        result = annualized_return(Decimal("0.1"), Decimal("365"))
        assert abs(result - Decimal("0.1")) < Decimal("1e-20")

    def test_half_year_compounds(self) -> None:
        result = annualized_return(Decimal("0.1"), Decimal("182.5"))
        assert abs(result - Decimal("0.21")) < Decimal("1e-20")

    def test_zero_duration_is_zero(self) -> None:
        assert annualized_return(Decimal("0.1"), Decimal("0")) == Decimal("0")

    def test_total_loss_is_zero(self) -> None:
        assert annualized_return(Decimal("-1"), Decimal("30")) == Decimal("0")

    def test_flat_is_zero(self) -> None:
        assert annualized_return(Decimal("0"), Decimal("30")) == Decimal("0")
