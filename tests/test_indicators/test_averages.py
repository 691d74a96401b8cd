"""Tests for moving averages and MACD."""

from decimal import Decimal

from trader.indicators.averages import ema, ema_series, macd, mean, population_std, sma


def _d(*values: float | int | str) -> list[Decimal]:
    return [Decimal(str(v)) for v in values]


class TestMeanAndStd:
    """mean() and population_std() basics."""

    def test_mean(self) -> None:
        assert mean(_d(1, 2, 3)) == Decimal("2")

    def test_mean_empty_is_zero(self) -> None:
        assert mean([]) == Decimal("0")

    def test_population_std(self) -> None:
        assert population_std(_d(2, 4, 4, 4, 5, 5, 7, 9)) == Decimal("2")

    def test_population_std_single_value_is_zero(self) -> None:
        assert population_std(_d(5)) == Decimal("0")


class TestSma:
    """Simple moving average over a trailing window."""

    def test_uses_last_period_values(self) -> None:
        assert sma(_d(1, 2, 3, 4, 5), 3) == Decimal("4")

    def test_short_window_uses_everything_available(self) -> None:
        assert sma(_d(1, 2), 5) == Decimal("1.5")

    def test_empty_is_zero(self) -> None:
        assert sma([], 3) == Decimal("0")


class TestEma:
    """Recursive EMA with 12-place quantization."""

    def test_first_value_seeds_series(self) -> None:
        assert ema_series(_d(1, 2), 3) == [Decimal("1"), Decimal("1.5")]

    def test_constant_input_stays_constant(self) -> None:
        assert ema_series(_d(10, 10, 10), 3) == _d(10, 10, 10)

    def test_empty_input(self) -> None:
        assert ema_series([], 5) == []
        assert ema([], 5) == Decimal("0")

    def test_ema_uses_trailing_window(self) -> None:
        """Window [3, 4] with alpha 2/3 gives 3 + 2/3."""
        result = ema(_d(1, 2, 3, 4), 2)
        assert abs(result - Decimal("3.666666666667")) < Decimal("1e-11")

    def test_quantized_to_twelve_places(self) -> None:
        result = ema_series(_d(1, 2, 3, 4), 2)
        assert all(v.as_tuple().exponent >= -12 for v in result)


class TestMacd:
    """MACD line and signal."""

    def test_underflow_returns_zeros(self) -> None:
        assert macd(_d(*range(1, 20))) == (Decimal("0"), Decimal("0"))

    def test_flat_series_is_zero(self) -> None:
        line, signal = macd([Decimal("100")] * 40)
        assert line == 0
        assert signal == 0

    def test_rising_series_is_positive(self) -> None:
        line, signal = macd(_d(*range(100, 160)))
        assert line > 0
        assert signal > 0
