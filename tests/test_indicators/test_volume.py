"""Tests for OBV, volume oscillator, and VWAP."""

from decimal import Decimal

from trader.indicators.volume import obv, obv_position, obv_series, volume_oscillator, vwap


def _d(*values: int | str) -> list[Decimal]:
    return [Decimal(str(v)) for v in values]


class TestObv:
    """On-balance volume."""

    def test_signed_running_sum(self) -> None:
        prices = _d(10, 11, 10, 10, 12)
        volumes = _d(100, 200, 300, 400, 500)
        assert obv(prices, volumes) == Decimal("400")

    def test_single_bar_is_zero(self) -> None:
        assert obv(_d(10), _d(100)) == Decimal("0")

    def test_series_tracks_every_bar(self) -> None:
        prices = _d(10, 11, 10, 10, 12)
        volumes = _d(100, 200, 300, 400, 500)
        assert obv_series(prices, volumes) == _d(0, 200, -100, -100, 400)
        assert obv_series([], []) == []


class TestObvPosition:
    """Latest OBV within its trailing range."""

    def test_midpoint(self) -> None:
        assert obv_position(_d(10, 11, 10), _d(100, 200, 100)) == Decimal("0.5")

    def test_fresh_high_is_one(self) -> None:
        prices = _d(10, 11, 10, 10, 12)
        volumes = _d(100, 200, 300, 400, 500)
        assert obv_position(prices, volumes, period=4) == Decimal("1")

    def test_window_limits_range(self) -> None:
        # Full series [0, 200, 100, 150]; last three span 100..200
        prices = _d(10, 11, 10, 11)
        volumes = _d(100, 200, 100, 50)
        assert obv_position(prices, volumes, period=3) == Decimal("0.5")
        assert obv_position(prices, volumes, period=4) == Decimal("0.75")

    def test_flat_range_is_zero(self) -> None:
        assert obv_position(_d(10, 10, 10), _d(100, 100, 100)) == Decimal("0")
        assert obv_position([], []) == Decimal("0")


class TestVolumeOscillator:
    """Short vs long volume SMA gap in percent."""

    def test_volume_surge(self) -> None:
        volumes = _d(*([100] * 9 + [200] * 5))
        result = volume_oscillator(volumes, short_period=5, long_period=14)
        assert result.quantize(Decimal("0.01")) == Decimal("47.37")

    def test_underflow_is_zero(self) -> None:
        assert volume_oscillator(_d(1, 2, 3)) == Decimal("0")

    def test_zero_volume_is_zero(self) -> None:
        assert volume_oscillator([Decimal("0")] * 20) == Decimal("0")


class TestVwap:
    """Volume-weighted average price."""

    def test_weighted_average(self) -> None:
        assert vwap(_d(10, 20), _d(1, 3), period=2) == Decimal("17.5")

    def test_underflow_returns_latest_price(self) -> None:
        assert vwap(_d(10, 20), _d(1, 3), period=7) == Decimal("20")

    def test_zero_volume_returns_latest_price(self) -> None:
        assert vwap(_d(10, 20), _d(0, 0), period=2) == Decimal("20")

    def test_empty(self) -> None:
        assert vwap([], [], period=7) == Decimal("0")
