"""Tests for the per-bar indicator snapshot and its model row."""

import math
from decimal import Decimal

from trader.config import IndicatorSettings
from trader.indicators.snapshot import FEATURE_ROW_LENGTH, compute_indicator_snapshot


class TestIndicatorSnapshot:
    """compute_indicator_snapshot() and to_feature_row()."""

    def test_rising_series(self, rising_prices: list[Decimal]) -> None:
        volumes = [Decimal("1000")] * len(rising_prices)
        snapshot = compute_indicator_snapshot(rising_prices, volumes)

        assert snapshot.price == rising_prices[-1]
        assert snapshot.rsi == Decimal("100")
        assert snapshot.sma_short > snapshot.sma_long
        assert snapshot.macd > 0
        assert snapshot.vwap < snapshot.price
        assert not snapshot.double_top
        assert snapshot.obv_position == Decimal("1")

    def test_row_shape_and_values(self, rising_prices: list[Decimal]) -> None:
        volumes = [Decimal("1000")] * len(rising_prices)
        row = compute_indicator_snapshot(rising_prices, volumes).to_feature_row()

        assert len(row) == FEATURE_ROW_LENGTH
        assert all(isinstance(v, float) and math.isfinite(v) for v in row)
        assert row[0] == 1.0  # RSI scaled to 0-1
        assert row[12] == 1.0  # OBV at the top of its range

    def test_short_history_uses_neutral_defaults(self) -> None:
        prices = [Decimal("100"), Decimal("101"), Decimal("102")]
        volumes = [Decimal("10")] * 3
        snapshot = compute_indicator_snapshot(prices, volumes)

        assert snapshot.rsi == Decimal("50")
        assert snapshot.atr == IndicatorSettings().atr_floor
        assert snapshot.stoch_k == Decimal("50")
        assert len(snapshot.to_feature_row()) == FEATURE_ROW_LENGTH

    def test_empty_prefix(self) -> None:
        row = compute_indicator_snapshot([], []).to_feature_row()
        assert len(row) == FEATURE_ROW_LENGTH

    def test_falling_series_obv_at_bottom(self) -> None:
        prices = [Decimal(200 - i) for i in range(40)]
        volumes = [Decimal("1000")] * len(prices)
        snapshot = compute_indicator_snapshot(prices, volumes)
        assert snapshot.obv_position == Decimal("0")
        assert snapshot.to_feature_row()[12] == 0.0
