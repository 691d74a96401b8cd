"""Tests for run_backtest, run_periods, and the period summary."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from trader.backtest.models import BacktestConfig, PeriodResult
from trader.backtest.runner import (
    build_decision_engine,
    format_period_summary,
    run_backtest,
    run_periods,
)
from trader.config import AppSettings, RegimeSettings, RiskSettings
from trader.data.provider import InMemoryDataProvider
from trader.signals.predictor import Predictor


def _config() -> BacktestConfig:
    return BacktestConfig(symbol="BTC/USD", reference_symbol="ETH/USD", start_days_ago=60)


class TestBuildDecisionEngine:
    """Wiring from AppSettings."""

    def test_uses_given_settings(self) -> None:
        settings = AppSettings(
            regime=RegimeSettings(override_confidence=Decimal("0.85")),
            risk=RiskSettings(min_confidence=Decimal("0.4")),
        )
        engine = build_decision_engine(settings)
        assert engine.selector.settings.override_confidence == Decimal("0.85")
        assert engine.risk_manager.settings.min_confidence == Decimal("0.4")


class TestRunBacktest:
    """Single-run entry point."""

    @pytest.mark.asyncio
    async def test_runs_with_settings(
        self,
        mock_settings: AppSettings,
        rising_prices: list[Decimal],
        make_provider: Callable[..., InMemoryDataProvider],
        make_stub_predictor: Callable[..., Predictor],
    ) -> None:
        result = await run_backtest(
            _config(), make_provider(rising_prices), make_stub_predictor(), mock_settings
        )
        assert result.total_trades == 1
        assert result.config.symbol == "BTC/USD"

    @pytest.mark.asyncio
    async def test_strict_confidence_blocks_all_trades(
        self,
        rising_prices: list[Decimal],
        make_provider: Callable[..., InMemoryDataProvider],
        make_stub_predictor: Callable[..., Predictor],
    ) -> None:
        settings = AppSettings(risk=RiskSettings(min_confidence=Decimal("0.95")))
        result = await run_backtest(
            _config(), make_provider(rising_prices), make_stub_predictor(), settings
        )
        assert result.total_trades == 0
        assert result.total_return == 0


class TestRunPeriods:
    """Multi-window runs."""

    @pytest.mark.asyncio
    async def test_failing_window_is_recorded(
        self,
        rising_prices: list[Decimal],
        make_provider: Callable[..., InMemoryDataProvider],
        make_stub_predictor: Callable[..., Predictor],
    ) -> None:
        period_result = await run_periods(
            _config(),
            [(60, 0), (40, 0), (60, 2)],
            make_provider(rising_prices),
            make_stub_predictor(),
        )

        assert len(period_result.results) == 3
        assert period_result.successful_count == 2
        assert period_result.profitable_count == 2

        window, result, error = period_result.results[1]
        assert window == (40, 0)
        assert result is None
        assert error is not None

        _, short_result, _ = period_result.results[2]
        assert short_result is not None
        assert short_result.config.end_days_ago == 2
        assert len(short_result.portfolio_history) == 3

    @pytest.mark.asyncio
    async def test_to_dict(
        self,
        flat_prices: list[Decimal],
        make_provider: Callable[..., InMemoryDataProvider],
        make_stub_predictor: Callable[..., Predictor],
    ) -> None:
        period_result = await run_periods(
            _config(), [(60, 0), (10, 0)], make_provider(flat_prices), make_stub_predictor()
        )
        d = period_result.to_dict()
        assert d["successful_count"] == 1
        assert d["profitable_count"] == 0
        assert d["results"][0]["metrics"]["total_trades"] == 0
        assert d["results"][1]["metrics"] is None
        assert d["results"][1]["error"]


class TestFormatPeriodSummary:
    """Console table output."""

    def test_empty(self) -> None:
        assert format_period_summary(PeriodResult(_config(), [])) == (
            "No period results to display."
        )

    @pytest.mark.asyncio
    async def test_table(
        self,
        rising_prices: list[Decimal],
        make_provider: Callable[..., InMemoryDataProvider],
        make_stub_predictor: Callable[..., Predictor],
    ) -> None:
        period_result = await run_periods(
            _config(), [(60, 0), (40, 0)], make_provider(rising_prices), make_stub_predictor()
        )
        text = format_period_summary(period_result)

        assert "PERIOD RESULTS: BTC/USD" in text
        assert "Window" in text
        assert "60->0" in text
        assert "40->0 | ERROR:" in text
        assert "Successful: 1/2  Profitable: 1" in text
        assert "Average return:" in text
