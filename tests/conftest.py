"""Shared test fixtures for the regime trader."""

from collections.abc import Callable
from decimal import Decimal

import pytest

from trader.config import AppSettings, ExchangeSettings
from trader.data.provider import InMemoryDataProvider, daily_series
from trader.models import PriceSeries
from trader.signals.features import compute_feature_snapshot
from trader.signals.models import Prediction
from trader.signals.predictor import Predictor

#: Timestamp of the last bar in fixture series (2023-11-14 00:00 UTC).
END_MS = 1_699_920_000_000


class StubPredictor(Predictor):
    """Deterministic predictor: fixed probabilities, real derived features."""

    def __init__(self, buy_prob: Decimal, sell_prob: Decimal) -> None:
        self.buy_prob = buy_prob
        self.sell_prob = sell_prob
        self.calls = 0

    async def predict(
        self,
        primary_prices: list[Decimal],
        primary_volumes: list[Decimal],
        reference_prices: list[Decimal],
        reference_volumes: list[Decimal],
    ) -> Prediction:
        self.calls += 1
        return Prediction(
            buy_prob=self.buy_prob,
            sell_prob=self.sell_prob,
            features=compute_feature_snapshot(primary_prices),
        )


@pytest.fixture
def mock_settings() -> AppSettings:
    """Return AppSettings with test defaults and dummy API keys."""
    return AppSettings(
        log_level="DEBUG",
        exchange=ExchangeSettings(
            exchange_id="coinbase",
            api_key="test-api-key",  # type: ignore[arg-type]
            api_secret="test-api-secret",  # type: ignore[arg-type]
        ),
    )


@pytest.fixture
def make_stub_predictor() -> Callable[..., StubPredictor]:
    """Factory for StubPredictor with the given probabilities."""

    def _make(buy_prob: str = "0.9", sell_prob: str = "0.05") -> StubPredictor:
        return StubPredictor(Decimal(buy_prob), Decimal(sell_prob))

    return _make


@pytest.fixture
def make_series() -> Callable[..., PriceSeries]:
    """Factory for a daily PriceSeries ending at END_MS with constant volume by default."""

    def _make(
        symbol: str,
        prices: list[Decimal],
        volumes: list[Decimal] | None = None,
    ) -> PriceSeries:
        if volumes is None:
            volumes = [Decimal("1000")] * len(prices)
        return daily_series(symbol, prices, volumes, END_MS)

    return _make


@pytest.fixture
def rising_prices() -> list[Decimal]:
    """60 prices rising linearly from 100 to 200."""
    step = Decimal("100") / Decimal("59")
    return [Decimal("100") + step * i for i in range(60)]


@pytest.fixture
def flat_prices() -> list[Decimal]:
    """60 prices all equal to 100."""
    return [Decimal("100")] * 60


@pytest.fixture
def make_provider(make_series: Callable[..., PriceSeries]) -> Callable[..., InMemoryDataProvider]:
    """Factory for an InMemoryDataProvider with aligned BTC/USD and ETH/USD history.

    The reference asset tracks the primary at one twentieth of its price.
    """

    def _make(prices: list[Decimal]) -> InMemoryDataProvider:
        reference = [p / Decimal("20") for p in prices]
        return InMemoryDataProvider({
            "BTC/USD": make_series("BTC/USD", prices),
            "ETH/USD": make_series("ETH/USD", reference),
        })

    return _make
