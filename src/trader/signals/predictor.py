"""Predictor boundary between price history and a trained classifier.

The classifier itself (architecture, training, weight storage) lives
outside this package. ModelPredictor only builds the feature window the
model expects, checks its shape, validates what comes back, and attaches
the derived FeatureSnapshot for the strategy layer.
"""

from __future__ import annotations

import inspect
import math
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Sequence
from decimal import Decimal
from typing import Protocol

from trader.config import IndicatorSettings, PredictorSettings
from trader.exceptions import (
    InsufficientHistoryError,
    PredictionError,
    SeriesMismatchError,
    ShapeMismatchError,
)
from trader.indicators.snapshot import compute_indicator_snapshot
from trader.logging import get_logger
from trader.signals.features import compute_feature_snapshot
from trader.signals.models import Prediction

logger = get_logger(__name__)


class ClassificationModel(Protocol):
    """A trained two-class model over a (timesteps x feature_count) window.

    predict_proba returns [sell_prob, buy_prob]; it may be a coroutine
    when inference runs in a remote service.
    """

    timesteps: int
    feature_count: int

    def predict_proba(
        self, window: list[list[float]]
    ) -> Sequence[float] | Awaitable[Sequence[float]]: ...


class Predictor(ABC):
    """Abstract predictor: aligned primary/reference history in, Prediction out."""

    @abstractmethod
    async def predict(
        self,
        primary_prices: list[Decimal],
        primary_volumes: list[Decimal],
        reference_prices: list[Decimal],
        reference_volumes: list[Decimal],
    ) -> Prediction:
        """Predict buy/sell probabilities for the latest bar."""
        ...


def build_feature_window(
    primary_prices: list[Decimal],
    primary_volumes: list[Decimal],
    reference_prices: list[Decimal],
    reference_volumes: list[Decimal],
    timesteps: int,
    settings: IndicatorSettings | None = None,
) -> list[list[float]]:
    """One row per timestep for the last ``timesteps`` bars.

    Each row concatenates the primary asset's indicator row with the
    reference asset's, both computed over the prefix ending at that bar.
    """
    n = len(primary_prices)
    window: list[list[float]] = []
    for end in range(n - timesteps + 1, n + 1):
        primary = compute_indicator_snapshot(
            primary_prices[:end], primary_volumes[:end], settings
        )
        reference = compute_indicator_snapshot(
            reference_prices[:end], reference_volumes[:end], settings
        )
        window.append(primary.to_feature_row() + reference.to_feature_row())
    return window


class ModelPredictor(Predictor):
    """Predictor backed by a ClassificationModel.

    Args:
        model: Trained classifier.
        predictor_settings: Window length (timesteps).
        indicator_settings: Indicator windows used for rows and features.
    """

    def __init__(
        self,
        model: ClassificationModel,
        predictor_settings: PredictorSettings | None = None,
        indicator_settings: IndicatorSettings | None = None,
    ) -> None:
        self._model = model
        self._timesteps = (predictor_settings or PredictorSettings()).timesteps
        self._indicator_settings = indicator_settings or IndicatorSettings()

    async def predict(
        self,
        primary_prices: list[Decimal],
        primary_volumes: list[Decimal],
        reference_prices: list[Decimal],
        reference_volumes: list[Decimal],
    ) -> Prediction:
        """Build the window, run the model, and wrap its output.

        Raises:
            SeriesMismatchError: If the four sequences differ in length.
            InsufficientHistoryError: If fewer than timesteps + 1 bars exist.
            ShapeMismatchError: If the window does not match the model's shape.
            PredictionError: If the model output is malformed.
        """
        lengths = {
            len(primary_prices),
            len(primary_volumes),
            len(reference_prices),
            len(reference_volumes),
        }
        if len(lengths) != 1:
            raise SeriesMismatchError(f"Predictor inputs differ in length: {sorted(lengths)}")

        n = len(primary_prices)
        if n < self._timesteps + 1:
            raise InsufficientHistoryError(
                f"Predictor needs {self._timesteps + 1} bars, got {n}"
            )

        window = build_feature_window(
            primary_prices,
            primary_volumes,
            reference_prices,
            reference_volumes,
            self._timesteps,
            self._indicator_settings,
        )
        self._check_shape(window)

        raw = self._model.predict_proba(window)
        if inspect.isawaitable(raw):
            raw = await raw
        sell_prob, buy_prob = self._validate_output(raw)

        prediction = Prediction(
            buy_prob=buy_prob,
            sell_prob=sell_prob,
            features=compute_feature_snapshot(primary_prices, self._indicator_settings),
        )
        logger.debug(
            "prediction_made",
            buy_prob=str(prediction.buy_prob),
            sell_prob=str(prediction.sell_prob),
            bars=n,
        )
        return prediction

    def _check_shape(self, window: list[list[float]]) -> None:
        expected_rows = self._model.timesteps
        expected_cols = self._model.feature_count
        if len(window) != expected_rows:
            raise ShapeMismatchError(
                f"Model expects {expected_rows} timesteps, window has {len(window)}"
            )
        for row in window:
            if len(row) != expected_cols:
                raise ShapeMismatchError(
                    f"Model expects {expected_cols} features, row has {len(row)}"
                )

    @staticmethod
    def _validate_output(raw: Sequence[float]) -> tuple[Decimal, Decimal]:
        values = list(raw)
        if len(values) != 2:
            raise PredictionError(f"Model returned {len(values)} probabilities, expected 2")
        result: list[Decimal] = []
        for value in values:
            number = float(value)
            if not math.isfinite(number) or number < 0.0 or number > 1.0:
                raise PredictionError(f"Model returned invalid probability: {value!r}")
            result.append(Decimal(str(number)))
        return result[0], result[1]
