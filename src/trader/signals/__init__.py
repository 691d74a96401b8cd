"""Signal layer -- derived features and the predictor boundary."""

from trader.signals.features import compute_feature_snapshot, momentum_window
from trader.signals.models import FeatureName, FeatureSnapshot, Prediction
from trader.signals.predictor import (
    ClassificationModel,
    ModelPredictor,
    Predictor,
    build_feature_window,
)

__all__ = [
    "ClassificationModel",
    "FeatureName",
    "FeatureSnapshot",
    "ModelPredictor",
    "Prediction",
    "Predictor",
    "build_feature_window",
    "compute_feature_snapshot",
    "momentum_window",
]
