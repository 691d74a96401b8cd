"""Signal data models: derived feature snapshot and model prediction.

CRITICAL: All feature and probability values use Decimal. Never use float for signal computations.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class FeatureName(str, Enum):
    """Closed set of derived features tracked by the strategy selector."""

    MOMENTUM = "momentum"
    SHORT_MOMENTUM = "short_momentum"
    TREND_SLOPE = "trend_slope"
    ATR = "atr"
    MOMENTUM_DIVERGENCE = "momentum_divergence"
    VOLATILITY_ADJUSTED_MOMENTUM = "volatility_adjusted_momentum"
    TREND_STRENGTH = "trend_strength"
    ATR_BREAKOUT = "atr_breakout"


@dataclass(frozen=True)
class FeatureSnapshot:
    """Derived signals for the latest bar of a price prefix.

    Momentum values are fractional changes, trend_slope is fractional change
    per day, atr is in price units and atr_ratio is atr relative to price.
    """

    price: Decimal
    momentum: Decimal
    short_momentum: Decimal
    trend_slope: Decimal
    atr: Decimal
    atr_ratio: Decimal
    momentum_divergence: Decimal
    volatility_adjusted_momentum: Decimal
    trend_strength: Decimal
    atr_breakout: Decimal

    def get(self, name: FeatureName) -> Decimal:
        """Value of one named feature."""
        return getattr(self, name.value)

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        return {
            "price": str(self.price),
            "atr_ratio": str(self.atr_ratio),
            **{name.value: str(self.get(name)) for name in FeatureName},
        }


@dataclass(frozen=True)
class Prediction:
    """Model output for one decision step.

    Confidence is the larger of the two directional probabilities.
    """

    buy_prob: Decimal
    sell_prob: Decimal
    features: FeatureSnapshot

    @property
    def confidence(self) -> Decimal:
        return max(self.buy_prob, self.sell_prob)

    def to_dict(self) -> dict:
        """Serialize to JSON-safe dict with Decimal values as strings."""
        return {
            "buy_prob": str(self.buy_prob),
            "sell_prob": str(self.sell_prob),
            "confidence": str(self.confidence),
            "features": self.features.to_dict(),
        }
