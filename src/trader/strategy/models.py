"""Strategy selector state: active regime plus smoothed feature history."""

from collections import deque
from dataclasses import dataclass, field
from decimal import Decimal

from trader.models import StrategyType
from trader.signals.models import FeatureName, FeatureSnapshot

#: Number of recent steps averaged when classifying the regime.
HISTORY_DEPTH = 3


@dataclass
class FeatureHistory:
    """Fixed-depth rolling window for every FeatureName."""

    depth: int = HISTORY_DEPTH
    _values: dict[FeatureName, deque[Decimal]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._values = {name: deque(maxlen=self.depth) for name in FeatureName}

    def push(self, snapshot: FeatureSnapshot) -> None:
        """Append the snapshot's value for every feature."""
        for name in FeatureName:
            self._values[name].append(snapshot.get(name))

    def average(self, name: FeatureName) -> Decimal:
        """Mean over a full window, the latest value while filling, 0 when empty."""
        values = self._values[name]
        if not values:
            return Decimal("0")
        if len(values) < self.depth:
            return values[-1]
        return sum(values, Decimal("0")) / Decimal(len(values))

    def __len__(self) -> int:
        return len(self._values[FeatureName.MOMENTUM])


@dataclass
class StrategyState:
    """Active strategy and its persistence counters for one run.

    Mutated only by StrategySelector. Never share an instance between runs.
    """

    current: StrategyType = StrategyType.MEAN_REVERSION
    start_timestamp_ms: int | None = None
    trade_count: int = 0
    history: FeatureHistory = field(default_factory=FeatureHistory)
    transitions: int = 0

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {
            "current": self.current.value,
            "start_timestamp_ms": self.start_timestamp_ms,
            "trade_count": self.trade_count,
            "transitions": self.transitions,
        }
