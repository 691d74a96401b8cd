"""Strategy layer -- regime selection and per-strategy profiles."""

from trader.strategy.models import FeatureHistory, StrategyState
from trader.strategy.profiles import STRATEGY_PROFILES, StrategyProfile, get_profile
from trader.strategy.selector import MarketContext, StrategySelector, compute_market_context

__all__ = [
    "STRATEGY_PROFILES",
    "FeatureHistory",
    "MarketContext",
    "StrategyProfile",
    "StrategySelector",
    "StrategyState",
    "compute_market_context",
    "get_profile",
]
