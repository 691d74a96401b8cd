"""Custom exceptions for the trade decision engine.

Precondition, prediction, and exchange errors live here so the
indicator, strategy, and backtest layers can share them without
circular imports.
"""


class TraderError(Exception):
    """Base exception for all trader errors."""


class PreconditionError(TraderError):
    """Raised when a run cannot start because its inputs are invalid."""


class SeriesMismatchError(PreconditionError):
    """Raised when primary and reference series differ in length or timestamps."""


class InsufficientHistoryError(PreconditionError):
    """Raised when a series is too short for the warm-up or the model window."""


class PredictionError(TraderError):
    """Raised when the classification model returns malformed output."""


class ShapeMismatchError(PredictionError):
    """Raised when the feature window does not match the model's input shape."""


class UnknownStrategyError(TraderError):
    """Raised when a strategy value has no rule set (programming error)."""


class ExchangeError(TraderError):
    """Raised when the exchange adapter cannot fetch prices or balances."""
