"""Live decision path: one decision per scheduling tick against an exchange."""

from trader.live.notifier import LogNotifier, Notifier
from trader.live.trader import LiveTrader, format_trade_message

__all__ = [
    "LiveTrader",
    "LogNotifier",
    "Notifier",
    "format_trade_message",
]
