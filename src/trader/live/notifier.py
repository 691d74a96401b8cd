"""Notification side channel for emitted trades."""

from abc import ABC, abstractmethod

from trader.logging import get_logger

logger = get_logger(__name__)


class Notifier(ABC):
    """Abstract base class for trade notifications."""

    @abstractmethod
    async def send(self, message: str) -> None:
        """Deliver ``message`` to the operator."""
        ...


class LogNotifier(Notifier):
    """Writes notifications to the structured log."""

    async def send(self, message: str) -> None:
        logger.info("notification", message=message)
