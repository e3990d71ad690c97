"""Base class for notification channels."""

from abc import ABC, abstractmethod
from typing import Any


class NotificationError(RuntimeError):
    """Raised when the provider rejected one or more notifications."""


class Notifier(ABC):
    """Delivers a message summary to the user."""

    @property
    @abstractmethod
    def channel(self) -> str:
        """The channel identifier (e.g. "sms")."""
        ...

    @abstractmethod
    async def send(self, message: str, sender: str) -> list[dict[str, Any]]:
        """Send a notification about a message.

        Args:
            message: Summary text to deliver.
            sender: Raw sender of the original message, used as a prefix.

        Returns:
            Provider responses, one per recipient.

        Raises:
            NotificationError: If any recipient could not be notified.
        """
        ...
