"""Base class for email source connectors."""

from abc import ABC, abstractmethod
from typing import Any

from inbox_sms.models import Email


class EmailSource(ABC):
    """Abstract base class for email source connectors."""

    name: str

    @abstractmethod
    async def connect(self) -> None:
        """Establish connection to the email source."""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the email source."""
        ...

    @abstractmethod
    async def fetch_unprocessed(self, limit: int = 10) -> list[Email]:
        """Fetch recent inbox messages not yet marked processed.

        Args:
            limit: Maximum number of emails to fetch

        Returns:
            Emails in the order the source listed them
        """
        ...

    @abstractmethod
    async def mark_processed(self, email_id: str) -> bool:
        """Mark an email so later fetches skip it."""
        ...

    async def __aenter__(self) -> "EmailSource":
        await self.connect()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.disconnect()
