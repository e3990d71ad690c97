"""SMS notifications through the TextBelt HTTP API."""

import asyncio
import logging
from typing import Any

import httpx

from inbox_sms.config import SMSConfig
from inbox_sms.utils.text import sender_display_name

from .base import NotificationError, Notifier

logger = logging.getLogger(__name__)


class TextBeltNotifier(Notifier):
    """Sends each summary to every configured phone number."""

    def __init__(
        self,
        config: SMSConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not config.api_key:
            raise ValueError("TextBelt API key is not set")
        if not config.phone_numbers:
            raise ValueError("At least one phone number is required")
        self.config = config
        self._transport = transport

    @property
    def channel(self) -> str:
        return "sms"

    def format_message(self, message: str, sender: str) -> str:
        """Prefix the summary with the sender's display name."""
        return f"[{sender_display_name(sender)}] {message}"

    async def _send_one(self, client: httpx.AsyncClient, phone: str, text: str) -> dict[str, Any]:
        response = await client.post(
            self.config.endpoint,
            json={"phone": phone, "message": text, "key": self.config.api_key},
        )
        response.raise_for_status()
        return response.json()

    async def send(self, message: str, sender: str) -> list[dict[str, Any]]:
        """Send an SMS to all configured numbers concurrently.

        Every number is attempted. HTTP failures and ``success: false``
        replies are collected and raised together as one NotificationError.
        """
        text = self.format_message(message, sender)
        phones = self.config.phone_numbers

        async with httpx.AsyncClient(
            timeout=self.config.timeout, transport=self._transport
        ) as client:
            results = await asyncio.gather(
                *(self._send_one(client, phone, text) for phone in phones),
                return_exceptions=True,
            )

        logger.debug(f"TextBelt responses: {results}")

        errors: list[str] = []
        for phone, result in zip(phones, results):
            if isinstance(result, BaseException):
                errors.append(f"{phone}: {result}")
            elif not result.get("success"):
                errors.append(f"{phone}: {result.get('error', 'unknown error')}")
        if errors:
            raise NotificationError(f"TextBelt API errors: {'; '.join(errors)}")

        return list(results)
