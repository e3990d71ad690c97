"""Tests for the TextBelt SMS notifier."""

import asyncio
import json

import httpx
import pytest

from inbox_sms.config import SMSConfig
from inbox_sms.notifiers import NotificationError, TextBeltNotifier


@pytest.fixture
def config() -> SMSConfig:
    return SMSConfig(api_key="key123", phone_numbers=["5551234567", "5559876543"])


def recording_transport(requests: list[httpx.Request], responses: dict[str, dict]) -> httpx.MockTransport:
    """Transport that records requests and answers per phone number."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        phone = json.loads(request.content)["phone"]
        return httpx.Response(200, json=responses.get(phone, {"success": True}))

    return httpx.MockTransport(handler)


class TestTextBeltNotifier:
    def test_requires_api_key(self) -> None:
        with pytest.raises(ValueError, match="API key"):
            TextBeltNotifier(SMSConfig(phone_numbers=["5551234567"]))

    def test_requires_phone_number(self) -> None:
        with pytest.raises(ValueError, match="phone number"):
            TextBeltNotifier(SMSConfig(api_key="key"))

    def test_format_message(self, config: SMSConfig) -> None:
        notifier = TextBeltNotifier(config)
        assert notifier.format_message("Meeting at 3", "Jane Doe <jane@x.com>") == "[Jane Doe] Meeting at 3"
        assert notifier.format_message("Meeting at 3", "jane@x.com") == "[jane@x.com] Meeting at 3"

    @pytest.mark.asyncio
    async def test_sends_to_every_number(self, config: SMSConfig) -> None:
        requests: list[httpx.Request] = []
        notifier = TextBeltNotifier(config, transport=recording_transport(requests, {}))

        results = await notifier.send("Invoice due Friday", "Billing <billing@company.com>")

        assert len(results) == 2
        payloads = [json.loads(r.content) for r in requests]
        assert sorted(p["phone"] for p in payloads) == ["5551234567", "5559876543"]
        for payload in payloads:
            assert payload["message"] == "[Billing] Invoice due Friday"
            assert payload["key"] == "key123"
        assert all(str(r.url) == "https://textbelt.com/text" for r in requests)

    @pytest.mark.asyncio
    async def test_provider_error_raises(self, config: SMSConfig) -> None:
        requests: list[httpx.Request] = []
        transport = recording_transport(
            requests, {"5559876543": {"success": False, "error": "Out of quota"}}
        )
        notifier = TextBeltNotifier(config, transport=transport)

        with pytest.raises(NotificationError, match="Out of quota"):
            await notifier.send("Hello", "a@b.com")

        # Both numbers were attempted
        assert len(requests) == 2

    @pytest.mark.asyncio
    async def test_http_error_raises(self, config: SMSConfig) -> None:
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        notifier = TextBeltNotifier(config, transport=transport)

        with pytest.raises(NotificationError, match="500"):
            await notifier.send("Hello", "a@b.com")

    @pytest.mark.asyncio
    async def test_mixed_http_failure_attempts_every_number(self, config: SMSConfig) -> None:
        delivered: list[str] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            phone = json.loads(request.content)["phone"]
            if phone == "5551234567":
                return httpx.Response(500)
            await asyncio.sleep(0.05)
            delivered.append(phone)
            return httpx.Response(200, json={"success": True})

        notifier = TextBeltNotifier(config, transport=httpx.MockTransport(handler))

        with pytest.raises(NotificationError) as exc_info:
            await notifier.send("Hello", "a@b.com")

        # The slow number finished before the error surfaced
        assert delivered == ["5559876543"]
        assert "5551234567" in str(exc_info.value)
        assert "5559876543" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_http_and_provider_errors_reported_together(self, config: SMSConfig) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            phone = json.loads(request.content)["phone"]
            if phone == "5551234567":
                return httpx.Response(503)
            return httpx.Response(200, json={"success": False, "error": "Invalid phone"})

        notifier = TextBeltNotifier(config, transport=httpx.MockTransport(handler))

        with pytest.raises(NotificationError) as exc_info:
            await notifier.send("Hello", "a@b.com")

        message = str(exc_info.value)
        assert "503" in message
        assert "Invalid phone" in message
