"""Tests for LLM summarization."""

from unittest.mock import MagicMock

import pytest

from inbox_sms.config import LLMConfig, SummaryConfig
from inbox_sms.processors.llm import LLMClient, Summarizer, create_llm_client

LONG_BODY = (
    "Hello,\n\n"
    + "The quarterly report is attached and needs your review before the board meeting. " * 5
    + "\n\nPlease confirm the budget figures by Thursday at noon.\n\nBest regards,\nDana"
)


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock(spec=LLMClient)
    client.chat.return_value = "Review the quarterly report\nand confirm budget   by Thursday."
    return client


@pytest.fixture
def summarizer(mock_client: MagicMock) -> Summarizer:
    return Summarizer(LLMConfig(), summary_config=SummaryConfig(), client=mock_client)


class TestCreateLLMClient:
    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_llm_client(LLMConfig(provider="cohere"))

    def test_anthropic_requires_key(self) -> None:
        with pytest.raises(ValueError, match="API key"):
            create_llm_client(LLMConfig(provider="anthropic"), api_key=None)


class TestSummarizer:
    @pytest.mark.asyncio
    async def test_short_content_skips_llm(
        self, summarizer: Summarizer, mock_client: MagicMock
    ) -> None:
        result = await summarizer.summarize("Your package arrives today.\nTrack it online.\nBye")

        assert result == "Your package arrives today. Track it online."
        mock_client.chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_short_threshold_applies_after_cleaning(
        self, summarizer: Summarizer, mock_client: MagicMock
    ) -> None:
        quoted = "\n".join(f"> old line {i} with plenty of quoted filler text" for i in range(20))
        result = await summarizer.summarize(f"Sounds good.\n\n{quoted}")

        assert result == "Sounds good."
        mock_client.chat.assert_not_called()

    @pytest.mark.asyncio
    async def test_long_content_uses_llm(
        self, summarizer: Summarizer, mock_client: MagicMock
    ) -> None:
        result = await summarizer.summarize(LONG_BODY, sender="Dana <dana@company.com>")

        assert result == "Review the quarterly report and confirm budget by Thursday."
        mock_client.chat.assert_called_once()
        prompt = mock_client.chat.call_args.kwargs["messages"][0]["content"]
        assert "From: Dana <dana@company.com>" in prompt
        assert "deadlines" in prompt
        assert "Best regards" not in prompt

    @pytest.mark.asyncio
    async def test_empty_llm_response_falls_back(
        self, summarizer: Summarizer, mock_client: MagicMock
    ) -> None:
        mock_client.chat.return_value = "  \n "
        result = await summarizer.summarize(LONG_BODY)

        assert result.startswith("Hello, The quarterly report")

    @pytest.mark.asyncio
    async def test_llm_errors_propagate(
        self, summarizer: Summarizer, mock_client: MagicMock
    ) -> None:
        mock_client.chat.side_effect = RuntimeError("model offline")
        with pytest.raises(RuntimeError):
            await summarizer.summarize(LONG_BODY)

    @pytest.mark.asyncio
    async def test_uses_configured_generation_settings(self, mock_client: MagicMock) -> None:
        summarizer = Summarizer(
            LLMConfig(max_tokens=99, temperature=0.0), client=mock_client
        )
        await summarizer.summarize(LONG_BODY)

        kwargs = mock_client.chat.call_args.kwargs
        assert kwargs["max_tokens"] == 99
        assert kwargs["temperature"] == 0.0
