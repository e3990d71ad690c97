"""LLM-based message summarization."""

import logging
from abc import ABC, abstractmethod

from inbox_sms.config import LLMConfig, SummaryConfig
from inbox_sms.utils.text import clean_for_summary, first_lines, flatten, smart_truncate

logger = logging.getLogger(__name__)

# Longest cleaned body sent to the model
MAX_PROMPT_CHARS = 4000


class LLMClient(ABC):
    """Abstract base class for LLM clients."""

    @abstractmethod
    def chat(self, messages: list[dict[str, str]], max_tokens: int, temperature: float) -> str:
        """Send a chat completion request and return the response text."""
        ...


class AnthropicClient(LLMClient):
    """Anthropic API client."""

    def __init__(self, api_key: str, model: str) -> None:
        import anthropic

        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def chat(self, messages: list[dict[str, str]], max_tokens: int, temperature: float) -> str:
        response = self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            messages=messages,  # type: ignore
        )
        return response.content[0].text


class OllamaClient(LLMClient):
    """Ollama client using native ollama library."""

    def __init__(self, base_url: str, model: str, context_length: int = 8192) -> None:
        import ollama

        self.client = ollama.Client(host=base_url)
        self.model = model
        self.context_length = context_length

    def chat(self, messages: list[dict[str, str]], max_tokens: int, temperature: float) -> str:
        response = self.client.chat(
            model=self.model,
            messages=messages,  # type: ignore
            options={
                "num_ctx": self.context_length,
                "num_predict": max_tokens,
                "temperature": temperature,
            },
        )
        return response["message"]["content"] or ""


def create_llm_client(config: LLMConfig, api_key: str | None = None) -> LLMClient:
    """Factory function to create the appropriate LLM client."""
    if config.provider == "anthropic":
        if not api_key:
            raise ValueError("Anthropic API key required")
        return AnthropicClient(api_key=api_key, model=config.model)
    elif config.provider == "ollama":
        return OllamaClient(
            base_url=config.ollama_base_url,
            model=config.model,
            context_length=config.ollama_context_length,
        )
    else:
        raise ValueError(f"Unknown LLM provider: {config.provider}")


class Summarizer:
    """Condense message text into a single SMS-sized line."""

    def __init__(
        self,
        config: LLMConfig,
        api_key: str | None = None,
        summary_config: SummaryConfig | None = None,
        client: LLMClient | None = None,
    ) -> None:
        """Initialize the summarizer.

        Args:
            config: LLM configuration
            api_key: API key for Anthropic (if using that provider)
            summary_config: Thresholds for skipping the model on short text
            client: Pre-built client, mainly for tests
        """
        self.config = config
        self.summary_config = summary_config or SummaryConfig()
        self.client = client or create_llm_client(config, api_key)

    def _build_prompt(self, text: str, sender: str) -> str:
        from_line = f"From: {sender}\n" if sender else ""
        return f"""Summarize this email as one short paragraph for a text message.
Focus on key actions, dates, amounts, and deadlines. Remove any URLs or contact information.

{from_line}Body:
{smart_truncate(text, MAX_PROMPT_CHARS)}

Summary:"""

    async def summarize(self, content: str, sender: str = "") -> str:
        """Summarize extracted message text.

        Short messages are not sent to the model: their first lines are
        returned instead.
        """
        cleaned = clean_for_summary(content)
        short = first_lines(cleaned, self.summary_config.short_lines)

        if len(cleaned) < self.summary_config.short_threshold:
            return short

        response = self.client.chat(
            messages=[{"role": "user", "content": self._build_prompt(cleaned, sender)}],
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )
        summary = flatten(response)
        if not summary:
            logger.warning("LLM returned an empty summary, using leading lines")
            return short
        return summary
