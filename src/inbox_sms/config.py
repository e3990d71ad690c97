"""Configuration management for inbox-sms."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from inbox_sms.models import RuleSet

DEFAULT_CONFIG_DIR = Path.home() / ".config" / "inbox-sms"


class GmailConfig(BaseModel):
    """Gmail API configuration.

    Credentials are an OAuth client plus a long-lived refresh token. The
    processed label is created on first connect and applied to every message
    that was relayed.
    """

    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""
    token_uri: str = "https://oauth2.googleapis.com/token"
    processed_label: str = "G2SMS"
    extra_query: str = ""  # Appended to the inbox search query


class LLMConfig(BaseModel):
    """LLM provider configuration."""

    provider: str = "ollama"  # "anthropic" or "ollama"
    model: str = "gpt-oss:20b"  # Ollama model name or Anthropic model ID
    max_tokens: int = 256
    temperature: float = 0.3
    # Ollama settings
    ollama_base_url: str = "http://localhost:11434"
    ollama_context_length: int = 8192


class SummaryConfig(BaseModel):
    """Settings for message summarization."""

    short_threshold: int = 250  # Shorter cleaned text is sent as-is
    short_lines: int = 2


class SMSConfig(BaseModel):
    """TextBelt SMS configuration."""

    api_key: str = ""
    phone_numbers: list[str] = Field(default_factory=list)
    endpoint: str = "https://textbelt.com/text"
    timeout: float = 30.0


class MonitorConfig(BaseModel):
    """Configuration for mailbox polling."""

    batch_size: int = 10
    summarize: bool = True
    notify: bool = True


class ServiceConfig(BaseModel):
    """Configuration for the scheduled service."""

    polling_interval: int = 300  # seconds (5 minutes)


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_prefix="INBOX_SMS_",
        env_nested_delimiter="__",
    )

    config_dir: Path = Field(default_factory=lambda: DEFAULT_CONFIG_DIR)

    # API keys (loaded from environment)
    anthropic_api_key: str | None = None

    gmail: GmailConfig = Field(default_factory=GmailConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    summary: SummaryConfig = Field(default_factory=SummaryConfig)
    sms: SMSConfig = Field(default_factory=SMSConfig)
    monitor: MonitorConfig = Field(default_factory=MonitorConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    # Filtering rules
    rules: RuleSet = Field(default_factory=RuleSet)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence.

    Nested dicts are merged recursively. Lists and other values are replaced.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_yaml(path: Path) -> dict[str, Any]:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def load_settings(config_dir: Path | None = None) -> Settings:
    """Load settings from environment and config files.

    Loads config.yaml first, then merges config.local.yaml on top if it
    exists (machine-specific overrides, e.g. secrets).
    """
    config_dir = config_dir or DEFAULT_CONFIG_DIR
    config_file = config_dir / "config.yaml"
    local_config_file = config_dir / "config.local.yaml"

    file_settings: dict[str, Any] = {}

    if config_file.exists():
        file_settings = _read_yaml(config_file)

    if local_config_file.exists():
        file_settings = _deep_merge(file_settings, _read_yaml(local_config_file))

    file_settings.setdefault("config_dir", config_dir)
    return Settings(**file_settings)
