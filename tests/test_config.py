"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from inbox_sms.config import Settings, _deep_merge, load_settings


def write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.safe_dump(data))


class TestDeepMerge:
    def test_nested_merge(self) -> None:
        base = {"gmail": {"client_id": "a", "processed_label": "G2SMS"}, "rules": {"x": [1]}}
        override = {"gmail": {"client_id": "b"}, "rules": {"x": [2]}}

        merged = _deep_merge(base, override)

        assert merged["gmail"] == {"client_id": "b", "processed_label": "G2SMS"}
        assert merged["rules"] == {"x": [2]}


class TestLoadSettings:
    def test_defaults_without_files(self, tmp_path: Path) -> None:
        settings = load_settings(tmp_path)

        assert settings.config_dir == tmp_path
        assert settings.rules.is_empty
        assert settings.gmail.processed_label == "G2SMS"
        assert settings.monitor.batch_size == 10

    def test_rules_from_yaml(self, tmp_path: Path) -> None:
        write_yaml(
            tmp_path / "config.yaml",
            {
                "rules": {
                    "exact_senders": ["example@domain.com"],
                    "sender_domains": ["company.com", "school.edu"],
                    "subject_keywords": ["important", "urgent"],
                    "content_keywords": ["critical", "action required"],
                    "blocked_senders": ["spam@example.com"],
                }
            },
        )

        settings = load_settings(tmp_path)

        assert settings.rules.sender_domains == frozenset({"company.com", "school.edu"})
        assert settings.rules.blocked_senders == frozenset({"spam@example.com"})

    def test_local_overrides_merge(self, tmp_path: Path) -> None:
        write_yaml(
            tmp_path / "config.yaml",
            {"sms": {"phone_numbers": ["5551234567"]}, "llm": {"provider": "ollama"}},
        )
        write_yaml(tmp_path / "config.local.yaml", {"sms": {"api_key": "secret"}})

        settings = load_settings(tmp_path)

        assert settings.sms.api_key == "secret"
        assert settings.sms.phone_numbers == ["5551234567"]

    def test_empty_yaml_file(self, tmp_path: Path) -> None:
        (tmp_path / "config.yaml").write_text("")
        assert load_settings(tmp_path).rules.is_empty

    def test_unknown_rule_key_rejected(self, tmp_path: Path) -> None:
        write_yaml(tmp_path / "config.yaml", {"rules": {"blacklist": ["spam.com"]}})
        with pytest.raises(ValidationError):
            load_settings(tmp_path)

    def test_env_secrets(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INBOX_SMS_GMAIL__REFRESH_TOKEN", "from-env")
        monkeypatch.setenv("INBOX_SMS_ANTHROPIC_API_KEY", "sk-test")

        settings = Settings(config_dir=tmp_path)

        assert settings.gmail.refresh_token == "from-env"
        assert settings.anthropic_api_key == "sk-test"
