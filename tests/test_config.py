"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from ggpr.config import Config


class TestConfig:
    """Tests for Config."""

    def test_defaults(self) -> None:
        config = Config()
        assert config.provider == "ollama"
        assert config.model is None
        assert config.log_requests is False
        assert config.log_dir == Path.home() / ".llm-logs"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = Config.load(tmp_path / "missing.yaml")
        assert config.provider == "ollama"

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "provider: anthropic\n"
            "log_requests: true\n"
            "providers:\n"
            "  anthropic:\n"
            "    api_key: sk-test\n"
            "    default_model: claude-test\n"
        )

        config = Config.load(path)

        assert config.provider == "anthropic"
        assert config.log_requests is True
        assert config.providers.anthropic.api_key == "sk-test"
        assert config.resolve_model() == "claude-test"

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert Config.load(path).provider == "ollama"

    def test_save_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.yaml"
        Config(provider="openai", model="gpt-test", log_dir=tmp_path / "logs").save(path)

        data = yaml.safe_load(path.read_text())
        assert data["provider"] == "openai"
        assert Config.load(path).model == "gpt-test"

    def test_env_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "env-key")
        monkeypatch.setenv("OLLAMA_BASE_URL", "http://ollama.internal:11434/api/generate")

        config = Config()

        assert config.providers.openai.api_key == "env-key"
        assert config.providers.ollama.base_url == "http://ollama.internal:11434/api/generate"

    def test_provider_config_lookup(self) -> None:
        config = Config()
        assert config.provider_config("deepseek") is config.providers.deepseek
        assert config.provider_config("nonexistent") is None
        assert config.provider_config() is config.providers.ollama


class TestResolveModel:
    """Tests for Config.resolve_model."""

    def test_explicit_model_wins(self) -> None:
        assert Config(model="configured").resolve_model("openai", "explicit") == "explicit"

    def test_configured_model_beats_provider_default(self) -> None:
        assert Config(model="configured").resolve_model("openai") == "configured"

    def test_provider_default(self) -> None:
        assert Config().resolve_model("openai") == "gpt-4o-mini"

    def test_unknown_provider(self) -> None:
        assert Config().resolve_model("nonexistent") == ""
