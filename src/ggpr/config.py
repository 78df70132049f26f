"""Configuration management for ggpr."""

from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, Field


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default)


class ProviderConfig(BaseModel):
    """Connection settings for one completion backend."""

    api_key: str = ""
    base_url: str = ""
    default_model: str = ""


def _openai_defaults() -> ProviderConfig:
    return ProviderConfig(
        api_key=_env("OPENAI_API_KEY"),
        base_url=_env("OPENAI_BASE_URL", "https://api.openai.com/v1"),
        default_model="gpt-4o-mini",
    )


def _anthropic_defaults() -> ProviderConfig:
    return ProviderConfig(
        api_key=_env("ANTHROPIC_API_KEY"),
        base_url=_env("ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1"),
        default_model="claude-3-5-sonnet-latest",
    )


def _deepseek_defaults() -> ProviderConfig:
    return ProviderConfig(
        api_key=_env("DEEPSEEK_API_KEY"),
        base_url=_env("DEEPSEEK_BASE_URL", "https://api.deepseek.com/v1"),
        default_model="deepseek-chat",
    )


def _ollama_defaults() -> ProviderConfig:
    return ProviderConfig(
        api_key=_env("OLLAMA_API_KEY"),
        base_url=_env("OLLAMA_BASE_URL", "http://localhost:11434/api/generate"),
        default_model=_env("OLLAMA_DEFAULT_MODEL", "llama3"),
    )


class ProvidersConfig(BaseModel):
    """Per-backend settings, defaulting to environment variables."""

    openai: ProviderConfig = Field(default_factory=_openai_defaults)
    anthropic: ProviderConfig = Field(default_factory=_anthropic_defaults)
    deepseek: ProviderConfig = Field(default_factory=_deepseek_defaults)
    ollama: ProviderConfig = Field(default_factory=_ollama_defaults)

    def get(self, name: str) -> ProviderConfig | None:
        value = getattr(self, name, None)
        return value if isinstance(value, ProviderConfig) else None


class Config(BaseModel):
    """ggpr configuration.

    Provider credentials default to the usual environment variables
    (OPENAI_API_KEY, ANTHROPIC_API_KEY, DEEPSEEK_API_KEY, OLLAMA_BASE_URL, ...)
    and can be overridden per provider in the YAML file.
    """

    provider: str = Field(default="ollama", description="Completion provider: openai, anthropic, deepseek, ollama")
    model: str | None = Field(default=None, description="Model override; defaults to the provider's default model")
    temperature: float = Field(default=0.1, description="Sampling temperature for every request")
    max_tokens: int = Field(default=4096, description="Maximum tokens the model may generate")
    request_timeout: float = Field(default=120.0, description="HTTP timeout for completion requests in seconds")
    git_timeout: float = Field(default=60.0, description="Timeout for a single git command in seconds")
    log_requests: bool = Field(default=False, description="Write every model request and response to log_dir")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".llm-logs", description="Directory for request logs")
    providers: ProvidersConfig = Field(default_factory=ProvidersConfig)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from file or use defaults."""
        if config_path is None:
            # Look for config in .ggpr/config.yaml
            config_path = Path(".ggpr/config.yaml")

        if config_path.exists():
            with config_path.open() as f:
                data = yaml.safe_load(f) or {}
            return cls.model_validate(data)

        return cls()

    def save(self, config_path: Path) -> None:
        """Save configuration to file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False)

    def provider_config(self, name: str | None = None) -> ProviderConfig | None:
        return self.providers.get(name or self.provider)

    def resolve_model(self, provider: str | None = None, model: str | None = None) -> str:
        """Pick the explicit model, then the configured override, then the provider default."""
        if model:
            return model
        if self.model:
            return self.model
        settings = self.provider_config(provider)
        return settings.default_model if settings else ""
