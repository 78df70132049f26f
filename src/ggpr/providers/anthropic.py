"""Anthropic Messages API provider."""

from __future__ import annotations

from typing import Any

from ggpr.core.models import CompletionRequest
from ggpr.providers.base import HTTPCompletionProvider, register_provider

ANTHROPIC_VERSION = "2023-06-01"


@register_provider("anthropic")
class AnthropicProvider(HTTPCompletionProvider):
    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/messages"

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": self.settings.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_payload(self, request: CompletionRequest, model: str) -> dict[str, Any]:
        self.require_api_key()
        return {
            "model": model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        content = data.get("content", [])
        return "".join(block.get("text", "") for block in content if block.get("type") == "text")
