"""OpenAI and OpenAI-compatible (DeepSeek) chat completion providers."""

from __future__ import annotations

from typing import Any

from ggpr.core.models import CompletionRequest
from ggpr.providers.base import HTTPCompletionProvider, register_provider


@register_provider("openai")
class OpenAIProvider(HTTPCompletionProvider):
    """OpenAI ``/chat/completions`` with JSON response format."""

    def endpoint(self) -> str:
        return f"{self.base_url.rstrip('/')}/chat/completions"

    def build_payload(self, request: CompletionRequest, model: str) -> dict[str, Any]:
        self.require_api_key()
        return {
            "model": model,
            "messages": [{"role": "user", "content": request.prompt}],
            "temperature": request.temperature,
            "max_tokens": request.max_tokens,
            "response_format": {"type": "json_object"},
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"] or ""


@register_provider("deepseek")
class DeepSeekProvider(OpenAIProvider):
    """DeepSeek exposes the OpenAI chat completion API."""
