"""Ollama ``/api/generate`` provider."""

from __future__ import annotations

from typing import Any

from ggpr.core.models import CompletionRequest
from ggpr.providers.base import HTTPCompletionProvider, register_provider

# Sampling options sent with every request
OLLAMA_OPTIONS: dict[str, Any] = {
    "num_ctx": 32768,
    "num_batch": 1024,
    "top_p": 0.8,
}


@register_provider("ollama")
class OllamaProvider(HTTPCompletionProvider):
    """Local Ollama server in JSON output mode.

    ``base_url`` is the full generate endpoint, e.g.
    ``http://localhost:11434/api/generate``.
    """

    def endpoint(self) -> str:
        return self.base_url

    def build_payload(self, request: CompletionRequest, model: str) -> dict[str, Any]:
        return {
            "model": model,
            "prompt": request.prompt,
            "stream": False,
            "format": "json",
            "options": {**OLLAMA_OPTIONS, "temperature": request.temperature},
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        return data.get("response", "") or ""
