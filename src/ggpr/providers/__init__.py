"""Completion providers.

Importing this package registers every bundled backend.
"""

from ggpr.providers.anthropic import AnthropicProvider
from ggpr.providers.base import (
    CompletionProvider,
    HTTPCompletionProvider,
    available_providers,
    create_provider,
    register_provider,
)
from ggpr.providers.ollama import OllamaProvider
from ggpr.providers.openai import DeepSeekProvider, OpenAIProvider
from ggpr.providers.request_log import RequestLogEntry, RequestLogger

__all__ = [
    "AnthropicProvider",
    "CompletionProvider",
    "DeepSeekProvider",
    "HTTPCompletionProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "RequestLogEntry",
    "RequestLogger",
    "available_providers",
    "create_provider",
    "register_provider",
]
