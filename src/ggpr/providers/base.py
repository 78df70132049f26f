"""Completion provider interface and registry.

Backends register themselves by name and are selected once per run with
``create_provider``. Providers return raw text only; parsing it against a
schema is the caller's job.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar, TypeVar

import httpx

from ggpr.config import Config, ProviderConfig
from ggpr.core.errors import ProviderError
from ggpr.core.models import CompletionRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0

_REGISTRY: dict[str, type[CompletionProvider]] = {}

P = TypeVar("P", bound="type[CompletionProvider]")


def register_provider(name: str) -> Callable[[P], P]:
    """Class decorator adding a provider to the registry under ``name``."""

    def decorator(cls: P) -> P:
        cls.name = name
        _REGISTRY[name] = cls
        return cls

    return decorator


def available_providers() -> list[str]:
    return sorted(_REGISTRY)


def create_provider(
    name: str,
    config: Config,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CompletionProvider:
    """Instantiate the registered provider ``name`` from configuration.

    Raises:
        ProviderError: If no provider is registered under ``name``.
    """
    cls = _REGISTRY.get(name)
    settings = config.provider_config(name)
    if cls is None or settings is None:
        raise ProviderError(f"Unsupported LLM provider: {name} (available: {', '.join(available_providers())})", provider=name)
    return cls(settings, timeout=config.request_timeout, transport=transport)


class CompletionProvider(ABC):
    """Abstract base class for language-model backends."""

    name: ClassVar[str] = ""

    def __init__(self, settings: ProviderConfig, timeout: float = DEFAULT_TIMEOUT) -> None:
        self.settings = settings
        self.timeout = timeout

    @property
    def base_url(self) -> str:
        return self.settings.base_url

    def resolve_model(self, request: CompletionRequest) -> str:
        return request.model or self.settings.default_model

    @abstractmethod
    async def generate(self, request: CompletionRequest) -> str:
        """Send ``request`` and return the raw completion text.

        Raises:
            ProviderError: On transport or HTTP errors.
        """


class HTTPCompletionProvider(CompletionProvider):
    """Provider speaking JSON over HTTP with httpx."""

    def __init__(
        self,
        settings: ProviderConfig,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(settings, timeout)
        self._transport = transport

    @abstractmethod
    def endpoint(self) -> str:
        """Full URL of the completion endpoint."""

    @abstractmethod
    def build_payload(self, request: CompletionRequest, model: str) -> dict[str, Any]:
        """JSON body for ``request``."""

    @abstractmethod
    def extract_text(self, data: dict[str, Any]) -> str:
        """Pull the completion text out of the decoded response body."""

    def headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.api_key:
            headers["Authorization"] = f"Bearer {self.settings.api_key}"
        return headers

    def require_api_key(self) -> None:
        if not self.settings.api_key:
            raise ProviderError(f"{self.name} API key not configured", provider=self.name)

    async def generate(self, request: CompletionRequest) -> str:
        model = self.resolve_model(request)
        url = self.endpoint()
        payload = self.build_payload(request, model)

        logger.info(f"Making {self.name} completion request with model: {model}")
        logger.debug(f"{self.name} request params: temperature={request.temperature}, max_tokens={request.max_tokens}, url={url}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, json=payload, headers=self.headers())
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            body = e.response.text[:200]
            raise ProviderError(
                f"{self.name} API error {e.response.status_code}: {body}",
                provider=self.name,
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise ProviderError(f"{self.name} request failed (network error): {e}", provider=self.name) from e
        except ValueError as e:
            raise ProviderError(f"{self.name} returned a non-JSON body: {e}", provider=self.name) from e

        try:
            return self.extract_text(data)
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected {self.name} response shape: {e}", provider=self.name) from e
