"""Strict parsing of model output and the completion call path.

``CompletionService`` is the only place prompts reach a provider: it
prepends the system preamble, times the call, optionally writes the
request log, and validates the reply against the schema the caller asked
for.
"""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from ggpr.config import Config
from ggpr.core.errors import ModelResponseFormatError, ProviderError
from ggpr.core.models import CompletionRequest, CompletionResponse
from ggpr.core.prompts import SYSTEM_PREAMBLE
from ggpr.providers.base import CompletionProvider
from ggpr.providers.request_log import RequestLogEntry, RequestLogger

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def parse_model_response(text: str, schema: type[T]) -> T:
    """Decode ``text`` as one JSON object and validate it against ``schema``.

    Raises:
        ModelResponseFormatError: If the text is not JSON, not an object, or
            does not match the schema.
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise ModelResponseFormatError(f"Model response is not valid JSON: {e}", raw_text=text) from e

    if not isinstance(data, dict):
        raise ModelResponseFormatError(
            f"Model response is not a JSON object (got {type(data).__name__})",
            raw_text=text,
        )

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(part) for part in err["loc"]) or "<root>" for err in e.errors())
        raise ModelResponseFormatError(
            f"Model response does not match {schema.__name__} ({fields})",
            raw_text=text,
        ) from e


class CompletionService:
    """Sends prompts to the selected provider and returns validated responses."""

    def __init__(
        self,
        provider: CompletionProvider,
        config: Config,
        model: str | None = None,
        request_logger: RequestLogger | None = None,
    ) -> None:
        self.provider = provider
        self.config = config
        self.model = config.resolve_model(provider.name, model) or provider.settings.default_model
        self.request_logger = request_logger

    async def complete(self, prompt: str, stage: str = "") -> CompletionResponse:
        """Send ``prompt`` with the system preamble and return the raw reply.

        Raises:
            ProviderError: If the provider call fails.
        """
        request = CompletionRequest(
            prompt=f"{SYSTEM_PREAMBLE}\n{prompt}",
            model=self.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )
        request_id = str(uuid.uuid4())
        entry = RequestLogEntry(
            id=request_id,
            provider=self.provider.name,
            model=self.model,
            stage=stage,
            prompt=request.prompt,
        )

        start = time.monotonic()
        try:
            text = await self.provider.generate(request)
        except ProviderError as e:
            entry.error = str(e)
            entry.execution_time_ms = int((time.monotonic() - start) * 1000)
            self._log(entry)
            logger.error(f"Error generating completion with {self.provider.name}: {e}")
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        entry.response = text
        entry.execution_time_ms = duration_ms
        self._log(entry)

        logger.debug(f"Completion {request_id} from {self.provider.name} took {duration_ms}ms")
        return CompletionResponse(
            text=text,
            request_id=request_id,
            provider=self.provider.name,
            model=self.model,
            duration_ms=duration_ms,
        )

    async def request(self, prompt: str, schema: type[T], stage: str = "") -> T:
        """Send ``prompt`` and parse the reply as ``schema``.

        Raises:
            ProviderError: If the provider call fails.
            ModelResponseFormatError: If the reply does not match ``schema``.
        """
        response = await self.complete(prompt, stage=stage)
        try:
            return parse_model_response(response.text, schema)
        except ModelResponseFormatError:
            logger.debug(f"Raw response for {schema.__name__}: {response.text}")
            raise

    def _log(self, entry: RequestLogEntry) -> None:
        if self.request_logger is not None:
            self.request_logger.write(entry)
