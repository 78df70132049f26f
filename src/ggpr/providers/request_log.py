"""Optional on-disk log of model requests for debugging prompts.

Each entry is appended to a daily ``llm-requests-YYYY-MM-DD.jsonl`` file and
also written on its own as ``request-<id>.json`` so a single request can be
replayed by hand.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class RequestLogEntry(BaseModel):
    """One request/response pair."""

    id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    provider: str
    model: str
    stage: str = ""
    prompt: str
    response: str | None = None
    error: str | None = None
    execution_time_ms: int | None = None


class RequestLogger:
    """Writes ``RequestLogEntry`` records under ``log_dir``.

    Write failures are logged and swallowed; logging a request never fails it.
    """

    def __init__(self, log_dir: Path) -> None:
        self.log_dir = log_dir

    def daily_log_path(self, when: datetime) -> Path:
        return self.log_dir / f"llm-requests-{when.date().isoformat()}.jsonl"

    def request_path(self, request_id: str) -> Path:
        return self.log_dir / f"request-{request_id}.json"

    def write(self, entry: RequestLogEntry) -> Path | None:
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            with self.daily_log_path(entry.timestamp).open("a", encoding="utf-8") as f:
                f.write(entry.model_dump_json() + "\n")
            request_file = self.request_path(entry.id)
            request_file.write_text(json.dumps(entry.model_dump(mode="json"), indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to log LLM request: {e}")
            return None

        logger.debug(f"Logged LLM request {entry.id} to {request_file}")
        return request_file
