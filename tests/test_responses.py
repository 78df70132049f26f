"""Tests for model response schemas and the completion service."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from fakes import FakeProvider

from ggpr.config import Config
from ggpr.core.errors import ModelResponseFormatError, ProviderError
from ggpr.core.models import (
    CommitMessageSuggestion,
    CompletionRequest,
    ImprovementAnalysis,
    PullRequestSuggestion,
    PullRequestUpdate,
)
from ggpr.core.prompts import SYSTEM_PREAMBLE
from ggpr.core.responses import CompletionService, parse_model_response
from ggpr.providers.request_log import RequestLogger


class TestParseModelResponse:
    """Tests for strict schema validation of model output."""

    def test_valid_commit_message(self) -> None:
        result = parse_model_response('{"commitMessage": "feat(api): add endpoint"}', CommitMessageSuggestion)
        assert result.commitMessage == "feat(api): add endpoint"

    def test_extra_fields_ignored(self) -> None:
        result = parse_model_response('{"commitMessage": "fix: x", "confidence": 0.9}', CommitMessageSuggestion)
        assert result.commitMessage == "fix: x"

    def test_not_json(self) -> None:
        with pytest.raises(ModelResponseFormatError) as exc:
            parse_model_response("Sure! Here is your commit message: fix: x", CommitMessageSuggestion)
        assert exc.value.raw_text.startswith("Sure!")

    def test_json_array_rejected(self) -> None:
        with pytest.raises(ModelResponseFormatError, match="not a JSON object"):
            parse_model_response('[{"commitMessage": "fix: x"}]', CommitMessageSuggestion)

    def test_missing_field(self) -> None:
        with pytest.raises(ModelResponseFormatError, match="commitMessage"):
            parse_model_response('{"message": "fix: x"}', CommitMessageSuggestion)

    def test_empty_commit_message_rejected(self) -> None:
        with pytest.raises(ModelResponseFormatError):
            parse_model_response('{"commitMessage": ""}', CommitMessageSuggestion)

    def test_wrong_type_rejected(self) -> None:
        """A string where a boolean is required is not coerced."""
        with pytest.raises(ModelResponseFormatError):
            parse_model_response('{"needsImprovement": "false", "reason": "ok"}', ImprovementAnalysis)

    def test_improvement_not_needed(self) -> None:
        result = parse_model_response('{"needsImprovement": false, "reason": "fine"}', ImprovementAnalysis)
        assert result.needsImprovement is False
        assert result.improvedCommitMessage is None

    def test_improvement_requires_message(self) -> None:
        with pytest.raises(ModelResponseFormatError):
            parse_model_response('{"needsImprovement": true, "reason": "vague"}', ImprovementAnalysis)

    def test_pull_request_suggestion_length_limits(self) -> None:
        data = {"suggestedBranchName": "x" * 51, "prTitle": "feat: x", "prDescription": "## Summary"}
        with pytest.raises(ModelResponseFormatError, match="suggestedBranchName"):
            parse_model_response(json.dumps(data), PullRequestSuggestion)

        data["suggestedBranchName"] = "feat/add-login"
        data["prDescription"] = "d" * 2001
        with pytest.raises(ModelResponseFormatError, match="prDescription"):
            parse_model_response(json.dumps(data), PullRequestSuggestion)

    @pytest.mark.parametrize("name", ["Feature/Add Login!!", "feat/Add-login", "feat_add_login", "-feat", "feat//x", "feat-"])
    def test_branch_name_must_be_lowercase_and_hyphenated(self, name: str) -> None:
        data = {"suggestedBranchName": name, "prTitle": "feat: x", "prDescription": "## Summary"}
        with pytest.raises(ModelResponseFormatError, match="suggestedBranchName"):
            parse_model_response(json.dumps(data), PullRequestSuggestion)

    @pytest.mark.parametrize("name", ["feat/add-login", "fix-123", "feature/auth/oauth-2"])
    def test_valid_branch_names(self, name: str) -> None:
        data = {"suggestedBranchName": name, "prTitle": "feat: x", "prDescription": "## Summary"}
        assert parse_model_response(json.dumps(data), PullRequestSuggestion).suggestedBranchName == name

    def test_pull_request_update(self) -> None:
        result = parse_model_response('{"updatedTitle": "t", "updatedDescription": "d"}', PullRequestUpdate)
        assert (result.updatedTitle, result.updatedDescription) == ("t", "d")


class TestCompletionService:
    """Tests for the provider call path."""

    @pytest.mark.asyncio
    async def test_prepends_system_preamble(self) -> None:
        provider = FakeProvider({"commitMessage": "feat: x"})
        service = CompletionService(provider, Config(temperature=0.3, max_tokens=512))

        result = await service.request("Describe this diff", CommitMessageSuggestion)

        assert result.commitMessage == "feat: x"
        request = provider.requests[0]
        assert request.prompt.startswith(SYSTEM_PREAMBLE)
        assert request.prompt.endswith("Describe this diff")
        assert request.temperature == 0.3
        assert request.max_tokens == 512

    @pytest.mark.asyncio
    async def test_model_resolution(self) -> None:
        provider = FakeProvider("{}", "{}")
        assert CompletionService(provider, Config()).model == "fake-model"
        assert CompletionService(provider, Config(model="configured")).model == "configured"
        assert CompletionService(provider, Config(model="configured"), model="explicit").model == "explicit"

    @pytest.mark.asyncio
    async def test_format_error_propagates(self) -> None:
        service = CompletionService(FakeProvider("not json"), Config())
        with pytest.raises(ModelResponseFormatError):
            await service.request("prompt", CommitMessageSuggestion)

    @pytest.mark.asyncio
    async def test_request_log_written(self, tmp_path: Path) -> None:
        provider = FakeProvider({"commitMessage": "feat: x"})
        service = CompletionService(provider, Config(), request_logger=RequestLogger(tmp_path))

        response = await service.complete("prompt", stage="COMMIT")

        logged = json.loads((tmp_path / f"request-{response.request_id}.json").read_text())
        assert logged["provider"] == "fake"
        assert logged["model"] == "fake-model"
        assert logged["stage"] == "COMMIT"
        assert logged["response"] == '{"commitMessage": "feat: x"}'
        assert len(list(tmp_path.glob("llm-requests-*.jsonl"))) == 1

    @pytest.mark.asyncio
    async def test_provider_error_logged_and_raised(self, tmp_path: Path) -> None:
        class FailingProvider(FakeProvider):
            async def generate(self, request: CompletionRequest) -> str:
                raise ProviderError("ollama request failed (network error)", provider="fake")

        service = CompletionService(FailingProvider(), Config(), request_logger=RequestLogger(tmp_path))
        with pytest.raises(ProviderError):
            await service.complete("prompt")

        [request_file] = list(tmp_path.glob("request-*.json"))
        assert "network error" in json.loads(request_file.read_text())["error"]
