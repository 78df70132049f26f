"""Tests for the command-line front end."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

from typer.testing import CliRunner

from ggpr.cli import __version__, _build_notifier, app
from ggpr.core.models import ManualInstructions, RunOptions, RunResult
from ggpr.notifications import CompositeNotifier, ConsoleNotifier, LoggingNotifier

runner = CliRunner()


def _config(tmp_path: Path) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(f"log_dir: {tmp_path / 'logs'}\n")
    return str(path)


class TestCli:
    """Tests for the ggpr CLI."""

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_unknown_provider_exits_1(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["create", "--provider", "nonexistent", "--config", _config(tmp_path)])
        assert result.exit_code == 1
        assert "Unsupported LLM provider" in result.output

    def test_options_passed_to_workflow(self, tmp_path: Path) -> None:
        run = AsyncMock(return_value=RunResult(status="completed"))

        with patch("ggpr.cli.WorkflowOrchestrator.run", run):
            result = runner.invoke(
                app,
                ["create", "-y", "--pr", "--draft", "-p", "openai", "-m", "gpt-test", "--config", _config(tmp_path)],
            )

        assert result.exit_code == 0
        options: RunOptions = run.call_args.args[0]
        assert options.auto_confirm is True
        assert options.create_pr is True
        assert options.draft is True
        assert options.provider == "openai"
        assert options.model == "gpt-test"

    def test_failed_run_exits_1(self, tmp_path: Path) -> None:
        run = AsyncMock(return_value=RunResult(status="failed", stage="COMMIT", message="git commit failed"))

        with patch("ggpr.cli.WorkflowOrchestrator.run", run):
            result = runner.invoke(app, ["create", "--config", _config(tmp_path)])

        assert result.exit_code == 1
        assert "Failed at COMMIT" in result.output

    def test_cancelled_run_exits_0(self, tmp_path: Path) -> None:
        run = AsyncMock(return_value=RunResult(status="cancelled", stage="BRANCH", message="Target branch selection cancelled"))

        with patch("ggpr.cli.WorkflowOrchestrator.run", run):
            result = runner.invoke(app, ["create", "--config", _config(tmp_path)])

        assert result.exit_code == 0
        assert "Cancelled at BRANCH" in result.output

    def test_manual_instructions_printed(self, tmp_path: Path) -> None:
        instructions = ManualInstructions(title="feat: x", description="Body", from_branch="feat/x", to_branch="main")
        run = AsyncMock(return_value=RunResult(status="completed", manual_instructions=instructions))

        with patch("ggpr.cli.WorkflowOrchestrator.run", run):
            result = runner.invoke(app, ["create", "--pr", "--config", _config(tmp_path)])

        assert result.exit_code == 0
        assert "From: feat/x" in result.output
        assert "To: main" in result.output

    def test_verbose_adds_logging_notifier(self, tmp_path: Path) -> None:
        orchestrator = MagicMock()
        orchestrator.return_value.run = AsyncMock(return_value=RunResult(status="completed"))

        with patch("ggpr.cli.WorkflowOrchestrator", orchestrator):
            result = runner.invoke(app, ["create", "-v", "--config", _config(tmp_path)])

        assert result.exit_code == 0
        notifier = orchestrator.call_args.kwargs["notifier"]
        assert isinstance(notifier, CompositeNotifier)
        assert [type(n) for n in notifier.notifiers] == [ConsoleNotifier, LoggingNotifier]


class TestBuildNotifier:
    """Tests for _build_notifier."""

    def test_console_only_by_default(self) -> None:
        notifier = _build_notifier(False)
        assert isinstance(notifier, ConsoleNotifier)
        assert notifier.show_debug is False

    def test_verbose_shows_debug_and_logs(self) -> None:
        notifier = _build_notifier(True)
        assert isinstance(notifier, CompositeNotifier)
        console_notifier = notifier.notifiers[0]
        assert isinstance(console_notifier, ConsoleNotifier)
        assert console_notifier.show_debug is True
