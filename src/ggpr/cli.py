"""CLI interface for ggpr."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ggpr.config import Config
from ggpr.core.models import RunOptions, RunResult
from ggpr.core.orchestrator import WorkflowOrchestrator
from ggpr.notifications import CompositeNotifier, ConsoleNotifier, LoggingNotifier, Notifier
from ggpr.providers import available_providers
from ggpr.ui.gates import create_gate

__version__ = "0.1.0"

app = typer.Typer(
    name="ggpr",
    help="Write commit messages and pull requests for the current git repository with an LLM.",
    no_args_is_help=True,
)
console = Console()


def _build_notifier(verbose: bool) -> Notifier:
    """Console progress; with --verbose the same events also go to the debug log."""
    console_notifier = ConsoleNotifier(console, show_debug=verbose)
    if not verbose:
        return console_notifier
    return CompositeNotifier([console_notifier, LoggingNotifier()])


def _print_summary(result: RunResult) -> None:
    if result.status == "failed":
        console.print(f"[bold red]Failed at {result.stage}:[/bold red] {result.message}")
        return
    if result.status == "cancelled":
        console.print(f"[yellow]Cancelled at {result.stage}:[/yellow] {result.message}")
        return

    if result.pull_request is not None:
        console.print(f"[bold green]Pull request:[/bold green] {result.pull_request.url}")
    elif result.manual_instructions is not None:
        console.print("[bold yellow]Create the pull request manually:[/bold yellow]")
        console.print(result.manual_instructions.render(), markup=False)
    for warning in result.warnings:
        console.print(f"[dim]Warning: {warning}[/dim]")


@app.command()
def create(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Auto-confirm every yes/no prompt"),
    ] = False,
    pr: Annotated[
        bool,
        typer.Option("--pr", help="Create or update a pull request after committing"),
    ] = False,
    draft: Annotated[
        bool,
        typer.Option("--draft", help="Open the pull request as a draft"),
    ] = False,
    provider: Annotated[
        str | None,
        typer.Option("--provider", "-p", help="LLM provider: openai, anthropic, deepseek, ollama"),
    ] = None,
    model: Annotated[
        str | None,
        typer.Option("--model", "-m", help="Model name; defaults to the provider's default model"),
    ] = None,
    log_request: Annotated[
        bool,
        typer.Option("--log-request", help="Write every LLM request and response to the log directory"),
    ] = False,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Path to config file (default: .ggpr/config.yaml)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Commit pending changes, optimize the last commit message, and optionally open a PR."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    config = Config.load(config_path)
    provider_name = provider or config.provider
    if provider_name not in available_providers():
        console.print(f"[red]Unsupported LLM provider: {provider_name}[/red]")
        console.print(f"[dim]Available: {', '.join(available_providers())}[/dim]")
        raise typer.Exit(1)

    options = RunOptions(
        auto_confirm=yes,
        draft=draft,
        provider=provider_name,
        model=model,
        create_pr=pr,
        log_requests=log_request,
    )
    orchestrator = WorkflowOrchestrator(
        config=config,
        gate=create_gate(yes, console),
        notifier=_build_notifier(verbose),
    )

    result = asyncio.run(orchestrator.run(options))
    _print_summary(result)
    raise typer.Exit(result.exit_code)


@app.command()
def version() -> None:
    """Show the ggpr version."""
    console.print(f"ggpr {__version__}")


if __name__ == "__main__":
    app()
