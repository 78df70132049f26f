"""Main workflow orchestration."""

from __future__ import annotations

import logging
from pathlib import Path

from ggpr.config import Config
from ggpr.core.branches import BranchResolver
from ggpr.core.committer import UncommittedChangesHandler
from ggpr.core.diffs import DiffCollector
from ggpr.core.errors import GgprError, ModelResponseFormatError, ProviderError, VCSOperationError
from ggpr.core.models import (
    Cancelled,
    ManualInstructions,
    OptimizationResult,
    PullRequestRecord,
    RunOptions,
    RunResult,
    WorkflowSession,
)
from ggpr.core.optimizer import CommitMessageOptimizer
from ggpr.core.provenance import CommitProvenanceTracker
from ggpr.core.pull_requests import PullRequestManager
from ggpr.core.responses import CompletionService
from ggpr.hosts.github import GitHubCLI
from ggpr.notifications import Notifier, NullNotifier
from ggpr.providers import CompletionProvider, create_provider
from ggpr.providers.request_log import RequestLogger
from ggpr.ui.gates import ConfirmationGate, create_gate
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)


class WorkflowOrchestrator:
    """Runs branch resolution, committing, optimization and the PR step in order.

    Each stage either finishes, returns ``Cancelled`` (the run ends with
    status ``cancelled``), or raises. Errors from the optimizer are reported
    and the run continues; any other ``GgprError`` ends the run as ``failed``.
    """

    def __init__(
        self,
        config: Config | None = None,
        gate: ConfirmationGate | None = None,
        notifier: Notifier | None = None,
        project_root: Path | None = None,
        git: GitRepository | None = None,
        host: GitHubCLI | None = None,
        provider: CompletionProvider | None = None,
    ) -> None:
        self.config = config or Config.load()
        self.project_root = (project_root or Path.cwd()).resolve()
        self.gate = gate
        self.notifier = notifier or NullNotifier()
        self.git = git or GitRepository(self.project_root, timeout=self.config.git_timeout)
        self.host = host or GitHubCLI(self.project_root)
        self.provider = provider

        self.diffs = DiffCollector(self.git)
        self.provenance = CommitProvenanceTracker(self.git)

    async def run(self, options: RunOptions) -> RunResult:
        """Run the workflow once.

        Args:
            options: Per-run options from the CLI

        Returns:
            The run outcome; never raises for workflow errors.
        """
        gate = self.gate or create_gate(options.auto_confirm)
        session = WorkflowSession()
        result = RunResult(status="completed")

        # Configuration
        try:
            completions = self._completion_service(options)
        except ProviderError as e:
            return self._failed(result, "CONFIG", e)

        self.notifier.info(
            "CONFIG",
            f"Using provider {completions.provider.name} with model {completions.model} ({completions.provider.base_url})",
        )
        if not await gate.confirm("Are you ready to create an AI PR?"):
            return self._cancelled(result, Cancelled("WORKFLOW", "Run cancelled"))

        # Working tree
        try:
            status = await self.git.status()
        except VCSOperationError as e:
            return self._failed(result, "STATUS", e)

        # Target branch
        if not await gate.confirm("Would you like to proceed with determining the target branch?"):
            return self._cancelled(result, Cancelled("BRANCH", "Target branch selection cancelled"))
        try:
            upstream = await BranchResolver(self.git, self.notifier).resolve(gate)
        except GgprError as e:
            return self._failed(result, "BRANCH", e)
        if isinstance(upstream, Cancelled):
            return self._cancelled(result, upstream)

        result.upstream_branch = upstream
        self.notifier.success("BRANCH", f"Target branch: {upstream}")

        # Uncommitted changes
        if status.is_clean:
            self.notifier.info("COMMIT", "No uncommitted changes found")
        else:
            if not await gate.confirm("Would you like to commit your uncommitted changes?"):
                return self._cancelled(result, Cancelled("COMMIT", "Commit of uncommitted changes cancelled"))
            handler = UncommittedChangesHandler(self.git, self.diffs, completions, self.provenance, self.notifier)
            try:
                committed = await handler.handle(status, gate, session)
            except GgprError as e:
                return self._failed(result, "COMMIT", e)
            if isinstance(committed, Cancelled):
                return self._cancelled(result, committed)

        # Commit message optimization
        result.optimization = await self._optimize(upstream, gate, session, completions, result)

        if not options.create_pr:
            self.notifier.success("WORKFLOW", "Done. Re-run with --pr to create or update a pull request.")
            return result

        # Pull request
        if not await gate.confirm("Would you like to proceed with creating a PR?"):
            return self._cancelled(result, Cancelled("PR-CREATE", "PR creation cancelled"))

        manager = PullRequestManager(self.git, self.host, self.diffs, completions, self.notifier)
        try:
            outcome = await manager.create_or_update(upstream, options.draft, gate, session)
        except GgprError as e:
            return self._failed(result, "PR-CREATE", e)

        if isinstance(outcome, PullRequestRecord):
            result.pull_request = outcome
            result.message = outcome.url
        elif isinstance(outcome, ManualInstructions):
            result.manual_instructions = outcome
            result.message = outcome.reason
        else:
            result.message = "PR step skipped"

        self.notifier.success("WORKFLOW", "Workflow completed")
        return result

    def _completion_service(self, options: RunOptions) -> CompletionService:
        provider = self.provider or create_provider(options.provider, self.config)
        request_logger = None
        if options.log_requests or self.config.log_requests:
            request_logger = RequestLogger(self.config.log_dir)
        return CompletionService(provider, self.config, model=options.model, request_logger=request_logger)

    async def _optimize(
        self,
        upstream: str,
        gate: ConfirmationGate,
        session: WorkflowSession,
        completions: CompletionService,
        result: RunResult,
    ) -> OptimizationResult:
        optimizer = CommitMessageOptimizer(self.git, self.diffs, completions, self.provenance, self.notifier)
        try:
            return await optimizer.optimize(upstream, gate, session)
        except (ModelResponseFormatError, ProviderError, VCSOperationError) as e:
            self.notifier.error("OPTIMIZE", f"Failed to optimize last commit: {e}")
            result.warnings.append(f"OPTIMIZE: {e}")
            return OptimizationResult(status="failed", reason=str(e))

    def _cancelled(self, result: RunResult, cancelled: Cancelled) -> RunResult:
        self.notifier.warning(cancelled.stage, cancelled.message)
        result.status = "cancelled"
        result.stage = cancelled.stage
        result.message = cancelled.message
        return result

    def _failed(self, result: RunResult, stage: str, error: Exception) -> RunResult:
        logger.debug(f"{stage} failed", exc_info=error)
        self.notifier.error(stage, str(error))
        result.status = "failed"
        result.stage = stage
        result.message = str(error)
        return result
