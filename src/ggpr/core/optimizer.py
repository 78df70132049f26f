"""Commit message optimization for the most recent commit of a branch.

The optimizer is a small state machine::

    Start -> CheckMerge -> CheckProvenance -> Analyze -> {Amend | Skip}

Only the newest commit in ``upstream..HEAD`` is ever considered. Merge
commits and commits already carrying the provenance note are skipped
before any model call.
"""

from __future__ import annotations

import logging

from ggpr.core.diffs import DiffCollector
from ggpr.core.errors import VCSOperationError
from ggpr.core.models import Commit, ImprovementAnalysis, OptimizationResult, SkipReason, WorkflowSession
from ggpr.core.prompts import build_improvement_prompt
from ggpr.core.provenance import CommitProvenanceTracker
from ggpr.core.responses import CompletionService
from ggpr.notifications import Notifier, NullNotifier
from ggpr.ui.gates import ConfirmationGate
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)

STAGE = "OPTIMIZE"


class CommitMessageOptimizer:
    """Rewrites the last commit message when the model says it needs it."""

    def __init__(
        self,
        git: GitRepository,
        diffs: DiffCollector,
        completions: CompletionService,
        provenance: CommitProvenanceTracker,
        notifier: Notifier | None = None,
    ) -> None:
        self.git = git
        self.diffs = diffs
        self.completions = completions
        self.provenance = provenance
        self.notifier = notifier or NullNotifier()

    async def optimize(
        self,
        upstream_branch: str,
        gate: ConfirmationGate,
        session: WorkflowSession,
    ) -> OptimizationResult:
        """Run the optimizer against ``upstream_branch..HEAD``.

        Raises:
            VCSOperationError: If the commit range or its diff cannot be read.
            ModelResponseFormatError: If the analysis reply is malformed.
            ProviderError: If the model call fails.
        """
        self.notifier.info(STAGE, "Starting commit message optimization process...")

        commits = await self.git.log(f"{upstream_branch}..HEAD")
        if not commits:
            self.notifier.info(STAGE, "No commits to optimize")
            return OptimizationResult.skipped(SkipReason.NO_COMMITS)

        self.notifier.info(STAGE, f"Found {len(commits)} commit(s) in the branch")
        if not await gate.confirm("Would you like to optimize your commit messages?"):
            self.notifier.info(STAGE, "Skipping commit message optimization")
            return OptimizationResult.skipped(SkipReason.USER, detail="optimization declined")

        last = commits[0]

        # CheckMerge
        if await self._is_merge(last):
            self.notifier.info(STAGE, f"Cannot optimize merge commit: {last.short_hash}")
            return OptimizationResult.skipped(SkipReason.MERGE, commit=last)

        # CheckProvenance
        if await self.provenance.is_marked(last.hash):
            self.notifier.info(STAGE, "Last commit was already created or processed by ggpr, skipping optimization")
            return OptimizationResult.skipped(SkipReason.ALREADY_PROCESSED, commit=last)

        self.notifier.info(STAGE, f"Will optimize the last commit: {last.short_hash} - {last.subject}")
        if not await gate.confirm("Continue with commit message optimization?"):
            self.notifier.info(STAGE, "Commit message optimization cancelled")
            return OptimizationResult.skipped(SkipReason.USER, commit=last, detail="optimization declined")

        # Analyze
        commit_diff, branch_diff = await self._collect_diffs(upstream_branch, last)
        if not commit_diff.strip() and not branch_diff.strip():
            self.notifier.info(STAGE, "Only ignored files changed, nothing to analyze")
            return OptimizationResult.skipped(SkipReason.NO_CHANGES, commit=last, detail="only ignored files changed")

        analysis = await self._analyze(last, commit_diff, branch_diff)

        if not analysis.needsImprovement:
            await self.provenance.mark(last.hash)
            self.notifier.info(STAGE, f"No changes needed for last commit: {analysis.reason}")
            return OptimizationResult.skipped(SkipReason.MODEL, commit=last, detail=analysis.reason)

        improved = analysis.improvedCommitMessage or ""
        self.notifier.success(
            STAGE,
            "AI suggests improving the last commit message\n"
            f"Current commit message: {last.message.strip()}\n"
            f"Improved commit message: {improved}\n"
            f"Reason for improvement: {analysis.reason}",
        )
        if not await gate.confirm(f"Amend commit {last.short_hash} with the improved message?"):
            self.notifier.info(STAGE, "Skipping amendment for last commit")
            return OptimizationResult.skipped(SkipReason.USER, commit=last, detail=analysis.reason)

        # Amend
        self.notifier.info(STAGE, f"Amending last commit {last.short_hash}...")
        new_hash = await self.git.amend_message(improved)
        await self.provenance.mark("HEAD")
        session.commit_optimized = True

        self.notifier.success(STAGE, f"Last commit amended successfully: {new_hash[:7]} - {improved}")
        return OptimizationResult(
            status="amended",
            commit=last,
            reason=analysis.reason,
            new_message=improved,
        )

    async def _is_merge(self, commit: Commit) -> bool:
        # Log records carry parents; re-read them when the record has none
        if not commit.parents:
            commit = commit.model_copy(update={"parents": await self.git.parents(commit.hash)})
        return commit.is_merge

    async def _collect_diffs(self, upstream_branch: str, commit: Commit) -> tuple[str, str]:
        """Return ``(commit_diff, branch_diff)``; the commit diff degrades to ""."""
        self.notifier.info(STAGE, f"Getting full diff context from {upstream_branch} to HEAD...")
        branch_diff = await self.diffs.range_diff(upstream_branch, "HEAD")

        try:
            commit_diff = await self.diffs.single_commit_diff(commit.hash)
        except VCSOperationError as e:
            self.notifier.warning(STAGE, f"Failed to get commit diff, continuing with the branch diff only: {e}")
            commit_diff = ""

        return commit_diff, branch_diff

    async def _analyze(self, commit: Commit, commit_diff: str, branch_diff: str) -> ImprovementAnalysis:
        self.notifier.info(STAGE, "Requesting commit message analysis from AI...")
        prompt = build_improvement_prompt(commit.message.strip(), commit_diff, branch_diff)
        analysis = await self.completions.request(prompt, ImprovementAnalysis, stage=STAGE)
        logger.debug(f"Analysis for {commit.short_hash}: needsImprovement={analysis.needsImprovement}")
        return analysis
