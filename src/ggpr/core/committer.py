"""Turning uncommitted changes into a commit with a generated message."""

from __future__ import annotations

import logging

from ggpr.core.diffs import DiffCollector
from ggpr.core.models import Cancelled, CommitMessageSuggestion, WorkflowSession, WorkingTreeStatus
from ggpr.core.prompts import build_commit_message_prompt
from ggpr.core.provenance import CommitProvenanceTracker
from ggpr.core.responses import CompletionService
from ggpr.notifications import Notifier, NullNotifier
from ggpr.ui.gates import ConfirmationGate
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)

STAGE = "COMMIT"


class UncommittedChangesHandler:
    """Asks the model for a commit message and commits the working tree.

    Every decline here ends the run. A reply that does not match the
    commit message schema raises ``ModelResponseFormatError``.
    """

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

    async def handle(
        self,
        status: WorkingTreeStatus,
        gate: ConfirmationGate,
        session: WorkflowSession,
    ) -> str | Cancelled | None:
        """Commit the changes in ``status``.

        Returns:
            The new commit hash, ``Cancelled`` on a declined gate, or None
            when no eligible file was left to analyze.
        """
        self.notifier.info(STAGE, "Found uncommitted changes in the working directory")

        if not await gate.confirm("Analyze changes with AI to generate a commit message?"):
            return Cancelled(STAGE, "Commit creation cancelled")

        self.notifier.info(STAGE, "Collecting modified file details for analysis...")
        diff = await self.diffs.uncommitted_diff(status.changed_paths)
        if not diff.strip():
            self.notifier.warning(STAGE, "No modified files to analyze.")
            return None

        if not await gate.confirm("Send changes to AI for commit message suggestion?"):
            return Cancelled(STAGE, "AI message generation cancelled")

        self.notifier.info(STAGE, "Sending changes to LLM for commit suggestion...")
        suggestion = await self.completions.request(
            build_commit_message_prompt(diff),
            CommitMessageSuggestion,
            stage=STAGE,
        )

        self.notifier.success(STAGE, f"Got commit suggestion:\n{suggestion.commitMessage}")
        if not await gate.confirm("Proceed with this commit?"):
            return Cancelled(STAGE, "Commit cancelled")

        self.notifier.info(STAGE, "Adding all changes to git...")
        await self.git.add(["."])

        self.notifier.info(STAGE, "Creating commit with the suggested message...")
        commit_hash = await self.git.commit(suggestion.commitMessage)
        await self.provenance.mark(commit_hash)
        session.commit_created = True

        self.notifier.success(STAGE, "Changes committed successfully!")
        logger.debug(f"Created commit {commit_hash}")
        return commit_hash
