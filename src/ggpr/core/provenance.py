"""Commit provenance stored as git notes.

Commits created or optimized by ggpr get a note under ``refs/notes/pr-agent``
so later runs do not analyze them again. Notes do not change commit hashes.
"""

from __future__ import annotations

import logging

from ggpr.core.errors import VCSOperationError
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)

NOTES_NAMESPACE = "pr-agent"
NOTE_MESSAGE = "created-by-pr-agent"


class CommitProvenanceTracker:
    """Reads and writes the provenance note of a commit."""

    def __init__(self, git: GitRepository) -> None:
        self.git = git

    async def mark(self, ref: str) -> bool:
        """Attach the provenance note to ``ref``.

        Failures are logged at debug level and reported as False; marking
        never fails the workflow.
        """
        try:
            await self.git.raw(["notes", "--ref", NOTES_NAMESPACE, "add", "-f", "-m", NOTE_MESSAGE, ref])
        except VCSOperationError as e:
            logger.debug(f"Failed to mark commit {ref} with git notes: {e}")
            return False
        logger.debug(f"Marked commit {ref} as created by ggpr")
        return True

    async def is_marked(self, ref: str) -> bool:
        """True when ``ref`` carries the provenance note."""
        try:
            note = await self.git.raw(["notes", "--ref", NOTES_NAMESPACE, "show", ref])
        except VCSOperationError as e:
            logger.debug(f"No provenance note for {ref}: {e}")
            return False
        return NOTE_MESSAGE in note
