"""Diff collection with lock files, generated files and images filtered out."""

from __future__ import annotations

import fnmatch
import logging
import posixpath

from ggpr.core.errors import VCSOperationError
from ggpr.core.prompts import format_file_diff
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)

# Exact paths never sent to the model
IGNORED_FILES = ("pnpm-lock.yaml", "yarn.lock", "package-lock.json", "tsconfig.json")

# Glob patterns never sent to the model
IGNORE_PATTERNS = (
    "*.generated.*",
    "*.lock",
    "tsconfig.*.json",
    "*.svg",
    "*.png",
    "*.jpg",
    "*.jpeg",
)

DIFF_ARGS = ["-U3", "--minimal"]


def is_ignored(path: str) -> bool:
    """True when the basename of ``path`` is in the ignore set, at any depth."""
    name = posixpath.basename(path)
    if name in IGNORED_FILES:
        return True
    return any(fnmatch.fnmatch(name, pattern) for pattern in IGNORE_PATTERNS)


def exclude_pathspecs() -> list[str]:
    """The ignore set as git exclude pathspecs.

    ``glob`` magic with a leading ``**/`` matches the basename in every
    directory including the root, which is what ``is_ignored`` checks.
    """
    return [f":(exclude,glob)**/{entry}" for entry in (*IGNORED_FILES, *IGNORE_PATTERNS)]


class DiffCollector:
    """Produces the diffs shown to the model."""

    def __init__(self, git: GitRepository) -> None:
        self.git = git

    async def uncommitted_diff(self, paths: list[str]) -> str:
        """Staged plus unstaged diff of each eligible path, framed per file.

        Paths in the ignore set are dropped. A path whose diff cannot be read
        is skipped with a warning. Returns "" when nothing is eligible.
        """
        parts: list[str] = []
        for path in paths:
            if not path or is_ignored(path):
                continue
            logger.info(f"Analyzing changes in: {path}")
            try:
                staged = await self.git.diff([*DIFF_ARGS, "--staged", "--", path])
                unstaged = await self.git.diff([*DIFF_ARGS, "--", path])
            except VCSOperationError as e:
                logger.warning(f"Failed to get diff for {path}: {e}")
                continue
            parts.append(format_file_diff(path, staged + unstaged))
        return "".join(parts)

    async def range_diff(self, from_ref: str, to_ref: str = "HEAD") -> str:
        return await self.git.diff([*DIFF_ARGS, from_ref, to_ref], exclude_pathspecs=["--", *exclude_pathspecs()])

    async def single_commit_diff(self, commit_hash: str) -> str:
        return await self.git.show(commit_hash, DIFF_ARGS, exclude_pathspecs=["--", *exclude_pathspecs()])
