"""Git-related utilities: status parsing and an async git command adapter."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from ggpr.core.errors import VCSOperationError
from ggpr.core.models import Commit, WorkingTreeStatus

logger = logging.getLogger(__name__)

# Separators for the machine-readable ``git log`` format
FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = f"--format=%H{FIELD_SEP}%P{FIELD_SEP}%B{RECORD_SEP}"


def parse_git_status_output(output: str) -> WorkingTreeStatus:
    """Parse git status --porcelain output into structured result.

    The porcelain format uses a two-character prefix XY where:
    - X = status of the index (staging area)
    - Y = status of the work tree

    Key prefixes:
    - '??' = untracked file
    - 'M ' / ' M' / 'MM' = modified (staged, unstaged, both)
    - 'A ' / 'AM' = added to index
    - 'D ' / ' D' = deleted
    - 'R ' = renamed in index ("old -> new")
    - 'C ' = copied in index (reported as added)

    Args:
        output: Raw output from `git status --porcelain`

    Returns:
        WorkingTreeStatus with categorized file lists
    """
    status = WorkingTreeStatus()

    for line in output.splitlines():
        if not line or len(line) < 3:
            continue

        prefix = line[:2]
        # File path starts at position 3 (after "XY ")
        file_path = line[3:]

        # Renamed/copied files have "old -> new" format
        if " -> " in file_path:
            file_path = file_path.split(" -> ", 1)[1]

        if prefix == "??":
            status.untracked.append(file_path)
        elif "R" in prefix:
            status.renamed.append(file_path)
        elif "A" in prefix or "C" in prefix:
            status.added.append(file_path)
        elif "D" in prefix:
            status.deleted.append(file_path)
        elif prefix.strip() == "!!":
            continue
        else:
            status.modified.append(file_path)

    return status


def parse_git_log_output(output: str) -> list[Commit]:
    """Parse ``git log`` output produced with ``LOG_FORMAT``."""
    commits: list[Commit] = []
    for record in output.split(RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(FIELD_SEP, 2)
        if len(parts) != 3:
            logger.debug(f"Skipping unparseable log record: {record[:80]!r}")
            continue
        commit_hash, parents, message = parts
        commits.append(
            Commit(
                hash=commit_hash.strip(),
                parents=parents.split(),
                message=message.strip(),
            )
        )
    return commits


class GitRepository:
    """Async wrapper around the git CLI for a single working directory.

    Every failing command raises ``VCSOperationError`` with the command and
    its stderr attached. Commands are awaited one at a time.
    """

    def __init__(self, project_root: Path | None = None, timeout: float = 60.0) -> None:
        self.project_root = project_root or Path.cwd()
        self.timeout = timeout

    async def raw(self, args: list[str]) -> str:
        """Run ``git <args>`` and return stdout.

        Raises:
            VCSOperationError: If git is missing, times out, or exits non-zero.
        """
        cmd = ["git", *args]
        logger.debug(f"Running git command: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=self.project_root,
            )
        except FileNotFoundError as e:
            raise VCSOperationError("git executable not found", command=cmd) from e

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except TimeoutError as e:
            process.kill()
            await process.wait()
            raise VCSOperationError(f"git {args[0]} timed out after {self.timeout} seconds", command=cmd) from e

        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")

        if process.returncode != 0:
            detail = stderr.strip() or stdout.strip()
            raise VCSOperationError(f"git {args[0]} failed: {detail}", command=cmd, stderr=stderr)

        return stdout

    # =========================================================================
    # Read Operations
    # =========================================================================

    async def status(self) -> WorkingTreeStatus:
        return parse_git_status_output(await self.raw(["status", "--porcelain"]))

    async def diff(self, args: list[str], exclude_pathspecs: list[str] | None = None) -> str:
        """Run ``git diff`` with optional ``:(exclude)`` pathspecs appended."""
        return await self.raw(["diff", *args, *(exclude_pathspecs or [])])

    async def show(self, ref: str, args: list[str] | None = None, exclude_pathspecs: list[str] | None = None) -> str:
        return await self.raw(["show", *(args or []), ref, *(exclude_pathspecs or [])])

    async def current_branch(self) -> str:
        branch = (await self.raw(["rev-parse", "--abbrev-ref", "HEAD"])).strip()
        if not branch:
            raise VCSOperationError("Could not determine current branch")
        return branch

    async def local_branches(self) -> list[str]:
        output = await self.raw(["branch", "--format=%(refname:short)"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def remote_branches(self) -> list[str]:
        """Return ``git branch --remotes`` entries as printed (including HEAD aliases)."""
        output = await self.raw(["branch", "--remotes"])
        return [line.strip() for line in output.splitlines() if line.strip()]

    async def revparse(self, args: list[str]) -> str:
        return (await self.raw(["rev-parse", *args])).strip()

    async def tracking_branch(self) -> str | None:
        """Return the configured upstream of the current branch, or None."""
        try:
            branch = await self.revparse(["--abbrev-ref", "--symbolic-full-name", "@{u}"])
        except VCSOperationError:
            return None
        return branch or None

    async def log(self, revision_range: str | None = None, max_count: int | None = None) -> list[Commit]:
        """Return commits newest first for ``revision_range`` (default HEAD)."""
        args = ["log", LOG_FORMAT]
        if max_count is not None:
            args.append(f"--max-count={max_count}")
        args.append(revision_range or "HEAD")
        return parse_git_log_output(await self.raw(args))

    async def last_commit(self) -> Commit | None:
        commits = await self.log(max_count=1)
        return commits[0] if commits else None

    async def parents(self, commit_hash: str) -> list[str]:
        """Parent hashes of a commit, via ``rev-list --parents``."""
        output = (await self.raw(["rev-list", "--parents", "-n", "1", commit_hash])).strip()
        if not output:
            raise VCSOperationError(f"No rev-list output for {commit_hash}")
        return output.split()[1:]

    # =========================================================================
    # Write Operations
    # =========================================================================

    async def add(self, paths: list[str]) -> None:
        await self.raw(["add", *paths])

    async def commit(self, message: str) -> str:
        """Create a commit and return its hash."""
        await self.raw(["commit", "-m", message])
        return await self.revparse(["HEAD"])

    async def amend_message(self, message: str) -> str:
        """Replace the last commit's message, keeping its tree. Returns the new hash."""
        await self.raw(["commit", "--amend", "-m", message])
        return await self.revparse(["HEAD"])

    async def push(self, remote: str, branch: str, flags: list[str] | None = None) -> None:
        await self.raw(["push", *(flags or []), remote, branch])

    async def checkout_local_branch(self, name: str) -> None:
        await self.raw(["checkout", "-b", name])
