"""GitHub pull request operations using the gh CLI.

This module provides an async adapter over the ``gh`` commands the workflow
needs: availability and auth checks, finding the open PR for a branch,
reading its title and body, creating and editing PRs.
"""

from __future__ import annotations

import asyncio
import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from ggpr.core.errors import HostCommandError, HostUnavailableError

logger = logging.getLogger(__name__)

# Fields to request from gh CLI
GH_PR_LIST_FIELDS = "url,number,title"
GH_PR_VIEW_FIELDS = "title,body"

INSTALL_HINT = """To install GitHub CLI:
- macOS: brew install gh
- Windows: winget install --id GitHub.cli
- Linux: https://github.com/cli/cli/blob/trunk/docs/install_linux.md

For more information, visit: https://cli.github.com/manual/installation"""

AUTH_HINT = """To authenticate GitHub CLI, run the following command:
$ gh auth login

For more information, visit: https://cli.github.com/manual/gh_auth_login"""


@dataclass
class GHResult:
    """Result of a gh CLI command execution."""

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the command succeeded."""
        return self.returncode == 0


@dataclass
class OpenPullRequest:
    """An open PR as returned by ``gh pr list --json url,number,title``."""

    number: int
    url: str
    title: str


def check_gh_available() -> bool:
    """Check if the gh CLI is installed and available."""
    return shutil.which("gh") is not None


def pull_request_number(url: str) -> int:
    """Extract the PR number from a pull request URL (0 when not found)."""
    tail = url.rstrip("/").rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else 0


class GitHubCLI:
    """Remote host adapter backed by the ``gh`` executable."""

    def __init__(self, project_root: Path | None = None) -> None:
        self.project_root = project_root

    async def _run(self, args: list[str]) -> GHResult:
        """Run a gh CLI command asynchronously.

        Raises:
            HostUnavailableError: If gh CLI is not installed.
        """
        if not check_gh_available():
            raise HostUnavailableError("gh CLI not found. Please install it from https://cli.github.com/")

        cmd = ["gh", *args]
        logger.debug(f"Running gh command: {' '.join(cmd[:3])}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.project_root,
        )

        stdout_bytes, stderr_bytes = await process.communicate()
        stdout = stdout_bytes.decode("utf-8", errors="replace")
        stderr = stderr_bytes.decode("utf-8", errors="replace")
        return GHResult(stdout=stdout, stderr=stderr, returncode=process.returncode or 0)

    async def _run_checked(self, args: list[str]) -> GHResult:
        result = await self._run(args)
        if not result.success:
            stderr = result.stderr.strip()
            if "authentication" in stderr.lower() or "not logged in" in stderr.lower():
                raise HostUnavailableError(f"GitHub authentication failed: {stderr}")
            raise HostCommandError(f"gh {' '.join(args[:2])} failed: {stderr or result.stdout.strip()}")
        return result

    # =========================================================================
    # Availability
    # =========================================================================

    async def is_available(self) -> bool:
        """True when ``gh --version`` runs successfully."""
        try:
            result = await self._run(["--version"])
        except (HostUnavailableError, OSError):
            return False
        return result.success

    async def is_authenticated(self) -> bool:
        """True when ``gh auth status`` reports a logged-in account."""
        try:
            result = await self._run(["auth", "status"])
        except (HostUnavailableError, OSError):
            return False
        # Older gh versions print the status on stderr
        output = result.stdout + result.stderr
        return result.success and "Logged in to" in output

    # =========================================================================
    # Pull Requests
    # =========================================================================

    async def find_open_pull_request(self, head_branch: str) -> OpenPullRequest | None:
        """Return the open PR whose head is ``head_branch``, if any."""
        if not head_branch:
            return None

        result = await self._run_checked(
            ["pr", "list", "--head", head_branch, "--state", "open", "--json", GH_PR_LIST_FIELDS, "--limit", "1"]
        )
        if not result.stdout.strip():
            return None

        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise HostCommandError(f"Failed to parse gh pr list output: {e}") from e

        if not isinstance(data, list) or not data:
            return None

        item = data[0]
        if not isinstance(item, dict):
            raise HostCommandError(f"Unexpected gh pr list output: {result.stdout.strip()[:200]}")
        logger.debug(f"Found existing PR for branch {head_branch}: #{item.get('number')}")
        return OpenPullRequest(
            number=int(item.get("number", 0)),
            url=item.get("url", ""),
            title=item.get("title", ""),
        )

    async def view_pull_request(self, number: int) -> tuple[str, str]:
        """Return ``(title, body)`` of PR ``number``."""
        result = await self._run_checked(["pr", "view", str(number), "--json", GH_PR_VIEW_FIELDS])
        try:
            data = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise HostCommandError(f"Failed to parse gh pr view output: {e}") from e
        if not isinstance(data, dict):
            raise HostCommandError(f"Unexpected gh pr view output: {result.stdout.strip()[:200]}")
        return data.get("title") or "", data.get("body") or ""

    async def create_pull_request(self, title: str, body: str, base: str, draft: bool = False) -> str:
        """Create a PR from the current branch and return its URL."""
        args = ["pr", "create", "--title", title, "--body", body, "--base", base]
        if draft:
            args.append("--draft")
        result = await self._run_checked(args)

        url = result.stdout.strip().splitlines()[-1] if result.stdout.strip() else ""
        if "http" not in url:
            view = await self._run_checked(["pr", "view", "--json", "url", "--jq", ".url"])
            url = view.stdout.strip()
        return url

    async def edit_pull_request(self, number: int, title: str | None = None, body: str | None = None) -> None:
        args = ["pr", "edit", str(number)]
        if title is not None:
            args += ["--title", title]
        if body is not None:
            args += ["--body", body]
        await self._run_checked(args)
