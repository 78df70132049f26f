"""Stand-ins for git, gh, the model and the user, shared by tests.

Most tests use the in-memory fakes. The few that need real git matching
build a throwaway repository with ``init_git_repo``.
"""

from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Any

import pytest

from ggpr.config import Config, ProviderConfig
from ggpr.core.errors import HostCommandError, VCSOperationError
from ggpr.core.models import Commit, CompletionRequest, WorkingTreeStatus
from ggpr.core.responses import CompletionService
from ggpr.hosts.github import OpenPullRequest
from ggpr.notifications import Notifier, NotificationLevel
from ggpr.providers.base import CompletionProvider
from ggpr.ui.gates import ConfirmationGate
from ggpr.utils.git import GitRepository

NOTE_BODY = "created-by-pr-agent"


def make_commit(hash_: str, message: str, parents: list[str] | None = None) -> Commit:
    return Commit(hash=hash_, message=message, parents=parents if parents is not None else ["p" + hash_])


class FakeGit:
    """Duck-typed ``GitRepository`` keeping state in memory.

    ``mutations`` records every call that would change the repository or a
    remote, in order.
    """

    def __init__(
        self,
        status: WorkingTreeStatus | None = None,
        current: str = "feature-x",
        tracking: str | None = "origin/main",
        remotes: list[str] | None = None,
        local: list[str] | None = None,
        commits: list[Commit] | None = None,
        file_diffs: dict[str, str] | None = None,
        range_diff: str = "diff --git a/app.py b/app.py\n+print('hi')\n",
        commit_diff: str = "commit abc\n+print('hi')\n",
    ) -> None:
        self.status_value = status or WorkingTreeStatus()
        self.current = current
        self.tracking = tracking
        self.remotes = remotes if remotes is not None else ["origin/HEAD -> origin/main", "origin/main"]
        self.local = local if local is not None else ["main", "feature-x"]
        self.commits = commits if commits is not None else []
        self.file_diffs = file_diffs or {}
        self.range_diff_text = range_diff
        self.commit_diff_text = commit_diff
        self.notes: dict[str, str] = {}
        self.failing_paths: set[str] = set()
        self.log_error = False
        self.current_error = False
        self.mutations: list[tuple[Any, ...]] = []
        self.diff_calls: list[tuple[list[str], list[str] | None]] = []
        self._counter = 0

    # Read operations

    async def status(self) -> WorkingTreeStatus:
        return self.status_value

    async def current_branch(self) -> str:
        if self.current_error:
            raise VCSOperationError("git rev-parse failed: not a git repository")
        return self.current

    async def tracking_branch(self) -> str | None:
        return self.tracking

    async def remote_branches(self) -> list[str]:
        return list(self.remotes)

    async def local_branches(self) -> list[str]:
        return list(self.local)

    async def log(self, revision_range: str | None = None, max_count: int | None = None) -> list[Commit]:
        if self.log_error:
            raise VCSOperationError("git log failed: bad revision")
        commits = list(self.commits)
        return commits[:max_count] if max_count is not None else commits

    async def last_commit(self) -> Commit | None:
        return self.commits[0] if self.commits else None

    async def parents(self, commit_hash: str) -> list[str]:
        for commit in self.commits:
            if commit.hash == commit_hash:
                return commit.parents
        raise VCSOperationError(f"No rev-list output for {commit_hash}")

    async def revparse(self, args: list[str]) -> str:
        if args == ["HEAD"] and self.commits:
            return self.commits[0].hash
        raise VCSOperationError(f"git rev-parse failed for {args}")

    async def diff(self, args: list[str], exclude_pathspecs: list[str] | None = None) -> str:
        self.diff_calls.append((list(args), exclude_pathspecs))
        if "--" in args:
            path = args[args.index("--") + 1]
            if path in self.failing_paths:
                raise VCSOperationError(f"git diff failed for {path}")
            if "--staged" in args:
                return ""
            return self.file_diffs.get(path, "")
        return self.range_diff_text

    async def show(self, ref: str, args: list[str] | None = None, exclude_pathspecs: list[str] | None = None) -> str:
        self.diff_calls.append(([ref, *(args or [])], exclude_pathspecs))
        return self.commit_diff_text

    async def raw(self, args: list[str]) -> str:
        if args[:3] == ["notes", "--ref", "pr-agent"]:
            action, ref = args[3], args[-1]
            ref = self.commits[0].hash if ref == "HEAD" and self.commits else ref
            if action == "add":
                self.notes[ref] = args[args.index("-m") + 1]
                self.mutations.append(("note", ref))
                return ""
            if action == "show":
                if ref not in self.notes:
                    raise VCSOperationError(f"error: no note found for object {ref}")
                return self.notes[ref] + "\n"
        raise VCSOperationError(f"unexpected git command: {args}")

    # Write operations

    async def add(self, paths: list[str]) -> None:
        self.mutations.append(("add", tuple(paths)))

    async def commit(self, message: str) -> str:
        commit = make_commit(self._next_hash(), message)
        self.commits.insert(0, commit)
        self.mutations.append(("commit", commit.hash))
        return commit.hash

    async def amend_message(self, message: str) -> str:
        old = self.commits[0]
        new = Commit(hash=self._next_hash(), message=message, parents=old.parents)
        self.commits[0] = new
        self.mutations.append(("amend", new.hash, message))
        return new.hash

    async def push(self, remote: str, branch: str, flags: list[str] | None = None) -> None:
        self.mutations.append(("push", remote, branch, tuple(flags or [])))

    async def checkout_local_branch(self, name: str) -> None:
        self.current = name
        self.local.append(name)
        self.mutations.append(("checkout", name))

    def _next_hash(self) -> str:
        self._counter += 1
        return f"{self._counter:040x}"


class FakeHost:
    """Duck-typed ``GitHubCLI``."""

    def __init__(
        self,
        available: bool = True,
        authenticated: bool = True,
        existing: OpenPullRequest | None = None,
        url: str = "https://github.com/acme/app/pull/42",
    ) -> None:
        self.available = available
        self.authenticated = authenticated
        self.existing = existing
        self.url = url
        self.view_result: tuple[str, str] = ("Old title", "Old body")
        self.view_error = False
        self.create_error = False
        self.calls: list[tuple[Any, ...]] = []

    async def is_available(self) -> bool:
        return self.available

    async def is_authenticated(self) -> bool:
        return self.authenticated

    async def find_open_pull_request(self, head_branch: str) -> OpenPullRequest | None:
        self.calls.append(("find", head_branch))
        return self.existing

    async def view_pull_request(self, number: int) -> tuple[str, str]:
        self.calls.append(("view", number))
        if self.view_error:
            raise HostCommandError("gh pr view failed: HTTP 502")
        return self.view_result

    async def create_pull_request(self, title: str, body: str, base: str, draft: bool = False) -> str:
        self.calls.append(("create", title, body, base, draft))
        if self.create_error:
            raise HostCommandError("gh pr create failed: a pull request already exists")
        return self.url

    async def edit_pull_request(self, number: int, title: str | None = None, body: str | None = None) -> None:
        self.calls.append(("edit", number, title, body))

    def called(self, name: str) -> bool:
        return any(call[0] == name for call in self.calls)


class ScriptedGate(ConfirmationGate):
    """Answers confirmations from a table of message fragments (default yes)."""

    def __init__(self, answers: dict[str, bool] | None = None, selection: str | None = None) -> None:
        self.answers = answers or {}
        self.selection = selection
        self.asked: list[str] = []
        self.selections: list[tuple[str, list[str]]] = []

    async def confirm(self, message: str) -> bool:
        self.asked.append(message)
        for fragment, answer in self.answers.items():
            if fragment in message:
                return answer
        return True

    async def select(self, message: str, options: list[str]) -> str | None:
        self.selections.append((message, list(options)))
        return self.selection

    def was_asked(self, fragment: str) -> bool:
        return any(fragment in message for message in self.asked)


class FakeProvider(CompletionProvider):
    """Returns queued replies; dicts are encoded as JSON."""

    name = "fake"

    def __init__(self, *replies: str | dict[str, Any]) -> None:
        super().__init__(ProviderConfig(base_url="http://fake.local", default_model="fake-model"))
        self.replies = list(replies)
        self.requests: list[CompletionRequest] = []

    async def generate(self, request: CompletionRequest) -> str:
        self.requests.append(request)
        if not self.replies:
            raise AssertionError("unexpected model call")
        reply = self.replies.pop(0)
        return json.dumps(reply) if isinstance(reply, dict) else reply


class RecordingNotifier(Notifier):
    def __init__(self) -> None:
        self.events: list[tuple[str, str, NotificationLevel]] = []

    def notify(self, stage: str, message: str, level: NotificationLevel = "info") -> None:
        self.events.append((stage, message, level))

    def messages(self, level: NotificationLevel | None = None) -> list[str]:
        return [message for _, message, lvl in self.events if level is None or lvl == level]


def make_completions(provider: FakeProvider, config: Config | None = None) -> CompletionService:
    return CompletionService(provider, config or Config())


requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git executable not available")


async def init_git_repo(path: Path) -> GitRepository:
    """Create an empty repository in ``path`` with a local identity."""
    git = GitRepository(path)
    await git.raw(["init", "-q"])
    for key, value in (("user.name", "ggpr tests"), ("user.email", "tests@example.com"), ("commit.gpgsign", "false")):
        await git.raw(["config", key, value])
    return git


async def commit_files(git: GitRepository, files: dict[str, str], message: str) -> str:
    """Write ``files`` (relative path -> content), commit them and return the hash."""
    for relative, content in files.items():
        target = git.project_root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content)
    await git.add(["."])
    return await git.commit(message)
