"""Core data models for ggpr."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Repository Models
# =============================================================================


class WorkingTreeStatus(BaseModel):
    """Tracked and untracked paths reported by ``git status --porcelain``."""

    modified: list[str] = Field(default_factory=list)
    added: list[str] = Field(default_factory=list)
    deleted: list[str] = Field(default_factory=list)
    renamed: list[str] = Field(default_factory=list)
    untracked: list[str] = Field(default_factory=list)

    @property
    def changed_paths(self) -> list[str]:
        """All tracked changes, in status order per category."""
        return [*self.modified, *self.added, *self.deleted, *self.renamed]

    @property
    def is_clean(self) -> bool:
        """True when no tracked change exists (untracked files are ignored)."""
        return not self.changed_paths


class Commit(BaseModel):
    """A single commit as read from ``git log``."""

    hash: str
    message: str
    parents: list[str] = Field(default_factory=list)

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def subject(self) -> str:
        return self.message.split("\n", 1)[0]


def target_branch_name(upstream_branch: str) -> str:
    """Strip the remote prefix from an upstream branch (``origin/main`` -> ``main``)."""
    if "/" not in upstream_branch:
        return upstream_branch
    return upstream_branch.split("/", 1)[1]


# =============================================================================
# Completion Models
# =============================================================================


class CompletionRequest(BaseModel):
    """A single prompt sent to a completion provider."""

    prompt: str
    model: str | None = None
    temperature: float = 0.1
    max_tokens: int = 4096


class CompletionResponse(BaseModel):
    """Raw text returned by a completion provider."""

    text: str
    request_id: str
    provider: str
    model: str
    duration_ms: int = 0


# Lowercase alphanumeric words joined by "-", optionally grouped with "/"
BRANCH_NAME_PATTERN = r"^[a-z0-9]+(?:[-/][a-z0-9]+)*$"


class _ModelResponse(BaseModel):
    """Base for the JSON shapes the model is asked to produce."""

    model_config = ConfigDict(extra="ignore", strict=True)


class CommitMessageSuggestion(_ModelResponse):
    """Response to the commit-message prompt."""

    commitMessage: str = Field(min_length=1)


class ImprovementAnalysis(_ModelResponse):
    """Response to the commit-message improvement prompt."""

    needsImprovement: bool
    reason: str
    improvedCommitMessage: str | None = None

    @model_validator(mode="after")
    def _improved_message_required(self) -> ImprovementAnalysis:
        if self.needsImprovement and not (self.improvedCommitMessage or "").strip():
            raise ValueError("improvedCommitMessage is required when needsImprovement is true")
        return self


class PullRequestSuggestion(_ModelResponse):
    """Response to the new pull request prompt."""

    suggestedBranchName: str = Field(min_length=1, max_length=50, pattern=BRANCH_NAME_PATTERN)
    prTitle: str = Field(min_length=1, max_length=100)
    prDescription: str = Field(min_length=1, max_length=2000)


class PullRequestUpdate(_ModelResponse):
    """Response to the pull request regeneration prompt."""

    updatedTitle: str = Field(min_length=1)
    updatedDescription: str = Field(min_length=1)


# =============================================================================
# Pull Request Models
# =============================================================================


class PullRequestRecord(BaseModel):
    """A pull request created or updated during the run."""

    number: int
    url: str
    title: str
    head_branch: str
    base_branch: str
    draft: bool = False


class ManualInstructions(BaseModel):
    """Details the user needs to open a pull request by hand."""

    title: str
    description: str
    from_branch: str
    to_branch: str
    reason: str = ""

    def render(self) -> str:
        return f"Title: {self.title}\nDescription: {self.description}\nFrom: {self.from_branch}\nTo: {self.to_branch}"


# =============================================================================
# Workflow Models
# =============================================================================


class SkipReason(str, Enum):
    """Why commit message optimization did not amend anything."""

    MERGE = "merge"
    ALREADY_PROCESSED = "already-processed"
    MODEL = "model"
    USER = "user"
    NO_COMMITS = "no-commits"
    NO_CHANGES = "no-changes"


@dataclass
class OptimizationResult:
    """Terminal state of the commit message optimizer."""

    status: Literal["amended", "skipped", "failed"]
    skip_reason: SkipReason | None = None
    commit: Commit | None = None
    reason: str = ""
    new_message: str | None = None

    @classmethod
    def skipped(cls, reason: SkipReason, commit: Commit | None = None, detail: str = "") -> OptimizationResult:
        return cls(status="skipped", skip_reason=reason, commit=commit, reason=detail)


@dataclass(frozen=True)
class Cancelled:
    """The user declined a gate that ends the whole run."""

    stage: str
    message: str


@dataclass
class WorkflowSession:
    """State shared between workflow stages for a single run.

    Written by earlier stages, read by the pull request stage to decide
    whether to offer description regeneration.
    """

    commit_created: bool = False
    commit_optimized: bool = False


class RunOptions(BaseModel):
    """Options for a single workflow run."""

    auto_confirm: bool = False
    draft: bool = False
    provider: str = "ollama"
    model: str | None = None
    create_pr: bool = False
    log_requests: bool = False


RunStatus = Literal["completed", "cancelled", "failed"]


@dataclass
class RunResult:
    """Outcome of ``WorkflowOrchestrator.run``."""

    status: RunStatus
    stage: str = ""
    message: str = ""
    upstream_branch: str | None = None
    optimization: OptimizationResult | None = None
    pull_request: PullRequestRecord | None = None
    manual_instructions: ManualInstructions | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 1 if self.status == "failed" else 0
