"""Core workflow logic."""

from ggpr.core.errors import (
    GgprError,
    HostCommandError,
    HostUnavailableError,
    ModelResponseFormatError,
    NoRemoteBranches,
    NoTrackingInfo,
    ProviderError,
    VCSOperationError,
)
from ggpr.core.models import (
    Cancelled,
    Commit,
    ManualInstructions,
    OptimizationResult,
    PullRequestRecord,
    RunOptions,
    RunResult,
    SkipReason,
    WorkflowSession,
    WorkingTreeStatus,
)

__all__ = [
    "Cancelled",
    "Commit",
    "GgprError",
    "HostCommandError",
    "HostUnavailableError",
    "ManualInstructions",
    "ModelResponseFormatError",
    "NoRemoteBranches",
    "NoTrackingInfo",
    "OptimizationResult",
    "ProviderError",
    "PullRequestRecord",
    "RunOptions",
    "RunResult",
    "SkipReason",
    "VCSOperationError",
    "WorkflowSession",
    "WorkingTreeStatus",
]
