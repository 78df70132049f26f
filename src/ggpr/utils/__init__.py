"""Utility modules for ggpr."""

from ggpr.utils.git import (
    GitRepository,
    parse_git_log_output,
    parse_git_status_output,
)

__all__ = [
    "GitRepository",
    "parse_git_log_output",
    "parse_git_status_output",
]
