"""Remote repository host adapters."""

from ggpr.hosts.github import AUTH_HINT, INSTALL_HINT, GitHubCLI, OpenPullRequest, check_gh_available, pull_request_number

__all__ = [
    "AUTH_HINT",
    "INSTALL_HINT",
    "GitHubCLI",
    "OpenPullRequest",
    "check_gh_available",
    "pull_request_number",
]
