"""Exception hierarchy for the ggpr workflow.

User cancellation is not an exception: stages return a ``Cancelled`` value
(see ``ggpr.core.models``) and only the CLI turns it into a process exit.
"""

from __future__ import annotations


class GgprError(Exception):
    """Base exception for ggpr errors."""


class VCSOperationError(GgprError):
    """A git command failed."""

    def __init__(self, message: str, command: list[str] | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr


class NoTrackingInfo(GgprError):
    """Branch metadata for the current repository could not be read."""


class NoRemoteBranches(GgprError):
    """No remote branch is available to target."""


class ModelResponseFormatError(GgprError):
    """The language model returned text that does not match the expected schema."""

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text


class ProviderError(GgprError):
    """A completion provider request failed or the provider is unknown."""

    def __init__(self, message: str, provider: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class HostUnavailableError(GgprError):
    """The remote host CLI is missing or not authenticated."""


class HostCommandError(GgprError):
    """A remote host CLI command exited with an error."""
