"""Target branch resolution."""

from __future__ import annotations

import logging

from ggpr.core.errors import NoRemoteBranches, NoTrackingInfo, VCSOperationError
from ggpr.core.models import Cancelled
from ggpr.notifications import Notifier, NullNotifier
from ggpr.ui.gates import ConfirmationGate
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)

STAGE = "BRANCH"


class BranchResolver:
    """Determines the remote branch a pull request will target.

    The configured tracking branch is offered first. If there is none or the
    user declines it, the remote branches are listed for selection and the
    choice must be confirmed a second time.
    """

    def __init__(self, git: GitRepository, notifier: Notifier | None = None) -> None:
        self.git = git
        self.notifier = notifier or NullNotifier()

    async def resolve(self, gate: ConfirmationGate) -> str | Cancelled:
        """Return the upstream branch (e.g. ``origin/main``) or ``Cancelled``.

        Raises:
            NoTrackingInfo: If the current branch cannot be read.
            NoRemoteBranches: If no selectable remote branch exists.
        """
        self.notifier.info(STAGE, "Attempting to determine the upstream branch...")

        try:
            current = await self.git.current_branch()
        except VCSOperationError as e:
            raise NoTrackingInfo(f"Could not determine current branch: {e}") from e

        tracking = await self.git.tracking_branch()
        if tracking:
            self.notifier.info(STAGE, f"Found tracking branch for {current}: {tracking}")
            if await gate.confirm(f'Use "{tracking}" as the target branch?'):
                return tracking
            self.notifier.info(STAGE, "You chose to select a different target branch")
        else:
            self.notifier.info(STAGE, "No tracking branch found")

        self.notifier.info(STAGE, "Fetching available remote branches...")
        try:
            remote = await self.git.remote_branches()
        except VCSOperationError as e:
            raise NoTrackingInfo(f"Could not retrieve remote branches: {e}") from e

        branches = [branch for branch in remote if branch and "HEAD ->" not in branch]
        if not branches:
            raise NoRemoteBranches("No remote branches found")

        selected = await gate.select("Select target branch for PR:", branches)
        if not selected:
            return Cancelled(STAGE, "No target branch selected")

        self.notifier.info(STAGE, f"Selected target branch: {selected}")
        if not await gate.confirm(f'Confirm "{selected}" as your target branch?'):
            return Cancelled(STAGE, "Branch selection cancelled. Please start over.")

        logger.debug(f"Resolved upstream branch {selected} for {current}")
        return selected
