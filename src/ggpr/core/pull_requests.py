"""Pull request creation and update.

If the current branch already has an open PR, new commits are pushed to it
and its title and description can be regenerated. Otherwise the model
suggests a branch name, title and description, the branch is pushed with
upstream tracking, and the PR is opened through the ``gh`` CLI. When ``gh``
cannot be used, the caller gets ``ManualInstructions`` instead.
"""

from __future__ import annotations

import logging

from ggpr.core.diffs import DiffCollector
from ggpr.core.errors import HostCommandError, HostUnavailableError, ModelResponseFormatError, VCSOperationError
from ggpr.core.models import (
    ManualInstructions,
    PullRequestRecord,
    PullRequestSuggestion,
    PullRequestUpdate,
    WorkflowSession,
    target_branch_name,
)
from ggpr.core.prompts import (
    build_new_pull_request_prompt,
    build_pull_request_update_prompt,
    format_commit_summaries,
)
from ggpr.core.responses import CompletionService
from ggpr.hosts.github import AUTH_HINT, INSTALL_HINT, GitHubCLI, OpenPullRequest, pull_request_number
from ggpr.notifications import Notifier, NullNotifier
from ggpr.ui.gates import ConfirmationGate
from ggpr.utils.git import GitRepository

logger = logging.getLogger(__name__)

STAGE = "PR-CREATE"
REMOTE = "origin"

# Characters of the regenerated description shown before confirming
DESCRIPTION_PREVIEW_CHARS = 200


class PullRequestManager:
    """Creates a new pull request or updates the open one for this branch."""

    def __init__(
        self,
        git: GitRepository,
        host: GitHubCLI,
        diffs: DiffCollector,
        completions: CompletionService,
        notifier: Notifier | None = None,
    ) -> None:
        self.git = git
        self.host = host
        self.diffs = diffs
        self.completions = completions
        self.notifier = notifier or NullNotifier()

    async def create_or_update(
        self,
        upstream_branch: str,
        draft: bool,
        gate: ConfirmationGate,
        session: WorkflowSession,
    ) -> PullRequestRecord | ManualInstructions | None:
        """Create or update the pull request for the current branch.

        Returns:
            The created or updated PR, manual instructions when ``gh`` could
            not be used, or None when the user skipped the step or
            there was nothing to describe.

        Raises:
            VCSOperationError: If branch creation or the push fails.
            ModelResponseFormatError: If the new-PR suggestion is malformed.
            ProviderError: If the model call fails.
        """
        self.notifier.info(STAGE, "Preparing to create or update a PR")

        current_branch = await self.git.current_branch()

        self.notifier.info(STAGE, "Checking if the current branch already has an open PR...")
        existing = await self._find_existing(current_branch)
        if existing is not None:
            return await self._update_existing(existing, current_branch, upstream_branch, gate, session)

        return await self._create_new(current_branch, upstream_branch, draft, gate)

    async def _find_existing(self, branch: str) -> OpenPullRequest | None:
        try:
            return await self.host.find_open_pull_request(branch)
        except (HostUnavailableError, HostCommandError) as e:
            logger.debug(f"Could not check for an existing PR: {e}")
            return None

    # =========================================================================
    # Existing PR
    # =========================================================================

    async def _update_existing(
        self,
        existing: OpenPullRequest,
        branch: str,
        upstream_branch: str,
        gate: ConfirmationGate,
        session: WorkflowSession,
    ) -> PullRequestRecord | None:
        self.notifier.info(
            STAGE,
            f'Found existing PR #{existing.number} for branch "{branch}"\nTitle: {existing.title}\nURL: {existing.url}',
        )
        if not await gate.confirm("Do you want to update this existing PR?"):
            self.notifier.info(STAGE, "Update of the existing PR skipped")
            return None

        self.notifier.info(STAGE, f'Pushing to branch "{branch}" to update PR #{existing.number}...')
        await self.git.push(REMOTE, branch)
        self.notifier.success(STAGE, f"Successfully pushed updates to PR #{existing.number}\nPR URL: {existing.url}")

        record = PullRequestRecord(
            number=existing.number,
            url=existing.url,
            title=existing.title,
            head_branch=branch,
            base_branch=target_branch_name(upstream_branch),
        )

        if not await self._should_offer_regeneration(upstream_branch, session):
            return record

        if not await gate.confirm("Would you like to update the PR description with the new changes?"):
            self.notifier.info(STAGE, "PR description update skipped")
            return record

        try:
            update = await self._generate_update(existing, upstream_branch)
        except ModelResponseFormatError as e:
            self.notifier.error(STAGE, f"Failed to parse AI response for updated PR title and description: {e}")
            return record

        preview = update.updatedDescription[:DESCRIPTION_PREVIEW_CHARS]
        self.notifier.success(
            STAGE,
            f"Generated updated PR title and description\nUpdated PR Title:\n{update.updatedTitle}\n\n"
            f"Updated PR Description:\n{preview}... (truncated)",
        )
        if not await gate.confirm("Apply the updated PR title and description?"):
            self.notifier.info(STAGE, "PR title and description update skipped")
            return record

        try:
            await self.host.edit_pull_request(existing.number, title=update.updatedTitle, body=update.updatedDescription)
        except (HostUnavailableError, HostCommandError) as e:
            self.notifier.error(STAGE, f"Failed to update PR title and description: {e}")
            self.notifier.info(STAGE, "You can manually update the PR with this title and description if needed")
            return record

        self.notifier.success(STAGE, "Successfully updated PR title and description")
        record.title = update.updatedTitle
        return record

    async def _should_offer_regeneration(self, upstream_branch: str, session: WorkflowSession) -> bool:
        try:
            commits = await self.git.log(f"{upstream_branch}..HEAD")
        except VCSOperationError as e:
            self.notifier.warning(STAGE, f"Unable to verify commits, will prompt for PR description update: {e}")
            return True

        offer = bool(commits)
        if commits:
            self.notifier.info(STAGE, f"Found {len(commits)} commit(s) in the PR\n{format_commit_summaries(commits)}")
        else:
            self.notifier.info(STAGE, "No commits found to include in PR description update.")

        if session.commit_optimized:
            self.notifier.info(STAGE, "Commits were optimized during this session.")
            offer = True
        if session.commit_created:
            self.notifier.info(STAGE, "New commits were created during this session.")
            offer = True
        return offer

    async def _generate_update(self, existing: OpenPullRequest, upstream_branch: str) -> PullRequestUpdate:
        self.notifier.info(STAGE, "Generating updated PR title and description...")

        title, description = existing.title, ""
        try:
            title, description = await self.host.view_pull_request(existing.number)
        except (HostUnavailableError, HostCommandError) as e:
            self.notifier.warning(STAGE, f"Failed to get current PR details, generating without them: {e}")

        summaries = ""
        try:
            summaries = format_commit_summaries(await self.git.log(f"{upstream_branch}..HEAD"))
        except VCSOperationError as e:
            self.notifier.warning(STAGE, f"Failed to get new commits: {e}")

        recent_changes = ""
        try:
            head = await self.git.revparse(["HEAD"])
            recent_changes = await self.diffs.single_commit_diff(head)
        except VCSOperationError as e:
            self.notifier.warning(STAGE, f"Failed to get recent changes: {e}")

        prompt = build_pull_request_update_prompt(title, description, summaries, recent_changes)
        return await self.completions.request(prompt, PullRequestUpdate, stage=STAGE)

    # =========================================================================
    # New PR
    # =========================================================================

    async def _create_new(
        self,
        current_branch: str,
        upstream_branch: str,
        draft: bool,
        gate: ConfirmationGate,
    ) -> PullRequestRecord | ManualInstructions | None:
        if not await gate.confirm("Generate PR details with AI based on your commits?"):
            self.notifier.info(STAGE, "PR creation cancelled")
            return None

        suggestion = await self._suggest(upstream_branch)
        if suggestion is None:
            return None

        self.notifier.info(
            STAGE,
            f"Pull Request Details:\nTitle: {suggestion.prTitle}\n"
            f"Description: {suggestion.prDescription}\nBranch name: {suggestion.suggestedBranchName}",
        )
        if not await gate.confirm("Create PR with these details?"):
            self.notifier.info(STAGE, "PR creation cancelled")
            return None

        target = target_branch_name(upstream_branch)
        branch_to_push = current_branch
        if current_branch == target:
            new_branch = suggestion.suggestedBranchName
            self.notifier.info(STAGE, f"Current branch is the same as target branch. Creating new branch: {new_branch}...")
            if not await gate.confirm(f'Confirm creation of branch "{new_branch}"?'):
                self.notifier.info(STAGE, "Branch creation cancelled")
                return None
            await self.git.checkout_local_branch(new_branch)
            branch_to_push = new_branch
            self.notifier.success(STAGE, f"Created and switched to branch: {new_branch}")
        else:
            self.notifier.info(STAGE, f'Using current branch "{current_branch}" for PR')

        if not await gate.confirm(f'Push branch "{branch_to_push}" to remote repository?'):
            self.notifier.info(STAGE, "Remote push cancelled")
            return None

        self.notifier.info(STAGE, "Pushing to remote repository...")
        await self.git.push(REMOTE, branch_to_push, ["--set-upstream"])
        self.notifier.success(STAGE, "Pushed branch to remote")

        instructions = ManualInstructions(
            title=suggestion.prTitle,
            description=suggestion.prDescription,
            from_branch=branch_to_push,
            to_branch=target,
        )

        if not await self._host_ready():
            instructions.reason = "GitHub CLI is not available or not properly configured"
            self._show_manual(instructions)
            return instructions

        if not await gate.confirm("Create GitHub PR using GitHub CLI?"):
            instructions.reason = "GitHub CLI PR creation skipped"
            self._show_manual(instructions)
            return instructions

        self.notifier.info(STAGE, "Creating PR using GitHub CLI...")
        try:
            url = await self.host.create_pull_request(suggestion.prTitle, suggestion.prDescription, target, draft=draft)
        except (HostUnavailableError, HostCommandError) as e:
            instructions.reason = f"Could not automatically create PR: {e}"
            self._show_manual(instructions)
            return instructions

        self.notifier.success(STAGE, f"Pull request created successfully!\nPR URL: {url}")
        return PullRequestRecord(
            number=pull_request_number(url),
            url=url,
            title=suggestion.prTitle,
            head_branch=branch_to_push,
            base_branch=target,
            draft=draft,
        )

    async def _suggest(self, upstream_branch: str) -> PullRequestSuggestion | None:
        """Ask the model for a branch name, title and description.

        Returns None when the branch only changes ignored files.
        """
        try:
            existing_branches = await self.git.local_branches()
        except VCSOperationError as e:
            self.notifier.warning(STAGE, f"Failed to get local branches: {e}")
            existing_branches = []

        last = await self.git.last_commit()
        commit_message = last.message.strip() if last else ""

        diff: str | None
        try:
            diff = await self.diffs.range_diff(upstream_branch, "HEAD")
        except VCSOperationError as e:
            self.notifier.warning(STAGE, f"Failed to get full diff for PR suggestion: {e}")
            diff = None
        if diff is not None and not diff.strip():
            self.notifier.warning(STAGE, f"No changes to describe between {upstream_branch} and HEAD, skipping PR creation")
            return None

        self.notifier.info(STAGE, "Requesting PR suggestions from AI...")
        prompt = build_new_pull_request_prompt(existing_branches, commit_message, upstream_branch, diff or "")
        suggestion = await self.completions.request(prompt, PullRequestSuggestion, stage=STAGE)

        if suggestion.suggestedBranchName in existing_branches:
            raise ModelResponseFormatError(
                f"Suggested branch name {suggestion.suggestedBranchName!r} already exists locally"
            )
        return suggestion

    async def _host_ready(self) -> bool:
        self.notifier.info(STAGE, "Checking GitHub CLI availability...")
        if not await self.host.is_available():
            self.notifier.warning(STAGE, f"GitHub CLI is not installed on your system.\n{INSTALL_HINT}")
            return False
        if not await self.host.is_authenticated():
            self.notifier.warning(STAGE, f"GitHub CLI is installed but not properly configured.\n{AUTH_HINT}")
            return False
        return True

    def _show_manual(self, instructions: ManualInstructions) -> None:
        self.notifier.warning(STAGE, f"{instructions.reason}. Create PR manually using:\n{instructions.render()}")
