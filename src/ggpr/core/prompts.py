"""Prompt templates for commit message and pull request generation.

Every prompt asks for a single JSON object whose shape matches one of the
response schemas in ``ggpr.core.models``. The system preamble is prepended
by ``CompletionService``, not by the builders here.
"""

from __future__ import annotations

from ggpr.core.models import Commit

# =============================================================================
# System Preamble
# =============================================================================

SYSTEM_PREAMBLE = """You are a senior software architect and code reviewer. Analyze the provided git diff to generate the following structured analysis:

Skip any sections or sub-sections that are not relevant to the changes.

## 1. Commit Message
- Format: type(scope): concise summary of main functionality
  - Example: "feat(logs): implement log viewer with options to delete and view logs"
- First line: 50-120 characters, written in imperative mood
- Follow with 3-5 bullet points that:
  - Each begin with a past tense action verb (Added, Implemented, Fixed, Updated, etc.)
  - Describe specific components or functionality added or changed
  - Highlight important implementation details or user-facing changes
  - Are ordered from most significant to least significant change

## 2. Pull Request Title
- Create a precise title (60-100 characters) with an appropriate type prefix
- Clearly communicate the primary purpose of the changes
- Example: "feat(user-profile): implement image upload with client-side compression"

## 3. Pull Request Description
- Begin with a Technical Summary (2-3 sentences) of the core functionality being changed
- Problem Statement: the specific issue being addressed
- Changes Made:
  - Use bullet points with past tense action verbs (Added, Implemented, Fixed, etc.)
  - Describe each significant change or addition
  - Order from most important to least important
  - Group related changes under sub-categories if needed

## 4. Change Classification
Categorize using conventional commit prefixes with a scope:
- feat: new functionality, e.g. "feat(auth): implement multi-factor authentication"
- fix: bug correction, e.g. "fix(checkout): prevent duplicate order submission"
- refactor: restructuring without behavioral changes
- docs: documentation updates
- perf: performance optimizations with measurable impact
- security: vulnerability patches or hardening
- test: test coverage or test framework changes
- build: build system or external dependency changes
- ci: continuous integration configuration updates
- chore: maintenance tasks
- style: formatting-only changes

## 5. Use correct sentence case. Keep the commit message and PR title clear and concise, following the angular commit convention used by @semantic-release/commit-analyzer.
"""

# =============================================================================
# Commit Message Prompt
# =============================================================================

COMMIT_MESSAGE_PROMPT = """
Provide a better multi-line commit message with summary and bullet points for all changes following the ## 1. Commit Message format in the prompt.
Format your response as a JSON object with structure:
{{
  "commitMessage": "type(scope): summary of changes\\n\\n- bullet points of changes"
}}

Git diff changes are as follows:
{diff}
"""

FILE_DIFF_TEMPLATE = """
filename: {path}
diff changes: {diff}
"""

# =============================================================================
# Commit Message Improvement Prompt
# =============================================================================

IMPROVEMENT_PROMPT = """
First, analyze the current commit message and determine if it needs improvement based on conventional commit best practices.
Then, analyze both the full branch diff and the specific commit diff to get complete context about the changes.
If the commit needs improvement, provide a better commit message that clearly describes the change using the conventional commit format
(type(scope): description). Types include: feat, fix, docs, style, refactor, perf, test, build, ci, chore.
The message should be concise, clear, and follow best practices.

Format your response as a JSON object with the following structure:
{{
  "needsImprovement": true|false,
  "reason": "Brief explanation of why the commit needs improvement or why it's already sufficient",
  "improvedCommitMessage": "type(scope): summary of changes"
}}

The "improvedCommitMessage" should only be provided if "needsImprovement" is true, and should be max 120 characters.

Current commit message: "{message}"

Specific commit diff:
{commit_diff}

Full branch context (all changes from upstream to HEAD):
{branch_diff}
"""

# =============================================================================
# New Pull Request Prompt
# =============================================================================

NEW_PULL_REQUEST_PROMPT = """
Exclude the following branches from suggestions: {excluded_branches}

Format your response as a JSON object with the following length and structure:
- suggestedBranchName: max 50 characters alphanumeric, lowercase, and hyphenated.
- prTitle: max 100 characters and follow the format prompt ## 2. Pull Request Title.
- prDescription: max 2000 characters and follow the format prompt ## 3. Pull Request Description.

Follow the structure:
{{
  "suggestedBranchName": "feature/descriptive-name",
  "prTitle": "type(scope): PR Title",
  "prDescription": "## Summary\\n[Comprehensive description of the changes]"
}}

Based on this commit message, suggest a branch name, PR title and description for a pull request:

Commit message: {commit_message}

Full diff from {upstream_branch} to HEAD:
{diff}
"""

# =============================================================================
# Pull Request Update Prompt
# =============================================================================

PULL_REQUEST_UPDATE_PROMPT = """
Generate an updated pull request title and description that incorporates both the original content and new changes.

Format your response as a JSON object with the following structure:
{{
  "updatedTitle": "The updated PR title",
  "updatedDescription": "The complete updated PR description with original content preserved when appropriate and new changes clearly highlighted"
}}

Current PR title:
{title}

Current PR description:
{description}

New commits added to the PR:
{commits}

Recent changes:
{recent_changes}

Please create a comprehensive title and description that:
1. Preserves relevant information from the original title and description
2. Clearly highlights the new changes under a "## Recent Updates" section
3. Ensures the title and description are well-formatted with proper markdown
4. Keeps the total length reasonable (under 4000 characters)
"""

# =============================================================================
# Helper Functions
# =============================================================================


def format_file_diff(path: str, diff: str) -> str:
    """Frame one file's diff for the commit message prompt."""
    return FILE_DIFF_TEMPLATE.format(path=path, diff=diff)


def format_commit_summaries(commits: list[Commit]) -> str:
    """One ``- <short hash>: <subject>`` line per commit."""
    return "\n".join(f"- {commit.short_hash}: {commit.subject}" for commit in commits)


def build_commit_message_prompt(diff: str) -> str:
    return COMMIT_MESSAGE_PROMPT.format(diff=diff)


def build_improvement_prompt(message: str, commit_diff: str, branch_diff: str) -> str:
    """Build the prompt asking whether a commit message needs improvement.

    Args:
        message: Current commit message
        commit_diff: Diff of the commit itself
        branch_diff: Diff of everything from upstream to HEAD

    Returns:
        Complete prompt string.
    """
    return IMPROVEMENT_PROMPT.format(
        message=message,
        commit_diff=commit_diff or "Failed to retrieve specific commit diff",
        branch_diff=branch_diff,
    )


def build_new_pull_request_prompt(
    excluded_branches: list[str],
    commit_message: str,
    upstream_branch: str,
    diff: str,
) -> str:
    """Build the prompt for a new pull request's branch name, title and description.

    Args:
        excluded_branches: Local branch names the suggestion must not reuse
        commit_message: Message of the latest commit
        upstream_branch: Target branch, e.g. ``origin/main``
        diff: Diff from the upstream branch to HEAD

    Returns:
        Complete prompt string.
    """
    return NEW_PULL_REQUEST_PROMPT.format(
        excluded_branches=", ".join(excluded_branches),
        commit_message=commit_message,
        upstream_branch=upstream_branch,
        diff=diff,
    )


def build_pull_request_update_prompt(
    title: str,
    description: str,
    commits: str,
    recent_changes: str,
) -> str:
    return PULL_REQUEST_UPDATE_PROMPT.format(
        title=title or "No current title available",
        description=description or "No current description available",
        commits=commits or "No new commit information available",
        recent_changes=recent_changes or "No recent changes information available",
    )
