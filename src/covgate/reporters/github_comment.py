"""Pull request comment publisher for coverage gate results.

The publisher:
1. Does nothing unless a GitHub token is configured
2. Lists the thread's comments and picks the first bot-authored one carrying the marker
3. Updates that comment in place, or creates a new one when none exists
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

from covgate.analyzers.coverage import format_number
from covgate.models.coverage import GateStatus
from covgate.utils.ci_context import get_pr_info_from_env
from covgate.utils.github import GitHubAPI, GitHubPRInfo

if TYPE_CHECKING:
    from covgate.models.coverage import GateDecision

logger = logging.getLogger(__name__)

_MAX_UNCOVERED_FILES_IN_COMMENT = 50

_HEADLINES = {
    GateStatus.PASSED: "## ✅ Coverage check passed",
    GateStatus.FAILED: "## ❌ Coverage check failed",
    GateStatus.NOT_EVALUABLE: "## ⚠️ Coverage could not be evaluated",
}


class CommentThread(Protocol):
    """A discussion thread that supports comment listing and upserts."""

    def list_comments(self) -> list[dict[str, Any]]:
        """Return the thread's comments in listing order."""
        ...

    def create_comment(self, body: str) -> dict[str, Any]:
        """Create a comment and return the API representation."""
        ...

    def update_comment(self, comment_id: int, body: str) -> dict[str, Any]:
        """Replace a comment's body and return the API representation."""
        ...

    def is_bot_author(self, comment: dict[str, Any]) -> bool:
        """Return True if *comment* was written by an automation account."""
        ...


class GitHubCommentThread:
    """The issue-comment thread of one GitHub pull request."""

    def __init__(self, api: GitHubAPI, pr_info: GitHubPRInfo) -> None:
        self._api = api
        self._pr_info = pr_info

    def list_comments(self) -> list[dict[str, Any]]:
        return self._api.list_comments(self._pr_info)

    def create_comment(self, body: str) -> dict[str, Any]:
        return self._api.create_comment(self._pr_info, body)

    def update_comment(self, comment_id: int, body: str) -> dict[str, Any]:
        return self._api.update_comment(self._pr_info, comment_id, body)

    def is_bot_author(self, comment: dict[str, Any]) -> bool:
        return self._api.is_bot_author(comment)


class PublishAction(Enum):
    """What the publisher did with the thread."""

    SKIPPED = "skipped"
    CREATED = "created"
    UPDATED = "updated"


@dataclass
class PublishResult:
    """Outcome of a publish call."""

    action: PublishAction
    comment_id: int | None = None
    comment_url: str = ""


class CommentPublisher:
    """Idempotently surface a status message on a pull request thread."""

    def __init__(
        self,
        github_token: str | None,
        marker: str,
        *,
        thread: CommentThread | None = None,
    ) -> None:
        """Initialize the publisher.

        Args:
            github_token: Access token. Without one, :meth:`publish` is a no-op.
            marker: Literal that identifies our comment; every posted body
                starts with it.
            thread: Thread to post to. Resolved from the GitHub Actions
                environment on first use when omitted.
        """
        self._token = github_token or ""
        self._marker = marker
        self._thread = thread

    @property
    def marker(self) -> str:
        return self._marker

    @property
    def enabled(self) -> bool:
        """Return True when a token is configured."""
        return bool(self._token)

    def find_marker_comment(self, thread: CommentThread) -> int | None:
        """Return the id of the first bot comment containing the marker."""
        for comment in thread.list_comments():
            if thread.is_bot_author(comment) and self._marker in (comment.get("body") or ""):
                comment_id = comment.get("id")
                if comment_id is not None:
                    return int(comment_id)
        return None

    def publish(self, message: str) -> PublishResult:
        """Create or update the marker comment with *message*.

        Returns:
            The action taken and the comment's id/URL.

        Raises:
            GitHubAPIError: If a GitHub API request fails.
        """
        if not self.enabled:
            logger.debug("No GitHub token configured; not posting a comment")
            return PublishResult(action=PublishAction.SKIPPED)

        thread = self._thread or self._resolve_thread()
        if thread is None:
            return PublishResult(action=PublishAction.SKIPPED)

        body = message if self._marker in message else f"{self._marker}\n{message}"

        comment_id = self.find_marker_comment(thread)
        if comment_id is not None:
            logger.info("Updating existing coverage comment %d", comment_id)
            response = thread.update_comment(comment_id, body)
            action = PublishAction.UPDATED
        else:
            logger.info("Creating new coverage comment")
            response = thread.create_comment(body)
            action = PublishAction.CREATED

        return PublishResult(
            action=action,
            comment_id=response.get("id", comment_id),
            comment_url=response.get("html_url", ""),
        )

    def _resolve_thread(self) -> CommentThread | None:
        pr_info = get_pr_info_from_env()
        if pr_info is None:
            logger.info("Not running in a pull request context; skipping PR comment")
            return None
        self._thread = GitHubCommentThread(GitHubAPI(token=self._token), pr_info)
        return self._thread


def format_comment_body(decision: GateDecision, marker: str) -> str:
    """Format a gate decision as a markdown PR comment.

    Args:
        decision: The evaluated coverage gate.
        marker: Identifying literal placed on the first line.

    Returns:
        Markdown body starting with *marker*.
    """
    result = decision.result
    sections: list[str] = [marker, _HEADLINES[decision.status], ""]

    coverage = f"{result.percentage:.2f}%" if result.is_evaluable else "n/a"
    sections.append("| Metric | Value |")
    sections.append("|--------|-------|")
    sections.append(f"| Coverage | **{coverage}** |")
    sections.append(f"| Minimum | {format_number(decision.min_coverage)}% |")
    sections.append(f"| Lines hit | {result.total_hit} / {result.total_found} |")
    sections.append(f"| Files excluded | {len(result.excluded_files)} |")
    sections.append("")

    if result.uncovered_lines:
        sections.append(
            f"<details><summary>Lines not covered ({len(result.uncovered_lines)} files)"
            "</summary>"
        )
        sections.append("")
        for index, (file, lines) in enumerate(result.uncovered_lines.items()):
            if index >= _MAX_UNCOVERED_FILES_IN_COMMENT:
                remaining = len(result.uncovered_lines) - _MAX_UNCOVERED_FILES_IN_COMMENT
                sections.append(f"- ... and {remaining} more files")
                break
            sections.append(f"- `{file}`: {', '.join(str(line) for line in lines)}")
        sections.append("")
        sections.append("</details>")
        sections.append("")

    sections.append("---")
    sections.append("*Generated by covgate*")

    return "\n".join(sections)
