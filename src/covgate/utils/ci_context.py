"""CI and PR context detection utilities."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from covgate.utils.github import GitHubPRInfo

logger = logging.getLogger(__name__)

# Expected number of parts when splitting "owner/repo"
_OWNER_REPO_PARTS = 2
_PR_REF_PREFIX = "refs/pull/"
_PR_EVENTS = frozenset({"pull_request", "pull_request_target"})


@dataclass
class CIContext:
    """Detected CI/PR execution context."""

    is_ci: bool
    """Running in CI environment."""

    is_pr: bool
    """Running in context of a pull request."""

    pr_number: int | None
    """PR number if in PR context."""

    repo_owner: str | None
    """Repository owner (org or user)."""

    repo_name: str | None
    """Repository name."""

    event_name: str | None = None
    """Triggering event name (GitHub Actions only)."""

    def pr_info(self) -> GitHubPRInfo | None:
        """Return the discussion thread coordinates, if complete."""
        if not self.is_pr or self.pr_number is None:
            return None
        if not self.repo_owner or not self.repo_name:
            return None
        return GitHubPRInfo(owner=self.repo_owner, repo=self.repo_name, pr_number=self.pr_number)


def detect_ci_context() -> CIContext:
    """Detect CI and PR context from environment variables.

    For GitHub Actions the PR number is read from the event payload
    (``$GITHUB_EVENT_PATH``), falling back to ``refs/pull/<n>/merge`` in
    ``$GITHUB_REF``.
    """
    if os.getenv("GITHUB_ACTIONS") == "true":
        event_name = os.getenv("GITHUB_EVENT_NAME", "")

        repo_full = os.getenv("GITHUB_REPOSITORY", "")
        repo_parts = repo_full.split("/") if repo_full else []
        repo_owner = repo_parts[0] if len(repo_parts) == _OWNER_REPO_PARTS else None
        repo_name = repo_parts[1] if len(repo_parts) == _OWNER_REPO_PARTS else None

        payload = _load_event_payload(os.getenv("GITHUB_EVENT_PATH"))
        pr_number = _pr_number_from_payload(payload) or _pr_number_from_ref(
            os.getenv("GITHUB_REF")
        )

        return CIContext(
            is_ci=True,
            is_pr=event_name in _PR_EVENTS or pr_number is not None,
            pr_number=pr_number,
            repo_owner=repo_owner,
            repo_name=repo_name,
            event_name=event_name or None,
        )

    return CIContext(
        is_ci=os.getenv("CI") == "true",
        is_pr=False,
        pr_number=None,
        repo_owner=None,
        repo_name=None,
    )


def get_pr_info_from_env() -> GitHubPRInfo | None:
    """Get PR information from the GitHub Actions environment.

    Returns:
        GitHubPRInfo if running in a PR context, None otherwise.
    """
    return detect_ci_context().pr_info()


def _load_event_payload(event_path: str | None) -> dict[str, Any]:
    if not event_path:
        return {}
    try:
        parsed = json.loads(Path(event_path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.debug("Could not read event payload %s: %s", event_path, exc)
        return {}
    return parsed if isinstance(parsed, dict) else {}


def _pr_number_from_payload(payload: dict[str, Any]) -> int | None:
    number = payload.get("number")
    if number is None:
        pull_request = payload.get("pull_request")
        if isinstance(pull_request, dict):
            number = pull_request.get("number")
    return _parse_int(number)


def _pr_number_from_ref(ref: str | None) -> int | None:
    if not ref or not ref.startswith(_PR_REF_PREFIX):
        return None
    parts = ref.split("/")
    return _parse_int(parts[2]) if len(parts) > _OWNER_REPO_PARTS else None


def _parse_int(value: Any) -> int | None:
    """Parse value to int, return None if invalid."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
