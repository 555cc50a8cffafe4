"""GitHub REST API client for pull request comments.

Only the comment endpoints the gate needs are wrapped: list, create and
update on an issue/PR thread.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

logger = logging.getLogger(__name__)

# GitHub API constants
GITHUB_API_BASE = "https://api.github.com"
_GITHUB_API_URL_ENV_KEY = "GITHUB_API_URL"
_GITHUB_AUTH_ENV_KEY = "GITHUB_" + "TOKEN"
_BOT_USER_TYPE = "Bot"
_PAGE_SIZE = 100
_REQUEST_TIMEOUT = 30


@dataclass
class GitHubPRInfo:
    """Information about a GitHub pull request."""

    owner: str
    """Repository owner (username or organization)."""

    repo: str
    """Repository name."""

    pr_number: int
    """Pull request number."""


class GitHubAPIError(Exception):
    """Exception raised when GitHub API operations fail."""


class GitHubAPI:
    """Client for the GitHub issue-comment API.

    Handles authentication, pagination, and bot-author classification.
    """

    def __init__(self, token: str | None = None, *, api_base: str | None = None) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token. If not provided, will try to read from the
                GITHUB_TOKEN environment variable.
            api_base: REST API root. Defaults to ``$GITHUB_API_URL`` or
                ``https://api.github.com``.

        Raises:
            GitHubAPIError: If no token is available.
        """
        self._token = token or os.environ.get(_GITHUB_AUTH_ENV_KEY)
        if not self._token:
            raise GitHubAPIError(
                f"GitHub token required. Set {_GITHUB_AUTH_ENV_KEY} environment variable "
                "or pass token to constructor."
            )

        base = api_base or os.environ.get(_GITHUB_API_URL_ENV_KEY) or GITHUB_API_BASE
        self._api_base = base.rstrip("/")
        self._session_headers = {
            "Authorization": f"Bearer {self._token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    @property
    def api_base(self) -> str:
        """REST API root used for requests."""
        return self._api_base

    def _comments_url(self, pr_info: GitHubPRInfo) -> str:
        return (
            f"{self._api_base}/repos/{pr_info.owner}/{pr_info.repo}/"
            f"issues/{pr_info.pr_number}/comments"
        )

    def list_comments(self, pr_info: GitHubPRInfo) -> list[dict[str, Any]]:
        """List all comments on a pull request, oldest first.

        Follows ``Link: rel="next"`` headers until every page is read.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        return self._get_paginated(self._comments_url(pr_info))

    def create_comment(self, pr_info: GitHubPRInfo, body: str) -> dict[str, Any]:
        """Create a new comment on a pull request.

        Args:
            pr_info: Pull request information.
            body: Comment body (markdown formatted).

        Returns:
            GitHub API response as a dictionary.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        result: dict[str, Any] = self._post(self._comments_url(pr_info), {"body": body})
        return result

    def update_comment(self, pr_info: GitHubPRInfo, comment_id: int, body: str) -> dict[str, Any]:
        """Replace the body of an existing comment.

        Args:
            pr_info: Pull request information.
            comment_id: ID of the comment to update.
            body: New comment body (markdown formatted).

        Returns:
            GitHub API response as a dictionary.

        Raises:
            GitHubAPIError: If the API request fails.
        """
        url = (
            f"{self._api_base}/repos/{pr_info.owner}/{pr_info.repo}/"
            f"issues/comments/{comment_id}"
        )

        result: dict[str, Any] = self._patch(url, {"body": body})
        return result

    @staticmethod
    def is_bot_author(comment: dict[str, Any]) -> bool:
        """Return True if the comment was written by a bot account."""
        user = comment.get("user") or {}
        return bool(user.get("type") == _BOT_USER_TYPE)

    def _get_paginated(self, url: str) -> list[dict[str, Any]]:
        """Collect every page of a list endpoint.

        Raises:
            GitHubAPIError: If a request fails or a page is not a JSON list.
        """
        items: list[dict[str, Any]] = []
        next_url: str | None = url
        params: dict[str, Any] | None = {"per_page": _PAGE_SIZE}

        while next_url:
            try:
                response = requests.get(
                    next_url,
                    params=params,
                    headers=self._session_headers,
                    timeout=_REQUEST_TIMEOUT,
                )
                response.raise_for_status()
                page = response.json()
            except Exception as exc:
                raise GitHubAPIError(f"GET request failed: {exc}") from exc

            if not isinstance(page, list):
                raise GitHubAPIError(f"GET request returned unexpected payload from {next_url}")

            items.extend(page)
            next_url = (response.links or {}).get("next", {}).get("url")
            # the next link already carries the query string
            params = None

        return items

    def _post(self, url: str, data: dict[str, Any]) -> Any:
        """Make a POST request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.post(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"POST request failed: {exc}") from exc

    def _patch(self, url: str, data: dict[str, Any]) -> Any:
        """Make a PATCH request to the GitHub API.

        Raises:
            GitHubAPIError: If the request fails.
        """
        try:
            response = requests.patch(
                url, json=data, headers=self._session_headers, timeout=_REQUEST_TIMEOUT
            )
            response.raise_for_status()
            return response.json()
        except Exception as exc:
            raise GitHubAPIError(f"PATCH request failed: {exc}") from exc
