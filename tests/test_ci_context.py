"""Tests for CI context detection."""

from __future__ import annotations

import json
import os
from typing import TYPE_CHECKING
from unittest.mock import patch

from covgate.utils.ci_context import (
    CIContext,
    _parse_int,
    _pr_number_from_ref,
    detect_ci_context,
    get_pr_info_from_env,
)
from covgate.utils.github import GitHubPRInfo

if TYPE_CHECKING:
    from pathlib import Path


def test_detect_pull_request_from_event_payload(tmp_path: Path) -> None:
    """PR number is read from the event payload."""
    event_file = tmp_path / "event.json"
    event_file.write_text(json.dumps({"number": 17, "pull_request": {"number": 17}}))
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "pull_request",
        "GITHUB_EVENT_PATH": str(event_file),
        "GITHUB_REPOSITORY": "owner/repo",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

    assert context.is_ci
    assert context.is_pr
    assert context.pr_number == 17
    assert context.repo_owner == "owner"
    assert context.repo_name == "repo"
    assert context.event_name == "pull_request"


def test_detect_pull_request_target_nested_number(tmp_path: Path) -> None:
    event_file = tmp_path / "event.json"
    event_file.write_text(json.dumps({"pull_request": {"number": 8}}))
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "pull_request_target",
        "GITHUB_EVENT_PATH": str(event_file),
        "GITHUB_REPOSITORY": "owner/repo",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

    assert context.is_pr
    assert context.pr_number == 8


def test_detect_pull_request_from_ref() -> None:
    """Falls back to refs/pull/<n>/merge when no payload is available."""
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "pull_request",
        "GITHUB_REF": "refs/pull/123/merge",
        "GITHUB_REPOSITORY": "owner/repo",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

    assert context.pr_number == 123


def test_detect_push_context(tmp_path: Path) -> None:
    event_file = tmp_path / "event.json"
    event_file.write_text(json.dumps({"ref": "refs/heads/main"}))
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "push",
        "GITHUB_EVENT_PATH": str(event_file),
        "GITHUB_REF": "refs/heads/main",
        "GITHUB_REPOSITORY": "owner/repo",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

    assert context.is_ci
    assert not context.is_pr
    assert context.pr_number is None
    assert context.pr_info() is None


def test_unreadable_event_payload_is_ignored(tmp_path: Path) -> None:
    event_file = tmp_path / "event.json"
    event_file.write_text("{not json")
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "pull_request",
        "GITHUB_EVENT_PATH": str(event_file),
        "GITHUB_REF": "refs/pull/5/merge",
        "GITHUB_REPOSITORY": "owner/repo",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

    assert context.pr_number == 5


def test_malformed_repository() -> None:
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "pull_request",
        "GITHUB_REF": "refs/pull/5/merge",
        "GITHUB_REPOSITORY": "just-a-name",
    }

    with patch.dict(os.environ, env, clear=True):
        context = detect_ci_context()

    assert context.repo_owner is None
    assert context.pr_info() is None


def test_generic_ci() -> None:
    with patch.dict(os.environ, {"CI": "true"}, clear=True):
        context = detect_ci_context()

    assert context.is_ci
    assert not context.is_pr


def test_local_run() -> None:
    with patch.dict(os.environ, {}, clear=True):
        context = detect_ci_context()

    assert not context.is_ci
    assert get_pr_info_from_env() is None


def test_get_pr_info_from_env() -> None:
    env = {
        "GITHUB_ACTIONS": "true",
        "GITHUB_EVENT_NAME": "pull_request",
        "GITHUB_REF": "refs/pull/42/merge",
        "GITHUB_REPOSITORY": "octocat/hello-world",
    }

    with patch.dict(os.environ, env, clear=True):
        pr_info = get_pr_info_from_env()

    assert pr_info == GitHubPRInfo(owner="octocat", repo="hello-world", pr_number=42)


def test_ci_context_pr_info_requires_number() -> None:
    context = CIContext(
        is_ci=True, is_pr=True, pr_number=None, repo_owner="o", repo_name="r"
    )

    assert context.pr_info() is None


def test_pr_number_from_ref() -> None:
    assert _pr_number_from_ref("refs/pull/9/head") == 9
    assert _pr_number_from_ref("refs/heads/feature") is None
    assert _pr_number_from_ref("refs/pull/abc/merge") is None
    assert _pr_number_from_ref(None) is None


def test_parse_int() -> None:
    """Test _parse_int helper function."""
    assert _parse_int("123") == 123
    assert _parse_int(7) == 7
    assert _parse_int("invalid") is None
    assert _parse_int(None) is None
    assert _parse_int(True) is None
