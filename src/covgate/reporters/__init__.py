"""Reporters for outputting coverage gate results."""

from __future__ import annotations

from covgate.reporters.github_comment import (
    CommentPublisher,
    CommentThread,
    GitHubCommentThread,
    PublishAction,
    PublishResult,
    format_comment_body,
)
from covgate.reporters.terminal import reporter

__all__ = [
    "CommentPublisher",
    "CommentThread",
    "GitHubCommentThread",
    "PublishAction",
    "PublishResult",
    "format_comment_body",
    "reporter",
]
