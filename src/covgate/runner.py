"""Coverage gate run: read → parse → aggregate → decide → publish.

Every step runs in order in a single call. The pass/fail status is fixed
before anything is published, and publishing errors never change it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covgate.adapters.coverage.lcov import LcovParseError, ReportInputError, parse_lcov_file
from covgate.analyzers.coverage import aggregate_coverage, evaluate_threshold
from covgate.reporters.github_comment import (
    CommentPublisher,
    PublishResult,
    format_comment_body,
)
from covgate.utils.actions import debug, set_failed, write_step_summary
from covgate.utils.github import GitHubAPIError

if TYPE_CHECKING:
    from covgate.config import GateConfig
    from covgate.models.coverage import GateDecision

logger = logging.getLogger(__name__)


@dataclass
class GateOutcome:
    """Result of a full gate run."""

    failed: bool
    """True if the run was marked as failed."""

    message: str = ""
    """Failure message passed to the failure channel (empty on success)."""

    decision: GateDecision | None = None
    """Threshold decision; None when the report could not be read or parsed."""

    publish_result: PublishResult | None = None
    """Comment outcome; None when publishing raised an API error."""


def _fail(message: str) -> GateOutcome:
    set_failed(message)
    return GateOutcome(failed=True, message=message)


def publish_comment(publisher: CommentPublisher, body: str) -> PublishResult | None:
    """Publish *body*, logging API errors instead of raising them."""
    try:
        return publisher.publish(body)
    except GitHubAPIError as exc:
        logger.error("Failed to publish coverage comment: %s", exc)
        return None


def run_gate(config: GateConfig, *, publisher: CommentPublisher | None = None) -> GateOutcome:
    """Run the coverage gate described by *config*.

    Args:
        config: Resolved configuration (see :func:`covgate.config.load_config`).
        publisher: Comment publisher to use; built from the config when omitted.

    Returns:
        The outcome. Failures are reported through
        :func:`covgate.utils.actions.set_failed`, never raised.
    """
    try:
        records = parse_lcov_file(config.path)
    except ReportInputError as exc:
        return _fail(str(exc))
    except LcovParseError as exc:
        logger.debug("Could not parse %s: %s", config.path, exc)
        return _fail(str(exc))

    result = aggregate_coverage(records, config.exclude)
    for excluded in result.excluded_files:
        debug(f"Excluding {excluded} from coverage")

    decision = evaluate_threshold(result, config.min_coverage)
    if not decision.passed:
        set_failed(decision.message)

    body = format_comment_body(decision, config.comment_marker)
    if config.step_summary:
        write_step_summary(body)

    if publisher is None:
        publisher = CommentPublisher(config.github_token, config.comment_marker)
    publish_result = publish_comment(publisher, body)

    return GateOutcome(
        failed=not decision.passed,
        message=decision.message,
        decision=decision,
        publish_result=publish_result,
    )
