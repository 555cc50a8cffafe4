"""GitHub Actions runtime helpers: inputs, workflow commands, step summary."""

from __future__ import annotations

import logging
import os
from pathlib import Path

import click

from covgate.reporters.terminal import reporter

logger = logging.getLogger(__name__)

_INPUT_PREFIX = "INPUT_"
_STEP_SUMMARY_ENV_KEY = "GITHUB_STEP_SUMMARY"


def is_github_actions() -> bool:
    """Return True when running inside a GitHub Actions job."""
    return os.getenv("GITHUB_ACTIONS") == "true"


def get_input(name: str, default: str | None = None) -> str | None:
    """Read an action input from its ``INPUT_<NAME>`` environment variable.

    Spaces in *name* become underscores and the name is upper-cased, as the
    Actions runner does when exporting ``with:`` values. Values are stripped.

    Returns:
        The input value, or *default* when the variable is unset.
    """
    env_key = _INPUT_PREFIX + name.replace(" ", "_").upper()
    value = os.environ.get(env_key)
    if value is None:
        return default
    return value.strip()


def escape_data(message: str) -> str:
    """Escape a message for use in a workflow command."""
    return message.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_failed(message: str) -> None:
    """Mark the run as failed with *message*.

    Emits an ``::error::`` workflow command under GitHub Actions, or a
    formatted error line otherwise. The caller is responsible for the exit
    status.
    """
    logger.debug("Marking run as failed: %s", message)
    if is_github_actions():
        click.echo(f"::error::{escape_data(message)}")
    else:
        reporter.print_error(message)


def debug(message: str) -> None:
    """Emit a ``::debug::`` workflow command (visible with step debug logging)."""
    logger.debug(message)
    if is_github_actions():
        click.echo(f"::debug::{escape_data(message)}")


def write_step_summary(markdown: str) -> bool:
    """Append *markdown* to the job summary file, if one is configured.

    Returns:
        True if the summary was written.
    """
    summary_path = os.environ.get(_STEP_SUMMARY_ENV_KEY)
    if not summary_path:
        return False
    try:
        with Path(summary_path).open("a", encoding="utf-8") as handle:
            handle.write(markdown.rstrip("\n") + "\n")
    except OSError as exc:
        logger.warning("Could not write step summary to %s: %s", summary_path, exc)
        return False
    return True
