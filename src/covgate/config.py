"""Configuration from ``.covgate.yml``, GitHub Actions inputs and CLI options.

Precedence, highest first: explicit overrides (CLI options), action inputs
(``INPUT_*`` environment variables), ``.covgate.yml``, built-in defaults.
"""

from __future__ import annotations

import logging
import math
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from covgate.analyzers.exclusion import parse_exclude_patterns
from covgate.utils.actions import get_input

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covgate.yml"
DEFAULT_REPORT_PATH = "./coverage/lcov.info"
DEFAULT_MIN_COVERAGE = 100.0
DEFAULT_COMMENT_MARKER = "<!-- covgate:coverage-report -->"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")
_MAX_PERCENTAGE = 100.0

# Keys readable from every layer, in the order they are documented
_CONFIG_KEYS = ("path", "min_coverage", "exclude", "github_token", "comment_marker")


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class GateConfig:
    """Complete covgate configuration for one run."""

    path: str = DEFAULT_REPORT_PATH
    """Location of the lcov tracefile."""

    min_coverage: float = DEFAULT_MIN_COVERAGE
    """Minimum line coverage percentage; NaN when the input was not numeric."""

    exclude: list[str] = field(default_factory=list)
    """Glob patterns of files to leave out of the aggregate."""

    github_token: str = ""
    """Token for PR comments. Posting is skipped when empty."""

    comment_marker: str = DEFAULT_COMMENT_MARKER
    """Literal that starts every posted comment and identifies it on later runs."""

    step_summary: bool = True
    """Append a markdown summary to ``$GITHUB_STEP_SUMMARY`` when available."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Merged raw values before coercion, for validation messages and debugging."""


def _coerce_float(value: Any) -> float:
    """Convert *value* to float, returning NaN for non-numeric input."""
    if isinstance(value, bool):
        return math.nan
    try:
        return float(str(value).strip())
    except ValueError:
        return math.nan


def _coerce_bool(value: Any, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def _load_config_file(root_path: Path) -> dict[str, Any]:
    config_file = root_path / CONFIG_FILE_NAME
    if not config_file.is_file():
        return {}

    parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
    if not isinstance(parsed, dict):
        logger.warning("Ignoring %s: expected a mapping at the top level", config_file)
        return {}
    return _resolve_dict(parsed)


def _load_action_inputs() -> dict[str, Any]:
    """Read the action's ``with:`` inputs.

    The runner exports declared but unset inputs as empty strings, so empty
    values are omitted along with missing ones.
    """
    inputs: dict[str, Any] = {}
    for key in (*_CONFIG_KEYS, "step_summary"):
        value = get_input(key)
        if value:
            inputs[key] = value
    return inputs


def load_config(
    root: str | Path = ".", overrides: Mapping[str, Any] | None = None
) -> GateConfig:
    """Load and merge the configuration layers.

    Args:
        root: Directory holding ``.covgate.yml``.
        overrides: Explicit values (typically CLI options); ``None`` entries
            are ignored.

    Returns:
        The resolved configuration. Invalid values are kept so that
        :func:`validate_config` can report them.
    """
    root_path = Path(root).resolve()

    raw: dict[str, Any] = {}
    raw.update(_load_config_file(root_path))
    raw.update(_load_action_inputs())
    if overrides:
        raw.update({key: value for key, value in overrides.items() if value is not None})

    path = str(raw.get("path", DEFAULT_REPORT_PATH) or "").strip()
    comment_marker = raw.get("comment_marker", DEFAULT_COMMENT_MARKER)

    return GateConfig(
        path=path,
        min_coverage=_coerce_float(raw.get("min_coverage", DEFAULT_MIN_COVERAGE)),
        exclude=parse_exclude_patterns(raw.get("exclude")),
        github_token=str(raw.get("github_token", "") or "").strip(),
        comment_marker=str(comment_marker if comment_marker is not None else ""),
        step_summary=_coerce_bool(raw.get("step_summary"), default=True),
        raw=raw,
    )


def validate_config(config: GateConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.path:
        errors.append("path is required")

    if math.isnan(config.min_coverage):
        errors.append(
            f"min_coverage must be a number (got: {config.raw.get('min_coverage')!r})"
        )
    elif not 0.0 <= config.min_coverage <= _MAX_PERCENTAGE:
        errors.append(
            f"min_coverage must be between 0 and 100 (got: {config.min_coverage:g})"
        )

    if not config.comment_marker.strip():
        errors.append("comment_marker must not be empty")

    return errors
