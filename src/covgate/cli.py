"""covgate CLI — top-level command group."""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import asdict
from typing import Any

import click
import yaml
from rich.console import Console

from covgate import __version__
from covgate.config import GateConfig, load_config, validate_config
from covgate.reporters.terminal import reporter
from covgate.runner import run_gate
from covgate.utils.actions import set_failed

logger = logging.getLogger(__name__)
console = Console()

LOG_FORMAT = "%(levelname)s: %(message)s"

# Masking thresholds
_MIN_MASKED_VALUE_LENGTH = 8
_SENSITIVE_KEYS = frozenset({"github_token", "token"})


def _configure_logging(*, verbose: bool, quiet: bool) -> None:
    level = logging.ERROR if quiet else (logging.DEBUG if verbose else logging.WARNING)
    logging.basicConfig(level=level, format=LOG_FORMAT)


def _config_to_dict(config: GateConfig) -> dict[str, Any]:
    """Convert GateConfig to dictionary for display."""
    result = asdict(config)
    # Remove the raw field as it's redundant
    result.pop("raw", None)
    return result


def _mask_sensitive_values(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask token values in a configuration dict."""
    result = copy.deepcopy(config_dict)
    for key, value in result.items():
        if key in _SENSITIVE_KEYS and isinstance(value, str) and value:
            # Show first 4 chars, mask the rest
            if len(value) > _MIN_MASKED_VALUE_LENGTH:
                result[key] = f"{value[:4]}...{value[-4:]}"
            else:
                result[key] = "***"
    return result


def _load_or_abort(root: str, overrides: dict[str, Any] | None = None) -> GateConfig:
    try:
        return load_config(root, overrides)
    except (OSError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.option("-q", "--quiet", is_flag=True, help="Only log errors.")
@click.version_option(version=__version__, prog_name="covgate")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """covgate: fail the build when lcov coverage drops below a threshold."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose, quiet=quiet)


@cli.command()
@click.option("--path", "report_path", default=None, help="Path to the lcov tracefile.")
@click.option(
    "--min-coverage",
    default=None,
    help="Minimum line coverage percentage (inclusive).",
)
@click.option(
    "--exclude",
    multiple=True,
    help="Glob pattern of files to exclude. Repeatable; each value may hold "
    "several space-separated patterns.",
)
@click.option(
    "--github-token",
    default=None,
    help="Token used to post the result as a pull request comment.",
)
@click.option(
    "--comment-marker",
    default=None,
    help="Literal that identifies the covgate comment on the pull request.",
)
@click.option(
    "--config-root",
    default=".",
    type=click.Path(file_okay=False, resolve_path=True),
    help="Directory containing .covgate.yml.",
)
def check(
    report_path: str | None,
    min_coverage: str | None,
    exclude: tuple[str, ...],
    github_token: str | None,
    comment_marker: str | None,
    config_root: str,
) -> None:
    """Check an lcov report against the minimum coverage.

    Exits with status 1 when the report is missing, empty or unparseable,
    or when coverage is below the threshold.

    Example:
      covgate check --path coverage/lcov.info --min-coverage 90 --exclude "**/*.g.dart"
    """
    overrides: dict[str, Any] = {
        "path": report_path,
        "min_coverage": min_coverage,
        "exclude": " ".join(exclude) if exclude else None,
        "github_token": github_token,
        "comment_marker": comment_marker,
    }
    config = _load_or_abort(config_root, overrides)

    errors = validate_config(config)
    if errors:
        set_failed("Invalid configuration: " + "; ".join(errors))
        raise SystemExit(1)

    outcome = run_gate(config)

    if outcome.decision is not None:
        reporter.print_coverage_summary(outcome.decision)
        if outcome.failed:
            reporter.print_uncovered_lines(outcome.decision.result.uncovered_lines)

    if outcome.publish_result is not None and outcome.publish_result.comment_url:
        reporter.print_info(f"Coverage comment: {outcome.publish_result.comment_url}")

    if outcome.failed:
        raise SystemExit(1)

    reporter.print_success("Coverage meets the minimum threshold")


@cli.group("config")
def config_group() -> None:
    """Inspect the resolved covgate configuration."""


@config_group.command("show")
@click.option(
    "--config-root",
    default=".",
    type=click.Path(file_okay=False, resolve_path=True),
    help="Directory containing .covgate.yml.",
)
@click.option(
    "--json-output",
    "as_json",
    is_flag=True,
    help="Output as JSON instead of YAML.",
)
@click.option(
    "--no-mask",
    is_flag=True,
    help="Show the token unmasked (use with caution).",
)
def config_show(config_root: str, *, as_json: bool, no_mask: bool) -> None:
    """Display resolved configuration with the token masked.

    Example:
      covgate config show
      covgate config show --json-output
    """
    config = _load_or_abort(config_root)

    config_dict = _config_to_dict(config)
    if not no_mask:
        config_dict = _mask_sensitive_values(config_dict)

    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        console.print()
        console.print("[bold cyan]Configuration:[/bold cyan]")
        console.print()
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@click.option(
    "--config-root",
    default=".",
    type=click.Path(file_okay=False, resolve_path=True),
    help="Directory containing .covgate.yml.",
)
def config_validate(config_root: str) -> None:
    """Validate the resolved configuration.

    Example:
      covgate config validate
    """
    config = _load_or_abort(config_root)
    errors = validate_config(config)

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    raise click.Abort
