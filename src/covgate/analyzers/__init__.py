"""Coverage aggregation and exclusion analysis."""

from covgate.analyzers.coverage import (
    aggregate_coverage,
    evaluate_threshold,
    format_failure_report,
    format_number,
)
from covgate.analyzers.exclusion import is_excluded, match_glob, parse_exclude_patterns

__all__ = [
    "aggregate_coverage",
    "evaluate_threshold",
    "format_failure_report",
    "format_number",
    "is_excluded",
    "match_glob",
    "parse_exclude_patterns",
]
