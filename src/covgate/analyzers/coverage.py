"""Coverage aggregation and threshold evaluation.

One pass over the parsed records:
1. Skips any file matching an exclusion pattern
2. Sums ``lines.found`` / ``lines.hit`` over the remaining files
3. Collects zero-hit line numbers per file, in encounter order
4. Compares the resulting percentage with ``min_coverage`` (inclusive)
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from covgate.analyzers.exclusion import is_excluded
from covgate.models.coverage import CoverageResult, GateDecision, GateStatus

if TYPE_CHECKING:
    from collections.abc import Iterable

    from covgate.adapters.coverage.base import CoverageRecord

logger = logging.getLogger(__name__)


def aggregate_coverage(
    records: Iterable[CoverageRecord], exclude_patterns: Iterable[str] = ()
) -> CoverageResult:
    """Aggregate line coverage over all records not matched by an exclusion.

    Args:
        records: Parsed per-file coverage records.
        exclude_patterns: Glob patterns; a matching file is dropped entirely.

    Returns:
        The totals and the uncovered-line map for the included files.
    """
    patterns = list(exclude_patterns)
    result = CoverageResult()

    for record in records:
        if is_excluded(record.file, patterns):
            result.excluded_files.append(record.file)
            continue

        result.included_files += 1
        result.total_found += record.lines.found
        result.total_hit += record.lines.hit

        for detail in record.lines.details:
            if detail.hit == 0:
                result.uncovered_lines.setdefault(record.file, []).append(detail.line)

    logger.debug(
        "Aggregated %d files (%d excluded): %d/%d lines hit",
        result.included_files,
        len(result.excluded_files),
        result.total_hit,
        result.total_found,
    )
    return result


def format_number(value: float) -> str:
    """Format a number without a trailing ``.0`` for integral values."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def format_uncovered_lines(uncovered_lines: dict[str, list[int]]) -> list[str]:
    """Render one ``<file>: <line>, <line>`` entry per file."""
    return [
        f"{file}: {', '.join(str(line) for line in lines)}"
        for file, lines in uncovered_lines.items()
    ]


def format_failure_report(result: CoverageResult, min_coverage: float) -> str:
    """Build the message used to fail a run below the threshold."""
    entries = format_uncovered_lines(result.uncovered_lines)
    return (
        f"{format_number(result.percentage)} is less than min_coverage "
        f"{format_number(min_coverage)}\n\n"
        "Lines not covered:\n" + "\n".join(f"  {entry}" for entry in entries)
    )


def format_not_evaluable_report(result: CoverageResult, min_coverage: float) -> str:
    """Build the message used when no instrumented lines remain."""
    return (
        "Coverage cannot be evaluated: no instrumented lines remain after exclusions "
        f"({result.included_files} files included, {len(result.excluded_files)} excluded; "
        f"min_coverage {format_number(min_coverage)})"
    )


def evaluate_threshold(result: CoverageResult, min_coverage: float) -> GateDecision:
    """Decide whether *result* satisfies *min_coverage*.

    The build passes iff ``percentage >= min_coverage``. A result with no
    found lines is reported as not evaluable rather than passed or failed.
    """
    if not result.is_evaluable:
        logger.warning("No instrumented lines after exclusions; coverage is not evaluable")
        return GateDecision(
            status=GateStatus.NOT_EVALUABLE,
            min_coverage=min_coverage,
            result=result,
            message=format_not_evaluable_report(result, min_coverage),
        )

    if result.percentage >= min_coverage:
        return GateDecision(status=GateStatus.PASSED, min_coverage=min_coverage, result=result)

    return GateDecision(
        status=GateStatus.FAILED,
        min_coverage=min_coverage,
        result=result,
        message=format_failure_report(result, min_coverage),
    )
