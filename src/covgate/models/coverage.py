"""Coverage aggregate and gate decision models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum


@dataclass
class CoverageResult:
    """Line coverage totals over the files that survived exclusion."""

    total_found: int = 0
    """Sum of instrumented lines over included files."""

    total_hit: int = 0
    """Sum of executed lines over included files."""

    uncovered_lines: dict[str, list[int]] = field(default_factory=dict)
    """Line numbers with zero hits, keyed by file in first-seen order."""

    excluded_files: list[str] = field(default_factory=list)
    """Files skipped because they matched an exclusion pattern."""

    included_files: int = 0
    """Number of records that contributed to the totals."""

    @property
    def percentage(self) -> float:
        """Return ``total_hit / total_found * 100``, or NaN with no found lines."""
        if self.total_found == 0:
            return math.nan
        return self.total_hit / self.total_found * 100

    @property
    def is_evaluable(self) -> bool:
        """Return True when the percentage is a comparable number."""
        return not math.isnan(self.percentage)


class GateStatus(Enum):
    """Outcome of a threshold comparison."""

    PASSED = "passed"
    FAILED = "failed"
    NOT_EVALUABLE = "not_evaluable"


@dataclass
class GateDecision:
    """A coverage result judged against a minimum threshold."""

    status: GateStatus
    min_coverage: float
    result: CoverageResult
    message: str = ""
    """Human-readable failure report (empty when the gate passed)."""

    @property
    def passed(self) -> bool:
        """Return True if the build should pass."""
        return self.status is GateStatus.PASSED
