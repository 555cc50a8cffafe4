"""Data models for parsed per-file coverage records.

The record shape mirrors the one produced by common lcov parsers: each
source file carries ``lines``, ``functions`` and ``branches`` sections, each
with ``found``/``hit`` totals and an ordered list of details.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class LineDetail:
    """Hit count for a single instrumented line."""

    line: int
    hit: int

    @property
    def is_covered(self) -> bool:
        """Return True if this line was executed at least once."""
        return self.hit > 0


@dataclass
class FunctionDetail:
    """Hit count for a single function."""

    name: str
    line: int
    hit: int = 0


@dataclass
class BranchDetail:
    """Taken count for a single branch (``BRDA`` entry)."""

    line: int
    block: int
    branch: int
    taken: int


@dataclass
class LineSummary:
    """Line totals and per-line details for a file."""

    found: int = 0
    """Total instrumented lines."""

    hit: int = 0
    """Lines executed at least once."""

    details: list[LineDetail] = field(default_factory=list)
    """Per-line hit counts, in report order."""


@dataclass
class FunctionSummary:
    """Function totals and per-function details for a file."""

    found: int = 0
    hit: int = 0
    details: list[FunctionDetail] = field(default_factory=list)


@dataclass
class BranchSummary:
    """Branch totals and per-branch details for a file."""

    found: int = 0
    hit: int = 0
    details: list[BranchDetail] = field(default_factory=list)


@dataclass
class CoverageRecord:
    """Coverage data for one source file in a report.

    ``file`` is the identity key. Only ``lines`` takes part in the line
    coverage aggregate; functions and branches are carried for reporting.
    """

    file: str
    title: str = ""
    lines: LineSummary = field(default_factory=LineSummary)
    functions: FunctionSummary = field(default_factory=FunctionSummary)
    branches: BranchSummary = field(default_factory=BranchSummary)
