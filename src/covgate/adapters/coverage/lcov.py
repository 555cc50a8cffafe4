"""LCOV tracefile reader.

Parses lcov ``.info`` text (as written by lcov/geninfo, Istanbul, c8,
``flutter test --coverage``, grcov, ...) into :class:`CoverageRecord` objects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from covgate.adapters.coverage.base import (
    BranchDetail,
    CoverageRecord,
    FunctionDetail,
    LineDetail,
)

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

EMPTY_REPORT_MESSAGE = "lcov is empty!"
PARSE_ERROR_MESSAGE = "parsing error!"

# LCOV record keys
_LCOV_TN = "TN"
_LCOV_SF = "SF"
_LCOV_FN = "FN"
_LCOV_FNDA = "FNDA"
_LCOV_FNF = "FNF"
_LCOV_FNH = "FNH"
_LCOV_DA = "DA"
_LCOV_LF = "LF"
_LCOV_LH = "LH"
_LCOV_BRDA = "BRDA"
_LCOV_BRF = "BRF"
_LCOV_BRH = "BRH"
_LCOV_END = "end_of_record"
_LCOV_PAIR_PARTS = 2
_LCOV_BRDA_PARTS = 4


class ReportInputError(Exception):
    """Raised when the report file is missing, unreadable or empty."""


class LcovParseError(Exception):
    """Raised when a report yields no usable coverage records."""


@dataclass
class _LcovRecordState:
    """Mutable accumulator for the record currently being read."""

    title: str = ""
    path: str | None = None
    lines: list[LineDetail] = field(default_factory=list)
    functions: list[FunctionDetail] = field(default_factory=list)
    branches: list[BranchDetail] = field(default_factory=list)
    lines_found: int | None = None
    lines_hit: int | None = None
    functions_found: int | None = None
    functions_hit: int | None = None
    branches_found: int | None = None
    branches_hit: int | None = None

    def to_record(self) -> CoverageRecord:
        """Build the finished record, deriving missing totals from details."""
        record = CoverageRecord(file=self.path or "", title=self.title)

        record.lines.details = self.lines
        record.lines.found = (
            self.lines_found if self.lines_found is not None else len(self.lines)
        )
        record.lines.hit = (
            self.lines_hit
            if self.lines_hit is not None
            else sum(1 for detail in self.lines if detail.is_covered)
        )

        record.functions.details = self.functions
        record.functions.found = (
            self.functions_found if self.functions_found is not None else len(self.functions)
        )
        record.functions.hit = (
            self.functions_hit
            if self.functions_hit is not None
            else sum(1 for fn in self.functions if fn.hit > 0)
        )

        record.branches.details = self.branches
        record.branches.found = (
            self.branches_found if self.branches_found is not None else len(self.branches)
        )
        record.branches.hit = (
            self.branches_hit
            if self.branches_hit is not None
            else sum(1 for br in self.branches if br.taken > 0)
        )
        return record


# ── Reading ──────────────────────────────────────────────────────


def read_report(path: str | Path) -> str:
    """Read a report file, failing up front on missing or empty input.

    Args:
        path: Location of the lcov tracefile.

    Returns:
        The decoded report text.

    Raises:
        ReportInputError: If the file does not exist, cannot be read, or is empty.
    """
    report_path = Path(path)
    if not report_path.is_file():
        raise ReportInputError(f"lcov file not found: {report_path}")

    try:
        raw = report_path.read_bytes()
    except OSError as exc:
        raise ReportInputError(f"lcov file could not be read: {report_path} ({exc})") from exc

    if not raw:
        raise ReportInputError(EMPTY_REPORT_MESSAGE)

    return raw.decode("utf-8", errors="replace")


def check_report_readable(path: str | Path) -> bool:
    """Return True if *path* is an existing, readable, non-empty file."""
    try:
        read_report(path)
    except ReportInputError:
        return False
    return True


# ── Parsing ──────────────────────────────────────────────────────


def parse_lcov_file(path: str | Path) -> list[CoverageRecord]:
    """Read and parse an lcov tracefile.

    Raises:
        ReportInputError: If the file is missing, unreadable or empty.
        LcovParseError: If no coverage records could be parsed.
    """
    return parse_lcov_string(read_report(path))


def parse_lcov_string(content: str) -> list[CoverageRecord]:
    """Parse LCOV text into coverage records, in report order.

    A record is closed by ``end_of_record``, by the next ``SF:`` line, or by
    the end of input. Malformed numeric entries are skipped.

    Raises:
        LcovParseError: If the text contains no ``SF:`` records.
    """
    records: list[CoverageRecord] = []
    state = _LcovRecordState()

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line == _LCOV_END:
            if state.path is not None:
                records.append(state.to_record())
            state = _LcovRecordState()
            continue
        if ":" not in line:
            logger.debug("Skipping unrecognised lcov line: %s", line)
            continue

        key, _, value = line.partition(":")
        value = value.strip()
        if key == _LCOV_TN:
            if state.path is not None:
                records.append(state.to_record())
                state = _LcovRecordState()
            state.title = value
        elif key == _LCOV_SF:
            if state.path is not None:
                records.append(state.to_record())
                state = _LcovRecordState(title=state.title)
            state.path = value
        else:
            _apply_lcov_key(key, value, state)

    if state.path is not None:
        records.append(state.to_record())

    if not records:
        raise LcovParseError(PARSE_ERROR_MESSAGE)

    logger.debug("Parsed %d lcov records", len(records))
    return records


def _split_pair(value: str) -> tuple[str, str] | None:
    parts = value.split(",", 1)
    if len(parts) < _LCOV_PAIR_PARTS:
        return None
    return parts[0].strip(), parts[1].strip()


def _apply_lcov_key(key: str, value: str, state: _LcovRecordState) -> None:
    try:
        if key == _LCOV_DA:
            pair = _split_pair(value)
            if pair:
                # DA may carry a trailing checksum: DA:<line>,<hits>[,<md5>]
                hits = pair[1].split(",", 1)[0]
                state.lines.append(LineDetail(line=int(pair[0]), hit=int(hits)))
        elif key == _LCOV_FN:
            pair = _split_pair(value)
            if pair:
                state.functions.append(FunctionDetail(name=pair[1], line=int(pair[0])))
        elif key == _LCOV_FNDA:
            pair = _split_pair(value)
            if pair:
                hits, name = int(pair[0]), pair[1]
                for fn in state.functions:
                    if fn.name == name:
                        fn.hit = hits
                        break
        elif key == _LCOV_BRDA:
            parts = [part.strip() for part in value.split(",")]
            if len(parts) >= _LCOV_BRDA_PARTS:
                taken = 0 if parts[3] == "-" else int(parts[3])
                state.branches.append(
                    BranchDetail(
                        line=int(parts[0]),
                        block=int(parts[1]),
                        branch=int(parts[2]),
                        taken=taken,
                    )
                )
        elif key == _LCOV_LF:
            state.lines_found = int(value)
        elif key == _LCOV_LH:
            state.lines_hit = int(value)
        elif key == _LCOV_FNF:
            state.functions_found = int(value)
        elif key == _LCOV_FNH:
            state.functions_hit = int(value)
        elif key == _LCOV_BRF:
            state.branches_found = int(value)
        elif key == _LCOV_BRH:
            state.branches_hit = int(value)
    except ValueError:
        logger.debug("Skipping malformed lcov entry %s:%s", key, value)
