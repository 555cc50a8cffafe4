"""Coverage report adapters producing per-file coverage records."""

from covgate.adapters.coverage.base import (
    BranchDetail,
    BranchSummary,
    CoverageRecord,
    FunctionDetail,
    FunctionSummary,
    LineDetail,
    LineSummary,
)
from covgate.adapters.coverage.lcov import (
    LcovParseError,
    ReportInputError,
    check_report_readable,
    parse_lcov_file,
    parse_lcov_string,
)

__all__ = [
    "BranchDetail",
    "BranchSummary",
    "CoverageRecord",
    "FunctionDetail",
    "FunctionSummary",
    "LcovParseError",
    "LineDetail",
    "LineSummary",
    "ReportInputError",
    "check_report_readable",
    "parse_lcov_file",
    "parse_lcov_string",
]
