"""Tests for the lcov tracefile reader (adapters/coverage/lcov.py)."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from covgate.adapters.coverage.lcov import (
    EMPTY_REPORT_MESSAGE,
    PARSE_ERROR_MESSAGE,
    LcovParseError,
    ReportInputError,
    check_report_readable,
    parse_lcov_file,
    parse_lcov_string,
    read_report,
)

if TYPE_CHECKING:
    from pathlib import Path


# ── Sample LCOV .info ───────────────────────────────────────────

_SAMPLE_LCOV_INFO = """TN:
SF:lib/src/math.dart
FN:1,add
FN:5,multiply
FNDA:2,add
FNDA:0,multiply
FNF:2
FNH:1
DA:1,2
DA:2,2
DA:3,0
DA:5,0
DA:6,0
LF:5
LH:2
BRDA:2,0,0,1
BRDA:2,0,1,-
BRF:2
BRH:1
end_of_record
TN:
SF:lib/src/utils.dart
DA:1,5
DA:2,5
DA:3,5
LF:3
LH:3
end_of_record
"""

_SAMPLE_LCOV_NO_TOTALS = """SF:src/a.js
DA:1,1
DA:2,0
DA:3,4
end_of_record
"""


class TestParseLcovString:
    def test_parses_records_in_order(self) -> None:
        records = parse_lcov_string(_SAMPLE_LCOV_INFO)

        assert [record.file for record in records] == [
            "lib/src/math.dart",
            "lib/src/utils.dart",
        ]

    def test_line_totals_from_lf_lh(self) -> None:
        math_record = parse_lcov_string(_SAMPLE_LCOV_INFO)[0]

        assert math_record.lines.found == 5
        assert math_record.lines.hit == 2

    def test_line_details_keep_report_order(self) -> None:
        math_record = parse_lcov_string(_SAMPLE_LCOV_INFO)[0]

        assert [(d.line, d.hit) for d in math_record.lines.details] == [
            (1, 2),
            (2, 2),
            (3, 0),
            (5, 0),
            (6, 0),
        ]

    def test_functions_and_branches(self) -> None:
        math_record = parse_lcov_string(_SAMPLE_LCOV_INFO)[0]

        assert math_record.functions.found == 2
        assert math_record.functions.hit == 1
        assert [(fn.name, fn.line, fn.hit) for fn in math_record.functions.details] == [
            ("add", 1, 2),
            ("multiply", 5, 0),
        ]
        assert math_record.branches.found == 2
        assert math_record.branches.hit == 1
        assert math_record.branches.details[1].taken == 0

    def test_totals_derived_when_lf_lh_missing(self) -> None:
        record = parse_lcov_string(_SAMPLE_LCOV_NO_TOTALS)[0]

        assert record.lines.found == 3
        assert record.lines.hit == 2

    def test_test_name_recorded_as_title(self) -> None:
        content = "TN:unit\nSF:a.js\nDA:1,1\nend_of_record\n"

        assert parse_lcov_string(content)[0].title == "unit"

    def test_record_without_end_marker_is_kept(self) -> None:
        content = "SF:a.js\nDA:1,1\nSF:b.js\nDA:1,0\n"

        records = parse_lcov_string(content)

        assert [record.file for record in records] == ["a.js", "b.js"]
        assert records[1].lines.hit == 0

    def test_da_with_checksum(self) -> None:
        content = "SF:a.c\nDA:7,3,aGVsbG8=\nend_of_record\n"

        detail = parse_lcov_string(content)[0].lines.details[0]

        assert (detail.line, detail.hit) == (7, 3)

    def test_malformed_entries_are_skipped(self) -> None:
        content = "SF:a.js\nDA:x,1\nDA:2\nDA:3,1\nLF:oops\nend_of_record\n"

        record = parse_lcov_string(content)[0]

        assert [d.line for d in record.lines.details] == [3]
        assert record.lines.found == 1

    def test_windows_line_endings(self) -> None:
        content = "SF:a.js\r\nDA:1,0\r\nLF:1\r\nLH:0\r\nend_of_record\r\n"

        record = parse_lcov_string(content)[0]

        assert record.file == "a.js"
        assert record.lines.found == 1

    def test_no_records_raises(self) -> None:
        with pytest.raises(LcovParseError, match=PARSE_ERROR_MESSAGE):
            parse_lcov_string("this is not an lcov file\n")

    def test_whitespace_only_raises(self) -> None:
        with pytest.raises(LcovParseError):
            parse_lcov_string("   \n\n")


class TestReadReport:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ReportInputError, match="lcov file not found"):
            read_report(tmp_path / "missing.info")

    def test_directory_is_not_a_report(self, tmp_path: Path) -> None:
        with pytest.raises(ReportInputError):
            read_report(tmp_path)

    def test_empty_file(self, tmp_path: Path) -> None:
        report = tmp_path / "lcov.info"
        report.write_bytes(b"")

        with pytest.raises(ReportInputError, match=EMPTY_REPORT_MESSAGE):
            read_report(report)

    def test_reads_text(self, tmp_path: Path) -> None:
        report = tmp_path / "lcov.info"
        report.write_text(_SAMPLE_LCOV_NO_TOTALS, encoding="utf-8")

        assert read_report(report) == _SAMPLE_LCOV_NO_TOTALS

    def test_check_report_readable(self, tmp_path: Path) -> None:
        report = tmp_path / "lcov.info"
        assert not check_report_readable(report)

        report.write_text("SF:a.js\n", encoding="utf-8")
        assert check_report_readable(report)


class TestParseLcovFile:
    def test_parses_file(self, tmp_path: Path) -> None:
        report = tmp_path / "lcov.info"
        report.write_text(_SAMPLE_LCOV_INFO, encoding="utf-8")

        records = parse_lcov_file(report)

        assert len(records) == 2

    def test_empty_file_fails_before_parsing(self, tmp_path: Path) -> None:
        report = tmp_path / "lcov.info"
        report.touch()

        with pytest.raises(ReportInputError):
            parse_lcov_file(report)

    def test_garbage_file_is_a_parse_error(self, tmp_path: Path) -> None:
        report = tmp_path / "lcov.info"
        report.write_text("garbage", encoding="utf-8")

        with pytest.raises(LcovParseError):
            parse_lcov_file(report)
