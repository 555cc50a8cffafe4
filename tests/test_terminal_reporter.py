"""Tests for the rich terminal reporter."""

from __future__ import annotations

from io import StringIO

from rich.console import Console

from covgate.models.coverage import CoverageResult, GateDecision, GateStatus
from covgate.reporters.terminal import CLIReporter


def _reporter() -> tuple[CLIReporter, StringIO]:
    buffer = StringIO()
    reporter = CLIReporter()
    reporter.console = Console(file=buffer, width=120, force_terminal=False)
    return reporter, buffer


class TestCoverageSummary:
    def test_shows_percentage_and_status(self) -> None:
        reporter, buffer = _reporter()
        decision = GateDecision(
            status=GateStatus.FAILED,
            min_coverage=80,
            result=CoverageResult(total_found=4, total_hit=3, included_files=2),
        )

        reporter.print_coverage_summary(decision)

        output = buffer.getvalue()
        assert "75.00%" in output
        assert "80%" in output
        assert "failed" in output

    def test_not_evaluable(self) -> None:
        reporter, buffer = _reporter()
        decision = GateDecision(
            status=GateStatus.NOT_EVALUABLE, min_coverage=0, result=CoverageResult()
        )

        reporter.print_coverage_summary(decision)

        assert "n/a" in buffer.getvalue()
        assert "not evaluable" in buffer.getvalue()


class TestUncoveredLines:
    def test_lists_files(self) -> None:
        reporter, buffer = _reporter()

        reporter.print_uncovered_lines({"src/[gen]/a.js": [1, 2]})

        output = buffer.getvalue()
        assert "src/[gen]/a.js" in output
        assert "1, 2" in output

    def test_truncates_long_line_lists(self) -> None:
        reporter, buffer = _reporter()

        reporter.print_uncovered_lines({"a.js": list(range(1, 41))})

        assert "(+10)" in buffer.getvalue()

    def test_nothing_to_show(self) -> None:
        reporter, buffer = _reporter()

        reporter.print_uncovered_lines({})

        assert buffer.getvalue() == ""


class TestCoverageColor:
    def test_thresholds(self) -> None:
        reporter = CLIReporter()

        assert reporter._get_coverage_color(90.0, 90.0) == "green"
        assert reporter._get_coverage_color(85.0, 90.0) == "yellow"
        assert reporter._get_coverage_color(50.0, 90.0) == "red"


def test_print_error_escapes_markup() -> None:
    reporter, buffer = _reporter()

    reporter.print_error("bad value [red]x[/red]")

    assert "bad value [red]x[/red]" in buffer.getvalue()
