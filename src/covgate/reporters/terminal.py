"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from covgate.analyzers.coverage import format_number
from covgate.models.coverage import GateStatus

if TYPE_CHECKING:
    from covgate.models.coverage import GateDecision

console = Console()


_WARN_MARGIN = 10.0
_MAX_UNCOVERED_FILES_DISPLAY = 20
_MAX_LINES_PER_FILE_DISPLAY = 30

_STATUS_LABELS = {
    GateStatus.PASSED: "[green]passed[/green]",
    GateStatus.FAILED: "[red]failed[/red]",
    GateStatus.NOT_EVALUABLE: "[yellow]not evaluable[/yellow]",
}


class CLIReporter:
    """Rich terminal output reporter for coverage gate runs."""

    def __init__(self) -> None:
        """Initialize the CLI reporter."""
        self.console = console

    def print_success(self, message: str) -> None:
        """Print a success message."""
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        """Print an error message."""
        self.console.print(f"[red]✗[/red] {escape(message)}")

    def print_info(self, message: str) -> None:
        """Print an info message."""
        self.console.print(f"[dim]{message}[/dim]")

    def print_coverage_summary(self, decision: GateDecision) -> None:
        """Print the aggregate coverage against the threshold."""
        result = decision.result
        table = Table(title="Coverage Summary", title_style="bold cyan")
        table.add_column("Metric", style="bold")
        table.add_column("Value", justify="right")

        table.add_row("Files included", str(result.included_files))
        table.add_row("Files excluded", str(len(result.excluded_files)))
        table.add_row("Lines found", str(result.total_found))
        table.add_row("Lines hit", str(result.total_hit))

        if result.is_evaluable:
            color = self._get_coverage_color(result.percentage, decision.min_coverage)
            table.add_row("Coverage", f"[{color}]{result.percentage:.2f}%[/{color}]")
        else:
            table.add_row("Coverage", "[yellow]n/a[/yellow]")
        table.add_row("Minimum", f"{format_number(decision.min_coverage)}%")

        table.add_section()
        table.add_row("[bold]Status[/bold]", _STATUS_LABELS[decision.status])

        self.console.print(table)

    def print_uncovered_lines(self, uncovered_lines: dict[str, list[int]]) -> None:
        """Print uncovered line numbers per file, truncated for display."""
        if not uncovered_lines:
            return

        table = Table(title="Lines Not Covered", title_style="bold yellow")
        table.add_column("File", style="bold")
        table.add_column("Lines")

        for index, (file, lines) in enumerate(uncovered_lines.items()):
            if index >= _MAX_UNCOVERED_FILES_DISPLAY:
                remaining = len(uncovered_lines) - _MAX_UNCOVERED_FILES_DISPLAY
                table.add_row(f"[dim]... {remaining} more files[/dim]", "")
                break
            shown = ", ".join(str(line) for line in lines[:_MAX_LINES_PER_FILE_DISPLAY])
            if len(lines) > _MAX_LINES_PER_FILE_DISPLAY:
                shown += f" [dim](+{len(lines) - _MAX_LINES_PER_FILE_DISPLAY})[/dim]"
            table.add_row(escape(file), shown)

        self.console.print(table)

    def _get_coverage_color(self, percentage: float, minimum: float) -> str:
        """Get color for a coverage percentage relative to the threshold."""
        if percentage >= minimum:
            return "green"
        if percentage >= minimum - _WARN_MARGIN:
            return "yellow"
        return "red"


reporter = CLIReporter()
