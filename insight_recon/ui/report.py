"""
Terminal presentation of comparison results.
Single responsibility: render results, analyses and history with Rich.
"""

from datetime import datetime
from typing import List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from ..core.comparator import ComparisonResult
from ..core.values import format_cell
from ..services.analysis import AIAnalysis, ReconciliationStatus
from ..storage.history import HistoryItem


STATUS_STYLES = {
    ReconciliationStatus.BALANCED: "bold green",
    ReconciliationStatus.DISCREPANCY_FOUND: "bold yellow",
    ReconciliationStatus.CRITICAL_MISMATCH: "bold red",
}


class ResultRenderer:
    """
    Render reconciliation output to the terminal.
    """

    def __init__(self, console: Optional[Console] = None, max_modified: int = 50):
        """
        Initialize renderer.

        Args:
            console: Rich console (stdout by default)
            max_modified: Modified records listed before truncating
        """
        self.console = console or Console()
        self.max_modified = max_modified

    def show_header(self, file_name_a: str, file_name_b: str):
        header = Panel(
            Text(f"{file_name_a}  vs  {file_name_b}", justify="center", style="bold cyan"),
            title="Insight Recon",
            box=box.DOUBLE,
            style="cyan"
        )
        self.console.print(header)

    def show_summary(self, result: ComparisonResult):
        """
        Display counts and, for financial comparisons, totals and variance.

        Args:
            result: Comparison result
        """
        summary = result.summary

        table = Table(title="Comparison Results", box=box.ROUNDED)
        table.add_column("Metric", style="cyan", no_wrap=True)
        table.add_column("Value", style="magenta", justify="right")

        table.add_row("Rows in base", f"{summary.total_a:,}")
        table.add_row("Rows in comparison", f"{summary.total_b:,}")
        table.add_row(Text("Added", style="green"), f"{summary.added_count:,}")
        table.add_row(Text("Removed", style="red"), f"{summary.removed_count:,}")
        table.add_row(Text("Modified", style="yellow"), f"{summary.modified_count:,}")

        if summary.financial:
            table.add_row("Total amount (base)", f"{summary.total_amount_a:,.2f}")
            table.add_row("Total amount (comparison)", f"{summary.total_amount_b:,.2f}")
            style = "green" if summary.is_balanced else "bold red"
            variance = 0.0 if summary.is_balanced else summary.variance
            table.add_row("Variance", Text(f"{variance:,.2f}", style=style))

        self.console.print()
        self.console.print(table)

        if summary.financial:
            if summary.is_balanced and summary.has_differences:
                self.console.print(
                    "Balanced totals, but records differ: review the breakdown below.",
                    style="yellow"
                )
            elif summary.is_balanced:
                self.console.print("✓ Balanced reconciliation", style="green")
            else:
                self.console.print("✗ Discrepancy requires investigation", style="bold red")

    def show_modified(self, result: ComparisonResult):
        """
        List modified records and their field changes.

        Args:
            result: Comparison result
        """
        if not result.modified:
            return

        table = Table(title="Field-Level Changes", box=box.SIMPLE)
        table.add_column("Record", style="cyan")
        table.add_column("Column", style="blue")
        table.add_column("From", style="red")
        table.add_column("To", style="green")

        for record in result.modified[: self.max_modified]:
            label = str(record.key) if record.key is not None else "?"
            for i, change in enumerate(record.changes):
                table.add_row(
                    label if i == 0 else "",
                    change.column,
                    format_cell(change.from_value),
                    format_cell(change.to_value),
                )

        self.console.print(table)

        hidden = len(result.modified) - self.max_modified
        if hidden > 0:
            self.console.print(f"... and {hidden:,} more modified records (export for full detail)",
                               style="dim")

    def show_analysis(self, analysis: AIAnalysis):
        """
        Display the AI narrative analysis.

        Args:
            analysis: Parsed analysis
        """
        title = "AI Analysis"
        border = "magenta"
        if analysis.reconciliation_status is not None:
            title = f"AI Analysis - {analysis.reconciliation_status.value}"
            border = STATUS_STYLES[analysis.reconciliation_status].split()[-1]

        self.console.print(Panel(Text(analysis.overview), title=title, border_style=border))

        for heading, items, style in (
            ("Key Insights", analysis.key_insights, "cyan"),
            ("Anomalies", analysis.anomalies, "yellow"),
            ("Recommendations", analysis.recommendations, "green"),
        ):
            if not items:
                continue
            self.console.print(Text(heading, style=f"bold {style}"))
            for item in items:
                self.console.print(Text(f"  • {item}"))

    def show_history(self, items: List[HistoryItem]):
        """
        Display saved comparisons.

        Args:
            items: History entries, newest first
        """
        if not items:
            self.console.print("No history yet.", style="dim")
            return

        table = Table(title="Recent Comparisons", box=box.SIMPLE)
        table.add_column("ID", style="dim")
        table.add_column("When", style="cyan")
        table.add_column("Files")
        table.add_column("+/-/~", justify="right")
        table.add_column("Status")

        for item in items:
            when = datetime.fromtimestamp(item.timestamp / 1000).strftime("%Y-%m-%d %H:%M")
            counts = "{added_count}/{removed_count}/{modified_count}".format(
                added_count=item.summary.get("added_count", 0),
                removed_count=item.summary.get("removed_count", 0),
                modified_count=item.summary.get("modified_count", 0),
            )
            table.add_row(
                item.id[:8],
                when,
                f"{item.file_name_a} → {item.file_name_b}",
                counts,
                item.analysis.get("reconciliationStatus", "-"),
            )

        self.console.print(table)

    def log_error(self, message: str):
        self.console.print(Text(f"✗ {message}", style="bold red"))

    def log_warning(self, message: str):
        self.console.print(Text(f"⚠ {message}", style="yellow"))

    def log_success(self, message: str):
        self.console.print(Text(f"✓ {message}", style="green"))
