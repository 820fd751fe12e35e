"""
Audit workbook export.
Single responsibility: write a comparison result to an Excel workbook.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from ..core.comparator import ComparisonResult
from ..utils.logger import get_logger


logger = get_logger()

CHANGE_LOG_COLUMN = "_RECONCILIATION_LOG"


class ExportError(Exception):
    """Exception raised when the audit workbook cannot be written."""
    pass


@dataclass(frozen=True)
class SheetNames:
    """Tab names for the three difference sheets."""

    added: str
    removed: str
    modified: str
    summary: str = "Summary"


FINANCIAL_SHEETS = SheetNames(
    added="New Transactions",
    removed="Missing in Actuals",
    modified="Price_Amount Mismatches",
)

GENERIC_SHEETS = SheetNames(
    added="Added Rows",
    removed="Removed Rows",
    modified="Modified Rows",
)


def flatten_modified(result: ComparisonResult) -> List[Dict[str, Any]]:
    """
    Flatten modified records into plain rows.

    Each row is the B row plus a change-log column such as
    "amount: 100 -> 120; status: open -> paid".

    Args:
        result: Comparison result

    Returns:
        Flattened rows
    """
    flattened = []
    for record in result.modified:
        row = dict(record.row)
        row[CHANGE_LOG_COLUMN] = record.change_log()
        flattened.append(row)
    return flattened


def _frame(rows: Sequence[Mapping[str, Any]], columns: Sequence[str]) -> pd.DataFrame:
    """Build a sheet frame with known columns first, extras after."""
    ordered = list(columns)
    for row in rows:
        for column in row:
            if column not in ordered:
                ordered.append(column)
    return pd.DataFrame([dict(row) for row in rows], columns=ordered)


def _summary_frame(result: ComparisonResult, file_name_a: Optional[str],
                   file_name_b: Optional[str]) -> pd.DataFrame:
    summary = result.summary
    metrics = [
        ["file_a", file_name_a or ""],
        ["file_b", file_name_b or ""],
        ["compare_columns", ", ".join(result.columns)],
        ["total_a", summary.total_a],
        ["total_b", summary.total_b],
        ["added", summary.added_count],
        ["removed", summary.removed_count],
        ["modified", summary.modified_count],
    ]
    if summary.financial:
        metrics += [
            ["total_amount_a", summary.total_amount_a],
            ["total_amount_b", summary.total_amount_b],
            ["variance", summary.variance],
        ]
    metrics.append(["timestamp_utc", datetime.now(timezone.utc).isoformat()])
    return pd.DataFrame(metrics, columns=["Metric", "Value"])


class WorkbookExporter:
    """
    Export added, removed and modified records to separate sheets.
    """

    def __init__(self, output_dir: Optional[Path] = None,
                 sheet_names: Optional[SheetNames] = None):
        """
        Initialize exporter.

        Args:
            output_dir: Directory for generated workbooks
            sheet_names: Tab names (chosen from the result's mode if omitted)
        """
        self.output_dir = Path(output_dir or "data/reports")
        self.sheet_names = sheet_names

    def report_path(self, base_name: str) -> Path:
        """Workbook path for a base name, e.g. Audit_Report_actuals.xlsx."""
        return self.output_dir / f"Audit_Report_{Path(base_name).stem}.xlsx"

    def export(self, result: ComparisonResult, base_name: str,
               file_name_a: Optional[str] = None,
               file_name_b: Optional[str] = None,
               output_path: Optional[Path] = None) -> Path:
        """
        Write the audit workbook.

        Empty difference sheets are omitted; the Summary sheet is always written.

        Args:
            result: Comparison result
            base_name: Name the report is derived from (usually file B)
            file_name_a: Base file name for the summary sheet
            file_name_b: Comparison file name for the summary sheet
            output_path: Explicit workbook path (overrides the derived one)

        Returns:
            Path to the written workbook

        Raises:
            ExportError: If the workbook cannot be written
        """
        path = Path(output_path) if output_path else self.report_path(base_name)
        names = self.sheet_names or (
            FINANCIAL_SHEETS if result.summary.financial else GENERIC_SHEETS
        )

        sheets = [(names.summary, _summary_frame(result, file_name_a, file_name_b))]
        if result.added:
            sheets.append((names.added, _frame(result.added, result.columns)))
        if result.removed:
            sheets.append((names.removed, _frame(result.removed, result.columns)))
        if result.modified:
            sheets.append((names.modified,
                           _frame(flatten_modified(result), result.columns)))

        logger.info("exporter.writing",
                    file=str(path),
                    sheets=[name for name, _ in sheets])

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with pd.ExcelWriter(path, engine="xlsxwriter") as writer:
                for sheet_name, frame in sheets:
                    frame.to_excel(writer, sheet_name=sheet_name, index=False)
                    ws = writer.sheets[sheet_name]
                    nrows, ncols = frame.shape
                    ws.freeze_panes(1, 0)
                    ws.autofilter(0, 0, max(nrows, 1), max(ncols - 1, 0))
        except OSError as e:
            logger.error("exporter.failed", file=str(path), error=str(e))
            raise ExportError(
                f"[EXPORT ERROR] Could not write {path}: {e}. "
                f"Suggestion: close the workbook if it is open and check folder permissions."
            ) from e

        logger.info("exporter.written", file=str(path))
        return path
