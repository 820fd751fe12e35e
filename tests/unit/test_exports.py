"""
Unit tests for the audit workbook export.
Workbooks are written to tmp_path and read back with openpyxl.
"""

import pytest
import pandas as pd
from pathlib import Path
from unittest.mock import patch
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from insight_recon.adapters.excel_exporter import (
    CHANGE_LOG_COLUMN,
    FINANCIAL_SHEETS,
    GENERIC_SHEETS,
    ExportError,
    WorkbookExporter,
    flatten_modified,
)
from insight_recon.core.comparator import compare_datasets


def sheet_names(path):
    with pd.ExcelFile(path, engine="openpyxl") as xf:
        return list(xf.sheet_names)


class TestWorkbookExporter:
    """Test cases for sheet layout and content."""

    def setup_method(self):
        self.rows_a = [
            {"invoice_no": "INV-1", "amount": 100, "status": "open"},
            {"invoice_no": "INV-2", "amount": 50, "status": "open"},
        ]
        self.rows_b = [
            {"invoice_no": "INV-1", "amount": 120, "status": "paid"},
            {"invoice_no": "INV-3", "amount": 30, "status": "open"},
        ]
        self.columns = ["invoice_no", "amount", "status"]

    def test_three_difference_sheets_in_financial_mode(self, tmp_path):
        result = compare_datasets(self.rows_a, self.rows_b, self.columns, financial=True)
        exporter = WorkbookExporter(tmp_path)

        path = exporter.export(result, "actuals.xlsx", "budget.xlsx", "actuals.xlsx")

        assert path == tmp_path / "Audit_Report_actuals.xlsx"
        assert sheet_names(path) == [
            "Summary",
            FINANCIAL_SHEETS.added,
            FINANCIAL_SHEETS.removed,
            FINANCIAL_SHEETS.modified,
        ]

        with pd.ExcelFile(path, engine="openpyxl") as xf:
            added = xf.parse(FINANCIAL_SHEETS.added)
            removed = xf.parse(FINANCIAL_SHEETS.removed)
            modified = xf.parse(FINANCIAL_SHEETS.modified)
            summary = xf.parse("Summary")

        assert added["invoice_no"].tolist() == ["INV-3"]
        assert removed["invoice_no"].tolist() == ["INV-2"]
        assert modified["invoice_no"].tolist() == ["INV-1"]
        assert modified[CHANGE_LOG_COLUMN].tolist() == [
            "amount: 100 -> 120; status: open -> paid"
        ]

        metrics = dict(zip(summary.Metric.astype(str), summary.Value))
        assert int(metrics["added"]) == 1
        assert int(metrics["removed"]) == 1
        assert int(metrics["modified"]) == 1
        assert float(metrics["variance"]) == 0
        assert metrics["file_a"] == "budget.xlsx"

    def test_empty_sheets_are_omitted(self, tmp_path):
        rows_b = [dict(self.rows_a[0], amount=999), dict(self.rows_a[1])]
        result = compare_datasets(self.rows_a, rows_b, self.columns)

        path = WorkbookExporter(tmp_path).export(result, "b.csv")

        assert sheet_names(path) == ["Summary", GENERIC_SHEETS.modified]

    def test_no_differences_still_writes_summary(self, tmp_path):
        result = compare_datasets(self.rows_a, self.rows_a, self.columns)

        path = WorkbookExporter(tmp_path).export(result, "same.csv")

        assert sheet_names(path) == ["Summary"]

    def test_explicit_output_path(self, tmp_path):
        result = compare_datasets(self.rows_a, self.rows_b, self.columns)
        target = tmp_path / "nested" / "report.xlsx"

        path = WorkbookExporter(tmp_path).export(result, "ignored", output_path=target)

        assert path == target
        assert target.exists()

    def test_extra_columns_are_appended(self, tmp_path):
        rows_b = self.rows_b + [{"invoice_no": "INV-9", "memo": "late"}]
        result = compare_datasets(self.rows_a, rows_b, self.columns)

        path = WorkbookExporter(tmp_path).export(result, "b")

        with pd.ExcelFile(path, engine="openpyxl") as xf:
            added = xf.parse(GENERIC_SHEETS.added)
        assert list(added.columns) == ["invoice_no", "amount", "status", "memo"]

    def test_write_failure_raises_export_error(self, tmp_path):
        result = compare_datasets(self.rows_a, self.rows_b, self.columns)
        exporter = WorkbookExporter(tmp_path)

        with patch("insight_recon.adapters.excel_exporter.pd.ExcelWriter",
                   side_effect=PermissionError("locked")):
            with pytest.raises(ExportError, match="locked"):
                exporter.export(result, "b")

    def test_export_does_not_mutate_result(self, tmp_path):
        result = compare_datasets(self.rows_a, self.rows_b, self.columns)
        before = [dict(r.row) for r in result.modified]

        WorkbookExporter(tmp_path).export(result, "b")

        assert [dict(r.row) for r in result.modified] == before
        assert CHANGE_LOG_COLUMN not in result.modified[0].row


class TestFlattenModified:
    """Test cases for change-log flattening."""

    def test_flatten_adds_log_column(self):
        result = compare_datasets([{"id": 1, "v": "a"}], [{"id": 1, "v": "b"}], ["id", "v"])

        assert flatten_modified(result) == [
            {"id": 1, "v": "b", CHANGE_LOG_COLUMN: "v: a -> b"}
        ]
