"""
Unit tests for monetary value extraction and amount parsing.
"""

import numpy as np
import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from insight_recon.core.amounts import AMOUNT_KEYWORDS, AmountExtractor
from insight_recon.utils.converters import infer_scalar, is_blank, parse_amount


class TestParseAmount:
    """Test cases for finite-number parsing of cells."""

    @pytest.mark.parametrize("value,expected", [
        (12, 12.0),
        (12.5, 12.5),
        ("12.5", 12.5),
        ("$1,234.56", 1234.56),
        ("(100)", -100.0),
        ("  -3 ", -3.0),
    ])
    def test_parses(self, value, expected):
        assert parse_amount(value) == expected

    @pytest.mark.parametrize("value", [
        None, True, False, "", "abc", "12abc", "inf", "nan", float("inf"), float("nan"), [1],
    ])
    def test_rejects(self, value):
        assert parse_amount(value) is None

    def test_numpy_scalars(self):
        assert parse_amount(np.int64(42)) == 42.0
        assert parse_amount(np.float32(2.5)) == 2.5
        assert AmountExtractor().row_amount({"amount": np.int64(7)}) == 7

    @pytest.mark.parametrize("text,expected", [
        ("12", 12),
        ("-3", -3),
        ("0.5", 0.5),
        (".5", 0.5),
        ("1e3", 1000.0),
        ("007", 7),
        ("12abc", "12abc"),
        ("1_000", "1_000"),
        ("inf", "inf"),
        ("NA", "NA"),
    ])
    def test_infer_scalar(self, text, expected):
        value = infer_scalar(text)
        assert value == expected
        assert type(value) is type(expected)

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank("  ")
        assert is_blank(float("nan"))
        assert not is_blank(0)
        assert not is_blank(False)


class TestAmountExtractor:
    """Test cases for priority-ordered column probing."""

    def setup_method(self):
        self.extractor = AmountExtractor()

    def test_keyword_priority_beats_column_order(self):
        row = {"Total": 999, "Invoice Amount": 120}
        assert self.extractor.row_amount(row) == 120

    def test_match_is_case_insensitive_substring(self):
        assert self.extractor.row_amount({"NET_AMOUNT_USD": "50"}) == 50
        assert self.extractor.row_amount({"Grand Total": 7}) == 7

    def test_unparseable_value_falls_through(self):
        row = {"amount": "pending", "total": "20", "balance": 5}
        assert self.extractor.row_amount(row) == 20

    def test_second_column_for_same_keyword(self):
        row = {"amount_note": "see memo", "amount": 15}
        assert self.extractor.row_amount(row) == 15

    def test_no_amount_column_contributes_zero(self):
        assert self.extractor.row_amount({"name": "x", "qty": 3}) == 0

    def test_boolean_is_not_an_amount(self):
        assert self.extractor.row_amount({"paid": True, "sum": 4}) == 4

    def test_total_over_rows(self):
        rows = [{"amount": 10}, {"amount": "$2.50"}, {"other": 1}]
        assert self.extractor.total(rows) == 12.5

    def test_custom_keywords(self):
        extractor = AmountExtractor(["cost"])
        assert extractor.row_amount({"amount": 1, "unit_cost": 3}) == 3

    def test_default_keyword_order(self):
        assert AMOUNT_KEYWORDS[:7] == (
            "amount", "total", "balance", "price", "paid", "invoice_amount", "sum",
        )
