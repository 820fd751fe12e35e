"""
Unit tests for identity resolution and the cell value model.
"""

import pytest
from pathlib import Path
import sys

# Add project root to path for imports
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from insight_recon.core.identity import (
    FINANCIAL_ID_FIELDS,
    GENERIC_ID_FIELDS,
    POSITIONAL,
    SCOPED,
    IdentityResolver,
    NaturalKey,
    OrdinalKey,
    resolve_identity,
)
from insight_recon.core.values import MISSING, CellKind, cell_kind, format_cell, values_equal


class TestIdentityResolver:
    """Test cases for candidate-field probing."""

    def test_first_present_field_wins(self):
        row = {"email": "a@example.com", "id": 42}
        assert resolve_identity(row, 0, 0) == NaturalKey(CellKind.NUMBER, 42)

    def test_probing_is_case_sensitive(self):
        resolver = IdentityResolver(["Id"])
        assert resolver.natural_key({"id": 1}) is None
        assert resolver.natural_key({"Id": 1}) == NaturalKey(CellKind.NUMBER, 1)

    @pytest.mark.parametrize("blank", [None, "", "   ", float("nan")])
    def test_blank_identifiers_are_skipped(self, blank):
        row = {"id": blank, "email": "x@example.com"}
        assert resolve_identity(row, 0, 0) == NaturalKey(CellKind.STRING, "x@example.com")

    def test_zero_and_false_are_identifiers(self):
        assert resolve_identity({"id": 0}, 0, 5) == NaturalKey(CellKind.NUMBER, 0)
        assert resolve_identity({"id": False}, 0, 5) == NaturalKey(CellKind.BOOLEAN, False)

    def test_financial_priority(self):
        row = {"Reference": "R-9", "id": 3, "PO": "PO-77", "invoice_no": "INV-1"}
        resolver = IdentityResolver(FINANCIAL_ID_FIELDS)
        assert resolver.resolve(row, 0, 0) == NaturalKey(CellKind.STRING, "INV-1")

        del row["invoice_no"]
        assert resolver.resolve(row, 0, 0) == NaturalKey(CellKind.STRING, "PO-77")

    def test_generic_fields_order(self):
        assert GENERIC_ID_FIELDS == ("id", "ID", "email", "Email", "code", "Code")
        assert resolve_identity({"Code": "c", "Email": "e"}, 0, 0).value == "e"

    def test_positional_fallback_lines_up_across_collections(self):
        key_a = resolve_identity({"name": "x"}, 0, 3, ordinal_policy=POSITIONAL)
        key_b = resolve_identity({"name": "y"}, 1, 3, ordinal_policy=POSITIONAL)
        assert key_a == key_b == OrdinalKey(3)

    def test_scoped_fallback_is_distinct_per_collection(self):
        key_a = resolve_identity({"name": "x"}, 0, 3, ordinal_policy=SCOPED)
        key_b = resolve_identity({"name": "x"}, 1, 3, ordinal_policy=SCOPED)
        assert key_a != key_b

    def test_resolution_is_deterministic(self):
        row = {"ID": "abc", "name": "n"}
        assert resolve_identity(row, 0, 1) == resolve_identity(dict(row), 0, 1)

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError, match="ordinal policy"):
            IdentityResolver(ordinal_policy="fuzzy")

    def test_key_display(self):
        assert str(NaturalKey(CellKind.STRING, "INV-1")) == "INV-1"
        assert str(OrdinalKey(2)) == "#2"
        assert str(OrdinalKey(2, 1)) == "#1:2"


class TestCellValues:
    """Test cases for the closed cell variant and strict equality."""

    @pytest.mark.parametrize("value,kind", [
        ("x", CellKind.STRING),
        (3, CellKind.NUMBER),
        (2.5, CellKind.NUMBER),
        (True, CellKind.BOOLEAN),
        (None, CellKind.EMPTY),
        (MISSING, CellKind.ABSENT),
    ])
    def test_cell_kind(self, value, kind):
        assert cell_kind(value) is kind

    def test_unsupported_type_raises(self):
        with pytest.raises(TypeError, match="Unsupported cell value type"):
            cell_kind(object())

    @pytest.mark.parametrize("left,right,expected", [
        ("10", 10, False),
        (1, 1.0, True),
        (True, 1, False),
        (False, 0, False),
        (None, MISSING, False),
        ("", MISSING, False),
        ("", None, False),
        (None, None, True),
        (MISSING, MISSING, True),
        ("a", "a", True),
        ("a", "A", False),
    ])
    def test_values_equal(self, left, right, expected):
        assert values_equal(left, right) is expected

    def test_missing_is_a_singleton(self):
        assert type(MISSING)() is MISSING
        assert repr(MISSING) == "MISSING"
        assert not MISSING

    def test_format_cell(self):
        assert format_cell(MISSING) == "(missing)"
        assert format_cell(None) == "(empty)"
        assert format_cell(120.0) == "120"
        assert format_cell(120.5) == "120.5"
        assert format_cell("paid") == "paid"
