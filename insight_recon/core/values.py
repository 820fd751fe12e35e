"""
Cell value model.
Single responsibility: classify loosely-typed cell values and compare them strictly.
"""

import numbers
from enum import Enum
from typing import Any


class _Missing:
    """Sentinel for a column absent from a row."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Missing, ())


MISSING = _Missing()


class CellKind(Enum):
    """Closed set of cell value variants."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    EMPTY = "empty"
    ABSENT = "absent"


def cell_kind(value: Any) -> CellKind:
    """
    Classify a cell value.

    bool is checked before numbers because bool subclasses int.

    Args:
        value: Cell value, or MISSING for an absent column

    Returns:
        The value's variant

    Raises:
        TypeError: If the value is not a spreadsheet scalar
    """
    if value is MISSING:
        return CellKind.ABSENT
    if value is None:
        return CellKind.EMPTY
    if isinstance(value, bool):
        return CellKind.BOOLEAN
    if isinstance(value, numbers.Number):
        return CellKind.NUMBER
    if isinstance(value, str):
        return CellKind.STRING
    raise TypeError(
        f"Unsupported cell value type: {type(value).__name__}. "
        f"Cells must be str, int, float, bool or None."
    )


def values_equal(left: Any, right: Any) -> bool:
    """
    Strict equality between two cell values.

    Values are equal only when they share a variant and a value: "10" and 10
    differ, True and 1 differ, 1 and 1.0 are equal, an absent cell differs
    from None and from "". NaN never equals anything.

    Args:
        left: Value from dataset A
        right: Value from dataset B

    Returns:
        True if the values are the same
    """
    kind = cell_kind(left)
    if kind is not cell_kind(right):
        return False
    if kind in (CellKind.EMPTY, CellKind.ABSENT):
        return True
    return left == right


def cell_at(row, column: str) -> Any:
    """Read a column from a row, MISSING when the column is absent."""
    return row.get(column, MISSING)


def format_cell(value: Any) -> str:
    """
    Render a cell value for change logs and prompts.

    Args:
        value: Cell value

    Returns:
        Display text
    """
    if value is MISSING:
        return "(missing)"
    if value is None:
        return "(empty)"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
