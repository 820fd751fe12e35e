"""
Data type conversion utilities.
Single responsibility: convert spreadsheet cell values safely.
"""

import math
import numbers
import re
from typing import Any, Optional, Union


_INTEGER = re.compile(r"[+-]?\d+")
_DECIMAL = re.compile(r"[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?")


def parse_amount(val: Any) -> Optional[float]:
    """
    Convert a monetary cell value to a finite float.
    Handles $, commas, surrounding spaces and parentheses for negatives.

    Args:
        val: Value to convert (string, int, float, bool or None)

    Returns:
        Finite float value or None if the value is not a number

    Examples:
        >>> parse_amount("$1,234.56")
        1234.56
        >>> parse_amount("(100)")
        -100.0
        >>> parse_amount(True) is None
        True
    """
    if val is None or isinstance(val, bool):
        return None

    if isinstance(val, numbers.Real):
        num = float(val)
        return num if math.isfinite(num) else None

    if not isinstance(val, str):
        return None

    val = val.strip()
    if not val:
        return None

    # Check for negative format with parentheses
    is_negative = val.startswith("(") and val.endswith(")")
    val = val.strip("() ")

    # Remove currency symbols and thousands separators
    val = val.replace("$", "").replace(",", "").strip()

    try:
        num = float(val)
    except (ValueError, TypeError):
        return None

    if not math.isfinite(num):
        return None
    return -num if is_negative else num


def is_blank(val: Any) -> bool:
    """
    Check whether a cell value counts as empty.

    None, NaN, and empty or whitespace-only strings are blank. Zero and
    False are values.

    Args:
        val: Cell value

    Returns:
        True if the value is blank
    """
    if val is None:
        return True
    if isinstance(val, float) and math.isnan(val):
        return True
    if isinstance(val, str) and not val.strip():
        return True
    return False


def infer_scalar(text: str) -> Union[int, float, str]:
    """
    Type a single text cell: integer, then decimal, else the text itself.

    Only plain numeric literals are converted; "1_000", "nan" and "inf"
    stay text.

    Args:
        text: Stripped cell text

    Returns:
        int, finite float, or the original text

    Examples:
        >>> infer_scalar("12")
        12
        >>> infer_scalar("2.50")
        2.5
        >>> infer_scalar("n/a")
        'n/a'
    """
    if _INTEGER.fullmatch(text):
        return int(text)
    if _DECIMAL.fullmatch(text):
        num = float(text)
        if math.isfinite(num):
            return num
    return text
