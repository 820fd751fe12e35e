"""
Text normalization utilities for handling encoding and character issues.
Ensures spreadsheet text compares consistently regardless of export quirks.
"""

import re
import unicodedata
from typing import Any


_ZERO_WIDTH = re.compile("[\u200b-\u200d\u2060\ufeff\u00ad]")
_SPACE_VARIANTS = re.compile("[\u00a0\u202f\u2009\u200a]")


def normalize_cell_text(value: Any) -> Any:
    """
    Normalize a text cell for comparison.

    This function handles:
    - Unicode normalization (é vs e + ́)
    - Non-breaking and thin spaces
    - Invisible zero-width characters and soft hyphens
    - Windows line endings
    - Leading/trailing whitespace

    Inner whitespace runs are kept; a changed double space is a real change.
    Non-string values are returned unchanged.

    Args:
        value: Cell value

    Returns:
        Normalized text, or the original value if it is not a string
    """
    if not isinstance(value, str):
        return value

    text = unicodedata.normalize("NFC", value)
    text = _SPACE_VARIANTS.sub(" ", text)
    text = _ZERO_WIDTH.sub("", text)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return text.strip()


def normalize_header(header: Any) -> str:
    """
    Clean a header cell into a column name.

    Headers keep their case; identifier probing is case-sensitive.

    Args:
        header: Raw header value

    Returns:
        Column name string
    """
    text = normalize_cell_text(str(header))
    return re.sub(r"\s+", " ", text)
