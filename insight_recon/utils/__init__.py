"""Utility functions and helpers."""

from .logger import get_logger, StructuredLogger
from .converters import parse_amount, is_blank, infer_scalar
from .text_normalizer import normalize_cell_text, normalize_header

__all__ = [
    "get_logger",
    "StructuredLogger",
    "parse_amount",
    "is_blank",
    "infer_scalar",
    "normalize_cell_text",
    "normalize_header",
]
