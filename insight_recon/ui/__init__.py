"""User interface: Rich terminal rendering."""

from .report import ResultRenderer

__all__ = ["ResultRenderer"]
