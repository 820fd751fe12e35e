"""Local persistence of recent results."""

from .history import HistoryStore, HistoryItem, HistoryError, STORAGE_KEY

__all__ = ["HistoryStore", "HistoryItem", "HistoryError", "STORAGE_KEY"]
