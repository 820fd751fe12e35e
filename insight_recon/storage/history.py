"""
Comparison history.
Single responsibility: persist the most recent comparison summaries and analyses.
"""

import json
import time
import uuid
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.comparator import ComparisonResult, Summary
from ..services.analysis import AIAnalysis
from ..utils.logger import get_logger


logger = get_logger()

STORAGE_KEY = "excel_insight_history"
DEFAULT_LIMIT = 10


class HistoryError(Exception):
    """Exception raised when history cannot be written."""
    pass


@dataclass
class HistoryItem:
    """One saved comparison: file names, summary counts and AI analysis."""

    id: str
    timestamp: int  # epoch milliseconds
    file_name_a: str
    file_name_b: str
    summary: Dict[str, Any]
    analysis: Dict[str, Any]

    @classmethod
    def create(cls, file_name_a: str, file_name_b: str,
               result: ComparisonResult, analysis: AIAnalysis) -> "HistoryItem":
        return cls(
            id=str(uuid.uuid4()),
            timestamp=int(time.time() * 1000),
            file_name_a=file_name_a,
            file_name_b=file_name_b,
            summary=result.summary.to_dict(),
            analysis=analysis.to_dict(),
        )

    def to_result(self) -> ComparisonResult:
        """Summary-only result; row-level detail is not stored."""
        return ComparisonResult.from_summary(Summary.from_dict(self.summary))

    def to_analysis(self) -> AIAnalysis:
        return AIAnalysis.from_dict(self.analysis)


class HistoryStore:
    """
    Newest-first history in a single JSON storage slot, capped at a fixed size.
    """

    def __init__(self, history_dir: Optional[Path] = None,
                 limit: int = DEFAULT_LIMIT,
                 storage_key: str = STORAGE_KEY):
        """
        Initialize history store.

        Args:
            history_dir: Directory holding the storage slot
            limit: Number of entries retained
            storage_key: Slot name (file stem)
        """
        self.history_dir = Path(history_dir or "data/history")
        self.limit = limit
        self.path = self.history_dir / f"{storage_key}.json"

    def load(self) -> List[HistoryItem]:
        """
        Load saved entries.

        A missing slot is an empty history. An unreadable slot is logged and
        treated as empty.

        Returns:
            Entries, newest first
        """
        if not self.path.exists():
            return []

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            return [HistoryItem(**entry) for entry in raw][: self.limit]
        except (json.JSONDecodeError, TypeError, OSError) as e:
            logger.error("history.load_failed", file=str(self.path), error=str(e))
            return []

    def _write(self, items: List[HistoryItem]) -> None:
        try:
            self.history_dir.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump([asdict(item) for item in items], f, indent=2, default=str)
        except OSError as e:
            logger.error("history.save_failed", file=str(self.path), error=str(e))
            raise HistoryError(
                f"[HISTORY ERROR] Could not write {self.path}: {e}. "
                f"Suggestion: check folder permissions or change output.history_dir."
            ) from e

    def add(self, item: HistoryItem) -> List[HistoryItem]:
        """
        Prepend an entry and drop the oldest beyond the limit.

        Args:
            item: Entry to save

        Returns:
            Updated entries, newest first
        """
        items = [item] + self.load()
        items = items[: self.limit]
        self._write(items)

        logger.info("history.saved", id=item.id, entries=len(items))
        return items

    def get(self, item_id: str) -> Optional[HistoryItem]:
        """
        Find an entry by id or by an unambiguous id prefix.

        Args:
            item_id: Full id or prefix

        Returns:
            The entry, or None if nothing or more than one entry matches
        """
        items = self.load()
        for item in items:
            if item.id == item_id:
                return item
        matches = [item for item in items if item.id.startswith(item_id)]
        return matches[0] if len(matches) == 1 else None

    def delete(self, item_id: str) -> bool:
        """
        Remove an entry.

        Args:
            item_id: Full id or unambiguous prefix

        Returns:
            True if an entry was removed
        """
        target = self.get(item_id)
        if target is None:
            return False
        remaining = [item for item in self.load() if item.id != target.id]
        self._write(remaining)
        logger.info("history.deleted", id=target.id)
        return True

    def clear(self) -> None:
        self._write([])
        logger.info("history.cleared")
