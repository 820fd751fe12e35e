"""
Core dataset reconciliation logic.
Single responsibility: compare two row collections and classify every record.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .amounts import AMOUNT_KEYWORDS, AmountExtractor
from .identity import (
    FINANCIAL_ID_FIELDS,
    GENERIC_ID_FIELDS,
    POSITIONAL,
    IdentityResolver,
    Key,
)
from .values import MISSING, cell_at, format_cell, values_equal
from ..utils.logger import get_logger


logger = get_logger()

# Variances within half a cent count as balanced
BALANCE_TOLERANCE = 0.005

Row = Mapping[str, Any]


@dataclass(frozen=True)
class Change:
    """A single field whose value differs between the two matched rows."""

    column: str
    from_value: Any
    to_value: Any

    def describe(self) -> str:
        return f"{self.column}: {format_cell(self.from_value)} -> {format_cell(self.to_value)}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "column": self.column,
            "from": None if self.from_value is MISSING else self.from_value,
            "to": None if self.to_value is MISSING else self.to_value,
        }


@dataclass(frozen=True)
class ModifiedRecord:
    """A matched record with at least one changed field; row is the B row."""

    row: Row
    changes: Tuple[Change, ...]
    key: Optional[Key] = None

    def change_log(self) -> str:
        """Render the change list as one human-readable line."""
        return "; ".join(change.describe() for change in self.changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": dict(self.row),
            "changes": [change.to_dict() for change in self.changes],
        }


@dataclass(frozen=True)
class MatchedPair:
    """Rows from A and B that share an identity key."""

    key: Key
    row_a: Row
    row_b: Row


@dataclass(frozen=True)
class Partition:
    """Set partition of two datasets by identity key."""

    added: Tuple[Row, ...]
    removed: Tuple[Row, ...]
    matched_pairs: Tuple[MatchedPair, ...]
    duplicates_a: int = 0
    duplicates_b: int = 0


@dataclass(frozen=True)
class Summary:
    """Counts and, in financial mode, monetary aggregates."""

    total_a: int = 0
    total_b: int = 0
    added_count: int = 0
    removed_count: int = 0
    modified_count: int = 0
    total_amount_a: Optional[float] = None
    total_amount_b: Optional[float] = None
    variance: Optional[float] = None

    @property
    def financial(self) -> bool:
        return self.variance is not None

    @property
    def is_balanced(self) -> Optional[bool]:
        """Variance within half a cent means balanced; None outside financial mode."""
        if self.variance is None:
            return None
        return math.isclose(self.variance, 0.0, abs_tol=BALANCE_TOLERANCE)

    @property
    def has_differences(self) -> bool:
        return bool(self.added_count or self.removed_count or self.modified_count)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "total_a": self.total_a,
            "total_b": self.total_b,
            "added_count": self.added_count,
            "removed_count": self.removed_count,
            "modified_count": self.modified_count,
        }
        if self.financial:
            data["total_amount_a"] = self.total_amount_a
            data["total_amount_b"] = self.total_amount_b
            data["variance"] = self.variance
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Summary":
        return cls(
            total_a=int(data.get("total_a", 0)),
            total_b=int(data.get("total_b", 0)),
            added_count=int(data.get("added_count", 0)),
            removed_count=int(data.get("removed_count", 0)),
            modified_count=int(data.get("modified_count", 0)),
            total_amount_a=data.get("total_amount_a"),
            total_amount_b=data.get("total_amount_b"),
            variance=data.get("variance"),
        )


@dataclass(frozen=True)
class ComparisonResult:
    """Immutable snapshot of one comparison."""

    added: Tuple[Row, ...] = ()
    removed: Tuple[Row, ...] = ()
    modified: Tuple[ModifiedRecord, ...] = ()
    columns: Tuple[str, ...] = ()
    summary: Summary = field(default_factory=Summary)

    @classmethod
    def from_summary(cls, summary: Summary) -> "ComparisonResult":
        """Summary-only result, used when re-opening a saved history entry."""
        return cls(summary=summary)


def partition(rows_a: Sequence[Row], rows_b: Sequence[Row],
              resolver: Optional[IdentityResolver] = None) -> Partition:
    """
    Partition two datasets into added, removed and matched records.

    Each dataset is indexed by identity key. A later row with an already seen
    key replaces the earlier row but keeps its original position in the
    index (last write wins); the number of such overwrites is reported.

    Args:
        rows_a: Base dataset rows
        rows_b: Comparison dataset rows
        resolver: Identity resolver (generic fields, positional fallback by default)

    Returns:
        Partition in index insertion order
    """
    resolver = resolver or IdentityResolver()

    index_a, duplicates_a = _build_index(rows_a, 0, resolver)
    index_b, duplicates_b = _build_index(rows_b, 1, resolver)

    if duplicates_a or duplicates_b:
        logger.warning("comparator.duplicate_keys",
                       duplicates_a=duplicates_a,
                       duplicates_b=duplicates_b,
                       message="Later rows replaced earlier rows with the same identifier")

    added: List[Row] = []
    matched: List[MatchedPair] = []
    for key, row_b in index_b.items():
        row_a = index_a.get(key)
        if row_a is None:
            added.append(row_b)
        else:
            matched.append(MatchedPair(key, row_a, row_b))

    removed = [row_a for key, row_a in index_a.items() if key not in index_b]

    return Partition(
        added=tuple(added),
        removed=tuple(removed),
        matched_pairs=tuple(matched),
        duplicates_a=duplicates_a,
        duplicates_b=duplicates_b,
    )


def _build_index(rows: Sequence[Row], collection_index: int,
                 resolver: IdentityResolver) -> Tuple[Dict[Key, Row], int]:
    index: Dict[Key, Row] = {}
    duplicates = 0
    for position, row in enumerate(rows):
        key = resolver.resolve(row, collection_index, position)
        if key in index:
            duplicates += 1
        index[key] = row
    return index, duplicates


def diff_pair(row_a: Row, row_b: Row, columns: Sequence[str]) -> List[Change]:
    """
    List the fields that differ between two matched rows.

    Only the given columns are compared, in the given order. Absent columns
    are reported as MISSING.

    Args:
        row_a: Row from dataset A
        row_b: Row from dataset B
        columns: Comparison surface

    Returns:
        Changes, empty when the rows are the same on every column
    """
    changes = []
    for column in columns:
        before = cell_at(row_a, column)
        after = cell_at(row_b, column)
        if not values_equal(before, after):
            changes.append(Change(column, before, after))
    return changes


def summarize(rows_a: Sequence[Row], rows_b: Sequence[Row],
              added: Sequence[Row], removed: Sequence[Row],
              modified: Sequence[ModifiedRecord], financial: bool = False,
              extractor: Optional[AmountExtractor] = None) -> Summary:
    """
    Compute counts and, in financial mode, amount totals and variance.

    Args:
        rows_a: Base dataset rows
        rows_b: Comparison dataset rows
        added: Rows only in B
        removed: Rows only in A
        modified: Matched records with changes
        financial: Whether to compute monetary aggregates
        extractor: Amount extractor (default keyword list if omitted)

    Returns:
        Summary
    """
    counts = dict(
        total_a=len(rows_a),
        total_b=len(rows_b),
        added_count=len(added),
        removed_count=len(removed),
        modified_count=len(modified),
    )
    if not financial:
        return Summary(**counts)

    extractor = extractor or AmountExtractor()
    total_amount_a = extractor.total(rows_a)
    total_amount_b = extractor.total(rows_b)
    return Summary(
        total_amount_a=total_amount_a,
        total_amount_b=total_amount_b,
        variance=total_amount_b - total_amount_a,
        **counts,
    )


class DatasetComparator:
    """
    Compare two in-memory datasets and classify every record.
    """

    def __init__(self, financial: bool = False,
                 id_fields: Optional[Sequence[str]] = None,
                 ordinal_policy: str = POSITIONAL,
                 amount_keywords: Sequence[str] = AMOUNT_KEYWORDS):
        """
        Initialize comparator.

        Args:
            financial: Enable monetary aggregates and financial identifiers
            id_fields: Identifier columns overriding the mode defaults
            ordinal_policy: "positional" or "scoped" fallback key matching
            amount_keywords: Column-name substrings for amount extraction
        """
        self.financial = financial
        if id_fields is None:
            id_fields = FINANCIAL_ID_FIELDS if financial else GENERIC_ID_FIELDS
        self.resolver = IdentityResolver(id_fields, ordinal_policy)
        self.extractor = AmountExtractor(amount_keywords)

    def compare(self, rows_a: Sequence[Row], rows_b: Sequence[Row],
                columns: Sequence[str]) -> ComparisonResult:
        """
        Compare two datasets.

        Args:
            rows_a: Base dataset rows
            rows_b: Comparison dataset rows
            columns: Columns to compare, usually the header row of A

        Returns:
            Comparison result
        """
        logger.info("comparator.starting",
                    rows_a=len(rows_a),
                    rows_b=len(rows_b),
                    columns=len(columns),
                    financial=self.financial)

        split = partition(rows_a, rows_b, self.resolver)

        modified = []
        for pair in split.matched_pairs:
            changes = diff_pair(pair.row_a, pair.row_b, columns)
            if changes:
                modified.append(ModifiedRecord(pair.row_b, tuple(changes), pair.key))

        summary = summarize(rows_a, rows_b, split.added, split.removed,
                            modified, self.financial, self.extractor)

        logger.info("comparator.completed", **summary.to_dict())

        return ComparisonResult(
            added=split.added,
            removed=split.removed,
            modified=tuple(modified),
            columns=tuple(columns),
            summary=summary,
        )


def compare_datasets(rows_a: Sequence[Row], rows_b: Sequence[Row],
                     columns: Sequence[str], financial: bool = False,
                     **options) -> ComparisonResult:
    """
    Compare two datasets with a one-off comparator.

    Args:
        rows_a: Base dataset rows
        rows_b: Comparison dataset rows
        columns: Columns to compare
        financial: Enable monetary aggregates and financial identifiers
        **options: Extra DatasetComparator options

    Returns:
        Comparison result
    """
    return DatasetComparator(financial=financial, **options).compare(rows_a, rows_b, columns)
