"""Reconciliation engine."""

from .values import MISSING, CellKind, cell_kind, values_equal, format_cell
from .identity import (
    GENERIC_ID_FIELDS,
    FINANCIAL_ID_FIELDS,
    POSITIONAL,
    SCOPED,
    NaturalKey,
    OrdinalKey,
    IdentityResolver,
    resolve_identity,
)
from .amounts import AMOUNT_KEYWORDS, AmountExtractor
from .comparator import (
    Change,
    ModifiedRecord,
    MatchedPair,
    Partition,
    Summary,
    ComparisonResult,
    DatasetComparator,
    partition,
    diff_pair,
    summarize,
    compare_datasets,
)

__all__ = [
    "MISSING",
    "CellKind",
    "cell_kind",
    "values_equal",
    "format_cell",
    "GENERIC_ID_FIELDS",
    "FINANCIAL_ID_FIELDS",
    "POSITIONAL",
    "SCOPED",
    "NaturalKey",
    "OrdinalKey",
    "IdentityResolver",
    "resolve_identity",
    "AMOUNT_KEYWORDS",
    "AmountExtractor",
    "Change",
    "ModifiedRecord",
    "MatchedPair",
    "Partition",
    "Summary",
    "ComparisonResult",
    "DatasetComparator",
    "partition",
    "diff_pair",
    "summarize",
    "compare_datasets",
]
