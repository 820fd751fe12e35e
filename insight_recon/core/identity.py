"""
Row identity resolution.
Single responsibility: derive the key that matches a row across two datasets.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Tuple, Union

from .values import CellKind, cell_kind
from ..utils.converters import is_blank


GENERIC_ID_FIELDS: Tuple[str, ...] = ("id", "ID", "email", "Email", "code", "Code")

FINANCIAL_ID_FIELDS: Tuple[str, ...] = (
    "invoice_no", "Invoice", "PO", "reference", "id", "ID", "email", "Reference",
)

# Ordinal key policies
POSITIONAL = "positional"
SCOPED = "scoped"
ORDINAL_POLICIES = (POSITIONAL, SCOPED)


@dataclass(frozen=True)
class NaturalKey:
    """Identifier value read from the row itself."""

    kind: CellKind
    value: Any

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class OrdinalKey:
    """
    Positional stand-in for rows without an identifier.

    scope is None when ordinal keys line up by position across datasets, and
    the dataset index when they must never match the other dataset.
    """

    index: int
    scope: Optional[int] = None

    def __str__(self) -> str:
        if self.scope is None:
            return f"#{self.index}"
        return f"#{self.scope}:{self.index}"


Key = Union[NaturalKey, OrdinalKey]


class IdentityResolver:
    """
    Resolve row identity by probing candidate identifier fields in order.
    """

    def __init__(self, id_fields: Sequence[str] = GENERIC_ID_FIELDS,
                 ordinal_policy: str = POSITIONAL):
        """
        Initialize resolver.

        Args:
            id_fields: Candidate identifier columns, highest priority first
                (case-sensitive)
            ordinal_policy: "positional" or "scoped" fallback matching

        Raises:
            ValueError: If the policy is unknown or no fields are given
        """
        if ordinal_policy not in ORDINAL_POLICIES:
            raise ValueError(
                f"Unknown ordinal policy: {ordinal_policy}. "
                f"Expected one of {', '.join(ORDINAL_POLICIES)}"
            )
        self.id_fields = tuple(id_fields)
        self.ordinal_policy = ordinal_policy

    def natural_key(self, row: Mapping[str, Any]) -> Optional[NaturalKey]:
        """
        Find the row's identifier.

        Args:
            row: Row mapping

        Returns:
            Key built from the first present, non-blank candidate field, or
            None if the row has no identifier
        """
        for field_name in self.id_fields:
            value = row.get(field_name)
            if is_blank(value):
                continue
            return NaturalKey(cell_kind(value), value)
        return None

    def resolve(self, row: Mapping[str, Any], collection_index: int,
                position: int) -> Key:
        """
        Resolve the identity key of a row.

        Args:
            row: Row mapping
            collection_index: Which dataset the row belongs to (0 = A, 1 = B)
            position: Row position within its own dataset

        Returns:
            Natural key, or ordinal key when the row has no identifier
        """
        key = self.natural_key(row)
        if key is not None:
            return key
        scope = collection_index if self.ordinal_policy == SCOPED else None
        return OrdinalKey(position, scope)


def resolve_identity(row: Mapping[str, Any], collection_index: int,
                     position: int,
                     id_fields: Sequence[str] = GENERIC_ID_FIELDS,
                     ordinal_policy: str = POSITIONAL) -> Key:
    """
    Resolve the identity key of a single row.

    Args:
        row: Row mapping
        collection_index: Which dataset the row belongs to (0 = A, 1 = B)
        position: Row position within its own dataset
        id_fields: Candidate identifier columns, highest priority first
        ordinal_policy: "positional" or "scoped"

    Returns:
        Identity key
    """
    return IdentityResolver(id_fields, ordinal_policy).resolve(
        row, collection_index, position
    )
