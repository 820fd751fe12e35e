"""
Monetary value extraction for financial reconciliation.
Single responsibility: find the amount a row contributes to its dataset total.
"""

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Tuple

from ..utils.converters import parse_amount


AMOUNT_KEYWORDS: Tuple[str, ...] = (
    "amount", "total", "balance", "price", "paid", "invoice_amount", "sum", "amt",
)


@dataclass(frozen=True)
class AmountProbe:
    """A column-name predicate paired with a value extractor."""

    keyword: str
    matches: Callable[[str], bool]
    extract: Callable[[Any], Optional[float]] = parse_amount


def build_probes(keywords: Sequence[str] = AMOUNT_KEYWORDS) -> Tuple[AmountProbe, ...]:
    """
    Build case-insensitive substring probes in priority order.

    Args:
        keywords: Column-name substrings, highest priority first

    Returns:
        Probes
    """
    probes = []
    for keyword in keywords:
        needle = keyword.lower()
        probes.append(AmountProbe(
            keyword=keyword,
            matches=lambda column, needle=needle: needle in str(column).lower(),
        ))
    return tuple(probes)


class AmountExtractor:
    """
    Extract the monetary value of a row.

    Probes are evaluated in priority order; within a probe, columns are
    tried in row order. The first value that parses as a finite number wins.
    Rows with no parseable amount contribute 0.
    """

    def __init__(self, keywords: Sequence[str] = AMOUNT_KEYWORDS):
        self.probes = build_probes(keywords)

    def row_amount(self, row: Mapping[str, Any]) -> float:
        for probe in self.probes:
            for column, value in row.items():
                if not probe.matches(column):
                    continue
                amount = probe.extract(value)
                if amount is not None:
                    return amount
        return 0.0

    def total(self, rows: Iterable[Mapping[str, Any]]) -> float:
        return sum((self.row_amount(row) for row in rows), 0.0)
