"""
Filtered pagination over the registry.

A single ascending pass ranks every matching record. A match lands on the
requested page iff its 1-based rank r satisfies

    (page - 1) * page_size < r <= page * page_size

and the total counts every match regardless of the window. Out-of-range
paging never raises; it yields an empty page with the correct total.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Tuple

from case_registry.domain.models import (
    CaseId,
    CasePage,
    CaseRecord,
    Category,
    FieldFilter,
    IdentifiedCase,
    Status,
)


@dataclass(frozen=True)
class CaseQuery:
    page: int = 1
    page_size: int = 10
    keyword: str = ""
    category: FieldFilter[Category] = field(default_factory=FieldFilter.any)
    status: FieldFilter[Status] = field(default_factory=FieldFilter.any)

    def __post_init__(self) -> None:
        if self.page < 1:
            object.__setattr__(self, "page", 1)

    @property
    def window(self) -> Tuple[int, int]:
        """Exclusive lower and inclusive upper rank bounds of the page."""
        return (self.page - 1) * self.page_size, self.page * self.page_size

    def matches(self, record: CaseRecord) -> bool:
        if self.keyword and self.keyword not in record.title and self.keyword not in record.description:
            return False
        return self.category.matches(record.category) and self.status.matches(record.status)


def paginate(rows: Iterable[Tuple[CaseId, CaseRecord]], query: CaseQuery) -> CasePage:
    """
    Apply `query` to `rows`, which must arrive in ascending identifier order.
    """
    lower, upper = query.window
    total = 0
    items: List[IdentifiedCase] = []
    for case_id, record in rows:
        if not query.matches(record):
            continue
        total += 1
        if lower < total <= upper:
            items.append(IdentifiedCase(id=case_id, record=record))
    return CasePage(items=items, total=total, page=query.page, page_size=query.page_size)


__all__ = ["CaseQuery", "paginate"]
