"""
Identifier allocation for new cases.

Identifiers start at 1 and grow strictly. The next identifier is derived from
the store's high-water mark, the largest identifier ever stored, so an
identifier freed by a deletion is never handed out again.
"""

from __future__ import annotations

from case_registry.domain.errors import IdentifierExhausted
from case_registry.domain.models import MAX_CASE_ID, CaseId
from case_registry.storage.abstract import CaseStore


class IdentifierAllocator:
    def __init__(self, store: CaseStore, max_id: CaseId = MAX_CASE_ID) -> None:
        self._store = store
        self._max_id = max_id

    def next_id(self) -> CaseId:
        """
        Return the identifier for the next case.

        Raises
        ------
        IdentifierExhausted
            If the identifier space is used up. Never wraps around.
        """
        last = self._store.high_water_mark()
        if last >= self._max_id:
            raise IdentifierExhausted(last)
        return last + 1


__all__ = ["IdentifierAllocator"]
