"""
In-memory store: a sorted identifier array plus a dict of records.

Iteration order is ascending by construction (keys are kept sorted with
`bisect`), not an artifact of dict insertion order.
"""

from __future__ import annotations

import bisect
import contextlib
from typing import Callable, Dict, Generator, Iterator, List, Optional, Tuple

from case_registry.domain.models import CaseId, CaseRecord
from case_registry.storage.abstract import AbstractCaseStore


class InMemoryCaseStore(AbstractCaseStore):
    """
    Process-local ordered mapping.

    Inside a transaction every write pushes its inverse onto an undo log; if
    the block raises, the log is replayed newest-first so failed operations
    leave no partial writes behind.
    """

    name: str = "memory"

    def __init__(self) -> None:
        self._keys: List[CaseId] = []
        self._rows: Dict[CaseId, CaseRecord] = {}
        self._settings: Dict[str, str] = {}
        self._high_water: CaseId = 0
        self._undo: Optional[List[Callable[[], None]]] = None

    def _record_undo(self, action: Callable[[], None]) -> None:
        if self._undo is not None:
            self._undo.append(action)

    def _drop_key(self, case_id: CaseId) -> None:
        index = bisect.bisect_left(self._keys, case_id)
        del self._keys[index]
        del self._rows[case_id]

    def _put_key(self, case_id: CaseId, record: CaseRecord) -> None:
        bisect.insort(self._keys, case_id)
        self._rows[case_id] = record

    def get(self, case_id: CaseId) -> Optional[CaseRecord]:
        return self._rows.get(case_id)

    def contains(self, case_id: CaseId) -> bool:
        return case_id in self._rows

    def insert(self, case_id: CaseId, record: CaseRecord) -> None:
        if case_id in self._rows:
            raise KeyError(f"Case {case_id} already stored")
        previous_high_water = self._high_water
        self._put_key(case_id, record)
        self._high_water = max(self._high_water, case_id)

        def _undo_insert() -> None:
            self._drop_key(case_id)
            self._high_water = previous_high_water

        self._record_undo(_undo_insert)

    def replace(self, case_id: CaseId, record: CaseRecord) -> bool:
        previous = self._rows.get(case_id)
        if previous is None:
            return False
        self._rows[case_id] = record
        self._record_undo(lambda: self._rows.__setitem__(case_id, previous))
        return True

    def remove(self, case_id: CaseId) -> bool:
        previous = self._rows.get(case_id)
        if previous is None:
            return False
        self._drop_key(case_id)
        self._record_undo(lambda: self._put_key(case_id, previous))
        return True

    def iter_ascending(self, batch_size: int = 500) -> Iterator[Tuple[CaseId, CaseRecord]]:
        # Snapshot the key list so callers may mutate between batches.
        for case_id in list(self._keys):
            record = self._rows.get(case_id)
            if record is not None:
                yield case_id, record

    def high_water_mark(self) -> CaseId:
        return self._high_water

    def count(self) -> int:
        return len(self._keys)

    def load_setting(self, key: str) -> Optional[str]:
        return self._settings.get(key)

    def save_setting(self, key: str, value: str) -> None:
        previous = self._settings.get(key)
        self._settings[key] = value
        if previous is None:
            self._record_undo(lambda: self._settings.pop(key, None))
        else:
            self._record_undo(lambda: self._settings.__setitem__(key, previous))

    @contextlib.contextmanager
    def transaction(self) -> Generator[None, None, None]:
        if self._undo is not None:
            # Nested: the outermost transaction owns the undo log.
            yield
            return

        self._undo = []
        try:
            yield
        except BaseException:
            undo, self._undo = self._undo, None
            for action in reversed(undo):
                action()
            raise
        finally:
            self._undo = None


__all__ = ["InMemoryCaseStore"]
