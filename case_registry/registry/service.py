"""
Case registry: CRUD, listing, and the owner-gated runtime switch.

`CaseRegistry` is an explicit state object: build one at startup around a
store and pass it to whoever needs it. Every public operation runs under a
re-entrant guard, so concurrent callers are serialized and readers never see
a half-applied mutation.
"""

from __future__ import annotations

import threading
from typing import List, Optional, Union

from case_registry.domain.errors import (
    IdentifierConflict,
    RecordNotFound,
    RuntimeSwitchFailed,
    Unauthorized,
)
from case_registry.domain.models import (
    NOT_FOUND_ID,
    CaseId,
    CasePage,
    CaseRecord,
    Category,
    FieldFilter,
    IdentifiedCase,
    Status,
)
from case_registry.host import RuntimeHost, StoreRuntimeHost
from case_registry.registry.allocator import IdentifierAllocator
from case_registry.registry.query import CaseQuery, paginate
from case_registry.storage.abstract import CaseStore
from case_registry.utils.logging import get_logger

log = get_logger(__name__)

OWNER_SETTING_KEY = "registry_owner"

CategoryInput = Union[FieldFilter[Category], Category, str, None]
StatusInput = Union[FieldFilter[Status], Status, str, None]


class CaseRegistry:
    """
    Authoritative index of case records.

    Parameters
    ----------
    store : CaseStore
        Durable ordered mapping the registry is built on.
    owner : str | None
        Identity allowed to call `set_runtime_hash`. Persisted on first open and
        never changed afterwards; when no owner exists the switch is unguarded.
    host : RuntimeHost | None
        Executes the code switch. Defaults to a StoreRuntimeHost over `store`.
    iter_batch_size : int
        Batch size used when scanning the store.
    """

    def __init__(
        self,
        store: CaseStore,
        owner: Optional[str] = None,
        host: Optional[RuntimeHost] = None,
        iter_batch_size: int = 500,
    ) -> None:
        self._store = store
        self._host = host or StoreRuntimeHost(store)
        self._allocator = IdentifierAllocator(store)
        self._iter_batch_size = iter_batch_size
        self._lock = threading.RLock()
        self._owner = self._init_owner(owner)

    def _init_owner(self, owner: Optional[str]) -> Optional[str]:
        persisted = self._store.load_setting(OWNER_SETTING_KEY)
        if persisted is None:
            if owner is not None:
                self._store.save_setting(OWNER_SETTING_KEY, owner)
                log.info("Registry owner set", extra={"owner": owner})
            return owner
        if owner is not None and owner != persisted:
            log.warning(
                "Ignoring configured owner; registry already owned",
                extra={"configured_owner": owner, "owner": persisted},
            )
        return persisted

    @property
    def owner(self) -> Optional[str]:
        return self._owner

    @property
    def store(self) -> CaseStore:
        return self._store

    def create(self, record: CaseRecord) -> CaseId:
        """
        Store `record` under a freshly allocated identifier and return it.

        Raises
        ------
        IdentifierExhausted
            If no identifier is left.
        IdentifierConflict
            If another writer sharing the store took the identifier first.
        """
        with self._lock, self._store.transaction():
            case_id = self._allocator.next_id()
            try:
                self._store.insert(case_id, record)
            except KeyError as exc:
                raise IdentifierConflict(case_id) from exc
        log.info("Case created", extra={"case_id": case_id, "category": record.category.value})
        return case_id

    def read_by_id(self, case_id: CaseId) -> Optional[CaseRecord]:
        with self._lock:
            record = self._store.get(case_id)
        log.debug("Case lookup", extra={"case_id": case_id, "found": record is not None})
        return record

    def read_title(self, case_id: CaseId) -> Optional[str]:
        record = self.read_by_id(case_id)
        return record.title if record is not None else None

    def exists_as_id(self, case_id: CaseId) -> CaseId:
        """
        Return `case_id` if it is stored, else the sentinel 0.

        Identifier 0 is never allocated, so 0 always means "absent"; prefer
        `contains` when a boolean is what you need.
        """
        return case_id if self.contains(case_id) else NOT_FOUND_ID

    def contains(self, case_id: CaseId) -> bool:
        with self._lock:
            return self._store.contains(case_id)

    def count(self) -> int:
        with self._lock:
            return self._store.count()

    def update(self, case_id: CaseId, record: CaseRecord) -> None:
        """
        Replace the whole record stored under `case_id`.

        Raises
        ------
        RecordNotFound
            If `case_id` is not stored. Nothing is written.
        """
        with self._lock, self._store.transaction():
            if not self._store.replace(case_id, record):
                raise RecordNotFound(case_id)
        log.info("Case updated", extra={"case_id": case_id})

    def delete(self, case_id: CaseId) -> None:
        """
        Remove `case_id` for good; its identifier is retired.

        Raises
        ------
        RecordNotFound
            If `case_id` is not stored.
        """
        with self._lock, self._store.transaction():
            if not self._store.remove(case_id):
                raise RecordNotFound(case_id)
        log.info("Case deleted", extra={"case_id": case_id})

    def list_all(self) -> List[IdentifiedCase]:
        with self._lock:
            return [
                IdentifiedCase(id=case_id, record=record)
                for case_id, record in self._store.iter_ascending(self._iter_batch_size)
            ]

    def list_paginated(
        self,
        page: int,
        page_size: int,
        keyword: str = "",
        category_filter: CategoryInput = None,
        status_filter: StatusInput = None,
    ) -> CasePage:
        """
        Return one page of matching cases and the total number of matches.

        Parameters
        ----------
        page : int
            1-based page number; values below 1 are treated as 1.
        page_size : int
            Items per page. Zero or negative sizes give an empty page.
        keyword : str
            Case-sensitive substring of the title or description; "" matches all.
        category_filter, status_filter
            A FieldFilter, an enum member, its text value, "All", or None (any).
        """
        query = CaseQuery(
            page=page,
            page_size=page_size,
            keyword=keyword,
            category=FieldFilter.parse(category_filter, Category),
            status=FieldFilter.parse(status_filter, Status),
        )
        with self._lock:
            result = paginate(self._store.iter_ascending(self._iter_batch_size), query)
        log.debug(
            "Cases listed",
            extra={
                "page": result.page,
                "page_size": result.page_size,
                "keyword": keyword,
                "category": str(query.category),
                "status": str(query.status),
                "returned": len(result.items),
                "total": result.total,
            },
        )
        return result

    def set_runtime_hash(self, caller: str, new_hash: str) -> None:
        """
        Ask the host to switch executable logic to `new_hash`.

        Raises
        ------
        Unauthorized
            If an owner is configured and `caller` is someone else.
        RuntimeSwitchFailed
            If the host refuses the switch.
        """
        with self._lock:
            if self._owner is not None and caller != self._owner:
                log.warning(
                    "Rejected code hash switch",
                    extra={"caller": caller, "owner": self._owner},
                )
                raise Unauthorized(caller, self._owner)
            try:
                self._host.set_code_hash(new_hash)
            except Exception as exc:  # noqa: BLE001 - host failures surface as one error type
                log.exception("Failed to switch code hash", extra={"code_hash": new_hash})
                raise RuntimeSwitchFailed(new_hash, exc) from exc
        log.info(f"Switched code hash to {new_hash}.", extra={"caller": caller})


__all__ = ["CaseRegistry", "OWNER_SETTING_KEY"]
