"""
Storage interfaces for the case registry.

The registry is built on a durable, ordered key/value primitive supplied by the
hosting environment. Concrete backends (in-memory, PostgreSQL) implement the
CaseStore protocol; the AbstractCaseStore ABC is an optional helper for
class-based implementations.
"""

from __future__ import annotations

import abc
from contextlib import AbstractContextManager
from typing import Iterator, Optional, Protocol, Tuple, runtime_checkable

from case_registry.domain.models import CaseId, CaseRecord

HIGH_WATER_MARK_KEY = "high_water_mark"


@runtime_checkable
class CaseStore(Protocol):
    """
    Ordered identifier -> record mapping with a persisted high-water mark.

    Attributes
    ----------
    name : str
        A short machine-friendly backend identifier.
    """

    name: str

    def get(self, case_id: CaseId) -> Optional[CaseRecord]:
        """Return the record stored under `case_id`, or None."""
        ...

    def contains(self, case_id: CaseId) -> bool:
        ...

    def insert(self, case_id: CaseId, record: CaseRecord) -> None:
        """
        Store a record under a fresh identifier.

        Raises
        ------
        KeyError
            If the identifier is already in use.
        """
        ...

    def replace(self, case_id: CaseId, record: CaseRecord) -> bool:
        """Overwrite an existing record. Returns False if `case_id` is absent."""
        ...

    def remove(self, case_id: CaseId) -> bool:
        """Delete a record. Returns False if `case_id` is absent."""
        ...

    def iter_ascending(self, batch_size: int = 500) -> Iterator[Tuple[CaseId, CaseRecord]]:
        """Yield every (id, record) pair in ascending identifier order."""
        ...

    def high_water_mark(self) -> CaseId:
        """
        Largest identifier ever inserted, 0 if none. Never decreases.

        Called inside `transaction()`, backends shared between processes hold an
        allocation lock until the transaction ends, so two writers never read
        the same mark.
        """
        ...

    def count(self) -> int:
        ...

    def load_setting(self, key: str) -> Optional[str]:
        ...

    def save_setting(self, key: str, value: str) -> None:
        ...

    def transaction(self) -> AbstractContextManager[None]:
        """Group writes so they all apply or none do."""
        ...

    def close(self) -> None:
        ...


class AbstractCaseStore(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses should set `name` and implement the abstract methods.
    """

    name: str

    @abc.abstractmethod
    def get(self, case_id: CaseId) -> Optional[CaseRecord]:  # pragma: no cover - interface only
        raise NotImplementedError

    def contains(self, case_id: CaseId) -> bool:
        return self.get(case_id) is not None

    @abc.abstractmethod
    def insert(self, case_id: CaseId, record: CaseRecord) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def replace(self, case_id: CaseId, record: CaseRecord) -> bool:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def remove(self, case_id: CaseId) -> bool:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def iter_ascending(
        self, batch_size: int = 500
    ) -> Iterator[Tuple[CaseId, CaseRecord]]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def high_water_mark(self) -> CaseId:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def count(self) -> int:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def load_setting(self, key: str) -> Optional[str]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def save_setting(self, key: str, value: str) -> None:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def transaction(self) -> AbstractContextManager[None]:  # pragma: no cover
        raise NotImplementedError

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    def __enter__(self) -> "AbstractCaseStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["CaseStore", "AbstractCaseStore", "HIGH_WATER_MARK_KEY"]
