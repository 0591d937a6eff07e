"""
Storage package for the case registry.

Re-exports the store interfaces and concrete backends, and `build_store`, the
factory that picks a backend from settings.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from case_registry.config import Settings, get_settings
from case_registry.storage.abstract import AbstractCaseStore, CaseStore
from case_registry.storage.memory import InMemoryCaseStore


def _postgres_store(settings: Settings) -> CaseStore:
    # Imported lazily so the memory backend works without a libpq install.
    from case_registry.storage.postgres import PostgresCaseStore

    store = PostgresCaseStore(
        dsn=settings.dsn,
        pool_min_size=settings.db_pool_min_size,
        pool_max_size=settings.db_pool_max_size,
    )
    store.ensure_schema()
    return store


def _store_factories() -> Dict[str, Callable[[Settings], CaseStore]]:
    """Registry of available storage backends."""
    return {
        "memory": lambda settings: InMemoryCaseStore(),
        "postgres": _postgres_store,
    }


def available_backends() -> List[str]:
    """List available backend names."""
    return sorted(_store_factories().keys())


def build_store(settings: Optional[Settings] = None) -> CaseStore:
    settings = settings or get_settings()
    factories = _store_factories()
    if settings.storage_backend not in factories:
        raise ValueError(
            f"Unknown storage backend '{settings.storage_backend}'. "
            f"Available: {', '.join(factories)}"
        )
    return factories[settings.storage_backend](settings)


__all__ = [
    "AbstractCaseStore",
    "CaseStore",
    "InMemoryCaseStore",
    "available_backends",
    "build_store",
]
