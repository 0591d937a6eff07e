"""
Pytest configuration for the case registry.

Provides fixtures for:
- Record construction
- In-memory registries
- PostgreSQL-backed stores for integration tests
"""

from __future__ import annotations

import hashlib
import os
from typing import Callable, Generator

import pytest

from case_registry.config import Settings, get_settings
from case_registry.domain.models import CaseRecord, Category, Status
from case_registry.registry.service import CaseRegistry
from case_registry.storage.memory import InMemoryCaseStore

RecordFactory = Callable[..., CaseRecord]


@pytest.fixture(autouse=True)
def _fresh_settings_cache() -> Generator[None, None, None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_record() -> RecordFactory:
    """
    Factory for CaseRecord with sensible defaults; override any field by keyword.
    """

    def _make(**overrides) -> CaseRecord:
        title = overrides.get("title", "Fake exchange")
        fields = {
            "title": title,
            "description": "Users report withdrawals never arrive.",
            "category": Category.SCAM,
            "owner": "alice",
            "bounty": 100,
            "file": hashlib.sha256(title.encode()).hexdigest(),
            "status": Status.NEW,
        }
        fields.update(overrides)
        return CaseRecord(**fields)

    return _make


@pytest.fixture
def store() -> InMemoryCaseStore:
    return InMemoryCaseStore()


@pytest.fixture
def registry(store: InMemoryCaseStore) -> CaseRegistry:
    """Registry without an owner: the runtime switch is unguarded."""
    return CaseRegistry(store)


@pytest.fixture
def owned_registry(store: InMemoryCaseStore) -> CaseRegistry:
    return CaseRegistry(store, owner="admin")


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        storage_backend="postgres",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "case_registry"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def db_connection_available(test_settings: Settings) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    import psycopg

    try:
        with psycopg.connect(test_settings.dsn, connect_timeout=5) as conn:
            conn.execute("SELECT 1;").fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture
def postgres_store(test_settings: Settings, db_connection_available: bool):
    """
    Clean PostgreSQL-backed store; skips when the database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    from case_registry.storage.postgres import PostgresCaseStore

    pg_store = PostgresCaseStore(dsn=test_settings.dsn, pool_max_size=2)
    pg_store.ensure_schema()
    with pg_store.transaction(), pg_store._connection() as conn:
        conn.execute("TRUNCATE TABLE cases, registry_settings;")
    try:
        yield pg_store
    finally:
        with pg_store.transaction(), pg_store._connection() as conn:
            conn.execute("TRUNCATE TABLE cases, registry_settings;")
        pg_store.close()
