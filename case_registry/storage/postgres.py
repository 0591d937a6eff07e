"""
PostgreSQL-backed case store.

Records live in `cases`; the high-water mark and other registry metadata live
in `registry_settings`. Full scans use a named (server-side) cursor fetched in
batches so large registries are never loaded into memory at once.
"""

from __future__ import annotations

import contextlib
import threading
from typing import Generator, Iterator, Optional, Tuple

from psycopg import Connection
from psycopg_pool import ConnectionPool

from case_registry.domain.models import CaseId, CaseRecord, Category, Status
from case_registry.storage.abstract import HIGH_WATER_MARK_KEY, AbstractCaseStore
from case_registry.storage.db_factory import open_pool
from case_registry.utils.logging import get_logger

log = get_logger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS cases (
    id BIGINT PRIMARY KEY CHECK (id BETWEEN 1 AND 4294967295),
    title TEXT NOT NULL,
    description TEXT NOT NULL,
    category TEXT NOT NULL,
    owner TEXT NOT NULL,
    bounty NUMERIC(39, 0) NOT NULL CHECK (bounty >= 0),
    file CHAR(64) NOT NULL,
    status TEXT NOT NULL
);
CREATE TABLE IF NOT EXISTS registry_settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""

_COLUMNS = "title, description, category, owner, bounty, file, status"

# Key of the transaction-scoped advisory lock serializing identifier allocation.
ALLOCATION_LOCK_KEY = 0x63617365


def _row_to_record(row: tuple) -> CaseRecord:
    title, description, category, owner, bounty, file_hash, status = row
    return CaseRecord(
        title=title,
        description=description,
        category=Category(category),
        owner=owner,
        bounty=int(bounty),
        file=file_hash,
        status=Status(status),
    )


def _record_params(record: CaseRecord) -> tuple:
    return (
        record.title,
        record.description,
        record.category.value,
        record.owner,
        record.bounty,
        record.file,
        record.status.value,
    )


class PostgresCaseStore(AbstractCaseStore):
    """
    Case store on a psycopg ConnectionPool.

    Calls made inside `transaction()` share one connection and commit together;
    calls made outside run in their own short transaction.
    """

    name: str = "postgres"

    def __init__(
        self,
        dsn: Optional[str] = None,
        pool: Optional[ConnectionPool] = None,
        pool_min_size: int = 1,
        pool_max_size: int = 10,
    ) -> None:
        self._pool = pool or open_pool(dsn, min_size=pool_min_size, max_size=pool_max_size)
        self._owns_pool = pool is None
        self._local = threading.local()

    def ensure_schema(self) -> None:
        with self._connection() as conn:
            conn.execute(SCHEMA_SQL)
        log.info("Case store schema ready")

    @contextlib.contextmanager
    def _connection(self) -> Generator[Connection, None, None]:
        active = getattr(self._local, "conn", None)
        if active is not None:
            yield active
            return
        with self._pool.connection() as conn:
            yield conn

    @contextlib.contextmanager
    def transaction(self) -> Generator[None, None, None]:
        active = getattr(self._local, "conn", None)
        if active is not None:
            with active.transaction():
                yield
            return
        with self._pool.connection() as conn:
            self._local.conn = conn
            try:
                with conn.transaction():
                    yield
            finally:
                self._local.conn = None

    def get(self, case_id: CaseId) -> Optional[CaseRecord]:
        with self._connection() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM cases WHERE id = %s", (case_id,)
            ).fetchone()
        return _row_to_record(row) if row else None

    def contains(self, case_id: CaseId) -> bool:
        with self._connection() as conn:
            row = conn.execute("SELECT 1 FROM cases WHERE id = %s", (case_id,)).fetchone()
        return row is not None

    def insert(self, case_id: CaseId, record: CaseRecord) -> None:
        with self.transaction(), self._connection() as conn:
            cur = conn.execute(
                f"INSERT INTO cases (id, {_COLUMNS}) VALUES (%s, %s, %s, %s, %s, %s, %s, %s) "
                "ON CONFLICT (id) DO NOTHING",
                (case_id, *_record_params(record)),
            )
            if cur.rowcount != 1:
                raise KeyError(f"Case {case_id} already stored")
            conn.execute(
                "INSERT INTO registry_settings (key, value) VALUES (%s, %s) "
                "ON CONFLICT (key) DO UPDATE SET value = "
                "GREATEST(registry_settings.value::bigint, EXCLUDED.value::bigint)::text",
                (HIGH_WATER_MARK_KEY, str(case_id)),
            )

    def replace(self, case_id: CaseId, record: CaseRecord) -> bool:
        with self._connection() as conn:
            cur = conn.execute(
                "UPDATE cases SET title = %s, description = %s, category = %s, owner = %s, "
                "bounty = %s, file = %s, status = %s WHERE id = %s",
                (*_record_params(record), case_id),
            )
            return cur.rowcount == 1

    def remove(self, case_id: CaseId) -> bool:
        with self._connection() as conn:
            cur = conn.execute("DELETE FROM cases WHERE id = %s", (case_id,))
            return cur.rowcount == 1

    def iter_ascending(self, batch_size: int = 500) -> Iterator[Tuple[CaseId, CaseRecord]]:
        with self._connection() as conn:
            # Named cursor -> server-side, rows arrive batch by batch.
            with conn.cursor(name="cases_ascending_scan") as cur:
                cur.execute(f"SELECT id, {_COLUMNS} FROM cases ORDER BY id")
                while True:
                    batch = cur.fetchmany(batch_size)
                    if not batch:
                        break
                    for row in batch:
                        yield int(row[0]), _row_to_record(row[1:])

    def high_water_mark(self) -> CaseId:
        with self._connection() as conn:
            if getattr(self._local, "conn", None) is not None:
                # Held until commit/rollback; a concurrent allocator waits here.
                conn.execute("SELECT pg_advisory_xact_lock(%s)", (ALLOCATION_LOCK_KEY,))
            row = conn.execute(
                "SELECT GREATEST("
                "COALESCE((SELECT value::bigint FROM registry_settings WHERE key = %s), 0), "
                "COALESCE((SELECT MAX(id) FROM cases), 0))",
                (HIGH_WATER_MARK_KEY,),
            ).fetchone()
        return int(row[0])

    def count(self) -> int:
        with self._connection() as conn:
            row = conn.execute("SELECT COUNT(*) FROM cases").fetchone()
        return int(row[0])

    def load_setting(self, key: str) -> Optional[str]:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM registry_settings WHERE key = %s", (key,)
            ).fetchone()
        return row[0] if row else None

    def save_setting(self, key: str, value: str) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO registry_settings (key, value) VALUES (%s, %s) "
                "ON CONFLICT (key) DO UPDATE SET value = EXCLUDED.value",
                (key, value),
            )

    def close(self) -> None:
        if self._owns_pool:
            self._pool.close()


__all__ = ["PostgresCaseStore", "SCHEMA_SQL", "ALLOCATION_LOCK_KEY"]
