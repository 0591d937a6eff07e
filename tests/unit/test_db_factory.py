from __future__ import annotations

import pytest
from psycopg_pool import PoolTimeout
from tenacity import stop_after_attempt, wait_none

from case_registry.storage import db_factory


class _FakePool:
    instances: list = []

    def __init__(self, conninfo: str, min_size: int, max_size: int, open: bool) -> None:
        self.conninfo = conninfo
        self.min_size = min_size
        self.max_size = max_size
        self.open_calls = []
        self.closed = False
        assert open is False
        _FakePool.instances.append(self)

    def open(self, wait: bool = False, timeout: float = 30.0) -> None:
        self.open_calls.append((wait, timeout))

    def close(self) -> None:
        self.closed = True


class _NeverReadyPool(_FakePool):
    def open(self, wait: bool = False, timeout: float = 30.0) -> None:
        super().open(wait, timeout)
        raise PoolTimeout("pool initialization incomplete")


@pytest.fixture(autouse=True)
def _reset_instances():
    _FakePool.instances = []
    yield
    _FakePool.instances = []


def test_exports_only_pool_helpers():
    assert db_factory.__all__ == ["build_dsn", "open_pool"]
    assert not hasattr(db_factory, "get_sync_connection")


def test_open_pool_waits_for_initial_connections(monkeypatch):
    monkeypatch.setattr(db_factory, "ConnectionPool", _FakePool)
    pool = db_factory.open_pool("postgresql://registry@db/cases", min_size=2, max_size=4, timeout=3.0)
    assert pool is _FakePool.instances[0]
    assert pool.conninfo == "postgresql://registry@db/cases"
    assert (pool.min_size, pool.max_size) == (2, 4)
    assert pool.open_calls == [(True, 3.0)]
    assert not pool.closed


def test_open_pool_closes_every_pool_that_never_became_ready(monkeypatch):
    monkeypatch.setattr(db_factory, "ConnectionPool", _NeverReadyPool)
    quick_open = db_factory.open_pool.retry_with(stop=stop_after_attempt(2), wait=wait_none())
    with pytest.raises(PoolTimeout):
        quick_open("postgresql://registry@db/cases")
    assert len(_FakePool.instances) == 2
    assert all(pool.closed for pool in _FakePool.instances)
