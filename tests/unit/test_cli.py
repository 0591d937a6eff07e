from __future__ import annotations

import hashlib
import json
import logging

import pytest
from typer.testing import CliRunner

from case_registry.domain.models import CaseRecord, Category, Status
from case_registry.main import app
from case_registry.storage.memory import InMemoryCaseStore

EVIDENCE_HASH = hashlib.sha256(b"evidence").hexdigest()

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(monkeypatch):
    monkeypatch.setenv("STORAGE_BACKEND", "memory")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("REGISTRY_OWNER", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_info_reports_backend():
    result = runner.invoke(app, ["info"])
    assert result.exit_code == 0
    assert "backend=memory" in result.output


def test_create_prints_first_identifier():
    result = runner.invoke(
        app,
        ["create", "--title", "Fake shop", "--category", "Web", "--owner", "alice", "--file", EVIDENCE_HASH],
    )
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == "1"


def test_create_rejects_malformed_hash():
    result = runner.invoke(
        app,
        ["create", "--title", "x", "--category", "Scam", "--owner", "alice", "--file", "abc"],
    )
    assert result.exit_code != 0


def test_get_missing_case_exits_nonzero():
    result = runner.invoke(app, ["get", "3"])
    assert result.exit_code == 1
    assert "Case 3 not found." in result.output


def test_delete_missing_case_reports_not_found():
    result = runner.invoke(app, ["delete", "3"])
    assert result.exit_code == 1
    assert "NOT_FOUND" in result.output


def test_list_on_empty_registry():
    result = runner.invoke(app, ["list", "--page", "0", "--page-size", "5", "--category", "Scam"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["items"] == []
    assert payload["total"] == 0
    assert payload["page"] == 1
    assert payload["page_count"] == 0


def test_list_rejects_unknown_filter():
    result = runner.invoke(app, ["list", "--status", "Pending"])
    assert result.exit_code == 2


def test_set_code_by_non_owner_is_unauthorized(monkeypatch):
    monkeypatch.setenv("REGISTRY_OWNER", "admin")
    result = runner.invoke(app, ["set-code", EVIDENCE_HASH, "--caller", "mallory"])
    assert result.exit_code == 1
    assert "UNAUTHORIZED" in result.output


def test_set_code_by_owner(monkeypatch):
    monkeypatch.setenv("REGISTRY_OWNER", "admin")
    result = runner.invoke(app, ["set-code", EVIDENCE_HASH, "--caller", "admin"])
    assert result.exit_code == 0, result.output
    assert f"Switched code hash to {EVIDENCE_HASH}." in result.stdout


def test_seed_reports_identifier_range():
    result = runner.invoke(app, ["seed", "--count", "3"])
    assert result.exit_code == 0, result.output
    assert "Created 3 cases (1..3)." in result.stdout


def test_bench_emits_profile_per_phase():
    result = runner.invoke(app, ["bench", "--count", "20", "--page-size", "7"])
    assert result.exit_code == 0, result.output
    phases = json.loads(result.stdout)
    assert [phase["label"] for phase in phases] == ["seed", "first-page", "last-page"]
    assert phases[1]["total"] == 20
    assert phases[1]["returned"] == 7
    assert phases[2]["page"] == 3
    assert phases[2]["returned"] == 6


def test_create_reports_identifier_taken_by_another_writer(monkeypatch):
    class StaleMarkStore(InMemoryCaseStore):
        def high_water_mark(self) -> int:
            return 0

    store = StaleMarkStore()
    store.insert(
        1,
        CaseRecord(
            title="Other writer",
            description="",
            category=Category.WEB,
            owner="bob",
            bounty=0,
            file=EVIDENCE_HASH,
            status=Status.NEW,
        ),
    )
    monkeypatch.setattr("case_registry.main.build_store", lambda settings: store)
    result = runner.invoke(
        app,
        ["create", "--title", "Fake shop", "--category", "Web", "--owner", "alice", "--file", EVIDENCE_HASH],
    )
    assert result.exit_code == 1
    assert "IDENTIFIER_CONFLICT" in result.output
    assert not isinstance(result.exception, KeyError)
