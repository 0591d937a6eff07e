from __future__ import annotations

import contextlib
import json
import sys
from typing import Generator, Optional

import typer

from case_registry.config import get_settings
from case_registry.domain.errors import RegistryError
from case_registry.domain.models import CaseRecord, Category, FieldFilter, Status
from case_registry.registry.service import CaseRegistry
from case_registry.seeding import seed_registry
from case_registry.storage import build_store
from case_registry.utils.logging import configure_logging
from case_registry.utils.profiler import profile_block

app = typer.Typer(help="Case registry CLI.")


@contextlib.contextmanager
def _open_registry() -> Generator[CaseRegistry, None, None]:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    store = build_store(settings)
    try:
        yield CaseRegistry(
            store,
            owner=settings.registry_owner,
            iter_batch_size=settings.iter_batch_size,
        )
    except RegistryError as exc:
        typer.echo(f"Error [{exc.code}]: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    finally:
        store.close()


def _echo_json(payload: object) -> None:
    typer.echo(json.dumps(payload, indent=2))


def _build_record(
    title: str,
    description: str,
    category: Category,
    owner: str,
    bounty: int,
    file: str,
    status: Status,
) -> CaseRecord:
    try:
        return CaseRecord(
            title=title,
            description=description,
            category=category,
            owner=owner,
            bounty=bounty,
            file=file,
            status=status,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    location = (
        f"{settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name}"
        if settings.storage_backend == "postgres"
        else "process memory (not persisted between runs)"
    )
    typer.echo(
        f"backend={settings.storage_backend} store={location} | "
        f"owner={settings.registry_owner or '-'} page_size={settings.default_page_size}"
    )


@app.command()
def create(
    title: str = typer.Option(..., "--title", "-t"),
    description: str = typer.Option("", "--description", "-d"),
    category: Category = typer.Option(..., "--category", "-c"),
    owner: str = typer.Option(..., "--owner", "-o", help="Identity of the submitter."),
    bounty: int = typer.Option(0, "--bounty", "-b", min=0),
    file: str = typer.Option(..., "--file", "-f", help="64-hex-character evidence hash."),
    status: Status = typer.Option(Status.NEW, "--status", "-s"),
) -> None:
    """
    Create a case and print its identifier.
    """
    record = _build_record(title, description, category, owner, bounty, file, status)
    with _open_registry() as registry:
        typer.echo(registry.create(record))


@app.command()
def get(case_id: int = typer.Argument(..., min=0)) -> None:
    """
    Print one case as JSON.
    """
    with _open_registry() as registry:
        record = registry.read_by_id(case_id)
    if record is None:
        typer.echo(f"Case {case_id} not found.", err=True)
        raise typer.Exit(code=1)
    _echo_json({"id": case_id, "record": record.model_dump(mode="json")})


@app.command()
def update(
    case_id: int = typer.Argument(..., min=0),
    title: str = typer.Option(..., "--title", "-t"),
    description: str = typer.Option(..., "--description", "-d"),
    category: Category = typer.Option(..., "--category", "-c"),
    owner: str = typer.Option(..., "--owner", "-o"),
    bounty: int = typer.Option(..., "--bounty", "-b", min=0),
    file: str = typer.Option(..., "--file", "-f"),
    status: Status = typer.Option(..., "--status", "-s"),
) -> None:
    """
    Replace a case. Every field is required: updates are not partial.
    """
    record = _build_record(title, description, category, owner, bounty, file, status)
    with _open_registry() as registry:
        registry.update(case_id, record)
    typer.echo(f"Case {case_id} updated.")


@app.command()
def delete(case_id: int = typer.Argument(..., min=0)) -> None:
    """
    Delete a case. Its identifier is never reused.
    """
    with _open_registry() as registry:
        registry.delete(case_id)
    typer.echo(f"Case {case_id} deleted.")


@app.command("list")
def list_cases(
    page: int = typer.Option(1, "--page", "-p"),
    page_size: Optional[int] = typer.Option(None, "--page-size", "-n"),
    keyword: str = typer.Option("", "--keyword", "-k", help="Case-sensitive substring."),
    category: str = typer.Option("All", "--category", "-c"),
    status: str = typer.Option("All", "--status", "-s"),
    show_all: bool = typer.Option(False, "--all", help="Ignore filters and paging."),
) -> None:
    """
    List cases, filtered and paginated.
    """
    try:
        category_filter = FieldFilter.parse(category, Category)
        status_filter = FieldFilter.parse(status, Status)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    with _open_registry() as registry:
        if show_all:
            items = registry.list_all()
            _echo_json({"items": [item.model_dump(mode="json") for item in items], "total": len(items)})
            return
        size = page_size if page_size is not None else get_settings().default_page_size
        result = registry.list_paginated(page, size, keyword, category_filter, status_filter)
    payload = result.model_dump(mode="json")
    payload["page_count"] = result.page_count
    _echo_json(payload)


@app.command("set-code")
def set_code(
    code_hash: str = typer.Argument(..., help="64-hex-character code hash."),
    caller: str = typer.Option(..., "--caller", help="Identity performing the switch."),
) -> None:
    """
    Switch the registry's executable logic (owner only).
    """
    with _open_registry() as registry:
        registry.set_runtime_hash(caller, code_hash)
    typer.echo(f"Switched code hash to {code_hash}.")


@app.command()
def seed(
    count: int = typer.Option(100, "--count", "-n", min=0),
    seed_value: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
) -> None:
    """
    Create synthetic cases.
    """
    with _open_registry() as registry:
        ids = seed_registry(registry, count, seed=seed_value)
    if ids:
        typer.echo(f"Created {len(ids)} cases ({ids[0]}..{ids[-1]}).")
    else:
        typer.echo("Created 0 cases.")


@app.command()
def bench(
    count: int = typer.Option(10_000, "--count", "-n", min=0, help="Synthetic cases to add first."),
    page_size: int = typer.Option(50, "--page-size"),
    keyword: str = typer.Option("", "--keyword", "-k"),
    category: str = typer.Option("All", "--category", "-c"),
    status: str = typer.Option("All", "--status", "-s"),
    seed_value: int = typer.Option(42, "--seed"),
) -> None:
    """
    Profile seeding and paginated queries against the configured store.
    """
    try:
        category_filter = FieldFilter.parse(category, Category)
        status_filter = FieldFilter.parse(status, Status)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    results = []
    with _open_registry() as registry:
        with profile_block("seed") as stats:
            seed_registry(registry, count, seed=seed_value)
        stats.extra["cases"] = count
        results.append(stats.as_dict())

        with profile_block("first-page") as stats:
            first = registry.list_paginated(1, page_size, keyword, category_filter, status_filter)
        stats.extra.update({"total": first.total, "returned": len(first.items)})
        results.append(stats.as_dict())

        last_page = max(first.page_count, 1)
        with profile_block("last-page") as stats:
            last = registry.list_paginated(last_page, page_size, keyword, category_filter, status_filter)
        stats.extra.update({"page": last_page, "returned": len(last.items)})
        results.append(stats.as_dict())
    _echo_json(results)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
