"""Shared CLI helpers: engine construction over DuckDB and domain error reporting."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import typer

from predsettle.engine import FixedClock, SettlementEngine, SystemClock
from predsettle.errors import SettlementError
from predsettle.storage.db import DuckDBBackend


@contextmanager
def open_engine(ctx: typer.Context) -> Iterator[tuple[SettlementEngine, DuckDBBackend]]:
    """Engine whose store, ledger and event log all live in the configured DuckDB file.
    Domain errors are printed as `code: message` and exit with status 1."""
    settings = ctx.obj["settings"]
    at = ctx.obj.get("at")
    backend = DuckDBBackend.open(settings.db_path)
    engine = SettlementEngine(
        backend,
        backend,
        clock=FixedClock(at) if at is not None else SystemClock(),
        events=backend,
        config=settings.engine_config(),
    )
    try:
        yield engine, backend
    except SettlementError as e:
        typer.echo(f"{e.code}: {e}", err=True)
        raise typer.Exit(1) from e
    finally:
        backend.close()


def require_caller(ctx: typer.Context) -> str:
    caller = ctx.obj.get("caller")
    if not caller:
        typer.echo("--as CALLER is required for this command", err=True)
        raise typer.Exit(2)
    return caller
