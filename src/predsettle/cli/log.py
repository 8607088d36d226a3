"""Log subcommand: events, stats, export."""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager

import typer

from predsettle.storage.db import get_connection, init_schema
from predsettle.storage.event_log import log_stats, stream_events
from predsettle.storage.export import export_events_to_parquet

app = typer.Typer(help="Event log inspection, statistics and export")


@contextmanager
def _event_log(ctx: typer.Context) -> Iterator:
    conn = get_connection(ctx.obj["settings"].db_path)
    init_schema(conn)
    try:
        yield conn
    finally:
        conn.close()


@app.command("events")
def events(
    ctx: typer.Context,
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market ID"),
    kind: str | None = typer.Option(None, "--kind", "-k", help="Filter by event kind"),
    limit: int = typer.Option(50, "--limit", "-n", help="Show at most N most recent events"),
) -> None:
    """Print events as JSON lines, oldest first."""
    with _event_log(ctx) as conn:
        rows = list(stream_events(conn, market_id=market, kind=kind))
    for payload in rows[-limit:] if limit > 0 else rows:
        typer.echo(json.dumps(payload, sort_keys=True))


@app.command("stats")
def stats(ctx: typer.Context) -> None:
    """Show event counts, time range, and breakdown by kind and market."""
    with _event_log(ctx) as conn:
        s = log_stats(conn)
    typer.echo(f"Total events: {s['total_events']}")
    typer.echo(f"Time range: {s['min_timestamp']} .. {s['max_timestamp']}")
    for title, rows, label in (
        ("By kind:", s["by_kind"], "kind"),
        ("By market (top 20):", s["by_market"], "market_id"),
    ):
        if rows:
            typer.echo(title)
            for row in rows:
                typer.echo(f"  {row[label]}  {row['count']}")


@app.command("export")
def export(
    ctx: typer.Context,
    market: str | None = typer.Option(None, "--market", "-m", help="Filter by market ID"),
    kind: str | None = typer.Option(None, "--kind", "-k", help="Filter by event kind"),
    output: str = typer.Option("events.parquet", "--output", "-o", help="Output path"),
) -> None:
    """Export events to Parquet."""
    with _event_log(ctx) as conn:
        count = export_events_to_parquet(conn, output, market_id=market, kind=kind)
    typer.echo(f"Exported {count} events to {output}")
