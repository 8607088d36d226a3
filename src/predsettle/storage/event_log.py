"""Event log append and query - append-only side channel for observability tooling."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Iterator

from predsettle.models import MarketEvent

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def append_event(conn: DuckDBPyConnection, event: MarketEvent) -> None:
    """Append a single event row."""
    conn.execute(
        "INSERT INTO events (kind, market_id, timestamp, payload) VALUES (?, ?, ?, ?)",
        [event.kind, event.market_id, event.timestamp, event.model_dump_json()],
    )


def stream_events(
    conn: DuckDBPyConnection,
    market_id: str | None = None,
    kind: str | None = None,
) -> Iterator[dict[str, Any]]:
    """Yield event payloads in append order, optionally filtered by market and kind."""
    conditions = []
    params: list[Any] = []
    if market_id:
        conditions.append("market_id = ?")
        params.append(market_id)
    if kind:
        conditions.append("kind = ?")
        params.append(kind)
    where = " AND ".join(conditions) if conditions else "1=1"
    rows = conn.execute(f"SELECT payload FROM events WHERE {where} ORDER BY id ASC", params).fetchall()
    for (payload,) in rows:
        yield json.loads(payload) if isinstance(payload, str) else payload


def log_stats(conn: DuckDBPyConnection) -> dict[str, Any]:
    """Return event log statistics: total count, min/max timestamp, counts by kind and market."""
    total = conn.execute("SELECT COUNT(*) FROM events").fetchone()[0]
    min_ts, max_ts = conn.execute("SELECT MIN(timestamp), MAX(timestamp) FROM events").fetchone()
    by_kind = conn.execute(
        "SELECT kind, COUNT(*) AS cnt FROM events GROUP BY kind ORDER BY cnt DESC, kind"
    ).fetchall()
    by_market = conn.execute(
        "SELECT market_id, COUNT(*) AS cnt FROM events GROUP BY market_id ORDER BY cnt DESC LIMIT 20"
    ).fetchall()
    return {
        "total_events": total,
        "min_timestamp": min_ts,
        "max_timestamp": max_ts,
        "by_kind": [{"kind": r[0], "count": r[1]} for r in by_kind],
        "by_market": [{"market_id": r[0], "count": r[1]} for r in by_market],
    }
