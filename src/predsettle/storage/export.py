"""Event log export to Parquet."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection


def _event_filter(market_id: str | None, kind: str | None) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []
    if market_id:
        clauses.append("market_id = ?")
        params.append(market_id)
    if kind:
        clauses.append("kind = ?")
        params.append(kind)
    return (" WHERE " + " AND ".join(clauses) if clauses else ""), params


def export_events_to_parquet(
    conn: DuckDBPyConnection,
    output_path: str | Path,
    market_id: str | None = None,
    kind: str | None = None,
) -> int:
    """Write events (in append order) to a Parquet file, optionally for one market and/or kind.
    Returns the number of rows written."""
    target = Path(output_path).resolve()
    target.parent.mkdir(parents=True, exist_ok=True)
    quoted = str(target).replace("'", "''")
    where, params = _event_filter(market_id, kind)
    conn.execute(
        f"COPY (SELECT id, kind, market_id, timestamp, payload FROM events{where} ORDER BY id) "
        f"TO '{quoted}' (FORMAT PARQUET)",
        params,
    )
    return conn.execute(f"SELECT COUNT(*) FROM events{where}", params).fetchone()[0]
