"""DuckDB connection, schema init, and the durable backend (records, balances, events)."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any

import duckdb
import structlog

from predsettle.arith import checked_add, checked_sub
from predsettle.ledger.authority import AuthorityKeyring, PoolAuthority, PoolSigner
from predsettle.ledger.base import InsufficientBalance, UnauthorizedTransfer
from predsettle.models import MarketEvent
from predsettle.storage.base import Record, RecordExists, record_type
from predsettle.storage.event_log import append_event

if TYPE_CHECKING:
    from duckdb import DuckDBPyConnection

log = structlog.get_logger(__name__)

SCHEMA_SQL = """
CREATE SEQUENCE IF NOT EXISTS event_seq START 1;

-- Market / Position / LiquidityPosition records, JSON payload per key
CREATE TABLE IF NOT EXISTS records (
    key             VARCHAR NOT NULL,
    kind            VARCHAR NOT NULL,
    market_id       VARCHAR,
    payload         JSON NOT NULL,
    updated_at      BIGINT NOT NULL
);

-- Ledger balances per account
CREATE TABLE IF NOT EXISTS balances (
    account         VARCHAR NOT NULL,
    amount          UBIGINT NOT NULL
);

-- Append-only event log
CREATE TABLE IF NOT EXISTS events (
    id              BIGINT PRIMARY KEY DEFAULT nextval('event_seq'),
    kind            VARCHAR NOT NULL,
    market_id       VARCHAR NOT NULL,
    timestamp       BIGINT NOT NULL,
    payload         JSON NOT NULL
);
"""


def get_connection(db_path: str | Path, read_only: bool = False) -> DuckDBPyConnection:
    """Return a DuckDB connection. Caller must close or use as context manager.
    ':memory:' opens an in-process database."""
    if str(db_path) == ":memory:":
        return duckdb.connect(":memory:")
    path = Path(db_path)
    if not read_only:
        path.parent.mkdir(parents=True, exist_ok=True)
    return duckdb.connect(str(path), read_only=read_only)


def init_schema(conn: DuckDBPyConnection) -> None:
    """Create tables and sequences if they do not exist."""
    for stmt in SCHEMA_SQL.split(";"):
        stmt = stmt.strip()
        if stmt:
            try:
                conn.execute(stmt)
            except duckdb.Error as e:
                if "already exists" not in str(e).lower():
                    raise


class DuckDBBackend:
    """Record store, value ledger and event sink over one DuckDB connection.

    All three share the connection, so a single transaction() covers record
    writes and balance transfers. Transactions are re-entrant; only the
    outermost one issues BEGIN/COMMIT/ROLLBACK.
    """

    def __init__(self, conn: DuckDBPyConnection) -> None:
        self.conn = conn
        self._lock = threading.RLock()
        self._depth = 0
        self._keyring = AuthorityKeyring()

    @classmethod
    def open(cls, db_path: str | Path) -> DuckDBBackend:
        conn = get_connection(db_path)
        init_schema(conn)
        return cls(conn)

    def close(self) -> None:
        self.conn.close()

    # -- transactions

    @contextmanager
    def transaction(self) -> Iterator[DuckDBBackend]:
        with self._lock:
            outer = self._depth == 0
            if outer:
                self.conn.begin()
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outer:
                    self.conn.rollback()
                raise
            else:
                self._depth -= 1
                if outer:
                    self.conn.commit()

    # -- record store

    def get(self, key: str) -> Record | None:
        row = self.conn.execute("SELECT payload FROM records WHERE key = ?", [key]).fetchone()
        if row is None:
            return None
        return record_type(key).model_validate_json(row[0])

    def _exists(self, key: str) -> bool:
        row = self.conn.execute("SELECT COUNT(*) FROM records WHERE key = ?", [key]).fetchone()
        return bool(row[0])

    def put(self, key: str, record: Record) -> None:
        with self.transaction():
            if self._exists(key):
                self.conn.execute(
                    "UPDATE records SET payload = ?, updated_at = ? WHERE key = ?",
                    [record.model_dump_json(), _now_ms(), key],
                )
            else:
                self._insert(key, record)

    def create(self, key: str, record: Record) -> None:
        with self.transaction():
            if self._exists(key):
                raise RecordExists(key)
            self._insert(key, record)

    def _insert(self, key: str, record: Record) -> None:
        kind = key.split("/", 1)[0]
        self.conn.execute(
            "INSERT INTO records (key, kind, market_id, payload, updated_at) VALUES (?, ?, ?, ?, ?)",
            [key, kind, record.market_id, record.model_dump_json(), _now_ms()],
        )

    def list_records(self, kind: str, market_id: str | None = None) -> list[Record]:
        """All records of one kind (market, position, lp), optionally for one market."""
        sql = "SELECT key, payload FROM records WHERE kind = ?"
        params: list[Any] = [kind]
        if market_id is not None:
            sql += " AND market_id = ?"
            params.append(market_id)
        rows = self.conn.execute(sql + " ORDER BY key", params).fetchall()
        return [record_type(k).model_validate_json(p) for k, p in rows]

    # -- value ledger

    def balance(self, account: str) -> int:
        row = self.conn.execute("SELECT amount FROM balances WHERE account = ?", [account]).fetchone()
        return int(row[0]) if row else 0

    def _set_balance(self, account: str, amount: int) -> None:
        row = self.conn.execute("SELECT COUNT(*) FROM balances WHERE account = ?", [account]).fetchone()
        if row[0]:
            self.conn.execute("UPDATE balances SET amount = ? WHERE account = ?", [amount, account])
        else:
            self.conn.execute("INSERT INTO balances (account, amount) VALUES (?, ?)", [account, amount])

    def mint(self, account: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("mint amount must be positive")
        with self.transaction():
            self._set_balance(account, checked_add(self.balance(account), amount))

    def transfer(
        self,
        src: str,
        dst: str,
        amount: int,
        authority: PoolAuthority | None = None,
    ) -> None:
        if amount <= 0:
            raise ValueError("transfer amount must be positive")
        if not self._keyring.check(src, authority):
            raise UnauthorizedTransfer(src)
        with self.transaction():
            available = self.balance(src)
            if available < amount:
                raise InsufficientBalance(src, available, amount)
            if src == dst:
                return
            self._set_balance(src, checked_sub(available, amount))
            self._set_balance(dst, checked_add(self.balance(dst), amount))

    def issue_signer(self) -> PoolSigner:
        return self._keyring.issue()

    def list_balances(self) -> list[tuple[str, int]]:
        rows = self.conn.execute("SELECT account, amount FROM balances ORDER BY account").fetchall()
        return [(r[0], int(r[1])) for r in rows]

    # -- event sink

    def append(self, event: MarketEvent) -> None:
        append_event(self.conn, event)


def _now_ms() -> int:
    return int(time.time() * 1000)
