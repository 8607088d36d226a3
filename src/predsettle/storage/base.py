"""Keyed record store protocol and deterministic record keys."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, Union

from predsettle.errors import InvalidIdentifier
from predsettle.models import LiquidityPosition, Market, Position

Record = Union[Market, Position, LiquidityPosition]

# key prefix -> record type, used to rehydrate serialized payloads
RECORD_TYPES: dict[str, type[Record]] = {
    "market": Market,
    "position": Position,
    "lp": LiquidityPosition,
}


class RecordExists(Exception):
    """create() on a key that already holds a record."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"record exists: {key}")


def _segment(value: str, name: str) -> str:
    """One key segment; "/" is the separator so it may not appear inside."""
    if not value or "/" in value:
        raise InvalidIdentifier(**{name: value})
    return value


def market_key(market_id: str) -> str:
    return f"market/{_segment(market_id, 'market_id')}"


def position_key(market_id: str, owner: str) -> str:
    return f"position/{_segment(market_id, 'market_id')}/{_segment(owner, 'owner')}"


def liquidity_key(market_id: str, owner: str) -> str:
    return f"lp/{_segment(market_id, 'market_id')}/{_segment(owner, 'owner')}"


def record_type(key: str) -> type[Record]:
    prefix = key.split("/", 1)[0]
    try:
        return RECORD_TYPES[prefix]
    except KeyError:
        raise ValueError(f"unknown record key: {key}") from None


class RecordStore(Protocol):
    """Durable keyed storage of Market / Position / LiquidityPosition records.

    get() returns a private copy (or None); changes are only visible after put().
    transaction() makes everything written inside it commit or roll back together.
    """

    def get(self, key: str) -> Record | None: ...

    def put(self, key: str, record: Record) -> None: ...

    def create(self, key: str, record: Record) -> None: ...

    def transaction(self) -> AbstractContextManager[object]: ...
