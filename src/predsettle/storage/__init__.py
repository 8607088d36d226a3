"""Record storage: keyed store protocol, in-memory and DuckDB backends, event log."""

from predsettle.storage.base import (
    RecordExists,
    RecordStore,
    liquidity_key,
    market_key,
    position_key,
)
from predsettle.storage.memory import InMemoryRecordStore

__all__ = [
    "RecordExists",
    "RecordStore",
    "InMemoryRecordStore",
    "liquidity_key",
    "market_key",
    "position_key",
]
