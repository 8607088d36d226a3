"""In-memory record store with snapshot rollback."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from predsettle.storage.base import Record, RecordExists


class InMemoryRecordStore:
    """Dict-backed store. Single writer via a re-entrant lock held for each transaction."""

    def __init__(self) -> None:
        self._records: dict[str, Record] = {}
        self._lock = threading.RLock()
        self._depth = 0

    def get(self, key: str) -> Record | None:
        record = self._records.get(key)
        return record.model_copy(deep=True) if record is not None else None

    def put(self, key: str, record: Record) -> None:
        with self._lock:
            self._records[key] = record.model_copy(deep=True)

    def create(self, key: str, record: Record) -> None:
        with self._lock:
            if key in self._records:
                raise RecordExists(key)
            self._records[key] = record.model_copy(deep=True)

    @contextmanager
    def transaction(self) -> Iterator[InMemoryRecordStore]:
        with self._lock:
            outer = self._depth == 0
            snapshot = dict(self._records) if outer else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if snapshot is not None:
                    self._records = snapshot
                raise
            finally:
                self._depth -= 1
