"""In-memory ledger with all-or-nothing transactions."""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from predsettle.arith import checked_add, checked_sub
from predsettle.ledger.authority import AuthorityKeyring, PoolAuthority, PoolSigner
from predsettle.ledger.base import InsufficientBalance, UnauthorizedTransfer


class InMemoryLedger:
    """Account balances in a dict. Nested transactions roll back as one unit."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances or {})
        self._keyring = AuthorityKeyring()
        self._lock = threading.RLock()
        self._depth = 0

    def balance(self, account: str) -> int:
        return self._balances.get(account, 0)

    def balances(self) -> dict[str, int]:
        return dict(self._balances)

    def issue_signer(self) -> PoolSigner:
        return self._keyring.issue()

    def mint(self, account: str, amount: int) -> None:
        if amount <= 0:
            raise ValueError("mint amount must be positive")
        with self._lock:
            self._balances[account] = checked_add(self.balance(account), amount)

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
        with self._lock:
            available = self.balance(src)
            if available < amount:
                raise InsufficientBalance(src, available, amount)
            credited = checked_add(self.balance(dst), amount)
            self._balances[src] = checked_sub(available, amount)
            self._balances[dst] = credited if src != dst else available

    @contextmanager
    def transaction(self) -> Iterator[InMemoryLedger]:
        with self._lock:
            outer = self._depth == 0
            snapshot = dict(self._balances) if outer else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if snapshot is not None:
                    self._balances = snapshot
                raise
            finally:
                self._depth -= 1
