"""Value-transfer capability protocol and adapter-level errors."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol

from predsettle.ledger.authority import PoolAuthority, PoolSigner


class InsufficientBalance(Exception):
    """Source account cannot cover the transfer."""

    def __init__(self, account: str, balance: int, amount: int) -> None:
        self.account = account
        self.balance = balance
        self.amount = amount
        super().__init__(f"{account}: balance {balance} < {amount}")


class UnauthorizedTransfer(Exception):
    """Transfer out of a pool account without its authority."""

    def __init__(self, account: str) -> None:
        self.account = account
        super().__init__(f"missing or invalid pool authority for {account}")


class ValueLedger(Protocol):
    """Moves value between accounts. Pool accounts require a PoolAuthority."""

    def balance(self, account: str) -> int: ...

    def transfer(
        self,
        src: str,
        dst: str,
        amount: int,
        authority: PoolAuthority | None = None,
    ) -> None: ...

    def mint(self, account: str, amount: int) -> None: ...

    def issue_signer(self) -> PoolSigner:
        """Signer for this ledger's pool accounts. Issued once, to the engine."""
        ...

    def transaction(self) -> AbstractContextManager[object]: ...
