"""Value-transfer capability: protocol, pool authority, in-memory ledger."""

from predsettle.ledger.authority import (
    POOL_SEED,
    VAULT_SEED,
    AuthorityKeyring,
    PoolAuthority,
    PoolSigner,
    SignerAlreadyIssued,
    is_pool_account,
    pool_account,
)
from predsettle.ledger.base import InsufficientBalance, UnauthorizedTransfer, ValueLedger
from predsettle.ledger.memory import InMemoryLedger

__all__ = [
    "POOL_SEED",
    "VAULT_SEED",
    "AuthorityKeyring",
    "PoolAuthority",
    "PoolSigner",
    "SignerAlreadyIssued",
    "is_pool_account",
    "pool_account",
    "InsufficientBalance",
    "UnauthorizedTransfer",
    "ValueLedger",
    "InMemoryLedger",
]
