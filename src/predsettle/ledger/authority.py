"""Pool-scoped signing capability derived from the market identifier.

Pool accounts (the bet vault and the liquidity pool of each market) hold no
key of their own. Moving value out of one requires a PoolAuthority whose proof
is an HMAC of (seed, market_id) under a key only the ledger knows. The ledger
hands a PoolSigner for that key out once, to the engine it is wired into;
authorities built anywhere else do not verify.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Final

VAULT_SEED: Final[str] = "vault"
POOL_SEED: Final[str] = "pool"
POOL_SEEDS: Final[frozenset[str]] = frozenset({VAULT_SEED, POOL_SEED})

_DOMAIN = b"predsettle-authority"


class SignerAlreadyIssued(Exception):
    """The ledger's pool signer was already handed to an engine."""


def pool_account(seed: str, market_id: str) -> str:
    """Ledger account name for a pool-derived account."""
    return f"{seed}:{market_id}"


def is_pool_account(account: str) -> bool:
    seed, sep, market_id = account.partition(":")
    return bool(sep) and seed in POOL_SEEDS and bool(market_id)


def derive_proof(key: bytes, seed: str, market_id: str) -> str:
    message = _DOMAIN + b"\x00" + seed.encode() + b"\x00" + market_id.encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


class PoolAuthority:
    """Capability to move value out of one pool account."""

    __slots__ = ("seed", "market_id", "account", "proof")

    def __init__(self, seed: str, market_id: str, proof: str) -> None:
        if seed not in POOL_SEEDS:
            raise ValueError(f"unknown pool seed: {seed}")
        self.seed = seed
        self.market_id = market_id
        self.account = pool_account(seed, market_id)
        self.proof = proof

    def __repr__(self) -> str:
        return f"PoolAuthority({self.account!r})"


class PoolSigner:
    """Issues PoolAuthority objects under the ledger's key."""

    __slots__ = ("_key",)

    def __init__(self, key: bytes) -> None:
        self._key = key

    def authority(self, seed: str, market_id: str) -> PoolAuthority:
        return PoolAuthority(seed, market_id, derive_proof(self._key, seed, market_id))


class AuthorityKeyring:
    """Per-ledger secret: verifies authorities and issues the signer once."""

    def __init__(self, key: bytes | None = None) -> None:
        self._key = key or secrets.token_bytes(32)
        self._issued = False

    def issue(self) -> PoolSigner:
        if self._issued:
            raise SignerAlreadyIssued("pool signer already issued for this ledger")
        self._issued = True
        return PoolSigner(self._key)

    def check(self, src: str, authority: PoolAuthority | None) -> bool:
        """True if a transfer out of src is allowed with the given authority."""
        if not is_pool_account(src):
            return True
        if authority is None or authority.account != src:
            return False
        expected = derive_proof(self._key, authority.seed, authority.market_id)
        return hmac.compare_digest(authority.proof, expected)
