"""Oracle-gated resolution and fee extraction."""

from __future__ import annotations

from dataclasses import dataclass

from predsettle.arith import bps_of, checked_add, checked_sub
from predsettle.errors import (
    InvalidOracle,
    InvalidOracleData,
    MarketAlreadyResolved,
    MarketNotActive,
    MarketNotExpired,
)
from predsettle.models import Market, MarketStatus, Outcome


@dataclass(frozen=True)
class Resolution:
    outcome: Outcome
    total_pool: int
    oracle_fee: int
    platform_fee: int
    total_payout_pool: int
    winning_pool: int
    losing_pool: int


def compute_fees(market: Market) -> tuple[int, int, int]:
    """(oracle_fee, platform_fee, total_payout_pool) for the market's current stakes."""
    total_pool = checked_add(market.stake_a, market.stake_b)
    oracle_fee = bps_of(total_pool, market.oracle_fee_bps)
    platform_fee = bps_of(total_pool, market.platform_fee_bps)
    payout_pool = checked_sub(total_pool, checked_add(oracle_fee, platform_fee))
    return oracle_fee, platform_fee, payout_pool


def resolve_market(
    market: Market,
    caller: str,
    outcome: int | str | Outcome,
    oracle_data: bytes,
    now: int,
    max_data_len: int = 256,
) -> tuple[Market, Resolution]:
    """Check preconditions and return the Resolved market with its settlement figures.

    Fee transfers are the caller's job; both must commit with the returned record.
    """
    if caller != market.oracle:
        raise InvalidOracle(market_id=market.market_id, caller=caller)
    if now < market.resolution_deadline:
        raise MarketNotExpired(deadline=market.resolution_deadline, now=now)
    if market.status is MarketStatus.RESOLVED:
        raise MarketAlreadyResolved(market_id=market.market_id)
    if market.status is not MarketStatus.ACTIVE:
        raise MarketNotActive(market_id=market.market_id, status=market.status.value)
    side = Outcome.parse(outcome)
    if not oracle_data:
        raise InvalidOracleData("Oracle evidence is empty")
    if len(oracle_data) > max_data_len:
        raise InvalidOracleData(
            "Oracle evidence too large", length=len(oracle_data), limit=max_data_len
        )

    oracle_fee, platform_fee, payout_pool = compute_fees(market)
    winning_pool = market.stake(side)
    resolution = Resolution(
        outcome=side,
        total_pool=checked_add(market.stake_a, market.stake_b),
        oracle_fee=oracle_fee,
        platform_fee=platform_fee,
        total_payout_pool=payout_pool,
        winning_pool=winning_pool,
        losing_pool=market.stake(side.other),
    )
    market = market.model_copy(
        update={
            "status": MarketStatus.RESOLVED,
            "winning_outcome": side,
            "resolved_at": now,
            "oracle_data": bytes(oracle_data),
            "oracle_fee": oracle_fee,
            "platform_fee": platform_fee,
            "total_payout_pool": payout_pool,
            "winning_pool": winning_pool,
        }
    )
    return market, resolution
