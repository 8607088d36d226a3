"""Proportional payout formula and exactly-once claim rules."""

from __future__ import annotations

from predsettle.arith import checked_add, mul_div_floor
from predsettle.errors import (
    AlreadyClaimed,
    InvariantViolation,
    MarketNotCancelled,
    MarketNotResolved,
    NotAWinner,
    NoWinnings,
    PositionNotFound,
)
from predsettle.models import Market, MarketStatus, Position


def compute_winnings(position_amount: int, total_payout_pool: int, winning_pool: int) -> int:
    """floor(amount * total_payout_pool / winning_pool), widened to u128 internally."""
    if winning_pool == 0:
        raise NoWinnings("Winning pool is empty")
    return mul_div_floor(position_amount, total_payout_pool, winning_pool)


def quote_winnings(market: Market, position: Position) -> int:
    """Payout a position would receive now; 0 for unresolved markets and losing positions."""
    if market.status is not MarketStatus.RESOLVED or position.outcome != market.winning_outcome:
        return 0
    if market.winning_pool == 0:
        return 0
    return compute_winnings(position.amount, market.total_payout_pool, market.winning_pool)


def settle_claim(market: Market, position: Position | None, now: int) -> tuple[Market, Position, int]:
    """ClaimWinnings state change: returns (market, position, winnings)."""
    if market.status is not MarketStatus.RESOLVED:
        raise MarketNotResolved(market_id=market.market_id, status=market.status.value)
    if position is None:
        raise PositionNotFound(market_id=market.market_id)
    if position.claimed:
        raise AlreadyClaimed(owner=position.owner, winnings_claimed=position.winnings_claimed)
    if position.outcome != market.winning_outcome:
        raise NotAWinner(owner=position.owner, outcome=position.outcome.name)

    winnings = compute_winnings(position.amount, market.total_payout_pool, market.winning_pool)
    if winnings == 0:
        raise NoWinnings(owner=position.owner)
    total_claimed = checked_add(market.total_claimed, winnings)
    if total_claimed > market.total_payout_pool:
        raise InvariantViolation(
            "Claims would exceed the payout pool",
            total_claimed=total_claimed,
            total_payout_pool=market.total_payout_pool,
        )

    position = position.model_copy(
        update={"claimed": True, "winnings_claimed": winnings, "updated_at": now}
    )
    market = market.model_copy(update={"total_claimed": total_claimed})
    return market, position, winnings


def settle_refund(market: Market, position: Position | None, now: int) -> tuple[Market, Position, int]:
    """ClaimRefund state change on a cancelled market: the stake is returned in full."""
    if market.status is not MarketStatus.CANCELLED:
        raise MarketNotCancelled(market_id=market.market_id, status=market.status.value)
    if position is None:
        raise PositionNotFound(market_id=market.market_id)
    if position.claimed:
        raise AlreadyClaimed("Refund already claimed", owner=position.owner)
    if position.amount == 0:
        raise NoWinnings("Nothing to refund", owner=position.owner)

    position = position.model_copy(
        update={"claimed": True, "winnings_claimed": position.amount, "updated_at": now}
    )
    market = market.model_copy(
        update={"total_refunded": checked_add(market.total_refunded, position.amount)}
    )
    return market, position, position.amount
