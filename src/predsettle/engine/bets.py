"""Position ledger: per-participant stake accumulation bound to one outcome."""

from __future__ import annotations

from predsettle.arith import checked_add
from predsettle.engine.lifecycle import require_active
from predsettle.errors import InvalidAmount, MarketExpired, OutcomeMismatch
from predsettle.models import Market, Outcome, Position


def apply_bet(
    market: Market,
    position: Position | None,
    bettor: str,
    outcome: int | str | Outcome,
    amount: int,
    now: int,
) -> tuple[Market, Position]:
    """PlaceBet state change. Returns updated copies of market and position.

    A new position is bound to `outcome`; a top-up on a different outcome is
    rejected, never merged.
    """
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidAmount(amount=amount)
    side = Outcome.parse(outcome)
    require_active(market)
    if now >= market.resolution_deadline:
        raise MarketExpired(market_id=market.market_id, deadline=market.resolution_deadline)

    if position is None:
        position = Position(
            market_id=market.market_id,
            owner=bettor,
            outcome=side,
            amount=amount,
            created_at=now,
            updated_at=now,
        )
    else:
        if position.outcome != side:
            raise OutcomeMismatch(bound=position.outcome.name, requested=side.name)
        position = position.model_copy(
            update={"amount": checked_add(position.amount, amount), "updated_at": now}
        )

    stake_field = "stake_a" if side == Outcome.A else "stake_b"
    market = market.model_copy(
        update={
            stake_field: checked_add(market.stake(side), amount),
            "total_bets": market.total_bets + 1,
        }
    )
    return market, position
