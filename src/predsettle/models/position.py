"""Per-participant records: bet Position and LiquidityPosition."""

from __future__ import annotations

from pydantic import BaseModel, Field

from predsettle.models.market import Outcome


class Position(BaseModel):
    """Accumulated stake of one participant in one market, bound to a single outcome."""

    market_id: str
    owner: str
    outcome: Outcome
    amount: int = Field(0, ge=0)
    created_at: int
    updated_at: int
    claimed: bool = False
    winnings_claimed: int = Field(0, ge=0)  # refund amount for cancelled markets


class LiquidityPosition(BaseModel):
    """LP shares held by one provider in one market."""

    market_id: str
    owner: str
    lp_shares: int = Field(0, ge=0)
    total_deposited: int = Field(0, ge=0)
    total_withdrawn: int = Field(0, ge=0)
    created_at: int
    updated_at: int
