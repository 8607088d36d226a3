"""Structured events appended to the event sink. Never read back by the engine."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel

from predsettle.models.market import Outcome


class _Event(BaseModel):
    market_id: str
    timestamp: int


class MarketCreated(_Event):
    kind: Literal["market_created"] = "market_created"
    authority: str
    oracle: str
    title: str
    resolution_deadline: int
    created_at: int


class BetPlaced(_Event):
    kind: Literal["bet_placed"] = "bet_placed"
    bettor: str
    outcome: Outcome
    amount: int


class LiquidityAdded(_Event):
    kind: Literal["liquidity_added"] = "liquidity_added"
    provider: str
    amount: int
    amount_a: int
    amount_b: int
    lp_shares_minted: int


class LiquidityRemoved(_Event):
    kind: Literal["liquidity_removed"] = "liquidity_removed"
    provider: str
    lp_shares: int
    withdrawal_amount: int  # net of fee
    fee_amount: int


class MarketResolved(_Event):
    kind: Literal["market_resolved"] = "market_resolved"
    outcome: Outcome
    winning_pool: int
    losing_pool: int
    oracle_fee: int
    platform_fee: int
    total_payout_pool: int


class WinningsClaimed(_Event):
    kind: Literal["winnings_claimed"] = "winnings_claimed"
    user: str
    amount: int
    outcome: Outcome


class MarketCancelled(_Event):
    kind: Literal["market_cancelled"] = "market_cancelled"
    authority: str


class MarketDisputed(_Event):
    kind: Literal["market_disputed"] = "market_disputed"
    authority: str


class RefundClaimed(_Event):
    kind: Literal["refund_claimed"] = "refund_claimed"
    user: str
    amount: int


MarketEvent = Union[
    MarketCreated,
    BetPlaced,
    LiquidityAdded,
    LiquidityRemoved,
    MarketResolved,
    WinningsClaimed,
    MarketCancelled,
    MarketDisputed,
    RefundClaimed,
]
