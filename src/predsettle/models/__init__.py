"""Canonical records (Pydantic) - Market, Position, LiquidityPosition, events."""

from predsettle.models.events import (
    BetPlaced,
    LiquidityAdded,
    LiquidityRemoved,
    MarketCancelled,
    MarketCreated,
    MarketDisputed,
    MarketEvent,
    MarketResolved,
    RefundClaimed,
    WinningsClaimed,
)
from predsettle.models.market import Market, MarketStatus, Outcome
from predsettle.models.position import LiquidityPosition, Position

__all__ = [
    "Market",
    "MarketStatus",
    "Outcome",
    "Position",
    "LiquidityPosition",
    "MarketEvent",
    "MarketCreated",
    "BetPlaced",
    "LiquidityAdded",
    "LiquidityRemoved",
    "MarketResolved",
    "WinningsClaimed",
    "MarketCancelled",
    "MarketDisputed",
    "RefundClaimed",
]
