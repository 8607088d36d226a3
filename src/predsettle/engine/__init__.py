"""Settlement engine: lifecycle, liquidity pool, bets, resolution and payouts."""

from predsettle.engine.core import (
    SettlementEngine,
    implied_odds,
    liquidity_account,
    vault_account,
)
from predsettle.engine.ports import (
    Clock,
    EventSink,
    FixedClock,
    LogEventSink,
    MemoryEventSink,
    PauseGate,
    StaticPauseGate,
    SystemClock,
)

__all__ = [
    "SettlementEngine",
    "implied_odds",
    "liquidity_account",
    "vault_account",
    "Clock",
    "EventSink",
    "FixedClock",
    "LogEventSink",
    "MemoryEventSink",
    "PauseGate",
    "StaticPauseGate",
    "SystemClock",
]
