"""Environment collaborators: clock, event sink, pause gate."""

from __future__ import annotations

import time
from typing import Protocol

import structlog

from predsettle.models import MarketEvent

log = structlog.get_logger(__name__)


class Clock(Protocol):
    """Externally supplied time source (unix seconds)."""

    def now(self) -> int: ...


class SystemClock:
    def now(self) -> int:
        return int(time.time())


class FixedClock:
    """Clock that only moves when told to. Used by tests and the CLI --at option."""

    def __init__(self, now: int = 0) -> None:
        self._now = now

    def now(self) -> int:
        return self._now

    def set(self, now: int) -> None:
        self._now = now

    def advance(self, seconds: int) -> int:
        self._now += seconds
        return self._now


class EventSink(Protocol):
    """Fire-and-forget append of structured events."""

    def append(self, event: MarketEvent) -> None: ...


class MemoryEventSink:
    """Keeps appended events in a list."""

    def __init__(self) -> None:
        self.events: list[MarketEvent] = []

    def append(self, event: MarketEvent) -> None:
        self.events.append(event)

    def of_kind(self, kind: str) -> list[MarketEvent]:
        return [e for e in self.events if e.kind == kind]


class LogEventSink:
    """Writes each event as a structlog record."""

    def append(self, event: MarketEvent) -> None:
        fields = event.model_dump(mode="json")
        # "timestamp" is reserved by the TimeStamper processor
        fields["event_time"] = fields.pop("timestamp")
        log.info("market_event", **fields)


class PauseGate(Protocol):
    """Global admin switch consulted before every mutating operation."""

    def is_paused(self, market_id: str) -> bool: ...


class StaticPauseGate:
    def __init__(self, paused: bool = False, markets: set[str] | None = None) -> None:
        self.paused = paused
        self.markets = set(markets or ())

    def is_paused(self, market_id: str) -> bool:
        return self.paused or market_id in self.markets
