"""Shared fixtures: in-memory engine with a fixed clock and funded accounts."""

import pytest

from predsettle.config import EngineConfig
from predsettle.engine import FixedClock, MemoryEventSink, SettlementEngine
from predsettle.ledger import InMemoryLedger
from predsettle.storage import InMemoryRecordStore

CREATOR = "creator"
ORACLE = "oracle"


@pytest.fixture
def clock():
    return FixedClock(0)


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def ledger():
    return InMemoryLedger(
        {CREATOR: 10_000, "alice": 10_000, "bob": 10_000, "carol": 10_000, "dave": 10_000}
    )


@pytest.fixture
def events():
    return MemoryEventSink()


@pytest.fixture
def config():
    return EngineConfig(oracle_fee_bps=100, platform_fee_bps=0, withdrawal_fee_bps=100)


@pytest.fixture
def engine(store, ledger, clock, events, config):
    return SettlementEngine(store, ledger, clock=clock, events=events, config=config)


@pytest.fixture
def market(engine):
    """Active market m1, created at t=0 with deadline t=100."""
    return engine.create_market(CREATOR, "m1", oracle=ORACLE, resolution_deadline=100, title="Test")
