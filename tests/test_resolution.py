"""Resolution engine: oracle gating, evidence checks, fee extraction."""

import pytest

from predsettle.errors import (
    InvalidOracle,
    InvalidOracleData,
    InvalidOutcome,
    MarketAlreadyResolved,
    MarketNotActive,
    MarketNotExpired,
)
from predsettle.models import MarketStatus, Outcome

from conftest import CREATOR, ORACLE


@pytest.fixture
def staked(engine, market, clock):
    clock.set(10)
    engine.place_bet("alice", "m1", "A", 100)
    clock.set(20)
    engine.place_bet("bob", "m1", "B", 300)
    clock.set(100)
    return engine


def test_resolve_extracts_oracle_fee(staked, ledger, events):
    m = staked.resolve(ORACLE, "m1", "A", b"final score 2-1")
    assert m.status is MarketStatus.RESOLVED
    assert m.winning_outcome is Outcome.A
    assert m.resolved_at == 100
    assert m.oracle_data == b"final score 2-1"
    assert m.oracle_fee == 4
    assert m.total_payout_pool == 396
    assert m.winning_pool == 100
    assert ledger.balance(ORACLE) == 4
    assert staked.vault_balance("m1") == 396
    resolved = events.of_kind("market_resolved")[0]
    assert (resolved.winning_pool, resolved.losing_pool, resolved.oracle_fee) == (100, 300, 4)


def test_only_oracle_may_resolve(staked):
    with pytest.raises(InvalidOracle):
        staked.resolve(CREATOR, "m1", "A", b"x")
    assert staked.get_market("m1").status is MarketStatus.ACTIVE


def test_resolve_before_deadline(engine, market, clock):
    clock.set(99)
    with pytest.raises(MarketNotExpired):
        engine.resolve(ORACLE, "m1", "A", b"x")


def test_resolve_twice(staked, ledger):
    staked.resolve(ORACLE, "m1", "A", b"x")
    with pytest.raises(MarketAlreadyResolved):
        staked.resolve(ORACLE, "m1", "B", b"x")
    assert ledger.balance(ORACLE) == 4
    assert staked.get_market("m1").winning_outcome is Outcome.A


def test_resolve_cancelled_market(staked):
    staked.cancel_market(CREATOR, "m1")
    with pytest.raises(MarketNotActive):
        staked.resolve(ORACLE, "m1", "A", b"x")


def test_invalid_outcome_and_evidence(staked):
    with pytest.raises(InvalidOutcome):
        staked.resolve(ORACLE, "m1", 3, b"x")
    with pytest.raises(InvalidOracleData):
        staked.resolve(ORACLE, "m1", "A", b"")
    with pytest.raises(InvalidOracleData):
        staked.resolve(ORACLE, "m1", "A", b"x" * 257)
    assert staked.resolve(ORACLE, "m1", "A", b"x" * 256).status is MarketStatus.RESOLVED


def test_zero_fee_skips_transfer(engine, market, ledger, clock):
    engine.place_bet("alice", "m1", "A", 50)
    clock.set(100)
    m = engine.resolve(ORACLE, "m1", "A", b"x")
    # floor(50 * 100 / 10000) == 0
    assert m.oracle_fee == 0
    assert m.total_payout_pool == 50
    assert ledger.balance(ORACLE) == 0


def test_platform_fee_goes_to_treasury(engine, ledger, clock):
    engine.create_market(
        CREATOR, "m2", oracle=ORACLE, resolution_deadline=100,
        oracle_fee_bps=100, platform_fee_bps=50,
    )
    engine.place_bet("alice", "m2", "A", 100)
    engine.place_bet("bob", "m2", "B", 300)
    clock.set(100)
    m = engine.resolve(ORACLE, "m2", "B", b"x")
    assert (m.oracle_fee, m.platform_fee, m.total_payout_pool) == (4, 2, 394)
    assert ledger.balance("treasury") == 2
    assert engine.vault_balance("m2") == 394
