"""Position ledger: stake accumulation, outcome binding, conservation."""

import pytest

from predsettle.engine import implied_odds
from predsettle.errors import (
    InsufficientFunds,
    InvalidAmount,
    InvalidOutcome,
    MarketExpired,
    MarketNotFound,
    OutcomeMismatch,
)
from predsettle.models import Outcome


def test_place_bet_creates_bound_position(engine, market, ledger, clock, events):
    clock.set(10)
    position = engine.place_bet("alice", "m1", "A", 100)
    assert position.outcome is Outcome.A
    assert position.amount == 100
    assert position.claimed is False
    m = engine.get_market("m1")
    assert (m.stake_a, m.stake_b, m.total_bets) == (100, 0, 1)
    assert ledger.balance("alice") == 9_900
    assert engine.vault_balance("m1") == 100
    placed = events.of_kind("bet_placed")[0]
    assert (placed.market_id, placed.bettor, placed.outcome, placed.amount, placed.timestamp) == (
        "m1", "alice", Outcome.A, 100, 10,
    )


def test_top_up_same_outcome_accumulates(engine, market):
    engine.place_bet("alice", "m1", Outcome.B, 40)
    position = engine.place_bet("alice", "m1", 1, 60)
    assert position.outcome is Outcome.B
    assert position.amount == 100
    assert engine.get_market("m1").stake_b == 100


def test_outcome_mismatch_rejected_and_nothing_changes(engine, market, ledger):
    engine.place_bet("alice", "m1", "A", 100)
    with pytest.raises(OutcomeMismatch):
        engine.place_bet("alice", "m1", "B", 50)
    m = engine.get_market("m1")
    assert (m.stake_a, m.stake_b, m.total_bets) == (100, 0, 1)
    assert engine.get_position("m1", "alice").amount == 100
    assert ledger.balance("alice") == 9_900
    assert engine.vault_balance("m1") == 100


def test_conservation_over_bet_sequence(engine, market):
    bets = [("alice", "A", 5), ("bob", "B", 17), ("alice", "A", 3), ("carol", "B", 250), ("dave", "A", 1)]
    accepted = 0
    previous_total = 0
    for bettor, outcome, amount in bets:
        engine.place_bet(bettor, "m1", outcome, amount)
        accepted += amount
        m = engine.get_market("m1")
        assert m.stake_a + m.stake_b == accepted
        assert m.stake_a + m.stake_b >= previous_total
        previous_total = m.stake_a + m.stake_b
    assert engine.vault_balance("m1") == accepted


def test_insufficient_balance_leaves_no_trace(engine, market, ledger):
    with pytest.raises(InsufficientFunds):
        engine.place_bet("alice", "m1", "A", 10_001)
    assert engine.get_position("m1", "alice") is None
    m = engine.get_market("m1")
    assert (m.stake_a, m.total_bets) == (0, 0)
    assert ledger.balance("alice") == 10_000


def test_validation_errors(engine, market):
    with pytest.raises(InvalidAmount):
        engine.place_bet("alice", "m1", "A", 0)
    with pytest.raises(InvalidAmount):
        engine.place_bet("alice", "m1", "A", -5)
    with pytest.raises(InvalidOutcome):
        engine.place_bet("alice", "m1", 2, 10)
    with pytest.raises(InvalidOutcome):
        engine.place_bet("alice", "m1", "C", 10)
    with pytest.raises(MarketNotFound):
        engine.place_bet("alice", "nope", "A", 10)


def test_betting_closes_at_deadline(engine, market, clock):
    clock.set(100)
    with pytest.raises(MarketExpired):
        engine.place_bet("alice", "m1", "A", 10)


def test_implied_odds(engine, market):
    assert implied_odds(engine.get_market("m1")) == (5000, 5000)
    engine.place_bet("alice", "m1", "A", 100)
    engine.place_bet("bob", "m1", "B", 300)
    assert implied_odds(engine.get_market("m1")) == (2500, 7500)
