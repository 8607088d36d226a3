"""Liquidity pool engine: deposits, share issuance, fee-adjusted withdrawals."""

import pytest

from predsettle.engine import liquidity_account
from predsettle.errors import (
    InsufficientFunds,
    InsufficientLiquidity,
    InvalidAmount,
    MarketNotActive,
)

from conftest import CREATOR


def test_first_deposit_splits_evenly(engine, market, events):
    lp = engine.add_liquidity("alice", "m1", 101)
    m = engine.get_market("m1")
    assert (m.reserve_a, m.reserve_b) == (50, 51)
    assert m.reserve_a + m.reserve_b == 101
    assert abs(m.reserve_a - m.reserve_b) <= 1
    assert lp.lp_shares == 101 and m.lp_supply == 101
    assert lp.total_deposited == 101
    assert m.liquidity_providers_count == 1
    added = events.of_kind("liquidity_added")[0]
    assert (added.amount_a, added.amount_b, added.lp_shares_minted) == (50, 51, 101)


def test_second_deposit_preserves_ratio_and_mints_proportionally(engine, market):
    engine.add_liquidity("alice", "m1", 1000)
    lp = engine.add_liquidity("bob", "m1", 300)
    m = engine.get_market("m1")
    assert (m.reserve_a, m.reserve_b) == (650, 650)
    assert lp.lp_shares == 300
    assert m.lp_supply == 1300
    assert m.liquidity_providers_count == 2
    assert engine.pool_balance("m1") == 1300


def test_remove_liquidity_charges_fee_and_round_trip_not_profitable(engine, market, ledger):
    engine.add_liquidity("alice", "m1", 1000)
    engine.add_liquidity("bob", "m1", 300)
    net = engine.remove_liquidity("bob", "m1", 300)
    # gross = 300 * 1300 / 1300 = 300, fee = 1% = 3
    assert net == 297
    assert net <= 300
    assert ledger.balance("bob") == 10_000 - 300 + 297
    m = engine.get_market("m1")
    assert m.lp_supply == 1000
    assert m.fees_collected == 3
    assert (m.reserve_a, m.reserve_b) == (502, 501)
    assert m.reserve_a + m.reserve_b == engine.pool_balance("m1") == 1003
    lp = engine.get_liquidity_position("m1", "bob")
    assert lp.lp_shares == 0 and lp.total_withdrawn == 297


def test_fees_accrue_to_remaining_providers(engine, market):
    engine.add_liquidity("alice", "m1", 1000)
    engine.add_liquidity("bob", "m1", 300)
    engine.remove_liquidity("bob", "m1", 300)
    # pool worth 1003 for 1000 shares: a new deposit of 100 mints floor(100 * 1000 / 1003)
    lp = engine.add_liquidity("carol", "m1", 100)
    assert lp.lp_shares == 99
    m = engine.get_market("m1")
    assert (m.reserve_a, m.reserve_b) == (552, 551)
    net = engine.remove_liquidity("alice", "m1", 1000)
    # gross = floor(1000 * 1103 / 1099) = 1003, fee = floor(1003 / 100) = 10
    assert net == 993


def test_round_trip_never_profits(engine, market):
    engine.add_liquidity("alice", "m1", 777)
    for amount in (1, 13, 250, 999):
        lp_before = engine.get_liquidity_position("m1", "bob")
        held_before = lp_before.lp_shares if lp_before else 0
        lp = engine.add_liquidity("bob", "m1", amount)
        minted = lp.lp_shares - held_before
        assert engine.remove_liquidity("bob", "m1", minted) <= amount


def test_remove_more_than_held(engine, market):
    engine.add_liquidity("alice", "m1", 100)
    with pytest.raises(InsufficientLiquidity):
        engine.remove_liquidity("alice", "m1", 101)
    with pytest.raises(InsufficientLiquidity):
        engine.remove_liquidity("bob", "m1", 1)


def test_invalid_amounts(engine, market):
    with pytest.raises(InvalidAmount):
        engine.add_liquidity("alice", "m1", 0)
    with pytest.raises(InvalidAmount):
        engine.remove_liquidity("alice", "m1", 0)


def test_add_liquidity_requires_funds(engine, market, ledger):
    with pytest.raises(InsufficientFunds):
        engine.add_liquidity("alice", "m1", 10_001)
    m = engine.get_market("m1")
    assert (m.reserve_a, m.reserve_b, m.lp_supply) == (0, 0, 0)
    assert engine.get_liquidity_position("m1", "alice") is None
    assert ledger.balance("alice") == 10_000


def test_pool_closed_after_resolution(engine, market, clock):
    engine.add_liquidity("alice", "m1", 100)
    clock.set(100)
    engine.resolve("oracle", "m1", "A", b"x")
    with pytest.raises(MarketNotActive):
        engine.add_liquidity("bob", "m1", 10)
    with pytest.raises(MarketNotActive):
        engine.remove_liquidity("alice", "m1", 10)


def test_liquidity_and_bets_use_separate_accounts(engine, market):
    engine.add_liquidity(CREATOR, "m1", 500)
    engine.place_bet("alice", "m1", "A", 200)
    assert engine.pool_balance("m1") == 500
    assert engine.vault_balance("m1") == 200
    assert liquidity_account("m1") == "pool:m1"


def test_value_credited_to_pool_is_shared_by_providers(engine, market, ledger):
    engine.add_liquidity("alice", "m1", 1000)
    ledger.transfer("bob", liquidity_account("m1"), 100)
    assert engine.pool_balance("m1") == 1100

    # gross = 1000 * 1100 / 1000, fee 1% of 1100
    assert engine.remove_liquidity("alice", "m1", 1000) == 1089
    m = engine.get_market("m1")
    assert (m.reserve_a, m.reserve_b, m.lp_supply) == (6, 5, 0)
    assert m.reserve_a + m.reserve_b == engine.pool_balance("m1") == 11
    assert ledger.balance("alice") == 10_000 - 1000 + 1089


def test_credited_value_folds_in_before_deposit(engine, market, ledger):
    engine.add_liquidity("alice", "m1", 1000)
    ledger.transfer("bob", liquidity_account("m1"), 100)
    lp = engine.add_liquidity("carol", "m1", 110)
    m = engine.get_market("m1")
    # shares priced against 1100 in the pool, not the stale 1000 reserves
    assert lp.lp_shares == 100
    assert (m.reserve_a, m.reserve_b) == (605, 605)
    assert m.reserve_a + m.reserve_b == engine.pool_balance("m1")
