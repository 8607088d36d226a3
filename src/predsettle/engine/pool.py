"""Liquidity pool share math: ratio-preserving deposits and fee-adjusted withdrawals."""

from __future__ import annotations

from dataclasses import dataclass

from predsettle.arith import (
    bps_of,
    checked_add,
    checked_sub,
    mul_div_floor,
    split_proportional,
)
from predsettle.engine.lifecycle import require_active
from predsettle.errors import (
    InsufficientLiquidity,
    InsufficientPoolBalance,
    InvalidAmount,
)
from predsettle.models import LiquidityPosition, Market


@dataclass(frozen=True)
class Deposit:
    amount: int
    amount_a: int
    amount_b: int
    lp_shares: int


@dataclass(frozen=True)
class Withdrawal:
    lp_shares: int
    gross: int  # before fee
    fee: int
    net: int
    net_a: int  # reserve reduction per side
    net_b: int


def quote_deposit(market: Market, amount: int) -> Deposit:
    """Split amount across reserves at the current ratio and price the LP shares.

    First deposit: (amount // 2, amount - amount // 2) and shares == amount.
    Otherwise shares = floor(amount * lp_supply / (reserve_a + reserve_b)).
    """
    if amount <= 0:
        raise InvalidAmount(amount=amount)
    amount_a, amount_b = split_proportional(amount, market.reserve_a, market.reserve_b)
    liquidity_before = checked_add(market.reserve_a, market.reserve_b)
    if market.lp_supply == 0 or liquidity_before == 0:
        shares = amount
    else:
        shares = mul_div_floor(amount, market.lp_supply, liquidity_before)
    if shares == 0:
        raise InvalidAmount("Deposit too small to mint any LP shares", amount=amount)
    return Deposit(amount=amount, amount_a=amount_a, amount_b=amount_b, lp_shares=shares)


def apply_deposit(
    market: Market,
    position: LiquidityPosition | None,
    provider: str,
    amount: int,
    now: int,
) -> tuple[Market, LiquidityPosition, Deposit]:
    """AddLiquidity state change. Returns updated copies; inputs are not mutated."""
    if amount <= 0:
        raise InvalidAmount(amount=amount)
    require_active(market)
    deposit = quote_deposit(market, amount)

    new_provider = position is None or position.lp_shares == 0
    if position is None:
        position = LiquidityPosition(
            market_id=market.market_id, owner=provider, created_at=now, updated_at=now
        )
    position = position.model_copy(
        update={
            "lp_shares": checked_add(position.lp_shares, deposit.lp_shares),
            "total_deposited": checked_add(position.total_deposited, amount),
            "updated_at": now,
        }
    )
    market = market.model_copy(
        update={
            "reserve_a": checked_add(market.reserve_a, deposit.amount_a),
            "reserve_b": checked_add(market.reserve_b, deposit.amount_b),
            "lp_supply": checked_add(market.lp_supply, deposit.lp_shares),
            "liquidity_providers_count": market.liquidity_providers_count + int(new_provider),
        }
    )
    return market, position, deposit


def sync_reserves(market: Market, pool_balance: int) -> Market:
    """Fold value credited to the pool account from outside into the reserves.

    Keeps reserve_a + reserve_b equal to the pool balance so that withdrawal
    reductions never exceed the reserves. The surplus is split at the current ratio.
    """
    reserves = checked_add(market.reserve_a, market.reserve_b)
    if pool_balance < reserves:
        raise InsufficientPoolBalance(pool_balance=pool_balance, reserves=reserves)
    if pool_balance == reserves:
        return market
    extra_a, extra_b = split_proportional(
        pool_balance - reserves, market.reserve_a, market.reserve_b
    )
    return market.model_copy(
        update={
            "reserve_a": checked_add(market.reserve_a, extra_a),
            "reserve_b": checked_add(market.reserve_b, extra_b),
        }
    )


def quote_withdrawal(market: Market, lp_shares: int, pool_balance: int) -> Withdrawal:
    """gross = floor(lp_shares * pool_balance / lp_supply); fee in bps on gross; net = gross - fee."""
    if market.lp_supply == 0:
        raise InsufficientLiquidity("Pool has no liquidity", market_id=market.market_id)
    if lp_shares > market.lp_supply:
        raise InsufficientLiquidity(lp_shares=lp_shares, lp_supply=market.lp_supply)
    gross = mul_div_floor(lp_shares, pool_balance, market.lp_supply)
    if gross == 0:
        raise InvalidAmount("Withdrawal amount rounds to zero", lp_shares=lp_shares)
    if pool_balance < gross:
        raise InsufficientPoolBalance(pool_balance=pool_balance, withdrawal=gross)
    fee = bps_of(gross, market.withdrawal_fee_bps)
    net = checked_sub(gross, fee)
    net_a, net_b = split_proportional(net, market.reserve_a, market.reserve_b)
    return Withdrawal(
        lp_shares=lp_shares, gross=gross, fee=fee, net=net, net_a=net_a, net_b=net_b
    )


def apply_withdrawal(
    market: Market,
    position: LiquidityPosition | None,
    lp_shares: int,
    pool_balance: int,
    now: int,
) -> tuple[Market, LiquidityPosition, Withdrawal]:
    """RemoveLiquidity state change. The fee stays in the pool for remaining providers."""
    if lp_shares <= 0:
        raise InvalidAmount(lp_shares=lp_shares)
    require_active(market)
    held = position.lp_shares if position is not None else 0
    if position is None or lp_shares > held:
        raise InsufficientLiquidity(lp_shares=lp_shares, held=held)
    w = quote_withdrawal(market, lp_shares, pool_balance)

    position = position.model_copy(
        update={
            "lp_shares": checked_sub(position.lp_shares, lp_shares),
            "total_withdrawn": checked_add(position.total_withdrawn, w.net),
            "updated_at": now,
        }
    )
    market = market.model_copy(
        update={
            "reserve_a": checked_sub(market.reserve_a, w.net_a),
            "reserve_b": checked_sub(market.reserve_b, w.net_b),
            "lp_supply": checked_sub(market.lp_supply, lp_shares),
            "fees_collected": checked_add(market.fees_collected, w.fee),
        }
    )
    return market, position, w
