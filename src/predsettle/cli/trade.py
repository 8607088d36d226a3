"""Bet, liquidity, resolve and claim subcommands."""

from __future__ import annotations

import typer

from predsettle.cli.common import open_engine, require_caller

bet_app = typer.Typer(help="Bets on outcomes")
liquidity_app = typer.Typer(help="Liquidity pool deposits and withdrawals")
claim_app = typer.Typer(help="Claim winnings or refunds")


@bet_app.command("place")
def place(
    ctx: typer.Context,
    market_id: str = typer.Argument(...),
    outcome: str = typer.Option(..., "--outcome", "-o", help="A/B or 0/1"),
    amount: int = typer.Option(..., "--amount", "-a"),
) -> None:
    """Stake on one outcome of a market."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        position = engine.place_bet(caller, market_id, outcome, amount)
        typer.echo(f"Position: {position.outcome.name} amount={position.amount}")


@liquidity_app.command("add")
def add(
    ctx: typer.Context,
    market_id: str = typer.Argument(...),
    amount: int = typer.Option(..., "--amount", "-a"),
) -> None:
    """Deposit into the liquidity pool."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        lp = engine.add_liquidity(caller, market_id, amount)
        typer.echo(f"LP shares: {lp.lp_shares}  deposited={lp.total_deposited}")


@liquidity_app.command("remove")
def remove(
    ctx: typer.Context,
    market_id: str = typer.Argument(...),
    shares: int = typer.Option(..., "--shares", "-s"),
) -> None:
    """Burn LP shares and withdraw the net amount."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        net = engine.remove_liquidity(caller, market_id, shares)
        typer.echo(f"Withdrawn: {net}")


def resolve(
    ctx: typer.Context,
    market_id: str = typer.Argument(...),
    outcome: str = typer.Option(..., "--outcome", "-o", help="A/B or 0/1"),
    evidence: str = typer.Option(..., "--evidence", "-e", help="Oracle evidence payload"),
) -> None:
    """Resolve a market (oracle only, at or after the deadline)."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        market = engine.resolve(caller, market_id, outcome, evidence.encode())
        typer.echo(
            f"Resolved {market_id}: {market.winning_outcome.name}  "
            f"payout_pool={market.total_payout_pool}  oracle_fee={market.oracle_fee}"
        )


@claim_app.command("winnings")
def winnings(ctx: typer.Context, market_id: str = typer.Argument(...)) -> None:
    """Claim winnings from a resolved market."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        amount = engine.claim_winnings(caller, market_id)
        typer.echo(f"Claimed: {amount}")


@claim_app.command("refund")
def refund(ctx: typer.Context, market_id: str = typer.Argument(...)) -> None:
    """Claim a stake refund from a cancelled market."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        amount = engine.claim_refund(caller, market_id)
        typer.echo(f"Refunded: {amount}")
