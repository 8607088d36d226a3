"""Market subcommand: create, show, list, cancel, dispute."""

from __future__ import annotations

import typer

from predsettle.cli.common import open_engine, require_caller
from predsettle.engine import implied_odds
from predsettle.models import Market, Outcome

app = typer.Typer(help="Market lifecycle")


def _print_market(m: Market) -> None:
    odds_a, odds_b = implied_odds(m)
    typer.echo(f"Market: {m.market_id}  [{m.status.value}]  {m.title}")
    typer.echo(f"Authority: {m.authority}  Oracle: {m.oracle}")
    typer.echo(f"Deadline: {m.resolution_deadline}  Created: {m.created_at}")
    typer.echo(
        f"Stakes: {m.label(Outcome.A)}={m.stake_a} ({odds_a / 100:.2f}%)  "
        f"{m.label(Outcome.B)}={m.stake_b} ({odds_b / 100:.2f}%)  bets={m.total_bets}"
    )
    typer.echo(
        f"Pool: reserve_a={m.reserve_a} reserve_b={m.reserve_b} "
        f"lp_supply={m.lp_supply} providers={m.liquidity_providers_count} fees={m.fees_collected}"
    )
    typer.echo(
        f"Fees (bps): oracle={m.oracle_fee_bps} platform={m.platform_fee_bps} "
        f"withdrawal={m.withdrawal_fee_bps}"
    )
    if m.winning_outcome is not None:
        typer.echo(
            f"Winner: {m.label(m.winning_outcome)}  payout_pool={m.total_payout_pool}  "
            f"winning_pool={m.winning_pool}  claimed={m.total_claimed}"
        )


@app.command("create")
def create(
    ctx: typer.Context,
    market_id: str = typer.Argument(..., help="Market identifier"),
    oracle: str = typer.Option(..., "--oracle", help="Identity allowed to resolve"),
    deadline: int = typer.Option(..., "--deadline", help="Resolution deadline (unix seconds)"),
    title: str = typer.Option("", "--title", "-t"),
    description: str = typer.Option("", "--description"),
    category: str = typer.Option("", "--category"),
    oracle_fee_bps: int | None = typer.Option(None, "--oracle-fee-bps"),
    platform_fee_bps: int | None = typer.Option(None, "--platform-fee-bps"),
    withdrawal_fee_bps: int | None = typer.Option(None, "--withdrawal-fee-bps"),
    initial_liquidity: int = typer.Option(0, "--initial-liquidity", help="Seed the pool from the creator"),
) -> None:
    """Create an Active market."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        market = engine.create_market(
            caller,
            market_id,
            oracle=oracle,
            resolution_deadline=deadline,
            title=title,
            description=description,
            category=category,
            oracle_fee_bps=oracle_fee_bps,
            platform_fee_bps=platform_fee_bps,
            withdrawal_fee_bps=withdrawal_fee_bps,
            initial_liquidity=initial_liquidity,
        )
        typer.echo(f"Created market {market.market_id} (deadline {market.resolution_deadline})")


@app.command("show")
def show(ctx: typer.Context, market_id: str = typer.Argument(...)) -> None:
    """Show a market record."""
    with open_engine(ctx) as (engine, _):
        _print_market(engine.get_market(market_id))


@app.command("list")
def list_cmd(ctx: typer.Context) -> None:
    """List all markets."""
    with open_engine(ctx) as (_, backend):
        markets = backend.list_records("market")
        if not markets:
            typer.echo("No markets.")
            return
        for m in markets:
            typer.echo(f"{m.market_id}  [{m.status.value}]  stake={m.total_stake}  {m.title}")


@app.command("cancel")
def cancel(ctx: typer.Context, market_id: str = typer.Argument(...)) -> None:
    """Cancel a market (authority only). Bettors can then claim refunds."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        engine.cancel_market(caller, market_id)
        typer.echo(f"Cancelled market {market_id}")


@app.command("dispute")
def dispute(ctx: typer.Context, market_id: str = typer.Argument(...)) -> None:
    """Move an Active market to Disputed (authority only)."""
    caller = require_caller(ctx)
    with open_engine(ctx) as (engine, _):
        engine.dispute_market(caller, market_id)
        typer.echo(f"Disputed market {market_id}")
