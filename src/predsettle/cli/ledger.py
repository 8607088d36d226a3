"""Ledger subcommand: mint, balance."""

from __future__ import annotations

import typer

from predsettle.cli.common import open_engine

app = typer.Typer(help="Account balances")


@app.command("mint")
def mint(
    ctx: typer.Context,
    account: str = typer.Argument(...),
    amount: int = typer.Option(..., "--amount", "-a"),
) -> None:
    """Credit an account (local funding for demos and tests)."""
    with open_engine(ctx) as (_, backend):
        backend.mint(account, amount)
        typer.echo(f"{account}: {backend.balance(account)}")


@app.command("balance")
def balance(ctx: typer.Context, account: str | None = typer.Argument(None)) -> None:
    """Show one account's balance, or all balances."""
    with open_engine(ctx) as (_, backend):
        if account:
            typer.echo(f"{account}: {backend.balance(account)}")
            return
        for name, amount in backend.list_balances():
            typer.echo(f"{name}: {amount}")
