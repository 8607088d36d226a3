"""Root CLI app - entry point and command registration."""

from pathlib import Path

import typer

from predsettle.config import get_settings
from predsettle.config.settings import configure_logging

app = typer.Typer(
    name="predsettle",
    help="predsettle - Prediction market settlement: markets, bets, liquidity, resolution and payouts.",
    no_args_is_help=True,
)


@app.callback()
def main(
    ctx: typer.Context,
    config_dir: Path | None = typer.Option(
        None, "--config-dir", "-C", help="Config directory (default: ./config or package config)"
    ),
    profile: str | None = typer.Option(
        None, "--profile", "-p", help="Config profile (e.g. dev) to overlay on default.toml"
    ),
    db_path: str | None = typer.Option(None, "--db", help="DuckDB path (overrides config)"),
    caller: str | None = typer.Option(None, "--as", help="Identity performing the operation"),
    at: int | None = typer.Option(None, "--at", help="Fixed clock (unix seconds) instead of now"),
) -> None:
    """Configure logging and store options in context."""
    settings = get_settings(profile, config_dir)
    if db_path:
        settings.storage["db_path"] = db_path
    configure_logging(settings)
    ctx.obj = {"settings": settings, "caller": caller, "at": at, "profile": profile}


# Subcommands registered from other modules
from predsettle.cli import ledger, log, market, trade  # noqa: E402

app.add_typer(market.app, name="market")
app.add_typer(trade.bet_app, name="bet")
app.add_typer(trade.liquidity_app, name="liquidity")
app.add_typer(trade.claim_app, name="claim")
app.add_typer(ledger.app, name="ledger")
app.add_typer(log.app, name="log")
app.command("resolve")(trade.resolve)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
