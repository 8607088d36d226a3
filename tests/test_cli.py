"""CLI end to end over a temporary DuckDB file."""

import pytest
from typer.testing import CliRunner

import predsettle.cli.app as cli_app
from predsettle.cli.app import app

runner = CliRunner()


@pytest.fixture
def cli(tmp_path, monkeypatch):
    # Leave structlog at its defaults so loggers are not bound to the runner's streams.
    monkeypatch.setattr(cli_app, "configure_logging", lambda settings: None)
    (tmp_path / "default.toml").write_text("[engine]\noracle_fee_bps = 100\n", encoding="utf-8")
    db = str(tmp_path / "cli.duckdb")

    def invoke(*args: str, caller: str | None = None, at: int | None = None):
        opts = ["--config-dir", str(tmp_path), "--db", db]
        if caller:
            opts += ["--as", caller]
        if at is not None:
            opts += ["--at", str(at)]
        return runner.invoke(app, [*opts, *args])

    return invoke


def test_market_round_trip(cli):
    assert cli("ledger", "mint", "alice", "--amount", "1000").exit_code == 0
    assert cli("ledger", "mint", "bob", "--amount", "1000").exit_code == 0

    result = cli("market", "create", "m1", "--oracle", "oracle", "--deadline", "100", "-t", "Rain", caller="creator", at=0)
    assert result.exit_code == 0, result.output
    assert "Created market m1" in result.output

    assert cli("bet", "place", "m1", "-o", "A", "-a", "100", caller="alice", at=10).exit_code == 0
    assert cli("bet", "place", "m1", "-o", "B", "-a", "300", caller="bob", at=20).exit_code == 0

    result = cli("resolve", "m1", "-o", "A", "-e", "rain gauge 12mm", caller="oracle", at=100)
    assert result.exit_code == 0, result.output
    assert "payout_pool=396" in result.output

    result = cli("claim", "winnings", "m1", caller="alice", at=101)
    assert result.exit_code == 0, result.output
    assert "Claimed: 396" in result.output

    result = cli("market", "show", "m1")
    assert "[resolved]" in result.output
    assert "Winner: Yes" in result.output

    result = cli("ledger", "balance")
    assert "alice: 1296" in result.output
    assert "oracle: 4" in result.output

    result = cli("log", "stats")
    assert "Total events: 5" in result.output


def test_domain_error_exit_code(cli):
    cli("ledger", "mint", "alice", "--amount", "10")
    cli("market", "create", "m1", "--oracle", "oracle", "--deadline", "100", caller="creator", at=0)
    result = cli("bet", "place", "m1", "-o", "A", "-a", "50", caller="alice", at=1)
    assert result.exit_code == 1
    assert "insufficient_funds" in result.output


def test_caller_required(cli):
    result = cli("bet", "place", "m1", "-o", "A", "-a", "5")
    assert result.exit_code == 2
    assert "--as CALLER" in result.output


def test_log_events_filtered(cli):
    cli("ledger", "mint", "alice", "--amount", "100")
    cli("market", "create", "m1", "--oracle", "oracle", "--deadline", "100", caller="creator", at=0)
    cli("bet", "place", "m1", "-o", "B", "-a", "40", caller="alice", at=5)
    result = cli("log", "events", "--market", "m1", "--kind", "bet_placed")
    assert result.exit_code == 0, result.output
    assert '"amount": 40' in result.output
    assert '"bettor": "alice"' in result.output
    assert "market_created" not in result.output
