"""Tests for the command line interface."""

import pytest
from typer.testing import CliRunner

from swiss_coin.cli import app
from swiss_coin.db import Database
from swiss_coin.models import Split, Transaction


@pytest.fixture
def cli_runner():
    return CliRunner()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """Point the CLI at a temporary database."""
    path = tmp_path / "cli.db"
    monkeypatch.setenv("SWISS_COIN_DATABASE_PATH", str(path))
    monkeypatch.delenv("SWISS_COIN_CURRENT_USER_ID", raising=False)
    return path


@pytest.fixture
def with_alice(cli_runner, db_path):
    result = cli_runner.invoke(app, ["person", "add", "Alice"])
    assert result.exit_code == 0
    return db_path


def stored(db_path, record_type):
    db = Database(db_path)
    try:
        return db.fetch(record_type)
    finally:
        db.close()


def test_person_add_and_list(cli_runner, db_path):
    result = cli_runner.invoke(app, ["person", "add", "Alice", "--phone", "+41 79 000"])
    assert result.exit_code == 0
    assert "Added Alice" in result.output

    result = cli_runner.invoke(app, ["person", "list"])
    assert result.exit_code == 0
    assert "Alice" in result.output
    assert "$0.00" in result.output


def test_add_equal_split(cli_runner, with_alice):
    result = cli_runner.invoke(app, ["add", "-t", "Dinner", "-a", "90", "-w", "Alice"])

    assert result.exit_code == 0
    assert "Transaction saved" in result.output
    assert "$45.00" in result.output
    assert "Splits add up to the total" in result.output
    assert len(stored(with_alice, Split)) == 2


def test_add_shares_split(cli_runner, with_alice):
    result = cli_runner.invoke(
        app,
        ["add", "-t", "Taxi", "-a", "90", "-w", "Alice", "-m", "shares", "-i", "Alice=2"],
    )

    assert result.exit_code == 0
    assert "$60.00" in result.output
    assert "$30.00" in result.output


def test_add_invalid_percentages(cli_runner, with_alice):
    result = cli_runner.invoke(
        app,
        ["add", "-t", "Rent", "-a", "100", "-w", "Alice", "-m", "percentage", "-i", "Alice=10"],
    )

    assert result.exit_code == 1
    assert "Percentages must add up to 100%" in result.output
    assert stored(with_alice, Transaction) == []


def test_add_unknown_person(cli_runner, db_path):
    result = cli_runner.invoke(app, ["add", "-t", "Dinner", "-a", "90", "-w", "Zed"])

    assert result.exit_code == 1
    assert "No person named 'Zed'" in result.output


def test_add_invalid_amount(cli_runner, db_path):
    result = cli_runner.invoke(app, ["add", "-t", "Dinner", "-a", "ninety"])

    assert result.exit_code == 1
    assert "Could not parse amount" in result.output


def test_add_dry_run_saves_nothing(cli_runner, with_alice):
    result = cli_runner.invoke(
        app, ["add", "-t", "Dinner", "-a", "10", "-w", "Alice", "--dry-run"]
    )

    assert result.exit_code == 0
    assert "Preview" in result.output
    assert "$5.00" in result.output
    assert stored(with_alice, Transaction) == []


def test_list_show_and_balance(cli_runner, with_alice):
    cli_runner.invoke(app, ["add", "-t", "Dinner", "-a", "90", "-w", "Alice"])

    result = cli_runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "Dinner" in result.output

    transaction_id = str(stored(with_alice, Transaction)[0].id)
    result = cli_runner.invoke(app, ["show", transaction_id[:8]])
    assert result.exit_code == 0
    assert "Dinner" in result.output
    assert "$90.00" in result.output

    result = cli_runner.invoke(app, ["balance", "alice"])
    assert result.exit_code == 0
    assert "Alice owes you $45.00" in result.output


def test_set_amount_rescales(cli_runner, with_alice):
    cli_runner.invoke(app, ["add", "-t", "Dinner", "-a", "90", "-w", "Alice"])
    transaction_id = str(stored(with_alice, Transaction)[0].id)

    result = cli_runner.invoke(app, ["set-amount", transaction_id, "120"])

    assert result.exit_code == 0
    assert "$60.00" in result.output
    assert "Amount updated" in result.output


def test_delete(cli_runner, with_alice):
    cli_runner.invoke(app, ["add", "-t", "Dinner", "-a", "90", "-w", "Alice"])
    transaction_id = str(stored(with_alice, Transaction)[0].id)

    result = cli_runner.invoke(app, ["delete", transaction_id, "--yes"])
    assert result.exit_code == 0
    assert "Deleted 'Dinner'" in result.output
    assert stored(with_alice, Split) == []

    result = cli_runner.invoke(app, ["list"])
    assert "No transactions yet" in result.output


def test_show_unknown_transaction(cli_runner, db_path):
    result = cli_runner.invoke(app, ["show", "deadbeef"])

    assert result.exit_code == 1
    assert "not found" in result.output
