from __future__ import annotations

from typer.testing import CliRunner

from parliament.__main__ import app

runner = CliRunner()


def test_bills_command_lists_the_catalog():
    result = runner.invoke(app, ["bills"])

    assert result.exit_code == 0
    assert "const_prop_rep" in result.output


def test_run_command_prints_the_parliament():
    result = runner.invoke(app, ["run", "--days", "0", "--seats", "6", "--seed", "4"])

    assert result.exit_code == 0, result.output
    assert "Parties" in result.output
    assert "Government" in result.output


def test_run_command_rejects_an_unknown_system():
    result = runner.invoke(app, ["run", "--days", "0", "--system", "STV"])

    assert result.exit_code != 0
