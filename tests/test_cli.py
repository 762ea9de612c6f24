"""Tests for the command-line interface."""
import csv
import json

import pytest
from click.testing import CliRunner

from emi_calc.main import cli

HOME_LOAN = ["-p", "250k", "-r", "7", "-t", "360"]


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.delenv("EMI_CALC_PREVIEW_ROWS", raising=False)
    monkeypatch.delenv("EMI_CALC_LOG_LEVEL", raising=False)
    return CliRunner()


def test_schedule_prints_summary_and_truncated_table(runner):
    result = runner.invoke(cli, ["schedule", *HOME_LOAN])
    assert result.exit_code == 0, result.output
    assert "Monthly EMI        : 1663.26" in result.output
    assert "Months to payoff   : 360" in result.output
    assert "showing first 120 rows" in result.output
    assert "240 more rows not shown" in result.output


def test_schedule_preview_rows_from_environment(runner, monkeypatch):
    monkeypatch.setenv("EMI_CALC_PREVIEW_ROWS", "12")
    result = runner.invoke(cli, ["schedule", "-p", "10000", "-r", "10", "-y", "2"])
    assert result.exit_code == 0, result.output
    assert "12 more rows not shown" in result.output


def test_schedule_with_prepayment_shows_savings(runner):
    result = runner.invoke(cli, ["schedule", *HOME_LOAN, "--prepay", "12:50000", "--yearly"])
    assert result.exit_code == 0, result.output
    assert "Interest saved" in result.output
    assert "Term reduction" in result.output
    assert "Year\tInterest\tPrincipal" in result.output


def test_schedule_csv_export(runner, tmp_path):
    path = tmp_path / "schedule.csv"
    result = runner.invoke(
        cli, ["schedule", "-p", "12000", "-r", "0", "-t", "12", "--output", str(path)]
    )
    assert result.exit_code == 0, result.output
    with path.open(newline="", encoding="utf-8") as f:
        rows = list(csv.reader(f))
    assert rows[0][0] == "Month"
    assert len(rows) == 13
    assert rows[1] == ["1", "12000.00", "0.00", "1000.00", "1000.00", "0.00", "11000.00"]
    assert rows[-1][-1] == "0.00"


def test_schedule_json_export(runner, tmp_path):
    path = tmp_path / "schedule.json"
    result = runner.invoke(
        cli, ["schedule", *HOME_LOAN, "--extra-monthly", "500", "--output", str(path)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["actual_tenure_months"] < 360
    assert len(data["schedule"]) == data["actual_tenure_months"]
    assert data["schedule"][0]["prepayment_amount"] == 500
    assert data["yearly"][0]["year"] == 1


def test_unsupported_export_format(runner, tmp_path):
    result = runner.invoke(cli, ["schedule", *HOME_LOAN, "--output", str(tmp_path / "x.pdf")])
    assert result.exit_code == 2
    assert "Unsupported output format" in result.output


def test_summary_json_export(runner, tmp_path):
    path = tmp_path / "summary.json"
    result = runner.invoke(
        cli, ["summary", *HOME_LOAN, "--recurring", "12:10000:12", "--output", str(path)]
    )
    assert result.exit_code == 0, result.output
    summary = json.loads(path.read_text(encoding="utf-8"))["summary"]
    assert "schedule" not in summary
    assert summary["emi"] == pytest.approx(1663.26, abs=0.01)
    assert summary["savings"]["interest_saved"] > 0


def test_invalid_principal_is_reported(runner):
    result = runner.invoke(cli, ["summary", "-p", "0", "-r", "7", "-t", "360"])
    assert result.exit_code == 2
    assert "principal must be greater than 0" in result.output


def test_missing_tenure_is_reported(runner):
    result = runner.invoke(cli, ["summary", "-p", "1000", "-r", "7"])
    assert result.exit_code == 2
    assert "Tenure is required" in result.output


def test_zero_extra_monthly_is_ignored(runner):
    result = runner.invoke(cli, ["summary", *HOME_LOAN, "--extra-monthly", "0"])
    assert result.exit_code == 0, result.output
    assert "Months to payoff   : 360" in result.output
    assert "Interest saved" not in result.output


def test_bad_prepayment_format(runner):
    result = runner.invoke(cli, ["summary", *HOME_LOAN, "--prepay", "12-5000"])
    assert result.exit_code == 2
    assert "MONTH:AMOUNT" in result.output


def test_compare(runner):
    result = runner.invoke(
        cli,
        ["compare", "--loan-a=-p 2500000 -r 8.5 -y 20", "--loan-b=-p 2500000 -r 9 -t 180"],
    )
    assert result.exit_code == 0, result.output
    assert "Loan A" in result.output
    assert "total_interest" in result.output


def test_compare_rejects_unknown_option(runner):
    result = runner.invoke(cli, ["compare", "--loan-a=-p 1000 -r 5 -t 12 --bogus 1", "--loan-b=-p 1000 -r 5 -t 12"])
    assert result.exit_code == 2
    assert "Unknown option in scenario" in result.output


def test_solve_tenure(runner):
    result = runner.invoke(cli, ["solve-tenure", "-p", "12000", "-r", "0", "--emi", "1000"])
    assert result.exit_code == 0, result.output
    assert "Tenure             : 12 months (1 years 0 months)" in result.output
