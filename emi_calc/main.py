"""Command-line interface for the EMI calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compute full amortization schedules with prepayments,
view summaries, compare two loans or find the tenure that fits a target
installment. Schedules can be printed to the terminal or exported to JSON/CSV
files.
"""

from __future__ import annotations

import csv
import json
import logging
import os
import shlex
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

import click

from .comparison import compare_loans
from .data_models import LoanConfig, PrepaymentRule, RecurringPrepayment, ScheduleResult
from .engine import calculate, group_by_year, prepayment_savings, solve_tenure_for_emi
from .errors import EMICalculatorError, InvalidLoanParameters
from .formatter import (
    SCHEDULE_HEADERS,
    print_comparison,
    print_schedule,
    print_summary,
    print_yearly,
    schedule_rows,
    serialize_result,
    serialize_savings,
    serialize_yearly,
)
from .utils import (
    env_int,
    parse_amount,
    parse_one_time_strings,
    parse_recurring_strings,
    tenure_from_parts,
)

DEFAULT_PREVIEW_ROWS = 120


def configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.environ.get("EMI_CALC_LOG_LEVEL", "WARNING")
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        raise click.BadParameter(f"Unknown log level: {level_name}", param_hint="EMI_CALC_LOG_LEVEL")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def preview_rows() -> int:
    try:
        return env_int("EMI_CALC_PREVIEW_ROWS", DEFAULT_PREVIEW_ROWS)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="EMI_CALC_PREVIEW_ROWS")


def build_request_from_options(
    principal: str,
    rate: float,
    tenure: Optional[int],
    years: Optional[int],
    prepay: Tuple[str, ...] = (),
    recurring: Tuple[str, ...] = (),
    extra_monthly: Optional[str] = None,
) -> Tuple[LoanConfig, List[PrepaymentRule]]:
    """Turn raw option values into a ``LoanConfig`` and its prepayment rules."""
    try:
        config = LoanConfig(
            principal=parse_amount(principal),
            annual_rate_percent=float(rate),
            tenure_months=tenure_from_parts(tenure, years),
        )
        rules: List[PrepaymentRule] = []
        rules.extend(parse_one_time_strings(prepay))
        rules.extend(parse_recurring_strings(recurring))
        if extra_monthly:
            extra = parse_amount(extra_monthly)
            if extra != 0:
                rules.append(RecurringPrepayment(start_month=1, amount=extra, frequency_months=1))
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    return config, rules


def run_engine(func: Callable[..., Any], *args: Any) -> Any:
    """Call an engine function, reporting its errors as click errors."""
    try:
        return func(*args)
    except InvalidLoanParameters as exc:
        raise click.BadParameter(str(exc), param_hint=exc.parameter)
    except EMICalculatorError as exc:
        raise click.ClickException(str(exc))


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    """Export a serialised result to a JSON file."""
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, result: ScheduleResult) -> None:
    """Export the schedule to a CSV file with two decimal places."""
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(SCHEDULE_HEADERS)
        for row in schedule_rows(result):
            writer.writerow([row[0]] + [f"{value:.2f}" for value in row[1:]])


def loan_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the loan and prepayment options shared by several commands."""
    options = [
        click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts 500k, 2.5m)"),
        click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)"),
        click.option("--tenure", "-t", "tenure", type=int, help="Loan tenure in months"),
        click.option("--years", "-y", "years", type=int, help="Loan tenure in years (added to --tenure)"),
        click.option("--prepay", "prepay", multiple=True, help="One-time prepayment in MONTH:AMOUNT format"),
        click.option(
            "--recurring",
            "recurring",
            multiple=True,
            help="Recurring prepayment in START:AMOUNT[:EVERY] format, EVERY in months (default 1)",
        ),
        click.option(
            "--extra-monthly", "extra_monthly", help="Extra payment added every month from month 1 (0 for none)"
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine activity to stderr")
def cli(verbose: bool) -> None:
    """An EMI calculator with prepayments and loan comparison."""
    configure_logging(verbose)


@cli.command()
@loan_options
@click.option("--yearly", is_flag=True, help="Also print the year-by-year breakdown")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str,
    rate: float,
    tenure: Optional[int],
    years: Optional[int],
    prepay: Tuple[str, ...],
    recurring: Tuple[str, ...],
    extra_monthly: Optional[str],
    yearly: bool,
    output: Optional[str],
) -> None:
    """Compute and print the full amortization schedule."""
    config, rules = build_request_from_options(principal, rate, tenure, years, prepay, recurring, extra_monthly)
    result = run_engine(calculate, config, rules)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            data = serialize_result(result)
            data["yearly"] = serialize_yearly(group_by_year(result.schedule))
            export_to_json(path, data)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, result)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv", param_hint="--output")
        click.echo(f"Schedule exported to {path}")
        return
    savings = run_engine(prepayment_savings, config, rules) if rules else None
    print_summary(result, savings)
    max_rows = preview_rows()
    if len(result.schedule) > max_rows:
        click.echo(f"Schedule has {len(result.schedule)} rows; showing first {max_rows} rows.")
    print_schedule(result, max_rows)
    if yearly:
        print_yearly(group_by_year(result.schedule))


@cli.command()
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
def summary(
    principal: str,
    rate: float,
    tenure: Optional[int],
    years: Optional[int],
    prepay: Tuple[str, ...],
    recurring: Tuple[str, ...],
    extra_monthly: Optional[str],
    output: Optional[str],
) -> None:
    """Compute and print only the summary metrics for a loan."""
    config, rules = build_request_from_options(principal, rate, tenure, years, prepay, recurring, extra_monthly)
    result = run_engine(calculate, config, rules)
    savings = run_engine(prepayment_savings, config, rules) if rules else None
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Summary export must use .json extension", param_hint="--output")
        data = serialize_result(result, max_rows=0)
        data.pop("schedule")
        data.pop("truncated", None)
        if savings:
            data["savings"] = serialize_savings(savings)
        export_to_json(path, {"summary": data})
        click.echo(f"Summary exported to {path}")
    else:
        print_summary(result, savings)


SCENARIO_OPTIONS = {
    "-p": "principal",
    "--principal": "principal",
    "-r": "rate",
    "--rate": "rate",
    "-t": "tenure",
    "--tenure": "tenure",
    "-y": "years",
    "--years": "years",
    "--prepay": "prepay",
    "--recurring": "recurring",
    "--extra-monthly": "extra_monthly",
}


def parse_scenario_opts(opts: str) -> Dict[str, Any]:
    """Convert a quoted scenario option string into ``build_request_from_options`` arguments."""
    tokens = shlex.split(opts)
    params: Dict[str, Any] = {
        "principal": None,
        "rate": None,
        "tenure": None,
        "years": None,
        "prepay": [],
        "recurring": [],
        "extra_monthly": None,
    }
    i = 0
    while i < len(tokens):
        token = tokens[i]
        key = SCENARIO_OPTIONS.get(token)
        if key is None:
            raise click.BadParameter(f"Unknown option in scenario: {token}")
        if i + 1 >= len(tokens):
            raise click.BadParameter(f"Option {token} in scenario needs a value")
        value = tokens[i + 1]
        try:
            if key in ("prepay", "recurring"):
                params[key].append(value)
            elif key == "rate":
                params[key] = float(value)
            elif key in ("tenure", "years"):
                params[key] = int(value)
            else:
                params[key] = value
        except ValueError:
            raise click.BadParameter(f"Invalid value for {token} in scenario: {value}")
        i += 2
    for required in ("principal", "rate"):
        if params[required] is None:
            raise click.BadParameter(f"Scenario missing required option {required}")
    params["prepay"] = tuple(params["prepay"])
    params["recurring"] = tuple(params["recurring"])
    return params


@cli.command()
@click.option("--loan-a", "loan_a", required=True, help="First loan options quoted string")
@click.option("--loan-b", "loan_b", required=True, help="Second loan options quoted string")
def compare(loan_a: str, loan_b: str) -> None:
    """Compare two loans.

    Loans are provided as quoted option strings, for example:

        emi-calc compare --loan-a "-p 500k -r 8.5 -y 20" --loan-b "-p 500k -r 9 -t 180"
    """
    config_a, rules_a = build_request_from_options(**parse_scenario_opts(loan_a))
    config_b, rules_b = build_request_from_options(**parse_scenario_opts(loan_b))
    comparison = run_engine(compare_loans, config_a, rules_a, config_b, rules_b)
    print_comparison(comparison)


@cli.command("solve-tenure")
@click.option("--principal", "-p", "principal", required=True, help="Loan amount (accepts 500k, 2.5m)")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--emi", "emi", required=True, help="Target monthly installment")
def solve_tenure(principal: str, rate: float, emi: str) -> None:
    """Find the shortest tenure whose EMI fits within a target installment."""
    try:
        principal_value = parse_amount(principal)
        target = parse_amount(emi)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    months = run_engine(solve_tenure_for_emi, principal_value, rate, target)
    result = run_engine(calculate, LoanConfig(principal_value, rate, months))
    click.echo(f"Tenure             : {months} months ({months // 12} years {months % 12} months)")
    click.echo(f"Monthly EMI        : {result.emi:.2f}")
    click.echo(f"Total interest     : {result.total_interest_paid:.2f}")


if __name__ == "__main__":
    cli()
