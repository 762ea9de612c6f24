"""Output helpers for the EMI calculator.

This module renders engine results as plain text tables for the terminal and
converts them into JSON-serialisable dictionaries for export and the web API.
Numbers are rounded to two decimals only here; the engine itself never rounds.
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable, List, Optional

from .data_models import (
    ComparisonResult,
    PrepaymentSavings,
    ScheduleEntry,
    ScheduleResult,
    YearlySummary,
)

SCHEDULE_HEADERS = [
    "Month",
    "Opening Balance",
    "Interest",
    "Principal Paid",
    "Regular EMI",
    "Extra Payment",
    "Closing Balance",
]


def print_summary(result: ScheduleResult, savings: Optional[PrepaymentSavings] = None) -> None:
    """Print a summary of loan metrics in a human-readable format."""
    print("Summary")
    print("-" * 72)
    print(f"Monthly EMI        : {result.emi:.2f}")
    print(f"Principal repaid   : {result.total_principal_paid:.2f}")
    print(f"Total interest     : {result.total_interest_paid:.2f}")
    if result.total_prepayment:
        print(f"Total prepayment   : {result.total_prepayment:.2f}")
    print(f"Total amount paid  : {result.total_amount_paid:.2f}")
    print(f"Months to payoff   : {result.actual_tenure_months}")
    if savings:
        print(f"Baseline interest  : {savings.baseline_total_interest:.2f}")
        print(f"Interest saved     : {savings.interest_saved:.2f}")
        if savings.months_saved:
            print(f"Term reduction     : {savings.months_saved} months")
    print("-" * 72)


def schedule_rows(result: ScheduleResult) -> List[List[float]]:
    """Return the schedule as rows matching ``SCHEDULE_HEADERS``."""
    return [
        [
            entry.month,
            entry.opening_balance,
            entry.interest_portion,
            entry.scheduled_principal_portion,
            result.emi,
            entry.prepayment_amount,
            entry.closing_balance,
        ]
        for entry in result.schedule
    ]


def print_schedule(result: ScheduleResult, max_rows: Optional[int] = None) -> None:
    """Print the amortization schedule as a tab separated table.

    When ``max_rows`` is given only that many rows are printed, followed by a
    note saying how many were left out.
    """
    rows = schedule_rows(result)
    shown = rows if max_rows is None else rows[:max_rows]
    print("\t".join(SCHEDULE_HEADERS))
    for row in shown:
        print("\t".join([str(row[0])] + [f"{value:.2f}" for value in row[1:]]))
    if len(shown) < len(rows):
        print(f"... {len(rows) - len(shown)} more rows not shown")


def print_yearly(yearly: Iterable[YearlySummary]) -> None:
    print("Year\tInterest\tPrincipal")
    for year in yearly:
        print(f"{year.year}\t{year.interest:.2f}\t{year.principal:.2f}")


def print_comparison(comparison: ComparisonResult) -> None:
    """Print a comparison of two loans side by side.

    The difference column is loan B minus loan A, so a negative difference
    means the second loan is cheaper or shorter.
    """
    a, b = comparison.loan_a, comparison.loan_b
    metrics = [
        ("emi", a.emi, b.emi, comparison.emi_delta),
        ("total_interest", a.total_interest_paid, b.total_interest_paid, comparison.total_interest_delta),
        ("total_payment", a.total_amount_paid, b.total_amount_paid, comparison.total_payment_delta),
        ("months", a.actual_tenure_months, b.actual_tenure_months, comparison.tenure_delta),
    ]
    print("Comparison")
    print("=" * 72)
    print(f"{'Metric':20s} {'Loan A':>15s} {'Loan B':>15s} {'Difference':>15s}")
    for name, v1, v2, diff in metrics:
        print(f"{name:20s} {v1:15.2f} {v2:15.2f} {diff:15.2f}")
    print("=" * 72)


def serialize_entry(entry: ScheduleEntry) -> Dict[str, Any]:
    data = asdict(entry)
    data["principal_repaid"] = entry.principal_repaid
    data["total_payment"] = entry.total_payment
    return data


def serialize_result(
    result: ScheduleResult, max_rows: Optional[int] = None
) -> Dict[str, Any]:
    """Convert a ``ScheduleResult`` into plain dictionaries and lists.

    ``max_rows`` limits the number of schedule entries included; the summary
    then carries a ``truncated`` count of the rows left out.
    """
    entries = result.schedule if max_rows is None else result.schedule[:max_rows]
    data: Dict[str, Any] = {
        "emi": result.emi,
        "actual_tenure_months": result.actual_tenure_months,
        "total_interest_paid": result.total_interest_paid,
        "total_principal_paid": result.total_principal_paid,
        "total_amount_paid": result.total_amount_paid,
        "total_prepayment": result.total_prepayment,
        "schedule": [serialize_entry(entry) for entry in entries],
    }
    if len(entries) < len(result.schedule):
        data["truncated"] = len(result.schedule) - len(entries)
    return data


def serialize_comparison(
    comparison: ComparisonResult, max_rows: Optional[int] = None
) -> Dict[str, Any]:
    return {
        "loan_a": serialize_result(comparison.loan_a, max_rows),
        "loan_b": serialize_result(comparison.loan_b, max_rows),
        "emi_delta": comparison.emi_delta,
        "total_interest_delta": comparison.total_interest_delta,
        "total_payment_delta": comparison.total_payment_delta,
        "tenure_delta": comparison.tenure_delta,
    }


def serialize_yearly(yearly: Iterable[YearlySummary]) -> List[Dict[str, Any]]:
    return [asdict(year) for year in yearly]


def serialize_savings(savings: PrepaymentSavings) -> Dict[str, Any]:
    return asdict(savings)
