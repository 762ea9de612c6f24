"""Utility functions for the EMI calculator.

This module provides helpers for turning user input (command line options,
form fields) into the numbers and prepayment rules the engine works with.
Every parser raises ``ValueError`` with a message naming the bad input; the
command line and web front ends translate that into their own error types.
"""

from __future__ import annotations

import os
from typing import Iterable, List, Optional, Sequence, Union

from .data_models import OneTimePrepayment, RecurringPrepayment


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), thousands separators ("5,00,000") and
    shorthand with ``k``/``m`` suffixes (e.g. "500k" meaning 500_000).
    """
    cleaned = str(value).strip().lower().replace(",", "").replace("_", "")
    factor = 1.0
    if cleaned.endswith("k"):
        factor = 1_000.0
        cleaned = cleaned[:-1]
    elif cleaned.endswith("m"):
        factor = 1_000_000.0
        cleaned = cleaned[:-1]
    try:
        return float(cleaned) * factor
    except ValueError as exc:
        raise ValueError(f"Invalid amount: {value}") from exc


def parse_month(value: str) -> int:
    """Parse a 1-based month number."""
    try:
        month = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid month number: {value}") from exc
    if month < 1:
        raise ValueError(f"Month numbers start at 1; got {value}")
    return month


def tenure_from_parts(months: Optional[int], years: Optional[int]) -> int:
    """Combine a tenure given in months and/or years into months.

    The calculator page lets users enter "20 years 6 months"; both parts are
    optional but at least one must be given.
    """
    if months is None and years is None:
        raise ValueError("Tenure is required (months and/or years)")
    return (years or 0) * 12 + (months or 0)


def parse_one_time_strings(values: Iterable[str]) -> List[OneTimePrepayment]:
    """Parse ``MONTH:AMOUNT`` strings into one-time prepayments."""
    prepayments: List[OneTimePrepayment] = []
    for item in values:
        parts = item.split(":")
        if len(parts) != 2:
            raise ValueError(f"Prepayment must be in MONTH:AMOUNT format; got {item}")
        month_str, amount_str = parts
        prepayments.append(
            OneTimePrepayment(at_month=parse_month(month_str), amount=parse_amount(amount_str))
        )
    return prepayments


def parse_recurring_strings(values: Iterable[str]) -> List[RecurringPrepayment]:
    """Parse ``START:AMOUNT[:EVERY]`` strings into recurring prepayments.

    ``EVERY`` is the number of months between payments and defaults to 1.
    """
    prepayments: List[RecurringPrepayment] = []
    for item in values:
        parts = item.split(":")
        if len(parts) not in (2, 3):
            raise ValueError(
                f"Recurring prepayment must be in START:AMOUNT[:EVERY] format; got {item}"
            )
        start = parse_month(parts[0])
        amount = parse_amount(parts[1])
        frequency = parse_month(parts[2]) if len(parts) == 3 else 1
        prepayments.append(
            RecurringPrepayment(start_month=start, amount=amount, frequency_months=frequency)
        )
    return prepayments


def parse_form_list(value: Union[str, Sequence[str], None]) -> List[str]:
    """Parse a semicolon or newline separated list of entries from a form field.

    Commas are left alone because amounts may use them as thousands
    separators ("12:50,000"). A JSON list of strings is accepted as is.
    Returns a list of trimmed strings, skipping any empty entries.
    """
    if not value:
        return []
    if isinstance(value, str):
        parts = value.replace("\n", ";").split(";")
    elif isinstance(value, (list, tuple)):
        if not all(isinstance(p, str) for p in value):
            raise ValueError(f"Expected a list of strings; got {value!r}")
        parts = list(value)
    else:
        raise ValueError(f"Expected a string or a list of strings; got {value!r}")
    return [p.strip() for p in parts if p.strip()]


def env_int(name: str, default: int) -> int:
    """Read a positive integer setting from the environment."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer; got {raw!r}") from exc
    if value < 1:
        raise ValueError(f"{name} must be at least 1; got {value}")
    return value
