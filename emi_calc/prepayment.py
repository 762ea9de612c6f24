"""Prepayment rule evaluation.

Rules are consulted by the schedule builder once per month; nothing is
expanded into a calendar ahead of time, so a loan that is paid off early never
evaluates the months it no longer has.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import OneTimePrepayment, PrepaymentRule, RecurringPrepayment
from .errors import InvalidLoanParameters


def _is_month(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def validate_rule(rule: PrepaymentRule) -> None:
    """Raise ``InvalidLoanParameters`` if ``rule`` cannot be applied."""
    if isinstance(rule, OneTimePrepayment):
        if not _is_month(rule.at_month):
            raise InvalidLoanParameters("at_month", rule.at_month, "an integer >= 1")
    elif isinstance(rule, RecurringPrepayment):
        if not _is_month(rule.start_month):
            raise InvalidLoanParameters("start_month", rule.start_month, "an integer >= 1")
        if not _is_month(rule.frequency_months):
            raise InvalidLoanParameters(
                "frequency_months", rule.frequency_months, "an integer >= 1"
            )
    else:
        raise InvalidLoanParameters("prepayment_rule", rule, "a one-time or recurring prepayment")
    if not rule.amount > 0:
        raise InvalidLoanParameters("amount", rule.amount, "greater than 0")


def prepayment_for_month(rule: PrepaymentRule, month: int) -> float:
    """Return the amount ``rule`` contributes in ``month`` (0.0 when it does not fire)."""
    if isinstance(rule, OneTimePrepayment):
        return rule.amount if month == rule.at_month else 0.0
    if month >= rule.start_month and (month - rule.start_month) % rule.frequency_months == 0:
        return rule.amount
    return 0.0


def total_prepayment(rules: Iterable[PrepaymentRule], month: int) -> float:
    """Sum the contributions of every rule that fires in ``month``."""
    return sum((prepayment_for_month(rule, month) for rule in rules), 0.0)
