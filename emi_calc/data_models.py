"""Data models for the EMI calculator.

This module defines dataclasses representing the entities used by the
amortization engine: the loan configuration, the two kinds of prepayment rule,
individual schedule entries and the aggregate results returned to callers.
All of them are frozen so a result can be handed to presentation code without
the risk of it being changed behind the engine's back; collections are stored
as tuples for the same reason.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class LoanConfig:
    """Configuration of a loan.

    Attributes
    ----------
    principal: float
        The financed amount. Must be positive.
    annual_rate_percent: float
        The nominal annual interest rate in percent (``7`` means 7 %).
    tenure_months: int
        The loan term in months. Must be at least one.
    """

    principal: float
    annual_rate_percent: float
    tenure_months: int

    @property
    def monthly_rate(self) -> float:
        return self.annual_rate_percent / 12 / 100


@dataclass(frozen=True)
class OneTimePrepayment:
    """A single extra payment applied in month ``at_month`` (1-based)."""

    at_month: int
    amount: float


@dataclass(frozen=True)
class RecurringPrepayment:
    """An extra payment repeated every ``frequency_months`` from ``start_month``.

    A frequency of one month is the "extra monthly payment" of the calculator
    page; twelve is a yearly top-up.
    """

    start_month: int
    amount: float
    frequency_months: int = 1


PrepaymentRule = Union[OneTimePrepayment, RecurringPrepayment]


@dataclass(frozen=True)
class ScheduleEntry:
    """One month of the amortization schedule."""

    month: int
    opening_balance: float
    interest_portion: float
    scheduled_principal_portion: float
    prepayment_amount: float
    closing_balance: float

    @property
    def principal_repaid(self) -> float:
        return self.scheduled_principal_portion + self.prepayment_amount

    @property
    def total_payment(self) -> float:
        return self.interest_portion + self.principal_repaid


@dataclass(frozen=True)
class ScheduleResult:
    """Aggregate result of simulating a loan.

    ``emi`` is the installment derived from the configuration and is not
    affected by prepayments; they shorten the loan instead of lowering the
    installment. ``actual_tenure_months`` equals ``len(schedule)`` and is below
    the configured tenure whenever a prepayment paid the loan off early.
    """

    emi: float
    schedule: Tuple[ScheduleEntry, ...]
    actual_tenure_months: int
    total_interest_paid: float
    total_principal_paid: float
    total_amount_paid: float
    total_prepayment: float = 0.0


@dataclass(frozen=True)
class ComparisonResult:
    """Two independently computed loans and their differences (B minus A).

    A negative delta means loan B is cheaper (or shorter) on that metric.
    """

    loan_a: ScheduleResult
    loan_b: ScheduleResult
    emi_delta: float
    total_interest_delta: float
    total_payment_delta: float
    tenure_delta: int


@dataclass(frozen=True)
class YearlySummary:
    """Interest and principal repaid during one loan year (months 1-12 are year 1)."""

    year: int
    interest: float
    principal: float


@dataclass(frozen=True)
class PrepaymentSavings:
    """Effect of a set of prepayment rules against the same loan without them."""

    baseline_total_interest: float
    total_interest: float
    interest_saved: float
    baseline_tenure_months: int
    actual_tenure_months: int
    months_saved: int
