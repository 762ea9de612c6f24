"""Core calculation engine for the EMI calculator.

This module implements reducing-balance amortization: the equated monthly
installment (EMI) is derived from the annuity formula and the loan is then
simulated month by month, applying one-time and recurring prepayments as it
goes. Results are returned as immutable ``ScheduleResult`` objects so callers
can format, chart or export them without touching the engine again.

All arithmetic is done in binary floating point and nothing is rounded here;
rounding to currency precision belongs to whoever displays the numbers.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterable, List

from .data_models import (
    LoanConfig,
    PrepaymentRule,
    PrepaymentSavings,
    ScheduleEntry,
    ScheduleResult,
    YearlySummary,
)
from .errors import InvalidLoanParameters, NonAmortizingLoan
from .prepayment import total_prepayment, validate_rule

logger = logging.getLogger(__name__)

# Closing balances below this are floating point drift, not money owed.
RESIDUAL_TOLERANCE = 1e-6

MIN_SOLVED_TENURE = 1
MAX_SOLVED_TENURE = 1200


def validate_loan_parameters(principal: float, annual_rate_percent: float, tenure_months: int) -> None:
    """Raise ``InvalidLoanParameters`` unless the three loan inputs are usable."""
    if not (isinstance(principal, (int, float)) and math.isfinite(principal) and principal > 0):
        raise InvalidLoanParameters("principal", principal, "greater than 0")
    if not (
        isinstance(annual_rate_percent, (int, float))
        and math.isfinite(annual_rate_percent)
        and annual_rate_percent >= 0
    ):
        raise InvalidLoanParameters("annual_rate_percent", annual_rate_percent, "0 or greater")
    if isinstance(tenure_months, bool) or not isinstance(tenure_months, int) or tenure_months < 1:
        raise InvalidLoanParameters("tenure_months", tenure_months, "an integer >= 1")


def validate_loan_config(config: LoanConfig) -> None:
    validate_loan_parameters(config.principal, config.annual_rate_percent, config.tenure_months)


def compute_emi(principal: float, annual_rate_percent: float, tenure_months: int) -> float:
    """Return the equated monthly installment for a loan.

    The formula is:

        emi = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` the monthly rate
    (``annual_rate_percent / 12 / 100``) and ``n`` the number of months. When
    the rate is zero the installment is simply ``P / n``. It is evaluated as
    ``P * r / (1 - (1 + r)^-n)`` through ``log1p``/``expm1``, which stays
    accurate for rates near zero and finite for very long, steep loans.

    Raises
    ------
    InvalidLoanParameters
        If the principal is not positive, the rate is negative or the tenure
        is not a positive integer.
    """
    validate_loan_parameters(principal, annual_rate_percent, tenure_months)
    rate = annual_rate_percent / 12 / 100
    if rate == 0:
        return principal / tenure_months
    # P * r / (1 - (1 + r)^-n), the same annuity evaluated with log1p/expm1.
    return principal * rate / -math.expm1(-tenure_months * math.log1p(rate))


def build_schedule(
    config: LoanConfig,
    emi: float,
    prepayment_rules: Iterable[PrepaymentRule] = (),
) -> ScheduleResult:
    """Simulate ``config`` month by month with a fixed installment of ``emi``.

    Parameters
    ----------
    config: LoanConfig
        The loan being repaid. The configured tenure is a hard upper bound on
        the number of months simulated.
    emi: float
        The regular installment, normally the result of ``compute_emi``.
    prepayment_rules: Iterable[PrepaymentRule]
        Extra payments to apply. Every rule is evaluated every month and the
        amounts of all firing rules are added together.

    Returns
    -------
    ScheduleResult
        The schedule, one entry per month until the balance reaches zero, and
        the totals accumulated over it.

    Notes
    -----
    The scheduled principal is capped at the opening balance and the combined
    prepayment at whatever remains after it, so the loan is never overpaid.
    A closing balance below ``RESIDUAL_TOLERANCE`` is treated as paid off and
    the last configured month always clears whatever is left; in both cases
    the difference is booked to the scheduled principal, never to interest.

    Raises
    ------
    InvalidLoanParameters
        If the configuration or any rule is invalid.
    NonAmortizingLoan
        If ``emi`` does not exceed a month's interest.
    """
    validate_loan_config(config)
    rules = tuple(prepayment_rules)
    for rule in rules:
        validate_rule(rule)

    rate = config.monthly_rate
    schedule: List[ScheduleEntry] = []
    total_interest_paid = 0.0
    total_principal_paid = 0.0
    total_prepaid = 0.0
    total_amount_paid = 0.0

    balance = float(config.principal)
    month = 1
    while balance > 0 and month <= config.tenure_months:
        opening_balance = balance
        interest_portion = opening_balance * rate
        if emi <= interest_portion:
            raise NonAmortizingLoan(month, emi, interest_portion)
        scheduled_principal = min(emi - interest_portion, opening_balance)

        prepayment_amount = min(
            total_prepayment(rules, month), opening_balance - scheduled_principal
        )

        closing_balance = opening_balance - scheduled_principal - prepayment_amount
        if closing_balance < RESIDUAL_TOLERANCE or month == config.tenure_months:
            scheduled_principal = opening_balance - prepayment_amount
            closing_balance = 0.0

        schedule.append(
            ScheduleEntry(
                month=month,
                opening_balance=opening_balance,
                interest_portion=interest_portion,
                scheduled_principal_portion=scheduled_principal,
                prepayment_amount=prepayment_amount,
                closing_balance=closing_balance,
            )
        )
        total_interest_paid += interest_portion
        total_principal_paid += scheduled_principal + prepayment_amount
        total_prepaid += prepayment_amount
        total_amount_paid += interest_portion + scheduled_principal + prepayment_amount

        balance = closing_balance
        month += 1

    if len(schedule) < config.tenure_months:
        logger.debug(
            "Loan paid off in month %d of %d", len(schedule), config.tenure_months
        )

    return ScheduleResult(
        emi=emi,
        schedule=tuple(schedule),
        actual_tenure_months=len(schedule),
        total_interest_paid=total_interest_paid,
        total_principal_paid=total_principal_paid,
        total_amount_paid=total_amount_paid,
        total_prepayment=total_prepaid,
    )


def calculate(config: LoanConfig, prepayment_rules: Iterable[PrepaymentRule] = ()) -> ScheduleResult:
    """Derive the EMI for ``config`` and build its schedule."""
    emi = compute_emi(config.principal, config.annual_rate_percent, config.tenure_months)
    logger.debug(
        "EMI %.6f for principal=%s rate=%s%% tenure=%d",
        emi,
        config.principal,
        config.annual_rate_percent,
        config.tenure_months,
    )
    return build_schedule(config, emi, prepayment_rules)


def solve_tenure_for_emi(
    principal: float,
    annual_rate_percent: float,
    target_emi: float,
    min_months: int = MIN_SOLVED_TENURE,
    max_months: int = MAX_SOLVED_TENURE,
) -> int:
    """Return the shortest tenure whose EMI does not exceed ``target_emi``.

    The EMI falls as the tenure grows, so the answer is found by bisection
    over ``min_months..max_months``. A target that cannot even cover the first
    month's interest yields ``max_months``.
    """
    validate_loan_parameters(principal, annual_rate_percent, min_months)
    if not (isinstance(target_emi, (int, float)) and math.isfinite(target_emi) and target_emi > 0):
        raise InvalidLoanParameters("target_emi", target_emi, "greater than 0")
    if max_months < min_months:
        raise InvalidLoanParameters("max_months", max_months, f"at least {min_months}")

    rate = annual_rate_percent / 12 / 100
    if target_emi <= principal * rate:
        return max_months

    lo, hi = min_months, max_months
    while lo < hi:
        mid = (lo + hi) // 2
        if compute_emi(principal, annual_rate_percent, mid) > target_emi:
            lo = mid + 1
        else:
            hi = mid
    return hi


def group_by_year(schedule: Iterable[ScheduleEntry]) -> List[YearlySummary]:
    """Aggregate schedule entries into loan years (months 1-12 form year 1)."""
    totals: Dict[int, List[float]] = {}
    for entry in schedule:
        year = (entry.month - 1) // 12 + 1
        bucket = totals.setdefault(year, [0.0, 0.0])
        bucket[0] += entry.interest_portion
        bucket[1] += entry.principal_repaid
    return [
        YearlySummary(year=year, interest=interest, principal=principal)
        for year, (interest, principal) in sorted(totals.items())
    ]


def prepayment_savings(
    config: LoanConfig, prepayment_rules: Iterable[PrepaymentRule]
) -> PrepaymentSavings:
    """Compare ``config`` with ``prepayment_rules`` against the same loan without them."""
    baseline = calculate(config)
    actual = calculate(config, prepayment_rules)
    return PrepaymentSavings(
        baseline_total_interest=baseline.total_interest_paid,
        total_interest=actual.total_interest_paid,
        interest_saved=baseline.total_interest_paid - actual.total_interest_paid,
        baseline_tenure_months=baseline.actual_tenure_months,
        actual_tenure_months=actual.actual_tenure_months,
        months_saved=baseline.actual_tenure_months - actual.actual_tenure_months,
    )
