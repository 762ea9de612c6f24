"""Side-by-side comparison of two loans."""

from __future__ import annotations

import logging
from typing import Iterable

from .data_models import ComparisonResult, LoanConfig, PrepaymentRule
from .engine import calculate

logger = logging.getLogger(__name__)


def compare_loans(
    config_a: LoanConfig,
    rules_a: Iterable[PrepaymentRule],
    config_b: LoanConfig,
    rules_b: Iterable[PrepaymentRule],
) -> ComparisonResult:
    """Compute both loans independently and return the differences B minus A.

    A negative difference means the second loan is cheaper or shorter. If
    either loan is invalid the error propagates and no partial result is
    produced.
    """
    loan_a = calculate(config_a, rules_a)
    loan_b = calculate(config_b, rules_b)
    result = ComparisonResult(
        loan_a=loan_a,
        loan_b=loan_b,
        emi_delta=loan_b.emi - loan_a.emi,
        total_interest_delta=loan_b.total_interest_paid - loan_a.total_interest_paid,
        total_payment_delta=loan_b.total_amount_paid - loan_a.total_amount_paid,
        tenure_delta=loan_b.actual_tenure_months - loan_a.actual_tenure_months,
    )
    logger.debug(
        "Compared loans: emi_delta=%.6f interest_delta=%.6f",
        result.emi_delta,
        result.total_interest_delta,
    )
    return result
