"""Exceptions raised by the EMI calculator engine."""

from __future__ import annotations

from typing import Any, Optional


class EMICalculatorError(Exception):
    """Base class for all engine errors."""


class InvalidLoanParameters(EMICalculatorError, ValueError):
    """Raised when a loan configuration or prepayment rule is out of range.

    ``parameter`` names the offending input and ``constraint`` describes what
    it must satisfy, so callers can point the user at the field to correct.
    """

    def __init__(self, parameter: str, value: Any, constraint: str) -> None:
        self.parameter = parameter
        self.value = value
        self.constraint = constraint
        super().__init__(f"{parameter} must be {constraint} (got {value!r})")


class NonAmortizingLoan(EMICalculatorError, RuntimeError):
    """Raised when the installment does not cover a month's interest.

    The balance of such a loan never decreases, so the schedule is abandoned
    instead of being extended indefinitely.
    """

    def __init__(self, month: int, emi: float, interest: float, message: Optional[str] = None) -> None:
        self.month = month
        self.emi = emi
        self.interest = interest
        super().__init__(
            message
            or f"Installment {emi:.2f} does not cover interest {interest:.2f} in month {month}"
        )
