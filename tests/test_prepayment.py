"""Unit tests for prepayment rule evaluation."""
import pytest

from emi_calc.data_models import OneTimePrepayment, RecurringPrepayment
from emi_calc.errors import InvalidLoanParameters
from emi_calc.prepayment import prepayment_for_month, total_prepayment, validate_rule


class TestOneTime:
    def test_fires_only_in_its_month(self):
        rule = OneTimePrepayment(at_month=12, amount=50000)
        assert prepayment_for_month(rule, 12) == 50000
        assert prepayment_for_month(rule, 11) == 0.0
        assert prepayment_for_month(rule, 13) == 0.0


class TestRecurring:
    def test_monthly_from_start(self):
        rule = RecurringPrepayment(start_month=3, amount=500)
        assert [prepayment_for_month(rule, m) for m in range(1, 6)] == [0.0, 0.0, 500, 500, 500]

    @pytest.mark.parametrize("month,expected", [
        (5, 0.0),
        (6, 1000),
        (7, 0.0),
        (18, 1000),
        (30, 1000),
        (31, 0.0),
    ])
    def test_every_twelve_months(self, month, expected):
        rule = RecurringPrepayment(start_month=6, amount=1000, frequency_months=12)
        assert prepayment_for_month(rule, month) == expected


def test_total_sums_firing_rules():
    rules = [
        OneTimePrepayment(at_month=12, amount=1000),
        RecurringPrepayment(start_month=1, amount=100),
        RecurringPrepayment(start_month=12, amount=250, frequency_months=6),
    ]
    assert total_prepayment(rules, 12) == 1350
    assert total_prepayment(rules, 13) == 100
    assert total_prepayment(rules, 18) == 350


def test_total_without_rules_is_zero():
    assert total_prepayment([], 1) == 0.0


class TestValidateRule:
    @pytest.mark.parametrize("rule,parameter", [
        (OneTimePrepayment(at_month=0, amount=100), "at_month"),
        (OneTimePrepayment(at_month=1, amount=0), "amount"),
        (OneTimePrepayment(at_month=1, amount=-5), "amount"),
        (RecurringPrepayment(start_month=0, amount=100), "start_month"),
        (RecurringPrepayment(start_month=1, amount=100, frequency_months=0), "frequency_months"),
        (RecurringPrepayment(start_month=1, amount=0), "amount"),
        (OneTimePrepayment(at_month=True, amount=100), "at_month"),
        (RecurringPrepayment(start_month=True, amount=100), "start_month"),
        (RecurringPrepayment(start_month=1, amount=100, frequency_months=True), "frequency_months"),
        ("12:500", "prepayment_rule"),
    ])
    def test_rejects(self, rule, parameter):
        with pytest.raises(InvalidLoanParameters) as excinfo:
            validate_rule(rule)
        assert excinfo.value.parameter == parameter

    def test_accepts_valid_rules(self):
        validate_rule(OneTimePrepayment(at_month=1, amount=0.01))
        validate_rule(RecurringPrepayment(start_month=1, amount=1, frequency_months=12))
