"""JSON web API for the EMI calculator.

The calculator pages post their inputs here and render whatever comes back;
formatting, charts and persistence of user preferences stay in the browser.
Every endpoint accepts either a JSON body or ordinary form fields.
"""

import logging
import os

from flask import Flask, jsonify, request
from werkzeug.exceptions import BadRequest, HTTPException

from emi_calc.comparison import compare_loans
from emi_calc.data_models import LoanConfig, OneTimePrepayment, PrepaymentRule, RecurringPrepayment
from emi_calc.engine import calculate, group_by_year, prepayment_savings, solve_tenure_for_emi
from emi_calc.errors import InvalidLoanParameters, NonAmortizingLoan
from emi_calc.formatter import (
    serialize_comparison,
    serialize_result,
    serialize_savings,
    serialize_yearly,
)
from emi_calc.utils import (
    env_int,
    parse_amount,
    parse_form_list,
    parse_one_time_strings,
    parse_recurring_strings,
    tenure_from_parts,
)

app = Flask(__name__)
app.config["PREVIEW_ROWS"] = env_int("EMI_CALC_PREVIEW_ROWS", 120)
app.logger.setLevel(os.environ.get("EMI_CALC_LOG_LEVEL", "WARNING").upper())


def _payload() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return request.form.to_dict()
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data


def _optional_int(value):
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise BadRequest(f"Expected a whole number; got {value!r}")
    if not number.is_integer():
        raise BadRequest(f"Expected a whole number; got {value!r}")
    return int(number)


def _number(data: dict, *names: str) -> float:
    for name in names:
        value = data.get(name)
        if value is not None and value != "":
            try:
                return parse_amount(value)
            except ValueError as exc:
                raise BadRequest(str(exc))
    raise BadRequest(f"Missing field: {names[0]}")


def _loan_from_payload(data: dict) -> LoanConfig:
    """Build a ``LoanConfig`` from request fields.

    The tenure may be given as ``tenure_months`` and/or ``tenure_years``.
    """
    try:
        tenure = tenure_from_parts(
            _optional_int(data.get("tenure_months")), _optional_int(data.get("tenure_years"))
        )
    except ValueError as exc:
        raise BadRequest(str(exc))
    return LoanConfig(
        principal=_number(data, "principal"),
        annual_rate_percent=_number(data, "annual_rate_percent", "rate"),
        tenure_months=tenure,
    )


def _rule_from_dict(item) -> PrepaymentRule:
    if not isinstance(item, dict):
        raise BadRequest("Each prepayment must be an object")
    kind = item.get("type", "one_time")
    amount = _number(item, "amount")
    if kind == "one_time":
        return OneTimePrepayment(at_month=_optional_int(item.get("at_month")), amount=amount)
    if kind == "recurring":
        frequency = _optional_int(item.get("frequency_months"))
        return RecurringPrepayment(
            start_month=_optional_int(item.get("start_month")),
            amount=amount,
            frequency_months=1 if frequency is None else frequency,
        )
    raise BadRequest(f"Unknown prepayment type: {kind}")


def _rules_from_payload(data: dict) -> list:
    """Collect prepayment rules from a JSON list or from form strings.

    JSON callers send ``prepayments`` as a list of objects; forms send
    ``prepay`` (MONTH:AMOUNT) and ``recurring`` (START:AMOUNT[:EVERY]) fields
    separated by semicolons or newlines, or as lists of such strings, plus an
    optional ``extra_monthly`` amount. An extra monthly amount of 0 adds no rule.
    """
    rules = []
    items = data.get("prepayments") or []
    if not isinstance(items, list):
        raise BadRequest("prepayments must be a list")
    rules.extend(_rule_from_dict(item) for item in items)
    try:
        rules.extend(parse_one_time_strings(parse_form_list(data.get("prepay"))))
        rules.extend(parse_recurring_strings(parse_form_list(data.get("recurring"))))
    except ValueError as exc:
        raise BadRequest(str(exc))
    if data.get("extra_monthly") not in (None, ""):
        extra = _number(data, "extra_monthly")
        if extra != 0:
            rules.append(RecurringPrepayment(start_month=1, amount=extra))
    return rules


def _preview_rows(data: dict):
    full = str(data.get("show_full_schedule", "")).lower() in ("1", "true", "yes")
    return None if full else app.config["PREVIEW_ROWS"]


@app.errorhandler(InvalidLoanParameters)
def handle_invalid_parameters(exc: InvalidLoanParameters):
    app.logger.info("Rejected loan parameters: %s", exc)
    return jsonify(error=str(exc), parameter=exc.parameter, constraint=exc.constraint), 400


@app.errorhandler(NonAmortizingLoan)
def handle_non_amortizing(exc: NonAmortizingLoan):
    app.logger.warning("Non-amortizing loan: %s", exc)
    return jsonify(error=str(exc), month=exc.month), 422


@app.errorhandler(HTTPException)
def handle_http_error(exc: HTTPException):
    return jsonify(error=exc.description), exc.code


@app.get("/healthz")
def healthz():
    return jsonify(status="ok")


@app.post("/api/schedule")
def schedule():
    data = _payload()
    config = _loan_from_payload(data)
    rules = _rules_from_payload(data)
    result = calculate(config, rules)
    body = serialize_result(result, _preview_rows(data))
    body["yearly"] = serialize_yearly(group_by_year(result.schedule))
    if rules:
        body["savings"] = serialize_savings(prepayment_savings(config, rules))
    return jsonify(body)


@app.post("/api/compare")
def compare():
    data = _payload()
    loan_a = data.get("loan_a")
    loan_b = data.get("loan_b")
    if not isinstance(loan_a, dict) or not isinstance(loan_b, dict):
        raise BadRequest("loan_a and loan_b must both be objects")
    comparison = compare_loans(
        _loan_from_payload(loan_a),
        _rules_from_payload(loan_a),
        _loan_from_payload(loan_b),
        _rules_from_payload(loan_b),
    )
    return jsonify(serialize_comparison(comparison, _preview_rows(data)))


@app.post("/api/solve-tenure")
def solve_tenure():
    data = _payload()
    principal = _number(data, "principal")
    rate = _number(data, "annual_rate_percent", "rate")
    months = solve_tenure_for_emi(principal, rate, _number(data, "target_emi"))
    result = calculate(LoanConfig(principal, rate, months))
    return jsonify(
        tenure_months=months,
        emi=result.emi,
        total_interest_paid=result.total_interest_paid,
        total_amount_paid=result.total_amount_paid,
    )


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    print("Starting EMI Calculator web app...")
    app.run(host="0.0.0.0", port=8710, debug=True)
