from datetime import date
from decimal import Decimal

import pytest

from mortgage_split.data_models import PaymentFrequency, validate_loan_terms
from mortgage_split.engine import (
    amortize_payment,
    balance_after,
    build_schedule,
    level_payment,
    scheduled_payment,
)

from conftest import make_terms

CENT = Decimal("0.01")


def test_scheduled_payment_standard_loan(monthly_terms):
    assert scheduled_payment(monthly_terms) == Decimal("1798.65")


def test_first_payment_interest_is_one_month_of_rate(monthly_terms):
    first = amortize_payment(monthly_terms, 0)
    assert first.interest == Decimal("1500.00")
    assert first.principal == Decimal("298.65")
    assert first.remaining_balance == Decimal("299701.35")


def test_second_payment_interest_on_reduced_balance(monthly_terms):
    second = amortize_payment(monthly_terms, 1)
    assert abs(second.interest - Decimal("1498.51")) <= CENT
    assert second.principal > Decimal("298.65")


def test_total_payments_by_frequency():
    assert make_terms().total_payments == 360
    assert make_terms(frequency=PaymentFrequency.SEMIMONTHLY).total_payments == 720
    assert make_terms(frequency=PaymentFrequency.BIWEEKLY).total_payments == 780
    assert make_terms(term=18, frequency=PaymentFrequency.BIWEEKLY).total_payments == 39


@pytest.mark.parametrize("frequency", list(PaymentFrequency))
def test_zero_rate_is_straight_line(frequency):
    terms = make_terms(principal="100000", rate="0", frequency=frequency)
    expected = (Decimal("100000") / terms.total_payments).quantize(CENT)
    for index in (0, 1, 50, terms.total_payments // 2):
        result = amortize_payment(terms, index)
        assert result.interest == 0
        assert abs(result.principal - expected) <= CENT


@pytest.mark.parametrize("frequency", list(PaymentFrequency))
def test_principal_plus_interest_matches_level_payment(frequency):
    terms = make_terms(rate="7.125", frequency=frequency)
    payment = level_payment(terms)
    for index in range(0, terms.total_payments - 1, 37):
        result = amortize_payment(terms, index)
        assert abs(result.principal + result.interest - payment) <= CENT


def test_balance_reaches_zero_at_maturity(monthly_terms):
    assert balance_after(monthly_terms, 360) == Decimal("0")
    assert balance_after(monthly_terms, 0) == Decimal("300000.00")
    assert balance_after(monthly_terms, 1) == Decimal("299701.35")


def test_final_payment_never_exceeds_balance(monthly_terms):
    last = amortize_payment(monthly_terms, 359)
    assert last.remaining_balance == Decimal("0")
    assert last.principal <= scheduled_payment(monthly_terms)
    assert last.interest < Decimal("10")


def test_payments_after_payoff_are_zero(monthly_terms):
    after = amortize_payment(monthly_terms, 400)
    assert after.principal == 0
    assert after.interest == 0
    assert after.remaining_balance == 0


def test_override_pays_loan_off_early(monthly_terms):
    fast = amortize_payment(monthly_terms, 100, payment_override=Decimal("50000"))
    assert fast.principal == 0
    assert fast.interest == 0
    assert balance_after(monthly_terms, 7, payment_override=Decimal("50000")) == 0


def test_override_changes_split(monthly_terms):
    regular = amortize_payment(monthly_terms, 0)
    bigger = amortize_payment(monthly_terms, 0, payment_override=Decimal("2000"))
    assert bigger.interest == regular.interest
    assert bigger.principal == Decimal("500.00")


def test_schedule_runs_to_zero(monthly_terms):
    rows = build_schedule(monthly_terms)
    assert len(rows) == 360
    assert rows[0].due_date == date(2024, 1, 1)
    assert rows[0].payment_number == 1
    assert rows[-1].due_date == date(2053, 12, 1)
    assert rows[-1].ending_balance == 0
    total_principal = sum(row.principal for row in rows)
    assert abs(total_principal - Decimal("300000")) < Decimal("1")


def test_schedule_limit(biweekly_terms):
    rows = build_schedule(biweekly_terms, limit=3)
    assert [row.due_date for row in rows] == [date(2024, 1, 5), date(2024, 1, 19), date(2024, 2, 2)]
    assert rows[1].starting_balance == rows[0].ending_balance


def test_validate_loan_terms_flags_bad_input():
    assert validate_loan_terms(make_terms()) == []
    problems = validate_loan_terms(make_terms(principal="0", rate="-1", term=0))
    assert len(problems) == 3
