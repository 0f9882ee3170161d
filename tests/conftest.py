from datetime import date
from decimal import Decimal

import pytest

from mortgage_split.data_models import LoanTerms, PaymentFrequency


def make_terms(
    principal="300000",
    rate="6",
    term=360,
    origination=date(2023, 11, 15),
    first_payment=date(2024, 1, 1),
    frequency=PaymentFrequency.MONTHLY,
):
    return LoanTerms(
        original_principal=Decimal(principal),
        annual_rate_percent=Decimal(rate),
        term_months=term,
        origination_date=origination,
        first_payment_date=first_payment,
        payment_frequency=frequency,
    )


@pytest.fixture
def monthly_terms():
    return make_terms()


@pytest.fixture
def biweekly_terms():
    return make_terms(first_payment=date(2024, 1, 5), frequency=PaymentFrequency.BIWEEKLY)


@pytest.fixture
def semimonthly_terms():
    return make_terms(frequency=PaymentFrequency.SEMIMONTHLY)
