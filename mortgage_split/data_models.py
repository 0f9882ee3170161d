"""Data models for the mortgage split engine.

This module defines dataclasses for the loan terms a deal is created with,
the payments observed against it and the splits the engine computes. All of
them are transient: they are built from caller-supplied data at computation
time and discarded afterwards. Money values are ``Decimal`` throughout.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional, Union


class PaymentFrequency(str, Enum):
    """How often the borrower pays. Stored values match the deal table."""

    MONTHLY = "monthly"
    SEMIMONTHLY = "semimonthly"
    BIWEEKLY = "biweekly"

    @property
    def periods_per_year(self) -> int:
        return _PERIODS_PER_YEAR[self]

    @classmethod
    def parse(cls, value: Union["PaymentFrequency", str, None]) -> "PaymentFrequency":
        """Return the frequency for ``value``; ``None`` or blank means monthly.

        Accepts the hyphenated spellings used on lender statements
        (``"semi-monthly"``, ``"bi-weekly"``).
        """
        if isinstance(value, cls):
            return value
        if value is None or not str(value).strip():
            return cls.MONTHLY
        key = str(value).strip().lower().replace("-", "").replace("_", "").replace(" ", "")
        try:
            return cls(key)
        except ValueError as exc:
            raise ValueError(f"Invalid payment frequency: {value}") from exc


_PERIODS_PER_YEAR = {
    PaymentFrequency.MONTHLY: 12,
    PaymentFrequency.SEMIMONTHLY: 24,
    PaymentFrequency.BIWEEKLY: 26,
}


@dataclass(frozen=True)
class LoanTerms:
    """Static terms of a loan, set once when the deal is created.

    Attributes
    ----------
    original_principal: Decimal
        The amount borrowed.
    annual_rate_percent: Decimal
        Nominal annual rate in percent (``7.125`` means 7.125 %).
    term_months: int
        Nominal loan length in months, whatever the payment frequency.
    origination_date: date
        Close date of the deal. Used as the payment anchor when no first
        payment date is known.
    first_payment_date: Optional[date]
        Date of payment number 1. When present it is the anchor.
    payment_frequency: PaymentFrequency
        Payment convention, monthly unless the deal says otherwise.

    The terms are assumed valid (positive principal and term, non-negative
    rate). See ``validate_loan_terms`` for a check callers can run first.
    """

    original_principal: Decimal
    annual_rate_percent: Decimal
    term_months: int
    origination_date: date
    first_payment_date: Optional[date] = None
    payment_frequency: PaymentFrequency = PaymentFrequency.MONTHLY

    @property
    def anchor_date(self) -> date:
        return self.first_payment_date or self.origination_date

    @property
    def uses_close_date_anchor(self) -> bool:
        return self.first_payment_date is None

    @property
    def periods_per_year(self) -> int:
        return PaymentFrequency.parse(self.payment_frequency).periods_per_year

    @property
    def total_payments(self) -> int:
        # 360 months is 360 monthly, 720 semi-monthly or 780 bi-weekly payments
        years = Decimal(self.term_months) / Decimal(12)
        return int((years * self.periods_per_year).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def periodic_rate(self) -> Decimal:
        return Decimal(self.annual_rate_percent) / Decimal(100) / Decimal(self.periods_per_year)


def validate_loan_terms(terms: LoanTerms) -> List[str]:
    """Return a list of problems with ``terms``; empty when they are usable."""
    problems = []
    if terms.original_principal is None or terms.original_principal <= 0:
        problems.append("Original loan amount must be positive")
    if terms.annual_rate_percent is None or terms.annual_rate_percent < 0:
        problems.append("Interest rate cannot be negative")
    if terms.term_months is None or terms.term_months <= 0:
        problems.append("Loan term must be a positive number of months")
    if terms.first_payment_date is None and terms.origination_date is None:
        problems.append("A first payment date or close date is required")
    return problems


@dataclass(frozen=True)
class PaymentObservation:
    """A mortgage payment as recorded by the bookkeeper.

    ``known_monthly_taxes`` and ``known_monthly_insurance`` are the
    borrower's stated escrow components at monthly granularity, even for
    semi-monthly or bi-weekly loans. Zero means unknown.
    """

    payment_date: date
    total_paid: Decimal
    known_monthly_taxes: Decimal = Decimal("0")
    known_monthly_insurance: Decimal = Decimal("0")


@dataclass(frozen=True)
class AmortizedPayment:
    """Theoretical principal/interest split of a single scheduled payment."""

    principal: Decimal
    interest: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class PaymentSplit:
    """Best-effort breakdown of an observed mortgage payment.

    All amounts are rounded to cents. ``escrow_inferred`` is True when no
    escrow figures were known and the escrow portion is the residual of the
    total after the expected principal and interest.
    """

    principal: Decimal
    interest: Decimal
    escrow_taxes: Decimal
    escrow_insurance: Decimal
    total_payment: Decimal
    escrow_inferred: bool
    payment_number: int
    frequency: PaymentFrequency = PaymentFrequency.MONTHLY

    @property
    def escrow(self) -> Decimal:
        return self.escrow_taxes + self.escrow_insurance

    @property
    def allocated_total(self) -> Decimal:
        return self.principal + self.interest + self.escrow


@dataclass(frozen=True)
class ScheduleEntry:
    """One row of an amortization schedule."""

    payment_number: int
    due_date: date
    starting_balance: Decimal
    payment: Decimal
    principal: Decimal
    interest: Decimal
    ending_balance: Decimal
