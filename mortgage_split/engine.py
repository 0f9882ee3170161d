"""Core amortization engine for the mortgage split calculator.

This module computes the theoretical principal/interest split of any single
payment of a level-payment loan, the balance left after a number of
payments and the full dated schedule. Every call walks the loan forward
from origination, so a payment amount different from the scheduled one (an
override) and early payoff are handled the same way as the regular case.
Only the values handed back to callers are rounded to cents; the walk
itself runs at full ``Decimal`` precision.
"""

from __future__ import annotations

import logging
from decimal import Decimal, getcontext
from typing import List, Optional, Tuple

from .data_models import AmortizedPayment, LoanTerms, ScheduleEntry
from .payment_index import payment_due_date
from .utils import ZERO, round_cents

getcontext().prec = 28  # increase precision for financial calculations

logger = logging.getLogger("mortgage_split.engine")


def _calculate_level_payment(principal: Decimal, rate_per_period: Decimal, n_payments: int) -> Decimal:
    """Return the level (annuity) payment for a loan.

    The formula is:

        payment = P * i / (1 - (1 + i)^-n)

    where ``P`` is the principal, ``i`` is the periodic interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if n_payments <= 0:
        raise ValueError("Number of payments must be positive")
    if rate_per_period == 0:
        return principal / Decimal(n_payments)
    return principal * rate_per_period / (1 - (1 + rate_per_period) ** -n_payments)


def level_payment(terms: LoanTerms) -> Decimal:
    """Unrounded scheduled principal-and-interest payment for ``terms``."""
    return _calculate_level_payment(
        Decimal(terms.original_principal), terms.periodic_rate, terms.total_payments
    )


def scheduled_payment(terms: LoanTerms) -> Decimal:
    """Scheduled principal-and-interest payment rounded to cents."""
    return round_cents(level_payment(terms))


def _walk_balance(
    principal: Decimal, rate: Decimal, payment: Decimal, steps: int
) -> Decimal:
    """Balance after ``steps`` payments of ``payment``, floored at zero."""
    balance = principal
    for _ in range(steps):
        if balance <= 0:
            break
        interest = balance * rate
        balance = max(ZERO, balance - (payment - interest))
    return balance


def _payment_terms(
    terms: LoanTerms, payment_override: Optional[Decimal]
) -> Tuple[Decimal, Decimal, Decimal]:
    principal = Decimal(terms.original_principal)
    rate = terms.periodic_rate
    if payment_override is not None:
        payment = Decimal(payment_override)
    else:
        payment = _calculate_level_payment(principal, rate, terms.total_payments)
    return principal, rate, payment


def amortize_payment(
    terms: LoanTerms,
    payment_index: int,
    payment_override: Optional[Decimal] = None,
) -> AmortizedPayment:
    """Compute the principal/interest split of the payment at ``payment_index``.

    Parameters
    ----------
    terms: LoanTerms
        The loan.
    payment_index: int
        Zero-based position of the payment in the schedule.
    payment_override: Optional[Decimal]
        Principal-and-interest amount to apply on every payment instead of
        the scheduled level payment. The reconciler passes the P&I part of an
        observed payment here.

    Returns
    -------
    AmortizedPayment
        Principal, interest and the balance left after this payment, each
        rounded to cents. Principal never exceeds the balance outstanding
        before the payment, and payments after payoff are all zero.
    """
    principal, rate, payment = _payment_terms(terms, payment_override)
    balance = _walk_balance(principal, rate, payment, max(payment_index, 0))

    interest = balance * rate
    principal_part = min(payment - interest, balance)
    remaining = max(ZERO, balance - principal_part)
    return AmortizedPayment(
        principal=round_cents(principal_part),
        interest=round_cents(interest),
        remaining_balance=round_cents(remaining),
    )


def balance_after(
    terms: LoanTerms,
    payments_made: int,
    payment_override: Optional[Decimal] = None,
) -> Decimal:
    """Loan balance, rounded to cents, once ``payments_made`` payments are in."""
    principal, rate, payment = _payment_terms(terms, payment_override)
    return round_cents(_walk_balance(principal, rate, payment, max(payments_made, 0)))


def build_schedule(terms: LoanTerms, limit: Optional[int] = None) -> List[ScheduleEntry]:
    """Compute the dated amortization schedule of ``terms``.

    The schedule runs until the loan is paid off or its scheduled number of
    payments is reached, whichever is first. The last payment absorbs any
    residual balance so that the schedule always ends at zero. ``limit``
    caps the number of rows returned.
    """
    principal, rate, payment = _payment_terms(terms, None)
    n_payments = terms.total_payments
    if limit is not None:
        n_payments = min(n_payments, limit)

    schedule: List[ScheduleEntry] = []
    balance = principal
    for index in range(n_payments):
        if balance <= 0:
            break
        interest = balance * rate
        principal_part = min(payment - interest, balance)
        if index == terms.total_payments - 1:
            principal_part = balance
        ending = max(ZERO, balance - principal_part)
        schedule.append(
            ScheduleEntry(
                payment_number=index + 1,
                due_date=payment_due_date(terms, index),
                starting_balance=round_cents(balance),
                payment=round_cents(principal_part + interest),
                principal=round_cents(principal_part),
                interest=round_cents(interest),
                ending_balance=round_cents(ending),
            )
        )
        balance = ending
    logger.debug("Built schedule with %d rows for %s", len(schedule), terms)
    return schedule
