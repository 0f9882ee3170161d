"""Split an observed mortgage payment into principal, interest and escrow.

The bookkeeper records one cash amount per mortgage payment. This module
resolves which payment of the loan that amount is, works out the
theoretical principal and interest for it and reconciles the rest against
the borrower's monthly tax and insurance figures. When those figures are
unknown the escrow portion is inferred as whatever the payment holds beyond
the expected principal and interest, and all of it is booked as taxes since
there is nothing to split it by.

The result is a best-effort estimate for historical and manual entries. It
never raises for out-of-range dates, zero rates or underpayments; the
clamps below keep every component between zero and the observed total.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from .data_models import LoanTerms, PaymentFrequency, PaymentObservation, PaymentSplit
from .engine import amortize_payment
from .payment_index import resolve_payment_index
from .utils import ZERO, clamp, round_cents

logger = logging.getLogger("mortgage_split.reconciler")

MONTHS_PER_YEAR = Decimal(12)


def _known(value: Optional[Decimal]) -> Decimal:
    return Decimal(value) if value is not None else ZERO


def scale_monthly_escrow(terms: LoanTerms, monthly_amount: Decimal) -> Decimal:
    """Convert a monthly escrow figure to the per-payment amount, in cents."""
    scale = MONTHS_PER_YEAR / Decimal(terms.periods_per_year)
    return round_cents(Decimal(monthly_amount) * scale)


def compute_mortgage_split(
    terms: LoanTerms,
    known_monthly_taxes: Optional[Decimal],
    known_monthly_insurance: Optional[Decimal],
    payment_date: date,
    total_paid: Decimal,
) -> PaymentSplit:
    """Break ``total_paid`` down into principal, interest, taxes and insurance.

    Parameters
    ----------
    terms: LoanTerms
        The loan the payment was made against.
    known_monthly_taxes, known_monthly_insurance: Optional[Decimal]
        The borrower's stated monthly escrow components. ``None`` or zero
        means unknown; if both are unknown the escrow is inferred.
    payment_date: date
        Date the payment was made.
    total_paid: Decimal
        Full cash amount of the payment.

    Returns
    -------
    PaymentSplit
        Components rounded to cents. While the loan still has a balance the
        components add up to ``total_paid`` within a cent.
    """
    total = Decimal(total_paid)
    taxes_monthly = _known(known_monthly_taxes)
    insurance_monthly = _known(known_monthly_insurance)
    frequency = PaymentFrequency.parse(terms.payment_frequency)

    index = resolve_payment_index(terms, payment_date)
    expected = amortize_payment(terms, index)
    expected_pi = expected.principal + expected.interest
    logger.debug(
        "Payment %d expected P&I %s (principal %s, interest %s)",
        index + 1,
        expected_pi,
        expected.principal,
        expected.interest,
    )

    if taxes_monthly > 0 or insurance_monthly > 0:
        escrow_taxes = scale_monthly_escrow(terms, taxes_monthly)
        escrow_insurance = scale_monthly_escrow(terms, insurance_monthly)
        actual_pi = total - (escrow_taxes + escrow_insurance)
        # rerun with the lender's actual P&I so the split matches the total
        actual = amortize_payment(terms, index, payment_override=actual_pi)
        principal = actual.principal
        interest = actual.interest
        escrow_inferred = False
        logger.debug("Known escrow %s, actual P&I %s", escrow_taxes + escrow_insurance, actual_pi)
    else:
        escrow_taxes = max(ZERO, round_cents(total - expected_pi))
        escrow_insurance = ZERO
        principal = expected.principal
        interest = expected.interest
        escrow_inferred = True
        logger.info(
            "No escrow figures known; inferred %s escrow from a %s payment", escrow_taxes, total
        )

    principal = clamp(principal, ZERO, total)
    interest = clamp(interest, ZERO, total - principal)

    return PaymentSplit(
        principal=round_cents(principal),
        interest=round_cents(interest),
        escrow_taxes=round_cents(escrow_taxes),
        escrow_insurance=round_cents(escrow_insurance),
        total_payment=round_cents(total),
        escrow_inferred=escrow_inferred,
        payment_number=index + 1,
        frequency=frequency,
    )


def split_observation(terms: LoanTerms, observation: PaymentObservation) -> PaymentSplit:
    """``compute_mortgage_split`` for a ``PaymentObservation``."""
    return compute_mortgage_split(
        terms,
        observation.known_monthly_taxes,
        observation.known_monthly_insurance,
        observation.payment_date,
        observation.total_paid,
    )
