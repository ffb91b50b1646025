"""Flat interest and one-off fee calculation."""

from loan_engine.models import FeeBreakdown, InterestBreakdown, LoanTerms, WeeklyBreakdown
from loan_engine.numbers import ZERO, Rounder, round2


def compute_interest(terms: LoanTerms, rounder: Rounder = round2) -> InterestBreakdown:
    """Compute flat interest over the whole loan duration.

    ``total_interest_percent`` is charged once on the original principal and
    split evenly across the weeks.

    Parameters
    ----------
    terms : LoanTerms
        Loan terms.
    rounder : Rounder
        Currency rounding applied once per figure.

    Returns
    -------
    InterestBreakdown
        Total and per-week interest. Per-week figures are zero for a
        zero-week loan.
    """
    weeks = terms.duration_weeks
    rate = terms.total_interest_percent

    total_interest_amount = rounder(terms.principal * rate / 100)
    if weeks:
        weekly_interest_percent = rounder(rate / weeks)
        interest_per_week = rounder(total_interest_amount / weeks)
    else:
        weekly_interest_percent = ZERO
        interest_per_week = ZERO

    return InterestBreakdown(
        total_interest_percent=rate,
        weekly_interest_percent=weekly_interest_percent,
        total_interest_amount=total_interest_amount,
        interest_per_week=interest_per_week,
    )


def compute_fees(terms: LoanTerms, rounder: Rounder = round2) -> FeeBreakdown:
    """Compute processing, insurance and book-price charges.

    Processing and insurance are percentages of the principal; the book
    price is a flat amount.
    """
    processing = rounder(terms.principal * terms.processing_fee_percent / 100)
    insurance = rounder(terms.principal * terms.insurance_fee_percent / 100)
    book_price = rounder(terms.book_price_amount)

    return FeeBreakdown(
        processing_fee_amount=processing,
        insurance_fee_amount=insurance,
        book_price_amount=book_price,
        first_installment_extra=rounder(processing + insurance + book_price),
    )


def compute_weekly_breakdown(
    terms: LoanTerms,
    interest: InterestBreakdown,
    rounder: Rounder = round2,
) -> WeeklyBreakdown:
    """Compute the per-week principal, interest and installment (no fees)."""
    weeks = terms.duration_weeks
    if not weeks:
        return WeeklyBreakdown(
            principal_per_week=ZERO,
            interest_per_week=ZERO,
            installment_per_week=ZERO,
        )

    principal = terms.principal
    return WeeklyBreakdown(
        principal_per_week=rounder(principal / weeks),
        interest_per_week=interest.interest_per_week,
        installment_per_week=rounder((principal + interest.total_interest_amount) / weeks),
    )
