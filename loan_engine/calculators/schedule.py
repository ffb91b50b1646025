"""Weekly repayment schedule builder."""

from __future__ import annotations

import logging
from datetime import timedelta

from loan_engine.calculators.interest import (
    compute_fees,
    compute_interest,
    compute_weekly_breakdown,
)
from loan_engine.config import ScheduleConfig
from loan_engine.exceptions import InvalidInputError
from loan_engine.models import (
    FeeBreakdown,
    FeePolicy,
    InstallmentRow,
    InterestBreakdown,
    LoanComputation,
    LoanTerms,
)
from loan_engine.numbers import ZERO, Rounder, round2

logger = logging.getLogger(__name__)

DAYS_PER_INSTALLMENT = 7


def build_schedule(
    terms: LoanTerms,
    interest: InterestBreakdown,
    fees: FeeBreakdown,
    *,
    rounder: Rounder = round2,
    config: ScheduleConfig | None = None,
) -> list[InstallmentRow]:
    """Expand loan terms into weekly installment rows.

    Every row carries the same principal (``principal / weeks``), capped at
    the remaining balance, and the same interest
    (``interest.interest_per_week``). When settling, the last row takes the
    whole remaining balance. First-installment fees are added to row 1 only.
    The running balance never goes below zero.

    Parameters
    ----------
    terms : LoanTerms
        Loan terms.
    interest : InterestBreakdown
        Output of :func:`compute_interest` for ``terms``.
    fees : FeeBreakdown
        Output of :func:`compute_fees` for ``terms``.
    rounder : Rounder
        Currency rounding.
    config : ScheduleConfig | None
        Fee placement and final-row settlement options.

    Returns
    -------
    list[InstallmentRow]
        One row per week; empty for a zero-week or zero-principal loan.

    Raises
    ------
    InvalidInputError
        If the schedule would have rows but no first installment date.
    """
    config = config or ScheduleConfig()
    weeks = terms.duration_weeks
    principal = terms.principal

    if not weeks or not principal:
        if fees.has_fees and config.fee_policy is FeePolicy.FIRST_INSTALLMENT:
            logger.warning(
                "No installments for principal=%s weeks=%d; first-installment fees %s dropped",
                principal,
                weeks,
                fees.first_installment_extra,
            )
        return []

    first_date = terms.first_installment_date
    if first_date is None:
        raise InvalidInputError("first_installment_date is required to build a schedule")

    principal_due = rounder(principal / weeks)
    interest_due = interest.interest_per_week
    first_fees = fees.first_installment_extra if config.fee_policy is FeePolicy.FIRST_INSTALLMENT else ZERO

    rows: list[InstallmentRow] = []
    balance = rounder(principal)
    for i in range(weeks):
        row_principal = min(principal_due, balance)
        if config.settle_final_installment and i == weeks - 1:
            # Last row takes whatever rounding left on the balance
            row_principal = balance

        row_fees = first_fees if i == 0 else ZERO
        balance = rounder(balance - row_principal)

        rows.append(
            InstallmentRow(
                installment_number=i + 1,
                due_date=first_date + timedelta(days=DAYS_PER_INSTALLMENT * i),
                principal_due=row_principal,
                interest_due=interest_due,
                fees_due=row_fees,
                total_due=rounder(row_principal + interest_due + row_fees),
                principal_balance_after=balance,
            )
        )

    logger.debug(
        "Built %d-week schedule: principal/week=%s interest/week=%s first fees=%s",
        weeks,
        principal_due,
        interest_due,
        first_fees,
        extra={"installments": weeks, "principal_per_week": principal_due},
    )
    return rows


def compute_loan(
    terms: LoanTerms,
    config: ScheduleConfig | None = None,
    rounder: Rounder = round2,
) -> LoanComputation:
    """Run the full calculation for one set of terms.

    Parameters
    ----------
    terms : LoanTerms
        Loan terms.
    config : ScheduleConfig | None
        Schedule options.
    rounder : Rounder
        Currency rounding used by every step.

    Returns
    -------
    LoanComputation
        Interest, fees, weekly figures and the schedule.
    """
    config = config or ScheduleConfig()

    interest = compute_interest(terms, rounder)
    fees = compute_fees(terms, rounder)
    weekly = compute_weekly_breakdown(terms, interest, rounder)
    schedule = build_schedule(terms, interest, fees, rounder=rounder, config=config)

    disbursement_charges = (
        fees.first_installment_extra if config.fee_policy is FeePolicy.DISBURSEMENT_DAY else ZERO
    )

    return LoanComputation(
        terms=terms,
        interest=interest,
        fees=fees,
        weekly=weekly,
        schedule=schedule,
        disbursement_charges=disbursement_charges,
    )
