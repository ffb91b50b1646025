"""Monthly simple-interest EMI calculator."""

import calendar
from datetime import date
from decimal import Decimal
from typing import Any

from loan_engine.exceptions import InvalidInputError
from loan_engine.models import EmiBreakdown, MonthlyInstallment, parse_iso_date
from loan_engine.numbers import ZERO, Rounder, round2, to_finite_number


def calculate_emi(
    principal: Any,
    annual_interest_rate: Any,
    tenure_months: Any,
    rounder: Rounder = round2,
) -> EmiBreakdown:
    """Calculate a flat monthly EMI.

    Total interest is ``P * R * T / (100 * 12)`` for an annual rate ``R`` and
    a tenure of ``T`` months; the EMI spreads principal plus interest evenly.

    Parameters
    ----------
    principal : Any
        Amount borrowed.
    annual_interest_rate : Any
        Annual rate in percent.
    tenure_months : Any
        Number of monthly installments.
    rounder : Rounder
        Currency rounding.

    Returns
    -------
    EmiBreakdown
        Monthly EMI, total interest and total payable. The EMI is zero for a
        zero-month tenure.
    """
    p = _non_negative("principal", principal)
    rate = _non_negative("annual_interest_rate", annual_interest_rate)
    months = _non_negative("tenure_months", tenure_months)

    total_interest = p * rate * months / (100 * 12)
    total_payable = p + total_interest
    monthly_emi = total_payable / months if months else ZERO

    return EmiBreakdown(
        monthly_emi=rounder(monthly_emi),
        total_interest=rounder(total_interest),
        total_payable=rounder(total_payable),
    )


def generate_monthly_schedule(
    start_date: date | str,
    monthly_emi: Any,
    tenure_months: int,
    loan_id: str | None = None,
) -> list[MonthlyInstallment]:
    """List EMI installments due one calendar month apart.

    The first installment falls one month after ``start_date``. Days past the
    end of a shorter month are clamped to its last day.
    """
    start = parse_iso_date(start_date)
    if start is None:
        raise InvalidInputError(f"start_date is not a date: {start_date!r}")
    if tenure_months < 0:
        raise InvalidInputError(f"tenure_months must be >= 0, got {tenure_months}")

    amount = to_finite_number(monthly_emi)
    prefix = loan_id or "emi"
    return [
        MonthlyInstallment(
            installment_id=f"{prefix}-{i}",
            loan_id=loan_id,
            installment_number=i,
            due_date=add_months(start, i),
            amount=amount,
        )
        for i in range(1, tenure_months + 1)
    ]


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the month end."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def _non_negative(name: str, value: Any) -> Decimal:
    number = to_finite_number(value)
    if number < 0:
        raise InvalidInputError(f"{name} must be >= 0, got {number}")
    return number
