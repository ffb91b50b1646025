"""Loan calculators: flat weekly interest, schedules and monthly EMI."""

from loan_engine.calculators.emi import add_months, calculate_emi, generate_monthly_schedule
from loan_engine.calculators.interest import (
    compute_fees,
    compute_interest,
    compute_weekly_breakdown,
)
from loan_engine.calculators.schedule import build_schedule, compute_loan

__all__ = [
    "add_months",
    "build_schedule",
    "calculate_emi",
    "compute_fees",
    "compute_interest",
    "compute_loan",
    "compute_weekly_breakdown",
    "generate_monthly_schedule",
]
