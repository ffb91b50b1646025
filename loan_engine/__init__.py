"""Loan financial computation engine.

Flat-interest weekly schedules and day/week/month disbursement roll-ups.
"""

from loan_engine.calculators import (
    build_schedule,
    calculate_emi,
    compute_fees,
    compute_interest,
    compute_loan,
)
from loan_engine.models import DisbursedLoanRecord, LoanTerms, RollupReport
from loan_engine.numbers import round2, to_finite_number
from loan_engine.rollup import build_rollup

__version__ = "0.1.0"

__all__ = [
    "DisbursedLoanRecord",
    "LoanTerms",
    "RollupReport",
    "build_rollup",
    "build_schedule",
    "calculate_emi",
    "compute_fees",
    "compute_interest",
    "compute_loan",
    "round2",
    "to_finite_number",
]
