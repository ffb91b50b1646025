"""Value objects for loan computation and roll-up reporting."""

from loan_engine.models.enums import (
    FeePolicy,
    InstallmentStatus,
    ReportColumn,
    RowKind,
)
from loan_engine.models.loan import (
    EmiBreakdown,
    FeeBreakdown,
    InstallmentRow,
    InterestBreakdown,
    LoanComputation,
    LoanTerms,
    MonthlyInstallment,
    WeeklyBreakdown,
    parse_iso_date,
)
from loan_engine.models.report import (
    AggregateCell,
    DisbursedLoanRecord,
    RangeSum,
    RollupReport,
    RollupRow,
    Value,
)

__all__ = [
    "AggregateCell",
    "DisbursedLoanRecord",
    "EmiBreakdown",
    "FeeBreakdown",
    "FeePolicy",
    "InstallmentRow",
    "InstallmentStatus",
    "InterestBreakdown",
    "LoanComputation",
    "LoanTerms",
    "MonthlyInstallment",
    "RangeSum",
    "ReportColumn",
    "RollupReport",
    "RollupRow",
    "RowKind",
    "Value",
    "WeeklyBreakdown",
    "parse_iso_date",
]
