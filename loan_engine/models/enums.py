"""Enumeration types for loan computation and reporting."""

from enum import Enum


class FeePolicy(str, Enum):
    FIRST_INSTALLMENT = "FIRST_INSTALLMENT"
    DISBURSEMENT_DAY = "DISBURSEMENT_DAY"


class InstallmentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class RowKind(str, Enum):
    DATA = "DATA"
    DAILY_TOTAL = "DAILY_TOTAL"
    WEEKLY_TOTAL = "WEEKLY_TOTAL"
    MONTHLY_TOTAL = "MONTHLY_TOTAL"
    GRAND_TOTAL = "GRAND_TOTAL"

    @property
    def is_total(self) -> bool:
        return self is not RowKind.DATA

    @property
    def label(self) -> str:
        return _ROW_LABELS[self]


_ROW_LABELS = {
    RowKind.DATA: "",
    RowKind.DAILY_TOTAL: "Daily Total",
    RowKind.WEEKLY_TOTAL: "Weekly Total",
    RowKind.MONTHLY_TOTAL: "Monthly Total",
    RowKind.GRAND_TOTAL: "Grand Total",
}


class ReportColumn(str, Enum):
    """Amount columns that total rows aggregate."""

    PRINCIPAL = "PRINCIPAL"
    DISBURSED = "DISBURSED"
