"""Loan term and repayment schedule models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal

from loan_engine.exceptions import InvalidInputError
from loan_engine.models.enums import InstallmentStatus
from loan_engine.numbers import ZERO, to_finite_number

_AMOUNT_FIELDS = (
    "principal",
    "total_interest_percent",
    "processing_fee_percent",
    "insurance_fee_percent",
    "book_price_amount",
)


def parse_iso_date(value: date | datetime | str | None) -> date | None:
    """Read a calendar date from a ``date``, ``datetime`` or ISO string.

    Only the leading ``YYYY-MM-DD`` of a string is used, so timestamps such
    as ``2024-01-08T00:00:00Z`` are accepted. Returns ``None`` for empty or
    unparseable input.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip()[:10]
    if not text:
        return None
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


@dataclass(frozen=True)
class LoanTerms:
    """Terms of a weekly flat-interest loan.

    Numeric fields are coerced with :func:`to_finite_number` on construction,
    so NaN, infinities, blanks and ``None`` become zero. Negative values are
    rejected.
    """

    principal: Decimal
    duration_weeks: int
    total_interest_percent: Decimal = ZERO  # Over the whole duration, not per week
    processing_fee_percent: Decimal = ZERO  # % of principal
    insurance_fee_percent: Decimal = ZERO  # % of principal
    book_price_amount: Decimal = ZERO  # Flat amount
    first_installment_date: date | None = None

    def __post_init__(self) -> None:
        for name in _AMOUNT_FIELDS:
            value = to_finite_number(getattr(self, name))
            if value < 0:
                raise InvalidInputError(f"{name} must be >= 0, got {value}")
            object.__setattr__(self, name, value)

        weeks = to_finite_number(self.duration_weeks)
        if weeks < 0:
            raise InvalidInputError(f"duration_weeks must be >= 0, got {weeks}")
        if weeks != weeks.to_integral_value():
            raise InvalidInputError(f"duration_weeks must be a whole number, got {weeks}")
        object.__setattr__(self, "duration_weeks", int(weeks))

        raw_date = self.first_installment_date
        first_date = parse_iso_date(raw_date)
        if raw_date not in (None, "") and first_date is None:
            raise InvalidInputError(f"first_installment_date is not a date: {raw_date!r}")
        object.__setattr__(self, "first_installment_date", first_date)


@dataclass(frozen=True)
class InterestBreakdown:
    """Flat interest derived from loan terms."""

    total_interest_percent: Decimal
    weekly_interest_percent: Decimal
    total_interest_amount: Decimal
    interest_per_week: Decimal


@dataclass(frozen=True)
class FeeBreakdown:
    """One-off charges derived from loan terms."""

    processing_fee_amount: Decimal
    insurance_fee_amount: Decimal
    book_price_amount: Decimal
    first_installment_extra: Decimal  # Sum of the three

    @property
    def has_fees(self) -> bool:
        return self.first_installment_extra > 0


@dataclass(frozen=True)
class WeeklyBreakdown:
    """Per-week figures shown next to the schedule."""

    principal_per_week: Decimal
    interest_per_week: Decimal
    installment_per_week: Decimal  # Principal + interest, no fees


@dataclass(frozen=True)
class InstallmentRow:
    """One weekly installment of a repayment schedule."""

    installment_number: int  # 1, 2, 3, ...
    due_date: date
    principal_due: Decimal
    interest_due: Decimal
    fees_due: Decimal
    total_due: Decimal
    principal_balance_after: Decimal


@dataclass(frozen=True)
class LoanComputation:
    """Everything computed for one set of loan terms."""

    terms: LoanTerms
    interest: InterestBreakdown
    fees: FeeBreakdown
    weekly: WeeklyBreakdown
    schedule: list[InstallmentRow] = field(default_factory=list)
    disbursement_charges: Decimal = ZERO  # Fees collected outside the schedule

    @property
    def total_repayable(self) -> Decimal:
        """Principal plus total interest."""
        return self.terms.principal + self.interest.total_interest_amount

    @property
    def scheduled_total(self) -> Decimal:
        """Sum of ``total_due`` across the schedule."""
        return sum((row.total_due for row in self.schedule), ZERO)


@dataclass(frozen=True)
class EmiBreakdown:
    """Monthly simple-interest EMI figures."""

    monthly_emi: Decimal
    total_interest: Decimal
    total_payable: Decimal


@dataclass(frozen=True)
class MonthlyInstallment:
    """One installment of a monthly EMI schedule."""

    installment_id: str
    loan_id: str | None
    installment_number: int
    due_date: date
    amount: Decimal
    status: InstallmentStatus = InstallmentStatus.PENDING

