"""Pytest configuration and fixtures."""

from datetime import date
from decimal import Decimal

import pytest

from loan_engine.models import DisbursedLoanRecord, LoanTerms


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def scenario_terms() -> LoanTerms:
    """12-week loan of 10,000 at 12% with 1% processing, 0.5% insurance, 50 book price."""
    return LoanTerms(
        principal=Decimal("10000"),
        duration_weeks=12,
        total_interest_percent=Decimal("12"),
        processing_fee_percent=Decimal("1"),
        insurance_fee_percent=Decimal("0.5"),
        book_price_amount=Decimal("50"),
        first_installment_date=date(2024, 1, 8),
    )


def make_record(
    disburse_date: object,
    principal: str = "10000",
    disbursed: str = "11200",
    name: str = "Member",
    account: str = "LN0001",
) -> DisbursedLoanRecord:
    """Build a disbursed loan record with sensible defaults."""
    return DisbursedLoanRecord(
        member_name=name,
        loan_account_number=account,
        group_id="GRP001",
        group_name="Asha Mahila Samiti",
        disburse_date=disburse_date,
        principal_amount=Decimal(principal),
        total_disbursed_amount=Decimal(disbursed),
    )


@pytest.fixture
def same_week_records() -> list[DisbursedLoanRecord]:
    """Three loans on Monday 2024-01-08 and one on Sunday 2024-01-14."""
    return [
        make_record("2024-01-08", "10000", "11400", name="Anita", account="LN0001"),
        make_record("2024-01-08", "20000", "22800", name="Bharti", account="LN0002"),
        make_record("2024-01-08", "5000", "5700", name="Chitra", account="LN0003"),
        make_record("2024-01-14", "15000", "17100", name="Deepa", account="LN0004"),
    ]


@pytest.fixture
def record_factory():
    """Factory for disbursed loan records."""
    return make_record
