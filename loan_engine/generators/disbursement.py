"""Synthetic loan terms and disbursement listings."""

from __future__ import annotations

import random
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from loan_engine.calculators import compute_loan
from loan_engine.generators.base import BaseGenerator
from loan_engine.models import DisbursedLoanRecord, LoanTerms

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@dataclass(frozen=True)
class LoanGroup:
    """A borrower group meeting on a fixed weekday."""

    group_id: str
    group_name: str
    meeting_day: str


class LoanTermsGenerator(BaseGenerator):
    """Generate plausible weekly microfinance loan terms."""

    PRINCIPALS = [5000, 10000, 15000, 20000, 25000, 30000, 40000, 50000]
    DURATIONS = [12, 24, 46, 50]
    # Total interest over the whole duration, in percent
    INTEREST_BY_DURATION = {12: (8, 12), 24: (12, 18), 46: (20, 26), 50: (22, 28)}

    def generate(self, first_installment_date: date | None = None) -> LoanTerms:
        """Generate one set of loan terms.

        Parameters
        ----------
        first_installment_date : date | None
            First due date; a date within the next two weeks when omitted.

        Returns
        -------
        LoanTerms
            Generated terms.
        """
        weeks = random.choice(self.DURATIONS)
        low, high = self.INTEREST_BY_DURATION[weeks]
        if first_installment_date is None:
            first_installment_date = self.fake.date_between(start_date="+1d", end_date="+14d")

        return LoanTerms(
            principal=Decimal(random.choice(self.PRINCIPALS)),
            duration_weeks=weeks,
            total_interest_percent=Decimal(random.randint(low, high)),
            processing_fee_percent=Decimal(random.choice(["0", "0.5", "1", "1.5"])),
            insurance_fee_percent=Decimal(random.choice(["0", "0.5", "1"])),
            book_price_amount=Decimal(random.choice([0, 20, 50])),
            first_installment_date=first_installment_date,
        )


class DisbursementGenerator(BaseGenerator):
    """Generate disbursed-loan listings like the loan-listing endpoint returns.

    Parameters
    ----------
    seed : int | None
        Random seed for reproducibility.
    num_groups : int
        Size of the borrower group pool.
    undated_rate : float
        Share of records generated without a disbursement date.
    """

    def __init__(
        self,
        seed: int | None = None,
        num_groups: int = 8,
        undated_rate: float = 0.0,
    ) -> None:
        super().__init__(seed)
        self.undated_rate = undated_rate
        self._terms = LoanTermsGenerator(seed=seed)
        self.groups = [self._generate_group(i) for i in range(1, num_groups + 1)]
        self._account_seq = 0

    def meeting_days(self) -> dict[str, str]:
        """Meeting weekday by group id, as the master roll shows it."""
        return {group.group_id: group.meeting_day for group in self.groups}

    def generate(self, start_date: date, end_date: date) -> DisbursedLoanRecord:
        """Generate one record disbursed between the two dates (inclusive)."""
        group = random.choice(self.groups)
        disburse_date: date | None = None
        if random.random() >= self.undated_rate:
            disburse_date = self.fake.date_between(start_date=start_date, end_date=end_date)

        first_due = (disburse_date or start_date) + timedelta(days=7)
        loan = compute_loan(self._terms.generate(first_installment_date=first_due))
        total = loan.total_repayable + loan.fees.first_installment_extra

        self._account_seq += 1
        return DisbursedLoanRecord(
            member_name=self.fake.name(),
            loan_account_number=f"LN{group.group_id[-3:]}{self._account_seq:05d}",
            group_id=group.group_id,
            group_name=group.group_name,
            disburse_date=disburse_date.isoformat() if disburse_date else None,
            principal_amount=loan.terms.principal,
            total_disbursed_amount=total,
        )

    def generate_batch(self, count: int, start_date: date, end_date: date) -> Iterator[DisbursedLoanRecord]:
        """Generate multiple records.

        Parameters
        ----------
        count : int
            Number of records to generate.
        start_date, end_date : date
            Disbursement date range (inclusive).

        Yields
        ------
        DisbursedLoanRecord
            Generated records, in no particular date order.
        """
        for _ in range(count):
            yield self.generate(start_date, end_date)

    def _generate_group(self, number: int) -> LoanGroup:
        return LoanGroup(
            group_id=f"GRP{number:03d}",
            group_name=f"{self.fake.last_name()} Mahila Samiti",
            meeting_day=random.choice(WEEKDAYS),
        )
