"""Tests for the weekly schedule builder."""

import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from loan_engine.calculators import build_schedule, compute_fees, compute_interest, compute_loan
from loan_engine.config import ScheduleConfig
from loan_engine.exceptions import InvalidInputError
from loan_engine.models import FeePolicy, InstallmentRow, LoanTerms


def _schedule(terms: LoanTerms, config: ScheduleConfig | None = None) -> list[InstallmentRow]:
    return build_schedule(terms, compute_interest(terms), compute_fees(terms), config=config)


class TestBuildSchedule:
    """Tests for build_schedule."""

    def test_one_row_per_week(self, scenario_terms: LoanTerms) -> None:
        rows = _schedule(scenario_terms)

        assert len(rows) == 12
        assert [row.installment_number for row in rows] == list(range(1, 13))

    def test_due_dates_weekly_from_first_date(self, scenario_terms: LoanTerms) -> None:
        rows = _schedule(scenario_terms)

        assert rows[0].due_date == date(2024, 1, 8)
        assert rows[1].due_date == date(2024, 1, 15)
        assert rows[-1].due_date == date(2024, 3, 25)
        for i, row in enumerate(rows):
            assert row.due_date == date(2024, 1, 8) + timedelta(days=7 * i)

    def test_first_row(self, scenario_terms: LoanTerms) -> None:
        first = _schedule(scenario_terms)[0]

        assert first.principal_due == Decimal("833.33")
        assert first.interest_due == Decimal("100.00")
        assert first.fees_due == Decimal("200.00")
        assert first.total_due == Decimal("1133.33")
        assert first.principal_balance_after == Decimal("9166.67")

    def test_fees_only_on_first_row(self, scenario_terms: LoanTerms) -> None:
        rows = _schedule(scenario_terms)

        assert [row.installment_number for row in rows if row.fees_due > 0] == [1]
        assert all(row.fees_due == 0 for row in rows[1:])
        assert rows[1].total_due == Decimal("933.33")

    def test_last_row_settles_balance(self, scenario_terms: LoanTerms) -> None:
        rows = _schedule(scenario_terms)

        assert rows[-1].principal_due == Decimal("833.37")
        assert rows[-1].total_due == Decimal("933.37")
        assert rows[-1].principal_balance_after == Decimal("0.00")
        assert sum(row.principal_due for row in rows) == Decimal("10000.00")

    def test_constant_principal_without_settlement(self, scenario_terms: LoanTerms) -> None:
        rows = _schedule(scenario_terms, ScheduleConfig(settle_final_installment=False))

        assert {row.principal_due for row in rows} == {Decimal("833.33")}
        assert rows[-1].principal_balance_after == Decimal("0.04")

    def test_principal_capped_at_balance(self) -> None:
        """200 / 3 rounds up to 66.67, so the third row only has 66.66 left to take."""
        terms = LoanTerms(principal=Decimal("200"), duration_weeks=3, first_installment_date=date(2024, 1, 1))

        rows = _schedule(terms, ScheduleConfig(settle_final_installment=False))

        assert [row.principal_due for row in rows] == [Decimal("66.67"), Decimal("66.67"), Decimal("66.66")]
        assert [row.principal_balance_after for row in rows] == [
            Decimal("133.33"),
            Decimal("66.66"),
            Decimal("0"),
        ]

    @pytest.mark.parametrize("settle", [True, False])
    def test_small_loan_round_up_never_overcharges(self, settle: bool) -> None:
        """5 over 52 weeks rounds to 0.10 a week, which pays the loan off by week 50."""
        terms = LoanTerms(principal=Decimal("5"), duration_weeks=52, first_installment_date=date(2024, 1, 1))

        rows = _schedule(terms, ScheduleConfig(settle_final_installment=settle))

        assert len(rows) == 52
        assert sum(row.principal_due for row in rows) == Decimal("5.00")
        assert {row.principal_due for row in rows[:50]} == {Decimal("0.10")}
        assert [row.principal_due for row in rows[50:]] == [Decimal("0.00"), Decimal("0.00")]
        assert rows[49].principal_balance_after == Decimal("0.00")
        assert rows[-1].principal_balance_after == Decimal("0.00")

    def test_settled_last_row_absorbs_round_up(self) -> None:
        terms = LoanTerms(principal=Decimal("200"), duration_weeks=3, first_installment_date=date(2024, 1, 1))

        rows = _schedule(terms)

        assert [row.principal_due for row in rows] == [Decimal("66.67"), Decimal("66.67"), Decimal("66.66")]
        assert rows[-1].principal_balance_after == Decimal("0")

    def test_balance_non_increasing(self, scenario_terms: LoanTerms) -> None:
        balances = [row.principal_balance_after for row in _schedule(scenario_terms)]

        assert balances == sorted(balances, reverse=True)
        assert all(balance >= 0 for balance in balances)

    def test_zero_weeks_empty(self) -> None:
        terms = LoanTerms(
            principal=Decimal("10000"),
            duration_weeks=0,
            total_interest_percent=Decimal("12"),
            first_installment_date=date(2024, 1, 8),
        )

        assert _schedule(terms) == []

    def test_zero_principal_empty(self) -> None:
        terms = LoanTerms(principal=Decimal("0"), duration_weeks=12, first_installment_date=date(2024, 1, 8))

        assert _schedule(terms) == []

    def test_dropped_fees_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        terms = LoanTerms(principal=Decimal("10000"), duration_weeks=0, book_price_amount=Decimal("50"))

        with caplog.at_level(logging.WARNING, logger="loan_engine"):
            assert _schedule(terms) == []

        assert "dropped" in caplog.text

    def test_missing_first_date_rejected(self) -> None:
        terms = LoanTerms(principal=Decimal("1000"), duration_weeks=4)

        with pytest.raises(InvalidInputError, match="first_installment_date"):
            _schedule(terms)

    def test_disbursement_day_fee_policy(self, scenario_terms: LoanTerms) -> None:
        rows = _schedule(scenario_terms, ScheduleConfig(fee_policy=FeePolicy.DISBURSEMENT_DAY))

        assert all(row.fees_due == 0 for row in rows)
        assert rows[0].total_due == Decimal("933.33")

    def test_idempotent(self, scenario_terms: LoanTerms) -> None:
        assert _schedule(scenario_terms) == _schedule(scenario_terms)

    @pytest.mark.parametrize(
        "principal,weeks",
        [("10000", 12), ("200", 3), ("999.99", 7), ("1", 46), ("50000", 50), ("0.05", 4), ("5", 52), ("1", 30)],
    )
    def test_principal_sums_to_loan_amount(self, principal: str, weeks: int) -> None:
        terms = LoanTerms(principal=Decimal(principal), duration_weeks=weeks, first_installment_date=date(2024, 1, 1))

        rows = _schedule(terms)

        assert sum(row.principal_due for row in rows) == Decimal(principal)
        assert rows[-1].principal_balance_after == 0


class TestComputeLoan:
    """Tests for compute_loan."""

    def test_scenario(self, scenario_terms: LoanTerms) -> None:
        loan = compute_loan(scenario_terms)

        assert loan.interest.total_interest_amount == Decimal("1200.00")
        assert loan.weekly.principal_per_week == Decimal("833.33")
        assert loan.fees.first_installment_extra == Decimal("200.00")
        assert len(loan.schedule) == 12
        assert loan.disbursement_charges == Decimal("0")
        assert loan.total_repayable == Decimal("11200.00")
        assert loan.scheduled_total == Decimal("11400.00")

    def test_disbursement_day_charges(self, scenario_terms: LoanTerms) -> None:
        loan = compute_loan(scenario_terms, ScheduleConfig(fee_policy=FeePolicy.DISBURSEMENT_DAY))

        assert loan.disbursement_charges == Decimal("200.00")
        assert loan.scheduled_total == Decimal("11200.00")

    def test_zero_weeks(self) -> None:
        terms = LoanTerms(principal=Decimal("10000"), duration_weeks=0, total_interest_percent=Decimal("12"))

        loan = compute_loan(terms)

        assert loan.schedule == []
        assert loan.interest.total_interest_amount == Decimal("1200.00")
        assert loan.interest.interest_per_week == Decimal("0")

    def test_very_large_principal(self) -> None:
        terms = LoanTerms(principal=Decimal("1e27"), duration_weeks=10, first_installment_date=date(2024, 1, 1))

        loan = compute_loan(terms)

        assert loan.weekly.principal_per_week == Decimal("1e26")
        assert len(loan.schedule) == 10
        assert sum(row.principal_due for row in loan.schedule) == Decimal("1e27")
        assert loan.schedule[-1].principal_balance_after == 0
