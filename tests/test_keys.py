"""Tests for roll-up grouping keys."""

import logging
from datetime import date, datetime

import pytest

from loan_engine.rollup import (
    NO_DATE,
    NO_MONTH,
    NO_WEEK,
    bucket_keys,
    day_key,
    month_key,
    sort_day_keys,
    week_key,
)


class TestWeekKey:
    """Tests for week_key."""

    def test_monday_start(self) -> None:
        assert week_key(date(2024, 1, 8)) == "2024-W02"
        assert week_key(date(2024, 1, 14)) == "2024-W02"
        assert week_key(date(2024, 1, 15)) == "2024-W03"

    def test_iso_year_at_year_end(self) -> None:
        assert week_key(date(2024, 12, 30)) == "2025-W01"
        assert week_key(date(2021, 1, 1)) == "2020-W53"

    def test_zero_padded(self) -> None:
        assert week_key(date(2024, 1, 1)) == "2024-W01"


class TestMonthKey:
    """Tests for month_key."""

    def test_month_key(self) -> None:
        assert month_key(date(2024, 3, 5)) == "2024-03"
        assert month_key(date(2024, 12, 30)) == "2024-12"


class TestDayKey:
    """Tests for day_key."""

    def test_iso_string(self) -> None:
        assert day_key("2024-01-08") == "2024-01-08"

    def test_timestamp_string(self) -> None:
        assert day_key("2024-01-08T18:45:00Z") == "2024-01-08"

    def test_date_and_datetime(self) -> None:
        assert day_key(date(2024, 1, 8)) == "2024-01-08"
        assert day_key(datetime(2024, 1, 8, 9, 0)) == "2024-01-08"

    def test_missing(self) -> None:
        assert day_key(None) == NO_DATE
        assert day_key("") == NO_DATE

    def test_malformed_is_undated(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="loan_engine"):
            assert day_key("08/01/2024") == NO_DATE

        assert "Unparseable" in caplog.text


class TestBucketKeys:
    """Tests for bucket_keys."""

    def test_dated(self) -> None:
        keys = bucket_keys("2024-01-31")

        assert keys.day == "2024-01-31"
        assert keys.week == "2024-W05"
        assert keys.month == "2024-01"
        assert keys.is_dated is True

    def test_undated_sentinels(self) -> None:
        keys = bucket_keys(NO_DATE)

        assert keys.week == NO_WEEK
        assert keys.month == NO_MONTH
        assert keys.is_dated is False


class TestSortDayKeys:
    """Tests for sort_day_keys."""

    def test_ascending_with_undated_last(self) -> None:
        keys = [NO_DATE, "2024-02-01", "2023-12-31", "2024-01-08"]

        assert sort_day_keys(keys) == ["2023-12-31", "2024-01-08", "2024-02-01", NO_DATE]
