"""Day, week and month grouping keys for disbursement dates."""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any

from loan_engine.models import parse_iso_date

logger = logging.getLogger(__name__)

NO_DATE = "NO_DATE"
NO_WEEK = "NO_WEEK"
NO_MONTH = "NO_MONTH"


@dataclass(frozen=True)
class BucketKeys:
    """Grouping keys of one day bucket."""

    day: str
    week: str
    month: str

    @property
    def is_dated(self) -> bool:
        return self.day != NO_DATE


UNDATED = BucketKeys(day=NO_DATE, week=NO_WEEK, month=NO_MONTH)


def week_key(value: date) -> str:
    """ISO week of ``value`` as ``YYYY-Www`` (Monday start, ISO year)."""
    iso_year, iso_week, _ = value.isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def month_key(value: date) -> str:
    return f"{value.year}-{value.month:02d}"


def day_key(value: Any) -> str:
    """Day bucket for a raw disbursement date, or ``NO_DATE``.

    Malformed values are not an error: they land in the undated bucket.
    """
    parsed = parse_iso_date(value)
    if parsed is None:
        if value not in (None, ""):
            logger.warning(
                "Unparseable disbursement date %r; grouped as undated", value, extra={"day_key": NO_DATE}
            )
        return NO_DATE
    return parsed.isoformat()


def bucket_keys(key: str) -> BucketKeys:
    """Derive week and month keys for a day key."""
    if key == NO_DATE:
        return UNDATED
    parsed = date.fromisoformat(key)
    return BucketKeys(day=key, week=week_key(parsed), month=month_key(parsed))


def sort_day_keys(keys: list[str]) -> list[str]:
    """Sort day keys ascending with ``NO_DATE`` last."""
    return sorted(keys, key=lambda key: (key == NO_DATE, key))
