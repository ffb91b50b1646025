"""Day / week / month / grand-total roll-up of disbursed loans."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Iterable, Mapping

from loan_engine.models import (
    DisbursedLoanRecord,
    RangeSum,
    ReportColumn,
    RollupReport,
    RollupRow,
    RowKind,
)
from loan_engine.numbers import ZERO
from loan_engine.rollup.keys import UNDATED, BucketKeys, bucket_keys, day_key, sort_day_keys
from loan_engine.rollup.tracker import RollupTracker

logger = logging.getLogger(__name__)


def group_by_day(
    records: Iterable[DisbursedLoanRecord | Mapping[str, Any]],
) -> dict[str, list[DisbursedLoanRecord]]:
    """Group records by day key, keeping first-seen order within a day.

    Mappings are read with :meth:`DisbursedLoanRecord.from_mapping`.
    """
    groups: dict[str, list[DisbursedLoanRecord]] = {}
    for item in records:
        record = item if isinstance(item, DisbursedLoanRecord) else DisbursedLoanRecord.from_mapping(item)
        groups.setdefault(day_key(record.disburse_date), []).append(record)
    return groups


def build_rollup(
    records: Iterable[DisbursedLoanRecord | Mapping[str, Any]],
    *,
    first_position: int = 1,
    split_weeks_at_month_end: bool = False,
) -> RollupReport:
    """Build the hierarchical disbursement roll-up.

    Each day's records are followed by a daily total. A weekly total follows
    the last day of each ISO week, a monthly total follows the last day of
    each month, and one grand total closes the report. Records without a
    usable date form an undated bucket after all dated days, with its own
    daily, weekly and monthly totals.

    Parameters
    ----------
    records : Iterable[DisbursedLoanRecord | Mapping[str, Any]]
        Disbursed loans, in listing order.
    first_position : int
        Absolute position of the first row, e.g. the first sheet row below
        the header block.
    split_weeks_at_month_end : bool
        Close the running week whenever the month closes, so a week spanning
        two months is totalled once per month. When off (the default), such a
        week is totalled once, under the month in which it ends.

    Returns
    -------
    RollupReport
        Flattened rows with materialized amounts and, on total rows, the
        positions they sum. Empty for empty input.
    """
    groups = group_by_day(records)
    if not groups:
        return RollupReport(rows=(), first_position=first_position)

    day_keys = sort_day_keys(list(groups))
    buckets = [bucket_keys(key) for key in day_keys]
    tracker = RollupTracker(first_position)
    rows: list[RollupRow] = []

    for index, keys in enumerate(buckets):
        next_keys = buckets[index + 1] if index + 1 < len(buckets) else None

        for record in groups[keys.day]:
            position, serial = tracker.add_data_row()
            rows.append(
                RollupRow(
                    kind=RowKind.DATA,
                    position=position,
                    principal_amount=record.principal_amount,
                    disbursed_amount=record.total_disbursed_amount,
                    day_key=keys.day,
                    week_key=keys.week,
                    month_key=keys.month,
                    serial=serial,
                    record=record,
                )
            )

        position, refs = tracker.close_day(keys.week)
        rows.append(_total_row(RowKind.DAILY_TOTAL, position, refs, keys, rows))

        month_ends = next_keys is None or next_keys.month != keys.month
        week_ends = next_keys is None or next_keys.week != keys.week
        if split_weeks_at_month_end:
            week_ends = week_ends or month_ends

        if week_ends:
            position, refs = tracker.close_week(keys.week, keys.month)
            rows.append(_total_row(RowKind.WEEKLY_TOTAL, position, refs, keys, rows))
            logger.debug(
                "Closed week %s at row %d over rows %s",
                keys.week,
                position,
                refs.rows,
                extra={"week_key": keys.week, "month_key": keys.month, "position": position, "rows": list(refs.rows)},
            )

        if month_ends:
            position, refs = tracker.close_month(keys.month)
            rows.append(_total_row(RowKind.MONTHLY_TOTAL, position, refs, keys, rows))
            logger.debug(
                "Closed month %s at row %d over rows %s",
                keys.month,
                position,
                refs.rows,
                extra={"month_key": keys.month, "position": position, "rows": list(refs.rows)},
            )

    position, refs = tracker.finish()
    grand_keys = BucketKeys(day="", week="", month="")
    rows.append(_total_row(RowKind.GRAND_TOTAL, position, refs, grand_keys, rows))

    report = RollupReport(rows=tuple(rows), first_position=first_position)
    undated = len(groups.get(UNDATED.day, []))
    logger.info(
        "Rolled up %d loans over %d days into %d rows (%d undated), grand total principal=%s",
        len(report.data_rows),
        len(day_keys),
        len(report),
        undated,
        report.grand_total.principal_amount if report.grand_total else ZERO,
    )
    return report


def _total_row(
    kind: RowKind,
    position: int,
    refs: RangeSum,
    keys: BucketKeys,
    emitted: list[RollupRow],
) -> RollupRow:
    first = emitted[0].position if emitted else position
    referenced = [emitted[ref - first] for ref in refs]
    return RollupRow(
        kind=kind,
        position=position,
        principal_amount=_sum(referenced, ReportColumn.PRINCIPAL),
        disbursed_amount=_sum(referenced, ReportColumn.DISBURSED),
        day_key=keys.day,
        week_key=keys.week,
        month_key=keys.month,
        refs=refs,
    )


def _sum(rows: list[RollupRow], column: ReportColumn) -> Decimal:
    return sum((row.amount(column) for row in rows), ZERO)
