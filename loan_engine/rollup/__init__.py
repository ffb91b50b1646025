"""Disbursement roll-up: grouping keys, position tracking and formulas."""

from loan_engine.rollup.aggregator import build_rollup, group_by_day
from loan_engine.rollup.formulas import render_cell, sum_formula
from loan_engine.rollup.keys import (
    NO_DATE,
    NO_MONTH,
    NO_WEEK,
    BucketKeys,
    bucket_keys,
    day_key,
    month_key,
    sort_day_keys,
    week_key,
)
from loan_engine.rollup.tracker import RollupState, RollupTracker

__all__ = [
    "NO_DATE",
    "NO_MONTH",
    "NO_WEEK",
    "BucketKeys",
    "RollupState",
    "RollupTracker",
    "bucket_keys",
    "build_rollup",
    "day_key",
    "group_by_day",
    "month_key",
    "render_cell",
    "sort_day_keys",
    "sum_formula",
    "week_key",
]
