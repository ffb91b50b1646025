"""Shared serialization utilities for sinks."""

from dataclasses import asdict, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from loan_engine.models import InstallmentRow, MonthlyInstallment, RollupReport, RollupRow


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if isinstance(obj, RollupRow):
        return rollup_row_to_dict(obj)
    elif isinstance(obj, (InstallmentRow, MonthlyInstallment)):
        return to_dict_fast(obj)
    elif is_dataclass(obj) and not isinstance(obj, type):
        return dataclass_to_dict(obj)
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert dataclass to dict with proper serialization."""
    result = {}
    for key, value in asdict(obj).items():
        result[key] = serialize_value(value)
    return result


def to_dict_fast(obj: Any) -> dict:
    """Convert dataclass without deep copy.

    Uses ``dataclasses.fields()`` + ``getattr`` instead of ``asdict()``
    which does a recursive deep-copy of every value. Best for flat
    dataclasses such as ``InstallmentRow``.

    Parameters
    ----------
    obj : Any
        A dataclass instance.

    Returns
    -------
    dict
        Serialized dictionary.
    """
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def rollup_row_to_dict(row: RollupRow) -> dict:
    """Flatten a report row: record fields inline, references as a list."""
    record = row.record
    return {
        "kind": row.kind.value,
        "position": row.position,
        "serial": row.serial,
        "label": row.label,
        "day_key": row.day_key,
        "week_key": row.week_key,
        "month_key": row.month_key,
        "member_name": record.member_name if record else None,
        "loan_account_number": record.loan_account_number if record else None,
        "group_id": record.group_id if record else None,
        "group_name": record.group_name if record else None,
        "disburse_date": serialize_value(record.disburse_date) if record else None,
        "principal_amount": serialize_value(row.principal_amount),
        "disbursed_amount": serialize_value(row.disbursed_amount),
        "refs": list(row.refs.rows) if row.refs is not None else None,
    }


def report_to_records(report: RollupReport) -> list[dict]:
    """Serialize every row of a roll-up report."""
    return [rollup_row_to_dict(row) for row in report]


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value
