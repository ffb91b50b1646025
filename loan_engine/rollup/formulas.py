"""Render aggregate cells as spreadsheet values or ``SUM`` formulas."""

from decimal import Decimal

from loan_engine.models import AggregateCell, RangeSum, Value


def sum_formula(column: str, refs: RangeSum) -> str:
    """Build the ``SUM`` expression for ``refs`` in ``column``.

    A contiguous block of two or more rows renders as a range
    (``SUM(G6:G8)``), anything else as a list (``SUM(G9,G14)``). No
    references render as ``0``.
    """
    if not refs:
        return "0"
    if len(refs) > 1 and refs.is_contiguous:
        return f"SUM({column}{refs.first}:{column}{refs.last})"
    return "SUM(" + ",".join(f"{column}{row}" for row in refs) + ")"


def render_cell(column: str, cell: AggregateCell) -> Decimal | str:
    """Return a literal amount for ``Value`` or ``=SUM(...)`` for ``RangeSum``."""
    if isinstance(cell, Value):
        return cell.amount
    return "=" + sum_formula(column, cell)
