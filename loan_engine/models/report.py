"""Disbursement roll-up report models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Iterator, Mapping, Union

from loan_engine.models.enums import ReportColumn, RowKind
from loan_engine.numbers import ZERO, to_finite_number


@dataclass(frozen=True)
class DisbursedLoanRecord:
    """One disbursed loan as returned by the loan-listing endpoint."""

    member_name: str
    loan_account_number: str
    group_id: str
    group_name: str
    disburse_date: date | datetime | str | None
    principal_amount: Decimal
    total_disbursed_amount: Decimal  # Principal + interest + fees

    def __post_init__(self) -> None:
        object.__setattr__(self, "principal_amount", to_finite_number(self.principal_amount))
        object.__setattr__(
            self, "total_disbursed_amount", to_finite_number(self.total_disbursed_amount)
        )

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "DisbursedLoanRecord":
        """Build a record from a REST payload.

        Missing keys become empty strings or zero amounts.
        """
        group_id = payload.get("group_id")
        return cls(
            member_name=str(payload.get("member_name") or ""),
            loan_account_number=str(
                payload.get("loan_account_no") or payload.get("loan_account_number") or ""
            ),
            group_id="" if group_id is None else str(group_id),
            group_name=str(payload.get("group_name") or ""),
            disburse_date=payload.get("disburse_date"),
            principal_amount=payload.get("principal_amount"),
            total_disbursed_amount=payload.get("total_disbursed_amount"),
        )

    def amount(self, column: ReportColumn) -> Decimal:
        if column is ReportColumn.PRINCIPAL:
            return self.principal_amount
        return self.total_disbursed_amount


@dataclass(frozen=True)
class Value:
    """A materialized amount."""

    amount: Decimal


@dataclass(frozen=True)
class RangeSum:
    """A sum over earlier report rows, by absolute position."""

    rows: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[int]:
        return iter(self.rows)

    @property
    def first(self) -> int | None:
        return self.rows[0] if self.rows else None

    @property
    def last(self) -> int | None:
        return self.rows[-1] if self.rows else None

    @property
    def is_contiguous(self) -> bool:
        """True when the rows form one unbroken ascending block."""
        return bool(self.rows) and list(self.rows) == list(
            range(self.rows[0], self.rows[0] + len(self.rows))
        )


AggregateCell = Union[Value, RangeSum]


@dataclass(frozen=True)
class RollupRow:
    """One row of the flattened roll-up report."""

    kind: RowKind
    position: int  # Absolute row number in the rendered sheet
    principal_amount: Decimal
    disbursed_amount: Decimal
    day_key: str
    week_key: str
    month_key: str
    serial: int | None = None  # Data rows only
    record: DisbursedLoanRecord | None = None  # Data rows only
    refs: RangeSum | None = None  # Total rows only

    @property
    def label(self) -> str:
        return self.kind.label

    @property
    def is_total(self) -> bool:
        return self.kind.is_total

    def amount(self, column: ReportColumn) -> Decimal:
        if column is ReportColumn.PRINCIPAL:
            return self.principal_amount
        return self.disbursed_amount

    def cell(self, column: ReportColumn, symbolic: bool = False) -> AggregateCell:
        """Return the cell for ``column``.

        Total rows yield their ``RangeSum`` when ``symbolic`` is set; every
        other case yields the materialized ``Value``.
        """
        if symbolic and self.refs is not None:
            return self.refs
        return Value(self.amount(column))


@dataclass(frozen=True)
class RollupReport:
    """Ordered data and total rows of a disbursement roll-up."""

    rows: tuple[RollupRow, ...] = ()
    first_position: int = 1
    _by_position: dict[int, RollupRow] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "rows", tuple(self.rows))
        object.__setattr__(self, "_by_position", {row.position: row for row in self.rows})

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[RollupRow]:
        return iter(self.rows)

    def __bool__(self) -> bool:
        return bool(self.rows)

    @property
    def last_position(self) -> int | None:
        return self.rows[-1].position if self.rows else None

    @property
    def data_rows(self) -> list[RollupRow]:
        return self.of_kind(RowKind.DATA)

    @property
    def grand_total(self) -> RollupRow | None:
        totals = self.of_kind(RowKind.GRAND_TOTAL)
        return totals[0] if totals else None

    def of_kind(self, kind: RowKind) -> list[RollupRow]:
        return [row for row in self.rows if row.kind is kind]

    def row_at(self, position: int) -> RollupRow:
        """Look a row up by its absolute position."""
        try:
            return self._by_position[position]
        except KeyError:
            raise KeyError(f"No report row at position {position}") from None

    def resolve(self, cell: AggregateCell, column: ReportColumn) -> Decimal:
        """Evaluate a cell the way a spreadsheet would, recursively."""
        if isinstance(cell, Value):
            return cell.amount
        total = ZERO
        for position in cell:
            row = self.row_at(position)
            total += self.resolve(row.cell(column, symbolic=True), column)
        return total
