"""Excel workbook sink for the disbursement master roll and schedule previews."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterable, Mapping

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from loan_engine.config import ReportConfig
from loan_engine.exceptions import SinkError
from loan_engine.models import (
    DisbursedLoanRecord,
    LoanComputation,
    ReportColumn,
    RollupReport,
    RollupRow,
    RowKind,
    parse_iso_date,
)
from loan_engine.rollup import build_rollup, render_cell

logger = logging.getLogger(__name__)

COLUMNS = ["A", "B", "C", "D", "E", "F", "G", "H"]
PRINCIPAL_COLUMN = "G"
DISBURSED_COLUMN = "H"
FIRST_DATA_ROW = 6  # Rows 1-5 hold the title block and column headers
AMOUNT_FORMAT = "#,##0.00"

_THIN = Side(style="thin")
_BORDER = Border(top=_THIN, left=_THIN, bottom=_THIN, right=_THIN)
_WRAP = Alignment(vertical="center", wrap_text=True, shrink_to_fit=True)


def _fill(argb: str) -> PatternFill:
    return PatternFill(fill_type="solid", fgColor=argb)


TITLE_FONT = Font(name="Arial", size=20, bold=True)
SUBTITLE_FONT = Font(name="Arial", size=15, bold=True)
INFO_FONT = Font(name="Arial", size=12, bold=True)
HEADER_FONT = Font(name="Arial", size=10, bold=True)
HEADER_FILL = _fill("FFC0C0C0")
DATA_FONT = Font(name="Microsoft Sans Serif", size=10)

TOTAL_STYLES = {
    RowKind.DAILY_TOTAL: (Font(name="Tahoma", size=10, bold=True), _fill("FFD3D3D3")),
    RowKind.WEEKLY_TOTAL: (Font(name="Tahoma", size=10, bold=True), _fill("FFB7DEE8")),
    RowKind.MONTHLY_TOTAL: (Font(name="Tahoma", size=10, bold=True), _fill("FFFCD5B4")),
    RowKind.GRAND_TOTAL: (Font(name="Tahoma", size=11, bold=True), _fill("FFC6EFCE")),
}

_AMOUNT_COLUMNS = {
    PRINCIPAL_COLUMN: ReportColumn.PRINCIPAL,
    DISBURSED_COLUMN: ReportColumn.DISBURSED,
}


def format_disbursed_date(value: Any) -> str:
    """Render a disbursement date as text, e.g. ``Thu, 10-Feb-2026``."""
    parsed = parse_iso_date(value)
    if parsed is None:
        return ""
    return parsed.strftime("%a, %d-%b-%Y")


def format_date_range(from_date: Any, to_date: Any) -> str:
    """Header text for the reporting period."""
    start = parse_iso_date(from_date)
    end = parse_iso_date(to_date)
    if start is None or end is None:
        return f"From {from_date or '-'} To {to_date or '-'}"
    return f"From {start.strftime('%a, %d/%m/%Y')} To {end.strftime('%a, %d/%m/%Y')}"


def master_roll_filename(from_date: Any, to_date: Any) -> str:
    return f"Loan_Disbursement_Master_Roll_{from_date or 'from'}_to_{to_date or 'to'}.xlsx"


class ExcelReportSink:
    """Write roll-up reports and schedules to ``.xlsx`` workbooks."""

    def __init__(self, output_dir: str | Path, config: ReportConfig | None = None) -> None:
        """Initialize Excel sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write workbooks.
        config : ReportConfig | None
            Titles, sheet name and total rendering options.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.config = config or ReportConfig()

    def write_master_roll_records(
        self,
        records: Iterable[DisbursedLoanRecord | Mapping[str, Any]],
        **kwargs: Any,
    ) -> Path | None:
        """Roll up raw records and write the master roll.

        Returns ``None`` without writing anything when there are no records.
        """
        report = build_rollup(
            records,
            first_position=FIRST_DATA_ROW,
            split_weeks_at_month_end=self.config.split_weeks_at_month_end,
        )
        if not report:
            logger.info("No disbursed loans to export")
            return None
        return self.write_master_roll(report, **kwargs)

    def write_master_roll(
        self,
        report: RollupReport,
        *,
        from_date: date | str | None = None,
        to_date: date | str | None = None,
        branch_name: str | None = None,
        region_name: str | None = None,
        meeting_day_by_group_id: Mapping[str, str] | None = None,
        filename: str | None = None,
    ) -> Path:
        """Write the loan disbursement master roll workbook.

        Parameters
        ----------
        report : RollupReport
            Roll-up built with ``first_position=FIRST_DATA_ROW``.
        from_date, to_date : date | str | None
            Reporting period shown in the header and used in the file name.
        branch_name, region_name : str | None
            Header labels.
        meeting_day_by_group_id : Mapping[str, str] | None
            Meeting weekday per group id, shown next to each loan.
        filename : str | None
            Override for the generated file name.

        Returns
        -------
        Path
            Written workbook path.

        Raises
        ------
        SinkError
            If the report rows do not start at ``FIRST_DATA_ROW`` or the
            file cannot be saved.
        """
        if report and report.first_position != FIRST_DATA_ROW:
            raise SinkError(
                f"Report starts at row {report.first_position}, master roll data starts at row {FIRST_DATA_ROW}"
            )

        workbook = Workbook()
        ws = workbook.active
        ws.title = self.config.sheet_name

        self._write_header(ws, from_date, to_date, branch_name, region_name)

        meeting_days = meeting_day_by_group_id or {}
        for row in report:
            if row.kind is RowKind.DATA:
                self._write_data_row(ws, row, meeting_days)
            else:
                self._write_total_row(ws, row)

        last_row = report.last_position or FIRST_DATA_ROW - 1
        _apply_borders(ws, 1, last_row, len(COLUMNS))
        _fit_columns(ws, minimum=6, maximum=55)
        ws.page_setup.orientation = "landscape"
        ws.page_setup.fitToWidth = 1
        ws.page_setup.fitToHeight = 0
        ws.sheet_properties.pageSetUpPr.fitToPage = True

        path = self.output_dir / (filename or master_roll_filename(from_date, to_date))
        self._save(workbook, path)
        logger.info(
            "Master roll with %d rows written to %s",
            len(report),
            path,
            extra={"rows": len(report), "path": path},
        )
        return path

    def write_schedule(self, loan: LoanComputation, filename: str = "repayment_schedule.xlsx") -> Path:
        """Write a schedule preview: charges summary, installments and totals."""
        workbook = Workbook()
        ws = workbook.active
        ws.title = "Schedule"

        fees = loan.fees
        summary = [
            ("Principal", loan.terms.principal),
            ("Total Interest", loan.interest.total_interest_amount),
            ("Processing Fee", fees.processing_fee_amount),
            ("Insurance Fee", fees.insurance_fee_amount),
            ("Book Price", fees.book_price_amount),
            ("Disbursement Charges", loan.disbursement_charges),
        ]
        for offset, (label, amount) in enumerate(summary, start=1):
            ws.cell(row=offset, column=1, value=label).font = HEADER_FONT
            ws.cell(row=offset, column=2, value=float(amount)).number_format = AMOUNT_FORMAT

        header_row = len(summary) + 2
        headers = ["Inst No", "Due Date", "Principal", "Interest", "Fees", "Total", "Balance"]
        for col, header in enumerate(headers, start=1):
            cell = ws.cell(row=header_row, column=col, value=header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL

        first_row = header_row + 1
        for offset, inst in enumerate(loan.schedule):
            row = first_row + offset
            ws.cell(row=row, column=1, value=inst.installment_number)
            ws.cell(row=row, column=2, value=inst.due_date).number_format = "DD-MMM-YYYY"
            amounts = [
                inst.principal_due,
                inst.interest_due,
                inst.fees_due,
                inst.total_due,
                inst.principal_balance_after,
            ]
            for col, amount in enumerate(amounts, start=3):
                ws.cell(row=row, column=col, value=float(amount)).number_format = AMOUNT_FORMAT

        if loan.schedule:
            total_row = first_row + len(loan.schedule)
            last_row = total_row - 1
            label = ws.cell(row=total_row, column=1, value="Total")
            label.font = HEADER_FONT
            for col in range(3, 7):
                letter = get_column_letter(col)
                cell = ws.cell(row=total_row, column=col, value=f"=SUM({letter}{first_row}:{letter}{last_row})")
                cell.number_format = AMOUNT_FORMAT
                cell.font = HEADER_FONT

        _fit_columns(ws, minimum=8, maximum=30)
        path = self.output_dir / filename
        self._save(workbook, path)
        logger.info(
            "Schedule with %d installments written to %s",
            len(loan.schedule),
            path,
            extra={"installments": len(loan.schedule), "path": path},
        )
        return path

    def _write_header(
        self,
        ws: Worksheet,
        from_date: Any,
        to_date: Any,
        branch_name: str | None,
        region_name: str | None,
    ) -> None:
        ws.merge_cells("A1:H1")
        ws["A1"] = self.config.title
        ws["A1"].font = TITLE_FONT
        ws["A1"].alignment = Alignment(horizontal="center", vertical="center")
        ws.row_dimensions[1].height = 26

        ws.merge_cells("A2:H2")
        ws["A2"] = self.config.subtitle
        ws["A2"].font = SUBTITLE_FONT
        ws["A2"].alignment = Alignment(horizontal="center", vertical="center")
        ws.row_dimensions[2].height = 20

        ws.merge_cells("A3:D3")
        ws.merge_cells("E3:H3")
        region = f" | Region: {region_name}" if region_name else ""
        ws["A3"] = f"Branch Name: {branch_name or '-'}{region}"
        ws["E3"] = format_date_range(from_date, to_date)
        for addr in ("A3", "E3"):
            ws[addr].font = INFO_FONT
            ws[addr].alignment = Alignment(horizontal="left", vertical="center", wrap_text=True)

        for col in ("A", "B", "C", "D", "E"):
            ws.merge_cells(f"{col}4:{col}5")
        ws.merge_cells("F4:H4")

        labels = {
            "A4": "Sl No",
            "B4": "Borrower Name",
            "C4": "Loan Account Number",
            "D4": "Group Name",
            "E4": "Meeting Day",
            "F4": "Loan Disbursed",
            "F5": "Disbursed Date",
            "G5": "Principal Amount",
            "H5": "Disbursed Amount (With Interest)",
        }
        for addr, label in labels.items():
            ws[addr] = label
            ws[addr].font = HEADER_FONT
            ws[addr].fill = HEADER_FILL
            ws[addr].alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        ws.row_dimensions[4].height = 20
        ws.row_dimensions[5].height = 18

    def _write_data_row(self, ws: Worksheet, row: RollupRow, meeting_days: Mapping[str, str]) -> None:
        record = row.record
        r = row.position
        values = [
            row.serial,
            record.member_name,
            record.loan_account_number,
            record.group_name,
            meeting_days.get(str(record.group_id), ""),
            format_disbursed_date(record.disburse_date),
            float(row.principal_amount),
            float(row.disbursed_amount),
        ]
        for col, value in zip(COLUMNS, values):
            cell = ws[f"{col}{r}"]
            cell.value = value
            cell.font = DATA_FONT
            cell.alignment = _WRAP
        ws[f"A{r}"].number_format = "0"
        ws[f"F{r}"].number_format = "@"
        ws[f"{PRINCIPAL_COLUMN}{r}"].number_format = AMOUNT_FORMAT
        ws[f"{DISBURSED_COLUMN}{r}"].number_format = AMOUNT_FORMAT
        ws.row_dimensions[r].height = 18

    def _write_total_row(self, ws: Worksheet, row: RollupRow) -> None:
        r = row.position
        font, fill = TOTAL_STYLES[row.kind]
        for col in COLUMNS:
            cell = ws[f"{col}{r}"]
            cell.font = font
            cell.fill = fill
            cell.alignment = _WRAP
        ws[f"B{r}"] = row.label

        for col, column in _AMOUNT_COLUMNS.items():
            value = render_cell(col, row.cell(column, symbolic=self.config.symbolic_totals))
            cell = ws[f"{col}{r}"]
            cell.value = float(value) if isinstance(value, Decimal) else value
            cell.number_format = AMOUNT_FORMAT
        ws.row_dimensions[r].height = 18

    def _save(self, workbook: Workbook, path: Path) -> None:
        try:
            workbook.save(path)
        except OSError as exc:
            raise SinkError(f"Failed to write {path}: {exc}") from exc


def _apply_borders(ws: Worksheet, first_row: int, last_row: int, columns: int) -> None:
    for row in ws.iter_rows(min_row=first_row, max_row=last_row, min_col=1, max_col=columns):
        for cell in row:
            cell.border = _BORDER


def _fit_columns(ws: Worksheet, minimum: int, maximum: int) -> None:
    widths: dict[str, int] = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None or not hasattr(cell, "column_letter"):
                continue
            text = "Thu, 10-Feb-2026" if isinstance(cell.value, date) else str(cell.value)
            letter = cell.column_letter
            widths[letter] = max(widths.get(letter, minimum), min(maximum, len(text) + 2))
    for letter, width in widths.items():
        ws.column_dimensions[letter].width = width
