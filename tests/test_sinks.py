"""Tests for output sinks."""

import json
from pathlib import Path

import pytest
from openpyxl import load_workbook

from loan_engine.calculators import compute_loan
from loan_engine.config import ReportConfig
from loan_engine.exceptions import SinkError
from loan_engine.models import LoanTerms
from loan_engine.rollup import build_rollup
from loan_engine.sinks import ExcelReportSink, JsonFileSink
from loan_engine.sinks.excel import (
    FIRST_DATA_ROW,
    format_date_range,
    format_disbursed_date,
    master_roll_filename,
)


class TestJsonFileSink:
    """Tests for JsonFileSink."""

    def test_write_schedule_batch(self, tmp_path: Path, scenario_terms) -> None:
        sink = JsonFileSink(tmp_path)
        loan = compute_loan(scenario_terms)

        path = sink.write_batch("schedule", loan.schedule)
        sink.close()

        assert path == tmp_path / "schedule.json"
        data = json.loads(path.read_text())
        assert len(data) == 12
        assert data[0]["total_due"] == "1133.33"
        assert data[-1]["principal_due"] == "833.37"

    def test_write_report(self, tmp_path: Path, same_week_records) -> None:
        sink = JsonFileSink(tmp_path, pretty=True)

        path = sink.write_report(build_rollup(same_week_records))

        assert path.name == "master_roll.json"
        data = json.loads(path.read_text())
        assert [row["kind"] for row in data].count("DAILY_TOTAL") == 2
        assert data[-1]["principal_amount"] == "50000"
        assert "\n" in path.read_text()

    def test_creates_output_dir(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "out"

        JsonFileSink(target)

        assert target.is_dir()

    def test_unwritable_path_raises_sink_error(self, tmp_path: Path) -> None:
        sink = JsonFileSink(tmp_path)
        (tmp_path / "schedule.json").mkdir()

        with pytest.raises(SinkError):
            sink.write_batch("schedule", [])


class TestFormatting:
    """Tests for master roll text helpers."""

    def test_disbursed_date(self) -> None:
        assert format_disbursed_date("2024-01-08") == "Mon, 08-Jan-2024"
        assert format_disbursed_date("2024-01-08T10:00:00Z") == "Mon, 08-Jan-2024"

    def test_disbursed_date_missing(self) -> None:
        assert format_disbursed_date(None) == ""
        assert format_disbursed_date("garbage") == ""

    def test_date_range(self) -> None:
        assert format_date_range("2024-01-01", "2024-01-31") == (
            "From Mon, 01/01/2024 To Wed, 31/01/2024"
        )

    def test_date_range_fallback(self) -> None:
        assert format_date_range(None, "soon") == "From - To soon"

    def test_filename(self) -> None:
        assert master_roll_filename("2024-01-01", "2024-01-31") == (
            "Loan_Disbursement_Master_Roll_2024-01-01_to_2024-01-31.xlsx"
        )
        assert master_roll_filename(None, None) == "Loan_Disbursement_Master_Roll_from_to_to.xlsx"


class TestExcelMasterRoll:
    """Tests for ExcelReportSink.write_master_roll."""

    @pytest.fixture
    def sheet(self, tmp_path: Path, same_week_records):
        report = build_rollup(same_week_records, first_position=FIRST_DATA_ROW)
        path = ExcelReportSink(tmp_path).write_master_roll(
            report,
            from_date="2024-01-01",
            to_date="2024-01-31",
            branch_name="Dharwad",
            region_name="North",
            meeting_day_by_group_id={"GRP001": "Monday"},
        )
        return load_workbook(path).active

    def test_header_block(self, sheet) -> None:
        assert sheet.title == "Sheet1"
        assert sheet["A1"].value == "Loan Disbursement Master Roll"
        assert sheet["A2"].value == "All Loan"
        assert sheet["A3"].value == "Branch Name: Dharwad | Region: North"
        assert sheet["E3"].value == "From Mon, 01/01/2024 To Wed, 31/01/2024"
        assert sheet["A4"].value == "Sl No"
        assert sheet["F4"].value == "Loan Disbursed"
        assert sheet["G5"].value == "Principal Amount"

    def test_data_rows(self, sheet) -> None:
        assert sheet["A6"].value == 1
        assert sheet["B6"].value == "Anita"
        assert sheet["C6"].value == "LN0001"
        assert sheet["D6"].value == "Asha Mahila Samiti"
        assert sheet["E6"].value == "Monday"
        assert sheet["F6"].value == "Mon, 08-Jan-2024"
        assert sheet["G6"].value == 10000
        assert sheet["H6"].value == 11400
        assert sheet["A10"].value == 4

    def test_total_formulas(self, sheet) -> None:
        assert sheet["B9"].value == "Daily Total"
        assert sheet["G9"].value == "=SUM(G6:G8)"
        assert sheet["H9"].value == "=SUM(H6:H8)"
        assert sheet["G11"].value == "=SUM(G10)"
        assert sheet["B12"].value == "Weekly Total"
        assert sheet["G12"].value == "=SUM(G9,G11)"
        assert sheet["B13"].value == "Monthly Total"
        assert sheet["G13"].value == "=SUM(G12)"
        assert sheet["B14"].value == "Grand Total"
        assert sheet["H14"].value == "=SUM(H13)"
        assert sheet["A15"].value is None

    def test_literal_totals(self, tmp_path: Path, same_week_records) -> None:
        report = build_rollup(same_week_records, first_position=FIRST_DATA_ROW)
        sink = ExcelReportSink(tmp_path, ReportConfig(symbolic_totals=False))

        path = sink.write_master_roll(report, filename="values.xlsx")

        ws = load_workbook(path).active
        assert path.name == "values.xlsx"
        assert ws["G9"].value == 35000
        assert ws["G14"].value == 50000
        assert ws["H14"].value == 57000

    def test_default_filename(self, tmp_path: Path, same_week_records) -> None:
        report = build_rollup(same_week_records, first_position=FIRST_DATA_ROW)

        path = ExcelReportSink(tmp_path).write_master_roll(
            report, from_date="2024-01-01", to_date="2024-01-31"
        )

        assert path == tmp_path / "Loan_Disbursement_Master_Roll_2024-01-01_to_2024-01-31.xlsx"
        assert path.exists()

    def test_wrong_first_position_raises(self, tmp_path: Path, same_week_records) -> None:
        report = build_rollup(same_week_records)

        with pytest.raises(SinkError):
            ExcelReportSink(tmp_path).write_master_roll(report)

    def test_week_crossing_month_end(self, tmp_path: Path, record_factory) -> None:
        records = [record_factory("2024-01-31"), record_factory("2024-02-01")]

        path = ExcelReportSink(tmp_path).write_master_roll_records(records, filename="cross.xlsx")

        ws = load_workbook(path).active
        assert ws["B8"].value == "Monthly Total"
        assert ws["G8"].value == "=0"
        assert ws["B11"].value == "Weekly Total"
        assert ws["G11"].value == "=SUM(G7,G10)"
        assert ws["G12"].value == "=SUM(G11)"
        assert ws["G13"].value == "=SUM(G8,G12)"

    def test_records_entry_point(self, tmp_path: Path, same_week_records) -> None:
        path = ExcelReportSink(tmp_path).write_master_roll_records(
            same_week_records, filename="roll.xlsx"
        )

        assert load_workbook(path).active["G14"].value == "=SUM(G13)"

    def test_no_records_writes_nothing(self, tmp_path: Path) -> None:
        assert ExcelReportSink(tmp_path).write_master_roll_records([]) is None
        assert list(tmp_path.iterdir()) == []


class TestExcelSchedule:
    """Tests for ExcelReportSink.write_schedule."""

    def test_layout(self, tmp_path: Path, scenario_terms) -> None:
        loan = compute_loan(scenario_terms)

        path = ExcelReportSink(tmp_path).write_schedule(loan)

        ws = load_workbook(path)["Schedule"]
        assert path.name == "repayment_schedule.xlsx"
        assert ws["A1"].value == "Principal"
        assert ws["B1"].value == 10000
        assert ws["A8"].value == "Inst No"
        assert ws["A9"].value == 1
        assert ws["C9"].value == 833.33
        assert ws["E9"].value == 200
        assert ws["A20"].value == 12
        assert ws["G20"].value == 0
        assert ws["A21"].value == "Total"
        assert ws["C21"].value == "=SUM(C9:C20)"
        assert ws["F21"].value == "=SUM(F9:F20)"

    def test_empty_schedule_has_no_total(self, tmp_path: Path) -> None:
        loan = compute_loan(LoanTerms(principal=1000, duration_weeks=0))

        ws = load_workbook(ExcelReportSink(tmp_path).write_schedule(loan)).active
        assert ws["A8"].value == "Inst No"
        assert ws["A9"].value is None
