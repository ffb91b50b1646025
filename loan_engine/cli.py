"""Command line entry point for loan-engine."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from datetime import date, timedelta
from pathlib import Path
from typing import Any, Sequence

from loan_engine.calculators import calculate_emi, compute_loan, generate_monthly_schedule
from loan_engine.config import EngineConfig
from loan_engine.exceptions import InvalidInputError, LoanEngineError
from loan_engine.generators import DisbursementGenerator
from loan_engine.logging import get_logger, setup_logging
from loan_engine.models import FeePolicy, LoanComputation, LoanTerms, parse_iso_date
from loan_engine.rollup import build_rollup
from loan_engine.sinks import ExcelReportSink, JsonFileSink
from loan_engine.sinks.excel import FIRST_DATA_ROW

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="loan-engine",
        description="Weekly loan schedules and disbursement master roll reports",
    )
    parser.add_argument("--log-level", default=None, help="Override LOAN_ENGINE_LOG_LEVEL")
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Directory for exported files (default: LOAN_ENGINE_OUTPUT_DIR or ./output)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    schedule = sub.add_parser("schedule", help="Compute a weekly flat-interest schedule")
    schedule.add_argument("--principal", required=True)
    schedule.add_argument("--weeks", required=True, help="Duration in weeks")
    schedule.add_argument("--interest", default="0", help="Total interest %% over the whole duration")
    schedule.add_argument("--processing-fee", default="0", help="Processing fee %% of principal")
    schedule.add_argument("--insurance-fee", default="0", help="Insurance fee %% of principal")
    schedule.add_argument("--book-price", default="0", help="Flat book price amount")
    schedule.add_argument("--first-date", required=True, help="First installment date (YYYY-MM-DD)")
    schedule.add_argument(
        "--fee-policy",
        choices=[policy.value for policy in FeePolicy],
        default=None,
        help="Where one-off charges go (default: LOAN_ENGINE_FEE_POLICY)",
    )
    schedule.add_argument(
        "--no-settle",
        action="store_true",
        help="Keep the last installment's principal equal to the others",
    )
    schedule.add_argument("--json", action="store_true", help="Also write schedule JSON")
    schedule.add_argument("--xlsx", action="store_true", help="Also write a schedule workbook")

    emi = sub.add_parser("emi", help="Compute a monthly simple-interest EMI")
    emi.add_argument("--principal", required=True)
    emi.add_argument("--rate", required=True, help="Annual interest rate %%")
    emi.add_argument("--months", type=int, required=True)
    emi.add_argument("--start-date", default=None, help="Loan start date; prints due dates")

    roll = sub.add_parser("master-roll", help="Build the disbursement master roll workbook")
    roll.add_argument("--input", type=Path, required=True, help="JSON list of loan payloads")
    roll.add_argument("--meeting-days", type=Path, default=None, help="JSON map of group id to weekday")
    _add_report_arguments(roll)

    sample = sub.add_parser("sample", help="Generate a master roll from synthetic loans")
    sample.add_argument("--count", type=int, default=50)
    sample.add_argument("--seed", type=int, default=42)
    sample.add_argument("--undated-rate", type=float, default=0.02)
    _add_report_arguments(sample)

    return parser


def _add_report_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--from", dest="from_date", default=None, help="Period start (YYYY-MM-DD)")
    parser.add_argument("--to", dest="to_date", default=None, help="Period end (YYYY-MM-DD)")
    parser.add_argument("--branch", default=None)
    parser.add_argument("--region", default=None)
    parser.add_argument("--values", action="store_true", help="Write totals as numbers, not formulas")
    parser.add_argument("--json", action="store_true", help="Also write the report rows as JSON")


def run_schedule(args: argparse.Namespace, config: EngineConfig) -> int:
    schedule_config = config.schedule
    if args.fee_policy:
        schedule_config = replace(schedule_config, fee_policy=FeePolicy(args.fee_policy))
    if args.no_settle:
        schedule_config = replace(schedule_config, settle_final_installment=False)

    terms = LoanTerms(
        principal=args.principal,
        duration_weeks=args.weeks,
        total_interest_percent=args.interest,
        processing_fee_percent=args.processing_fee,
        insurance_fee_percent=args.insurance_fee,
        book_price_amount=args.book_price,
        first_installment_date=args.first_date,
    )
    loan = compute_loan(terms, schedule_config)
    print_schedule(loan)

    if args.json:
        sink = JsonFileSink(config.output.output_dir, pretty=config.output.pretty_json)
        sink.write_batch("schedule", loan.schedule)
        sink.close()
    if args.xlsx:
        ExcelReportSink(config.output.output_dir, config.report).write_schedule(loan)
    return 0


def print_schedule(loan: LoanComputation) -> None:
    interest, fees, weekly = loan.interest, loan.fees, loan.weekly
    print(f"Principal:            {loan.terms.principal:>12}")
    print(f"Total interest:       {interest.total_interest_amount:>12}  ({interest.total_interest_percent}%)")
    print(f"Interest per week:    {interest.interest_per_week:>12}  ({interest.weekly_interest_percent}%)")
    print(f"Principal per week:   {weekly.principal_per_week:>12}")
    print(f"Installment per week: {weekly.installment_per_week:>12}")
    print(f"Charges:              {fees.first_installment_extra:>12}")
    if loan.disbursement_charges:
        print(f"  collected on disbursement day: {loan.disbursement_charges}")
    print()
    print(f"{'No':>3}  {'Due date':<10}  {'Principal':>10}  {'Interest':>9}  {'Fees':>8}  {'Total':>10}  {'Balance':>10}")
    for row in loan.schedule:
        print(
            f"{row.installment_number:>3}  {row.due_date.isoformat():<10}  {row.principal_due:>10}  "
            f"{row.interest_due:>9}  {row.fees_due:>8}  {row.total_due:>10}  {row.principal_balance_after:>10}"
        )


def run_emi(args: argparse.Namespace, config: EngineConfig) -> int:
    emi = calculate_emi(args.principal, args.rate, args.months)
    print(f"Monthly EMI:    {emi.monthly_emi}")
    print(f"Total interest: {emi.total_interest}")
    print(f"Total payable:  {emi.total_payable}")
    if args.start_date:
        for inst in generate_monthly_schedule(args.start_date, emi.monthly_emi, args.months):
            print(f"{inst.installment_number:>3}  {inst.due_date.isoformat()}  {inst.amount}")
    return 0


def run_master_roll(args: argparse.Namespace, config: EngineConfig) -> int:
    records = _load_json(args.input)
    if isinstance(records, dict):
        records = records.get("rows") or records.get("data") or []
    if not isinstance(records, list):
        raise InvalidInputError(f"{args.input} must hold a JSON list of loans")
    meeting_days = _load_json(args.meeting_days) if args.meeting_days else {}
    return _export_master_roll(args, config, records, meeting_days)


def run_sample(args: argparse.Namespace, config: EngineConfig) -> int:
    to_date = parse_iso_date(args.to_date) or date.today()
    from_date = parse_iso_date(args.from_date) or to_date - timedelta(days=60)
    args.from_date, args.to_date = from_date.isoformat(), to_date.isoformat()

    generator = DisbursementGenerator(seed=args.seed, undated_rate=args.undated_rate)
    records = list(generator.generate_batch(args.count, from_date, to_date))
    logger.info("Generated %d synthetic disbursements", len(records))
    return _export_master_roll(args, config, records, generator.meeting_days())


def _export_master_roll(
    args: argparse.Namespace,
    config: EngineConfig,
    records: list[Any],
    meeting_days: dict[str, str],
) -> int:
    report_config = config.report
    if args.values:
        report_config = replace(report_config, symbolic_totals=False)

    report = build_rollup(
        records,
        first_position=FIRST_DATA_ROW,
        split_weeks_at_month_end=report_config.split_weeks_at_month_end,
    )
    if not report:
        print("No loans to export")
        return 1

    sink = ExcelReportSink(config.output.output_dir, report_config)
    path = sink.write_master_roll(
        report,
        from_date=args.from_date,
        to_date=args.to_date,
        branch_name=args.branch,
        region_name=args.region,
        meeting_day_by_group_id=meeting_days,
    )
    print(f"Master roll written to {path}")

    if args.json:
        json_sink = JsonFileSink(config.output.output_dir, pretty=config.output.pretty_json)
        json_sink.write_report(report)
        json_sink.close()
    return 0


def _load_json(path: Path) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidInputError(f"Cannot read {path}: {exc}") from exc


COMMANDS = {
    "schedule": run_schedule,
    "emi": run_emi,
    "master-roll": run_master_roll,
    "sample": run_sample,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = EngineConfig.from_env()
    except LoanEngineError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    if args.log_level:
        config.log_level = args.log_level
    if args.output_dir:
        config.output.output_dir = args.output_dir
    setup_logging(config.log_level, config.log_format)

    try:
        return COMMANDS[args.command](args, config)
    except LoanEngineError as exc:
        logger.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
