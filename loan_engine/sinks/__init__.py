"""Output sinks for exporting schedules and roll-up reports."""

from loan_engine.sinks.excel import ExcelReportSink
from loan_engine.sinks.json_file import JsonFileSink

__all__ = ["ExcelReportSink", "JsonFileSink"]
