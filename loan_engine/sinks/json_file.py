"""JSON file sink for exporting schedules and reports."""

import json
import logging
from pathlib import Path
from typing import Any

from loan_engine.exceptions import SinkError
from loan_engine.models import RollupReport
from loan_engine.sinks.serialization import report_to_records, to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output data to JSON files."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> Path:
        """Write a batch of records to ``<entity_type>.json``."""
        data = [to_dict(record) for record in records]
        return self._dump(entity_type, data)

    def write_report(self, report: RollupReport, name: str = "master_roll") -> Path:
        """Write every row of a roll-up report, totals included."""
        return self._dump(name, report_to_records(report))

    def close(self) -> None:
        """Log a summary of what was written."""
        logger.info("JSON files written to: %s", self.output_dir)
        for entity_type, count in self._counts.items():
            logger.info("  %s: %d records", entity_type, count)

    def _dump(self, entity_type: str, data: list[dict]) -> Path:
        file_path = self.output_dir / f"{entity_type}.json"
        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as exc:
            raise SinkError(f"Failed to write {file_path}: {exc}") from exc

        self._counts[entity_type] = len(data)
        return file_path
