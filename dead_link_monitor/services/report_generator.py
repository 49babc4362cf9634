"""
Post-run report generation: console report and JSON export of failures.
"""

import json
import sys
from typing import Any, Dict, List, Optional, TextIO

from dead_link_monitor.data.repository import ResultRepository
from dead_link_monitor.utils.logging import get_business_logger
from dead_link_monitor.utils.errors import ExportError


REPORT_START = "=== Start Report ==="
REPORT_END = "=== End Report ==="

STDOUT_DESTINATION = "-"


class ReportGenerator:
    """Read-only summaries of a finished results table."""

    def __init__(self, results: ResultRepository):
        """
        Initialize report generator.

        Args:
            results: Results table of a finished run
        """
        self.results = results
        self.logger = get_business_logger('report')

    def console_lines(self) -> List[str]:
        """Failing entries by ascending code, then the total fetch time."""
        lines = [REPORT_START]
        for entry in self.results.get_failures():
            lines.append(f"{entry.code} {entry.url} {entry.location or ''}")
        lines.append(f"Total fetch time: {self.results.total_fetch_time():.3f}s")
        lines.append(REPORT_END)
        return lines

    def print_console_report(self, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        for line in self.console_lines():
            print(line, file=stream)

    def failures_document(self) -> Dict[str, Dict[str, Any]]:
        """Failing entries keyed by URL in the structured export shape."""
        return {entry.url: entry.to_export_dict() for entry in self.results.get_failures()}

    def write_json(self, destination: str) -> bool:
        """
        Write the failures document to ``destination`` ("-" for stdout).

        A destination that cannot be written is logged as a warning.

        Returns:
            True if the export was written
        """
        try:
            self._write_json(destination)
        except ExportError as e:
            self.logger.warning(f"JSON export skipped: {e.message}")
            return False
        return True

    def _write_json(self, destination: str) -> None:
        document = self.failures_document()
        payload = json.dumps(document, indent=2, ensure_ascii=False)

        if destination == STDOUT_DESTINATION:
            sys.stdout.write(payload + "\n")
            sys.stdout.flush()
            return

        try:
            with open(destination, 'w', encoding='utf-8') as f:
                f.write(payload + "\n")
        except OSError as e:
            raise ExportError(f"Cannot write {destination}: {e}", {"destination": destination}) from e

        self.logger.info(f"Wrote {len(document)} failures to {destination}")
