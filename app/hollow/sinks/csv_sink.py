"""CSV report sink.

Appends report rows to a local CSV file. Useful on its own and as the
offline counterpart of the Google Sheets sink.
"""

import csv
import io
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from hollow.sinks.base import ReportSink, ReportSinkError

logger = logging.getLogger(__name__)


class CsvReportSink(ReportSink):
    """Writes the report to a CSV file.

    Rows for one append call are rendered in memory first and written
    with a single ``write`` so a failed call never leaves half a batch.

    Args:
        path: CSV file to append to. Parent directories are created.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    @property
    def location(self) -> str:
        return str(self._path)

    def initialize_schema(self, columns: Sequence[str]) -> None:
        if self._path.exists() and self._path.stat().st_size > 0:
            logger.debug("Report %s already has content, keeping header", self._path)
            return
        self._write([list(columns)])

    def append_rows(self, rows: Sequence[Sequence[Any]]) -> None:
        if not rows:
            return
        self._write(rows)

    def _write(self, rows: Sequence[Sequence[Any]]) -> None:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        for row in rows:
            writer.writerow(row)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open(mode="a", encoding="utf-8", newline="") as f:
                f.write(buffer.getvalue())
                f.flush()
        except OSError as e:
            raise ReportSinkError(f"Failed to write report {self._path}: {e}") from e
