"""Abstract base class for report sinks.

A report sink is an append-only table with a fixed column schema. The
scan controller writes one row per empty folder and a final summary row.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from hollow.models.record import ScanSummary


class ReportSinkError(Exception):
    """Raised when rows cannot be written to the report."""


class ReportSink(ABC):
    """Abstract base class for all report sinks.

    Implementations must never rewrite or remove rows that were already
    appended.
    """

    @property
    @abstractmethod
    def location(self) -> str:
        """Human-readable location of the report (path or URL)."""

    @abstractmethod
    def initialize_schema(self, columns: Sequence[str]) -> None:
        """Write the header row if the report has none yet.

        Args:
            columns: Column names in order.

        Raises:
            ReportSinkError: If the header cannot be written.
        """

    @abstractmethod
    def append_rows(self, rows: Sequence[Sequence[Any]]) -> None:
        """Append rows to the end of the report in one operation.

        Either all rows are written or the call raises; callers retry the
        whole batch on failure.

        Raises:
            ReportSinkError: If the rows cannot be written.
        """

    def append_summary(self, summary: ScanSummary) -> None:
        """Append the end-of-scan summary row.

        Raises:
            ReportSinkError: If the row cannot be written.
        """
        self.append_rows([summary.to_row()])
