"""Report sinks.

Append-only tabular writers for empty-folder findings.
"""

from hollow.sinks.base import ReportSink, ReportSinkError
from hollow.sinks.csv_sink import CsvReportSink

__all__ = [
    "CsvReportSink",
    "ReportSink",
    "ReportSinkError",
]
