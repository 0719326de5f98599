"""Data models for hollow.

This module exports the core data structures used throughout the application.
"""

from hollow.models.record import (
    REPORT_COLUMNS,
    ChildFolder,
    FolderMeta,
    FolderRecord,
    ScanSummary,
)
from hollow.models.scan_state import (
    PATH_SEPARATOR,
    ROOT_PARENT_SENTINEL,
    SCHEMA_VERSION,
    FrontierEntry,
    Root,
    ScanState,
    UnsupportedSchemaError,
)

__all__ = [
    "PATH_SEPARATOR",
    "REPORT_COLUMNS",
    "ROOT_PARENT_SENTINEL",
    "SCHEMA_VERSION",
    "ChildFolder",
    "FolderMeta",
    "FolderRecord",
    "FrontierEntry",
    "Root",
    "ScanState",
    "ScanSummary",
    "UnsupportedSchemaError",
]
