"""Report row models for empty-folder findings.

This module defines the folder metadata returned by storage browsers and
the immutable records written to the report sink, along with the fixed
report column schema.
"""

from dataclasses import dataclass
from typing import Any

# Report columns, in sheet order
REPORT_COLUMNS: tuple[str, ...] = (
    "Folder Name",
    "Folder ID",
    "Link",
    "Path",
    "Drive Type",
    "Drive Name",
    "Parent Folder",
    "Last Modified",
    "Owner",
    "Delete?",
    "Drive ID",
)

MY_DRIVE = "My Drive"
SHARED_DRIVE = "Shared Drive"

SUMMARY_MARKER = "SCAN COMPLETE"


@dataclass(frozen=True, slots=True)
class FolderMeta:
    """Metadata for a single folder as reported by a storage browser.

    Attributes:
        folder_id: Identifier of the folder in the storage service.
        name: Display name of the folder.
        owner_email: Email of the folder owner (empty when unknown).
        last_modified: Last modification time in ISO 8601 format (empty when unknown).
        url: Direct link to the folder.
        drive_id: Identifier of the shared drive holding the folder, if any.
    """

    folder_id: str
    name: str
    owner_email: str = ""
    last_modified: str = ""
    url: str = ""
    drive_id: str | None = None

    @property
    def drive_type(self) -> str:
        """Human-readable drive type for the report."""
        return SHARED_DRIVE if self.drive_id else MY_DRIVE


@dataclass(frozen=True, slots=True)
class ChildFolder:
    """A direct subfolder discovered while listing a parent."""

    folder_id: str
    name: str


@dataclass(frozen=True, slots=True)
class FolderRecord:
    """An empty folder as written to the report.

    Records are immutable once built; the report is append-only.

    Attributes:
        name: Folder display name.
        folder_id: Folder identifier.
        url: Direct link to the folder.
        path: Ancestor chain of the folder ("Root" for a root folder).
        drive_type: "My Drive" or "Shared Drive".
        drive_name: Display name of the root the folder was found under.
        parent_name: Display name of the direct parent.
        last_modified: Last modification time in ISO 8601 format.
        owner_email: Email of the folder owner.
    """

    name: str
    folder_id: str
    url: str
    path: str
    drive_type: str
    drive_name: str
    parent_name: str
    last_modified: str
    owner_email: str

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.folder_id:
            msg = "Folder ID cannot be empty"
            raise ValueError(msg)

    def to_row(self) -> list[Any]:
        """Build the report row in REPORT_COLUMNS order.

        The "Delete?" column always starts unchecked and the "Drive ID"
        column is a reserved placeholder.
        """
        return [
            self.name,
            self.folder_id,
            self.url,
            self.path,
            self.drive_type,
            self.drive_name,
            self.parent_name,
            self.last_modified,
            self.owner_email,
            False,
            "",
        ]


@dataclass(frozen=True, slots=True)
class ScanSummary:
    """Totals for a finished scan.

    Attributes:
        folders_visited: Number of folders visited (including inaccessible ones).
        empty_found: Number of empty folders reported.
        completed_at: Completion time in ISO 8601 format.
    """

    folders_visited: int
    empty_found: int
    completed_at: str

    def to_row(self) -> list[Any]:
        """Build a report row describing the finished scan."""
        row: list[Any] = [""] * len(REPORT_COLUMNS)
        row[0] = SUMMARY_MARKER
        row[3] = f"Scanned {self.folders_visited} folders"
        row[6] = f"Found {self.empty_found} empty folders"
        row[7] = self.completed_at
        row[9] = False
        return row

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON output."""
        return {
            "folders_visited": self.folders_visited,
            "empty_found": self.empty_found,
            "completed_at": self.completed_at,
        }
