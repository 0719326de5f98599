"""Unit tests for report row models."""

import pytest
from hollow.models.record import (
    MY_DRIVE,
    REPORT_COLUMNS,
    SHARED_DRIVE,
    SUMMARY_MARKER,
    FolderMeta,
    FolderRecord,
    ScanSummary,
)


def _record(**overrides: str) -> FolderRecord:
    fields = {
        "name": "x",
        "folder_id": "x-id",
        "url": "https://drive.google.com/drive/folders/x-id",
        "path": "A",
        "drive_type": MY_DRIVE,
        "drive_name": "A",
        "parent_name": "A",
        "last_modified": "2026-01-01T00:00:00Z",
        "owner_email": "owner@example.com",
    }
    fields.update(overrides)
    return FolderRecord(**fields)


class TestFolderMeta:
    """Tests for FolderMeta."""

    def test_my_drive_without_drive_id(self) -> None:
        """Folders outside a shared drive are in My Drive."""
        assert FolderMeta(folder_id="f", name="f").drive_type == MY_DRIVE

    def test_shared_drive_with_drive_id(self) -> None:
        """Folders with a drive ID are in a shared drive."""
        assert FolderMeta(folder_id="f", name="f", drive_id="0AB").drive_type == SHARED_DRIVE


class TestFolderRecord:
    """Tests for FolderRecord."""

    def test_to_row_matches_columns(self) -> None:
        """Rows follow the report column order."""
        row = _record().to_row()

        assert len(row) == len(REPORT_COLUMNS)
        assert row[REPORT_COLUMNS.index("Folder Name")] == "x"
        assert row[REPORT_COLUMNS.index("Folder ID")] == "x-id"
        assert row[REPORT_COLUMNS.index("Path")] == "A"
        assert row[REPORT_COLUMNS.index("Owner")] == "owner@example.com"

    def test_delete_column_starts_unchecked(self) -> None:
        """The Delete? column is always False and Drive ID is blank."""
        row = _record().to_row()

        assert row[REPORT_COLUMNS.index("Delete?")] is False
        assert row[REPORT_COLUMNS.index("Drive ID")] == ""

    def test_empty_folder_id_rejected(self) -> None:
        """A record needs a folder ID."""
        with pytest.raises(ValueError, match="Folder ID"):
            _record(folder_id="")


class TestScanSummary:
    """Tests for ScanSummary."""

    def test_summary_row(self) -> None:
        """The summary row carries the marker and totals."""
        summary = ScanSummary(folders_visited=4, empty_found=2, completed_at="2026-01-01T00:00:00+00:00")

        row = summary.to_row()

        assert len(row) == len(REPORT_COLUMNS)
        assert row[0] == SUMMARY_MARKER
        assert row[3] == "Scanned 4 folders"
        assert row[6] == "Found 2 empty folders"
        assert row[7] == "2026-01-01T00:00:00+00:00"

    def test_to_dict(self) -> None:
        """Summary serializes its totals."""
        summary = ScanSummary(folders_visited=4, empty_found=2, completed_at="t")

        assert summary.to_dict() == {"folders_visited": 4, "empty_found": 2, "completed_at": "t"}
