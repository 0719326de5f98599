"""Unit tests for GoogleDriveBrowser.

The Drive service is a MagicMock; no network access happens.
"""

from unittest.mock import MagicMock, Mock

import httplib2
import pytest
from google.auth.exceptions import TransportError
from googleapiclient.errors import HttpError
from hollow.browsers.base import FolderAccessError, FolderNotFoundError
from hollow.browsers.drive import FOLDER_MIME_TYPE, SHORTCUT_MIME_TYPE, GoogleDriveBrowser
from hollow.core.engine import TraversalEngine
from hollow.models.record import MY_DRIVE, SHARED_DRIVE
from hollow.models.scan_state import Root, ScanState


def _http_error(status: int) -> HttpError:
    return HttpError(resp=Mock(status=status, reason="error"), content=b"")


@pytest.fixture
def service() -> MagicMock:
    """Mock Drive v3 service."""
    return MagicMock()


@pytest.fixture
def browser(service: MagicMock) -> GoogleDriveBrowser:
    """Browser over the mock service."""
    return GoogleDriveBrowser(service, num_retries=2)


def _folder(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "id": "f1",
        "name": "Projects",
        "mimeType": FOLDER_MIME_TYPE,
        "trashed": False,
        "owners": [{"emailAddress": "owner@example.com"}],
        "modifiedTime": "2026-01-01T00:00:00.000Z",
        "webViewLink": "https://drive.google.com/drive/folders/f1",
    }
    data.update(overrides)
    return data


class TestResolveFolder:
    """Tests for resolve_folder."""

    def test_maps_metadata(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Folder metadata is mapped onto FolderMeta."""
        service.files.return_value.get.return_value.execute.return_value = _folder()

        meta = browser.resolve_folder("f1")

        assert meta.folder_id == "f1"
        assert meta.name == "Projects"
        assert meta.owner_email == "owner@example.com"
        assert meta.last_modified == "2026-01-01T00:00:00.000Z"
        assert meta.url == "https://drive.google.com/drive/folders/f1"
        assert meta.drive_type == MY_DRIVE
        service.files.return_value.get.assert_called_once()
        assert service.files.return_value.get.call_args.kwargs["supportsAllDrives"] is True
        service.files.return_value.get.return_value.execute.assert_called_once_with(num_retries=2)

    def test_shared_drive_folder(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Folders in a shared drive carry the drive ID and may have no owner."""
        service.files.return_value.get.return_value.execute.return_value = _folder(
            driveId="0AB", owners=None, webViewLink=None
        )

        meta = browser.resolve_folder("f1")

        assert meta.drive_type == SHARED_DRIVE
        assert meta.owner_email == ""
        assert meta.url == "https://drive.google.com/drive/folders/f1"

    def test_file_is_not_a_folder(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Non-folder items are rejected."""
        service.files.return_value.get.return_value.execute.return_value = _folder(
            mimeType="application/pdf"
        )

        with pytest.raises(FolderNotFoundError, match="not a folder"):
            browser.resolve_folder("f1")

    def test_trashed_folder(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Trashed folders are treated as missing."""
        service.files.return_value.get.return_value.execute.return_value = _folder(trashed=True)

        with pytest.raises(FolderNotFoundError, match="trash"):
            browser.resolve_folder("f1")

    @pytest.mark.parametrize(
        ("status", "error_type", "reason"),
        [
            (404, FolderNotFoundError, "folder not found"),
            (403, FolderAccessError, "permission denied"),
            (500, FolderAccessError, "Drive API error 500"),
        ],
    )
    def test_http_errors(
        self,
        browser: GoogleDriveBrowser,
        service: MagicMock,
        status: int,
        error_type: type[Exception],
        reason: str,
    ) -> None:
        """HTTP errors map onto browser errors."""
        service.files.return_value.get.return_value.execute.side_effect = _http_error(status)

        with pytest.raises(error_type, match=reason):
            browser.resolve_folder("f1")

    def test_transport_error(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Auth and transport failures become FolderAccessError."""
        service.files.return_value.get.return_value.execute.side_effect = TransportError("offline")

        with pytest.raises(FolderAccessError, match="request failed"):
            browser.resolve_folder("f1")

    def test_connection_error(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """DNS and socket failures left after retries become FolderAccessError."""
        service.files.return_value.get.return_value.execute.side_effect = (
            httplib2.ServerNotFoundError("dns")
        )

        with pytest.raises(FolderAccessError, match="dns"):
            browser.resolve_folder("f1")

    def test_connection_error_is_per_folder_failure(
        self, browser: GoogleDriveBrowser, service: MagicMock
    ) -> None:
        """An unreachable API skips the folder instead of failing the batch."""
        service.files.return_value.get.return_value.execute.side_effect = (
            httplib2.ServerNotFoundError("dns")
        )
        state = ScanState.fresh([Root(identifier="f1", display_name="Projects")])
        state.seed_next_root()

        result = TraversalEngine(browser).drain_batch(state, 10, deadline=1e9)

        assert result.processed == 1
        assert [f.folder_id for f in result.failures] == ["f1"]
        assert "f1" in state.visited


class TestListing:
    """Tests for has_child_files and list_child_folders."""

    def test_has_child_files(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """A single non-folder match means the folder has files."""
        files = service.files.return_value
        files.list.return_value.execute.return_value = {"files": [{"id": "doc"}]}

        assert browser.has_child_files("f1") is True
        kwargs = files.list.call_args.kwargs
        assert kwargs["pageSize"] == 1
        assert f"mimeType != '{FOLDER_MIME_TYPE}'" in kwargs["q"]
        assert "'f1' in parents" in kwargs["q"]
        assert "trashed = false" in kwargs["q"]

    def test_has_no_child_files(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """No match means no files."""
        service.files.return_value.list.return_value.execute.return_value = {"files": []}

        assert browser.has_child_files("f1") is False

    def test_query_escapes_identifier(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Quotes in identifiers are escaped in queries."""
        files = service.files.return_value
        files.list.return_value.execute.return_value = {"files": []}

        browser.has_child_files("it's")

        assert "'it\\'s' in parents" in files.list.call_args.kwargs["q"]

    def test_child_folders_follow_pages(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Every page of results is listed in order."""
        files = service.files.return_value
        files.list.return_value.execute.side_effect = [
            {"files": [{"id": "a", "name": "Alpha"}], "nextPageToken": "t2"},
            {"files": [{"id": "b", "name": "Beta"}]},
        ]

        children = list(browser.list_child_folders("f1"))

        assert [(c.folder_id, c.name) for c in children] == [("a", "Alpha"), ("b", "Beta")]
        tokens = [c.kwargs["pageToken"] for c in files.list.call_args_list]
        assert tokens == [None, "t2"]
        assert files.list.call_args.kwargs["orderBy"] == "name"

    def test_shortcuts_ignored_by_default(
        self, browser: GoogleDriveBrowser, service: MagicMock
    ) -> None:
        """Without follow_shortcuts only real folders are listed."""
        files = service.files.return_value
        files.list.return_value.execute.return_value = {"files": []}

        list(browser.list_child_folders("f1"))

        assert files.list.call_count == 1

    def test_followed_shortcut_uses_target(self, service: MagicMock) -> None:
        """Shortcuts to folders are listed under their target identifier."""
        browser = GoogleDriveBrowser(service, follow_shortcuts=True)
        files = service.files.return_value
        files.list.return_value.execute.side_effect = [
            {"files": [{"id": "a", "name": "Alpha"}]},
            {
                "files": [
                    {
                        "id": "s1",
                        "name": "Link",
                        "shortcutDetails": {"targetId": "t1", "targetMimeType": FOLDER_MIME_TYPE},
                    },
                    {
                        "id": "s2",
                        "name": "Doc link",
                        "shortcutDetails": {"targetId": "d1", "targetMimeType": "application/pdf"},
                    },
                ]
            },
        ]

        children = list(browser.list_child_folders("f1"))

        assert [(c.folder_id, c.name) for c in children] == [("a", "Alpha"), ("t1", "Link")]
        assert SHORTCUT_MIME_TYPE in files.list.call_args.kwargs["q"]

    def test_listing_error(self, browser: GoogleDriveBrowser, service: MagicMock) -> None:
        """Listing failures surface as browser errors."""
        service.files.return_value.list.return_value.execute.side_effect = _http_error(403)

        with pytest.raises(FolderAccessError):
            list(browser.list_child_folders("f1"))
