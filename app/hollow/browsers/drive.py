"""Google Drive storage browser.

Reads folder metadata and children through the Drive v3 API using
service-account credentials. Works across My Drive and shared drives.
"""

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from hollow.browsers.base import (
    FolderAccessError,
    FolderNotFoundError,
    StorageBrowser,
)
from hollow.models.record import ChildFolder, FolderMeta

logger = logging.getLogger(__name__)

DRIVE_SCOPES: tuple[str, ...] = ("https://www.googleapis.com/auth/drive.readonly",)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
SHORTCUT_MIME_TYPE = "application/vnd.google-apps.shortcut"

_FOLDER_FIELDS = "id, name, mimeType, trashed, owners(emailAddress), modifiedTime, webViewLink, driveId"
_PAGE_SIZE = 1000


def _escape_query_value(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def build_drive_service(credentials_file: Path) -> Any:
    """Build a Drive v3 service from a service-account key file.

    Raises:
        FileNotFoundError: If the key file does not exist.
        ValueError: If the key file is not a valid service-account key.
    """
    credentials = service_account.Credentials.from_service_account_file(
        str(credentials_file), scopes=list(DRIVE_SCOPES)
    )
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


class GoogleDriveBrowser(StorageBrowser):
    """Browses folders in Google Drive.

    Args:
        service: A built Drive v3 service resource.
        num_retries: Retries for transient API errors (5xx, 429), with
            exponential backoff handled by the client library.
        follow_shortcuts: If True, shortcuts to folders are reported as
            child folders under the shortcut's target identifier.
    """

    def __init__(
        self,
        service: Any,
        *,
        num_retries: int = 3,
        follow_shortcuts: bool = False,
    ) -> None:
        self._service = service
        self._num_retries = num_retries
        self._follow_shortcuts = follow_shortcuts

    @classmethod
    def from_credentials_file(
        cls,
        credentials_file: Path,
        *,
        num_retries: int = 3,
        follow_shortcuts: bool = False,
    ) -> "GoogleDriveBrowser":
        """Create a browser authenticated with a service-account key file."""
        return cls(
            build_drive_service(credentials_file),
            num_retries=num_retries,
            follow_shortcuts=follow_shortcuts,
        )

    @property
    def name(self) -> str:
        return "drive"

    def resolve_folder(self, folder_id: str) -> FolderMeta:
        request = self._service.files().get(
            fileId=folder_id,
            fields=_FOLDER_FIELDS,
            supportsAllDrives=True,
        )
        data = self._execute(folder_id, request)

        if data.get("mimeType") != FOLDER_MIME_TYPE:
            raise FolderNotFoundError(folder_id, "not a folder")
        if data.get("trashed"):
            raise FolderNotFoundError(folder_id, "folder is in the trash")

        owners = data.get("owners") or []
        owner_email = owners[0].get("emailAddress", "") if owners else ""

        return FolderMeta(
            folder_id=data.get("id", folder_id),
            name=data.get("name", ""),
            owner_email=owner_email,
            last_modified=data.get("modifiedTime", ""),
            url=data.get("webViewLink") or f"https://drive.google.com/drive/folders/{folder_id}",
            drive_id=data.get("driveId"),
        )

    def has_child_files(self, folder_id: str) -> bool:
        parent = _escape_query_value(folder_id)
        query = f"'{parent}' in parents and mimeType != '{FOLDER_MIME_TYPE}' and trashed = false"
        request = self._service.files().list(
            q=query,
            pageSize=1,
            fields="files(id)",
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
            corpora="allDrives",
        )
        response = self._execute(folder_id, request)
        return bool(response.get("files"))

    def list_child_folders(self, folder_id: str) -> Iterator[ChildFolder]:
        parent = _escape_query_value(folder_id)
        logger.debug("Listing Drive subfolders of %s", folder_id)

        query = f"'{parent}' in parents and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        for item in self._list_pages(folder_id, query, "nextPageToken, files(id, name)"):
            yield ChildFolder(folder_id=item["id"], name=item.get("name", ""))

        if not self._follow_shortcuts:
            return

        query = f"'{parent}' in parents and mimeType = '{SHORTCUT_MIME_TYPE}' and trashed = false"
        fields = "nextPageToken, files(id, name, shortcutDetails(targetId, targetMimeType))"
        for item in self._list_pages(folder_id, query, fields):
            details = item.get("shortcutDetails") or {}
            if details.get("targetMimeType") == FOLDER_MIME_TYPE and details.get("targetId"):
                yield ChildFolder(folder_id=details["targetId"], name=item.get("name", ""))

    def _list_pages(self, folder_id: str, query: str, fields: str) -> Iterator[dict[str, Any]]:
        """Yield every file matching ``query``, following page tokens."""
        page_token: str | None = None
        while True:
            request = self._service.files().list(
                q=query,
                pageSize=_PAGE_SIZE,
                fields=fields,
                orderBy="name",
                pageToken=page_token,
                supportsAllDrives=True,
                includeItemsFromAllDrives=True,
                corpora="allDrives",
            )
            response = self._execute(folder_id, request)
            yield from response.get("files", [])
            page_token = response.get("nextPageToken")
            if not page_token:
                break

    def _execute(self, folder_id: str, request: Any) -> dict[str, Any]:
        """Execute an API request, mapping client errors to BrowserError."""
        try:
            return request.execute(num_retries=self._num_retries)
        except HttpError as e:
            status = getattr(e.resp, "status", None)
            if status == 404:
                raise FolderNotFoundError(folder_id, "folder not found") from e
            if status == 403:
                raise FolderAccessError(folder_id, "permission denied") from e
            raise FolderAccessError(folder_id, f"Drive API error {status}: {e.reason}") from e
        except (GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            raise FolderAccessError(folder_id, f"request failed: {e}") from e
