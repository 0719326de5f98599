"""Abstract base class for storage browsers.

This module defines the StorageBrowser interface that every folder
source (Google Drive, local filesystem) must implement, along with the
errors a browser may raise for a single folder.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator

from hollow.models.record import ChildFolder, FolderMeta


class BrowserError(Exception):
    """Base exception for a failed folder lookup or listing."""

    def __init__(self, folder_id: str, message: str) -> None:
        super().__init__(f"{folder_id}: {message}")
        self.folder_id = folder_id
        self.reason = message


class FolderNotFoundError(BrowserError):
    """Raised when a folder does not exist or is not a folder."""


class FolderAccessError(BrowserError):
    """Raised when a folder exists but cannot be read.

    Covers permission problems and service errors that persisted past
    the browser's own retries.
    """


class StorageBrowser(ABC):
    """Abstract base class for all storage browsers.

    A browser answers three questions about a folder: what it is,
    whether it holds any files, and which folders sit directly inside
    it. It never modifies anything.

    Example:
        >>> browser = LocalFolderBrowser()
        >>> meta = browser.resolve_folder("/srv/share")
        >>> for child in browser.list_child_folders(meta.folder_id):
        ...     print(child.name)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short name of the backend, used in log and CLI output."""

    @abstractmethod
    def resolve_folder(self, folder_id: str) -> FolderMeta:
        """Look up a folder's metadata.

        Args:
            folder_id: Identifier of the folder.

        Returns:
            FolderMeta for the folder.

        Raises:
            FolderNotFoundError: If the folder does not exist.
            FolderAccessError: If the folder cannot be read.
        """

    @abstractmethod
    def has_child_files(self, folder_id: str) -> bool:
        """Check whether the folder directly contains at least one file.

        Raises:
            BrowserError: If the folder cannot be listed.
        """

    @abstractmethod
    def list_child_folders(self, folder_id: str) -> Iterator[ChildFolder]:
        """Yield the folders directly inside the folder.

        Raises:
            BrowserError: If the folder cannot be listed.
        """
