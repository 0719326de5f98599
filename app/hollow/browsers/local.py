"""Local filesystem storage browser.

Treats directories on a mounted filesystem (a synced Drive folder, a
network share) as the storage service. Folder identifiers are resolved
absolute paths, so a symlink to an already-known directory maps to the
same identifier as its target.
"""

import logging
import os
import pwd
from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

from hollow.browsers.base import FolderAccessError, FolderNotFoundError, StorageBrowser
from hollow.models.record import ChildFolder, FolderMeta

logger = logging.getLogger(__name__)


class LocalFolderBrowser(StorageBrowser):
    """Browses directories on the local filesystem.

    Args:
        follow_symlinks: If True, symlinks to directories are reported as
            child folders (under their resolved target path). If False they
            count as plain entries, which still makes the parent non-empty.
    """

    def __init__(self, *, follow_symlinks: bool = True) -> None:
        self._follow_symlinks = follow_symlinks

    @property
    def name(self) -> str:
        return "local"

    def resolve_folder(self, folder_id: str) -> FolderMeta:
        if not folder_id:
            raise FolderNotFoundError(folder_id, "empty path")

        path = self._resolve(folder_id)
        try:
            stat = path.stat()
        except FileNotFoundError as e:
            raise FolderNotFoundError(folder_id, "folder not found") from e
        except OSError as e:
            raise FolderAccessError(folder_id, e.strerror or str(e)) from e

        if not path.is_dir():
            raise FolderNotFoundError(folder_id, "not a folder")

        return FolderMeta(
            folder_id=str(path),
            name=path.name or str(path),
            owner_email=self._owner_name(stat.st_uid),
            last_modified=datetime.fromtimestamp(stat.st_mtime, tz=UTC).isoformat(),
            url=path.as_uri(),
            drive_id=None,
        )

    def has_child_files(self, folder_id: str) -> bool:
        for entry in self._scan(folder_id):
            if not self._is_folder(entry):
                return True
        return False

    def list_child_folders(self, folder_id: str) -> Iterator[ChildFolder]:
        entries = sorted(self._scan(folder_id), key=lambda e: e.name)
        for entry in entries:
            if not self._is_folder(entry):
                continue
            try:
                child_id = str(Path(entry.path).resolve(strict=True))
            except OSError:
                # Dead symlink; counts as a plain entry
                logger.debug("Cannot resolve %s, skipping", entry.path)
                continue
            yield ChildFolder(folder_id=child_id, name=entry.name)

    def _is_folder(self, entry: os.DirEntry[str]) -> bool:
        """Classify a directory entry as a folder for traversal purposes."""
        try:
            if entry.is_symlink() and not self._follow_symlinks:
                return False
            return entry.is_dir(follow_symlinks=self._follow_symlinks)
        except OSError:
            return False

    def _scan(self, folder_id: str) -> list[os.DirEntry[str]]:
        """List a directory's entries, mapping OS errors to BrowserError."""
        path = self._resolve(folder_id)
        try:
            with os.scandir(path) as it:
                return list(it)
        except FileNotFoundError as e:
            raise FolderNotFoundError(folder_id, "folder not found") from e
        except NotADirectoryError as e:
            raise FolderNotFoundError(folder_id, "not a folder") from e
        except PermissionError as e:
            raise FolderAccessError(folder_id, "permission denied") from e
        except OSError as e:
            raise FolderAccessError(folder_id, e.strerror or str(e)) from e

    @staticmethod
    def _resolve(folder_id: str) -> Path:
        try:
            return Path(folder_id).expanduser().resolve()
        except (OSError, RuntimeError) as e:
            raise FolderAccessError(folder_id, f"cannot resolve path: {e}") from e

    @staticmethod
    def _owner_name(uid: int) -> str:
        try:
            return pwd.getpwuid(uid).pw_name
        except KeyError:
            return str(uid)
