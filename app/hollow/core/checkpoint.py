"""Durable key-value storage for scan checkpoints.

The scan controller keeps the whole traversal state under one
well-known key. This module defines the store interface and a
file-backed implementation that writes each key atomically.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path
from tempfile import NamedTemporaryFile

from hollow.core.paths import get_checkpoint_dir

logger = logging.getLogger(__name__)

# Key under which the scan state is stored
CHECKPOINT_KEY = "scan-state"

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class CheckpointError(Exception):
    """Raised when the checkpoint store cannot be read or written."""


class CheckpointStore(ABC):
    """Abstract key-value store for serialized scan state."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent.

        Raises:
            CheckpointError: If the store cannot be read.
        """

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        """Store a value, replacing any previous value atomically.

        A failed put must leave the previously stored value intact.

        Raises:
            CheckpointError: If the value cannot be written.
        """

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove a key. Removing an absent key is not an error.

        Raises:
            CheckpointError: If the key cannot be removed.
        """


class FileCheckpointStore(CheckpointStore):
    """Stores each key as a JSON file in a directory.

    Storage location: ~/.local/state/hollow/checkpoints/<key>.json

    Args:
        directory: Optional override for the checkpoint directory.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory if directory is not None else get_checkpoint_dir()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Path of the file holding ``key``.

        Raises:
            ValueError: If the key contains characters unsafe for a file name.
        """
        if not _KEY_PATTERN.match(key):
            msg = f"Invalid checkpoint key: {key!r}"
            raise ValueError(msg)
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CheckpointError(f"Failed to read checkpoint {path}: {e}") from e

    def put(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_path: Path | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            # Write atomically using a temporary file in the same directory
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._directory,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(str(tmp_path), str(path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise CheckpointError(f"Failed to write checkpoint {path}: {e}") from e
        logger.debug("Checkpoint %s written (%d bytes)", key, len(value))

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise CheckpointError(f"Failed to delete checkpoint {path}: {e}") from e
