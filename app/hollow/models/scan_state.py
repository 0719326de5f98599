"""Persisted traversal state.

This module defines the scan checkpoint: the configured roots, the
breadth-first frontier, the visited set, running counters and any
report rows still waiting to be written. A ScanState is the only thing
that survives between invocations, so it serializes completely to a
versioned JSON document.
"""

import json
from collections import deque
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

# Bump when the serialized layout changes incompatibly
SCHEMA_VERSION = 1

# Parent name carried by a root's seed entry
ROOT_PARENT_SENTINEL = "Root"

PATH_SEPARATOR = "/"


class UnsupportedSchemaError(ValueError):
    """Raised when a serialized state carries an unknown schema version."""


@dataclass(slots=True)
class Root:
    """A configured top-level folder.

    Attributes:
        identifier: Folder identifier in the storage service.
        display_name: Folder name resolved during validation.
        fully_queued: True once the root's seed entry has been enqueued.
    """

    identifier: str
    display_name: str
    fully_queued: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "identifier": self.identifier,
            "display_name": self.display_name,
            "fully_queued": self.fully_queued,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Root":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
        """
        return cls(
            identifier=data["identifier"],
            display_name=data["display_name"],
            fully_queued=bool(data.get("fully_queued", False)),
        )


@dataclass(frozen=True, slots=True)
class FrontierEntry:
    """A folder waiting to be visited.

    Attributes:
        folder_id: Identifier of the folder to visit.
        path_prefix: Ancestor chain joined by PATH_SEPARATOR; empty for a root.
        parent_name: Display name of the parent (ROOT_PARENT_SENTINEL for a root).
        root_name: Display name of the root this folder descends from.
    """

    folder_id: str
    path_prefix: str
    parent_name: str
    root_name: str = ""

    @classmethod
    def seed(cls, root: Root) -> "FrontierEntry":
        """Build the single seed entry for a root."""
        return cls(
            folder_id=root.identifier,
            path_prefix="",
            parent_name=ROOT_PARENT_SENTINEL,
            root_name=root.display_name,
        )

    def child(self, child_id: str, folder_name: str) -> "FrontierEntry":
        """Build the entry for a direct subfolder of this entry's folder.

        The child's path prefix is the full ancestor chain: a subfolder of
        x under root A gets "A/x", not "A".

        Args:
            child_id: Identifier of the subfolder.
            folder_name: Display name of this entry's folder (the child's parent).
        """
        if self.path_prefix:
            prefix = f"{self.path_prefix}{PATH_SEPARATOR}{folder_name}"
        else:
            prefix = folder_name
        return FrontierEntry(
            folder_id=child_id,
            path_prefix=prefix,
            parent_name=folder_name,
            root_name=self.root_name,
        )

    @property
    def report_path(self) -> str:
        """Path shown in the report: the prefix, or the parent name for roots."""
        return self.path_prefix or self.parent_name

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "folder_id": self.folder_id,
            "path_prefix": self.path_prefix,
            "parent_name": self.parent_name,
            "root_name": self.root_name,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FrontierEntry":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
        """
        return cls(
            folder_id=data["folder_id"],
            path_prefix=data["path_prefix"],
            parent_name=data["parent_name"],
            root_name=data.get("root_name", ""),
        )


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass(slots=True)
class ScanState:
    """The single persisted aggregate of a scan in progress.

    Attributes:
        roots: Validated roots, in configured order.
        next_unseeded_root: Index of the next root to seed.
        folders_visited: Folders visited so far (accessible or not).
        empty_found: Empty folders found so far.
        frontier: FIFO queue of folders awaiting a visit.
        visited: Identifiers of folders already visited in this scan.
        pending_rows: Report rows computed but not yet written to the sink.
        started_at: When the scan started (ISO 8601).
        updated_at: When the state was last persisted (ISO 8601).
        invocations: Number of controller invocations that touched this scan.
    """

    roots: list[Root]
    next_unseeded_root: int = 0
    folders_visited: int = 0
    empty_found: int = 0
    frontier: deque[FrontierEntry] = field(default_factory=deque)
    visited: set[str] = field(default_factory=set)
    pending_rows: list[list[Any]] = field(default_factory=list)
    started_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)
    invocations: int = 0

    @classmethod
    def fresh(cls, roots: list[Root]) -> "ScanState":
        """Create the initial state for a new scan.

        Raises:
            ValueError: If no roots are given.
        """
        if not roots:
            msg = "A scan needs at least one root"
            raise ValueError(msg)
        return cls(roots=list(roots))

    @property
    def has_unseeded_root(self) -> bool:
        """True while some root has not been enqueued yet."""
        return self.next_unseeded_root < len(self.roots)

    @property
    def is_drained(self) -> bool:
        """True when every root is seeded and the frontier is empty."""
        return not self.frontier and not self.has_unseeded_root

    def seed_next_root(self) -> Root:
        """Enqueue the seed entry for the next unseeded root.

        Returns:
            The root that was seeded.

        Raises:
            IndexError: If every root is already seeded.
        """
        if not self.has_unseeded_root:
            msg = "All roots are already seeded"
            raise IndexError(msg)
        root = self.roots[self.next_unseeded_root]
        self.frontier.append(FrontierEntry.seed(root))
        root.fully_queued = True
        self.next_unseeded_root += 1
        return root

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "schema_version": SCHEMA_VERSION,
            "roots": [root.to_dict() for root in self.roots],
            "next_unseeded_root": self.next_unseeded_root,
            "folders_visited": self.folders_visited,
            "empty_found": self.empty_found,
            "frontier": [entry.to_dict() for entry in self.frontier],
            "visited": sorted(self.visited),
            "pending_rows": [list(row) for row in self.pending_rows],
            "started_at": self.started_at,
            "updated_at": self.updated_at,
            "invocations": self.invocations,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScanState":
        """Deserialize from dictionary.

        Raises:
            UnsupportedSchemaError: If the schema version is unknown.
            KeyError: If required fields are missing.
            ValueError: If a field has an invalid value.
        """
        version = data.get("schema_version")
        if version != SCHEMA_VERSION:
            msg = f"Unsupported scan state schema version: {version!r} (expected {SCHEMA_VERSION})"
            raise UnsupportedSchemaError(msg)

        roots = [Root.from_dict(item) for item in data["roots"]]
        next_unseeded = int(data["next_unseeded_root"])
        if not 0 <= next_unseeded <= len(roots):
            msg = f"Root cursor {next_unseeded} out of range for {len(roots)} roots"
            raise ValueError(msg)

        return cls(
            roots=roots,
            next_unseeded_root=next_unseeded,
            folders_visited=int(data["folders_visited"]),
            empty_found=int(data["empty_found"]),
            frontier=deque(FrontierEntry.from_dict(item) for item in data["frontier"]),
            visited=set(data["visited"]),
            pending_rows=[list(row) for row in data.get("pending_rows", [])],
            started_at=data.get("started_at", ""),
            updated_at=data.get("updated_at", ""),
            invocations=int(data.get("invocations", 0)),
        )

    def to_json(self) -> str:
        """Serialize to a compact JSON document."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)

    @classmethod
    def from_json(cls, text: str) -> "ScanState":
        """Deserialize from a JSON document.

        Raises:
            json.JSONDecodeError: If the text is not valid JSON.
            UnsupportedSchemaError: If the schema version is unknown.
            KeyError: If required fields are missing.
            ValueError: If a field has an invalid value.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            msg = "Scan state must be a JSON object"
            raise ValueError(msg)
        return cls.from_dict(data)

    def touch(self) -> None:
        """Refresh the last-updated timestamp."""
        self.updated_at = _now_iso()
