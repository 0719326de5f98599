"""Breadth-first traversal engine.

The engine drains the scan state's frontier in bounded batches. Each
call visits at most ``max_items`` folders and stops early once the
deadline passes, leaving the state ready to be checkpointed and resumed
by a later invocation.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from hollow.browsers.base import BrowserError, StorageBrowser
from hollow.models.record import ChildFolder, FolderMeta, FolderRecord
from hollow.models.scan_state import FrontierEntry, ScanState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FolderFailure:
    """A folder that could not be read during traversal.

    Attributes:
        folder_id: Identifier of the folder.
        path: Ancestor chain of the folder.
        reason: Why the folder could not be read.
    """

    folder_id: str
    path: str
    reason: str


@dataclass(slots=True)
class BatchResult:
    """Outcome of one drain_batch call.

    Attributes:
        empty_found: Empty folders found, in visit order.
        processed: Folders visited (including inaccessible ones).
        skipped_duplicates: Frontier entries discarded as already visited.
        failures: Folders that could not be read.
    """

    empty_found: list[FolderRecord] = field(default_factory=list)
    processed: int = 0
    skipped_duplicates: int = 0
    failures: list[FolderFailure] = field(default_factory=list)


class TraversalEngine:
    """Visits folders from the frontier of a ScanState.

    Args:
        browser: Storage browser used to read folders.
        clock: Monotonic time source that deadlines are expressed in.
            Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        browser: StorageBrowser,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._browser = browser
        self._clock = clock

    def drain_batch(self, state: ScanState, max_items: int, deadline: float) -> BatchResult:
        """Visit up to ``max_items`` folders from the head of the frontier.

        The state is mutated in place: entries are popped from the
        frontier, discovered subfolders are appended to it, and visited
        identifiers and counters are updated. Discarded duplicates do
        not count towards ``max_items``.

        The deadline is checked before each folder, so a folder listing
        that has already started always finishes.

        Args:
            state: Scan state to advance.
            max_items: Maximum number of folders to visit in this call.
            deadline: Stop once ``clock()`` reaches this value.

        Returns:
            BatchResult describing the folders visited in this call.

        Raises:
            ValueError: If max_items is less than 1.
        """
        if max_items < 1:
            msg = f"max_items must be at least 1, got {max_items}"
            raise ValueError(msg)

        result = BatchResult()

        while state.frontier and result.processed < max_items and self._clock() < deadline:
            entry = state.frontier.popleft()

            if entry.folder_id in state.visited:
                result.skipped_duplicates += 1
                continue

            record = self._visit(state, entry, result)
            if record is not None:
                result.empty_found.append(record)
                state.empty_found += 1

            state.visited.add(entry.folder_id)
            state.folders_visited += 1
            result.processed += 1

        logger.debug(
            "Batch visited %d folder(s), %d empty, %d failed, %d queued",
            result.processed,
            len(result.empty_found),
            len(result.failures),
            len(state.frontier),
        )
        return result

    def _visit(
        self, state: ScanState, entry: FrontierEntry, result: BatchResult
    ) -> FolderRecord | None:
        """Read one folder, enqueue its subfolders and classify it.

        Returns:
            A FolderRecord if the folder is empty, otherwise None.
        """
        try:
            meta = self._browser.resolve_folder(entry.folder_id)
            # Materialize before enqueueing so a failed listing adds nothing
            children = list(self._browser.list_child_folders(entry.folder_id))
            has_files = self._browser.has_child_files(entry.folder_id) if not children else True
        except BrowserError as e:
            logger.warning("Skipping folder %s (%s): %s", entry.folder_id, entry.report_path, e.reason)
            result.failures.append(
                FolderFailure(folder_id=entry.folder_id, path=entry.report_path, reason=e.reason)
            )
            return None

        self._enqueue_children(state, entry, meta, children)

        if children or has_files:
            return None
        return self._build_record(entry, meta)

    @staticmethod
    def _enqueue_children(
        state: ScanState,
        entry: FrontierEntry,
        meta: FolderMeta,
        children: list[ChildFolder],
    ) -> None:
        for child in children:
            if child.folder_id in state.visited:
                continue
            state.frontier.append(entry.child(child.folder_id, meta.name))

    @staticmethod
    def _build_record(entry: FrontierEntry, meta: FolderMeta) -> FolderRecord:
        return FolderRecord(
            name=meta.name,
            folder_id=meta.folder_id,
            url=meta.url,
            path=entry.report_path,
            drive_type=meta.drive_type,
            drive_name=entry.root_name,
            parent_name=entry.parent_name,
            last_modified=meta.last_modified,
            owner_email=meta.owner_email,
        )
