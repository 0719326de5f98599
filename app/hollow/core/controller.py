"""Scan controller.

The controller runs one time-boxed invocation of a scan. It loads the
checkpoint (or starts a fresh scan after validating the roots), seeds
roots into the frontier one at a time, drains the frontier in batches
through the traversal engine, and persists the state after every batch.
When the time budget runs out it schedules its own re-invocation; when
the frontier and the root list are both exhausted it finalizes the
report and removes the checkpoint.

Report rows are buffered in the checkpoint until the sink accepts them,
so a failed append is retried on a later batch or invocation instead of
being lost. Delivery is at-least-once: a row may be written twice if
the checkpoint update after a successful append fails.
"""

import json
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from hollow.browsers.base import StorageBrowser
from hollow.core.checkpoint import CHECKPOINT_KEY, CheckpointError, CheckpointStore
from hollow.core.config import HollowConfig
from hollow.core.engine import TraversalEngine
from hollow.core.scheduler import RESUME_HANDLER, Scheduler, SchedulerError
from hollow.core.validator import RootValidation, validate_roots
from hollow.models.record import REPORT_COLUMNS, ScanSummary
from hollow.models.scan_state import ScanState
from hollow.sinks.base import ReportSink, ReportSinkError

logger = logging.getLogger(__name__)


class InvocationOutcome(str, Enum):
    """How a controller invocation ended.

    Attributes:
        COMPLETED: The scan finished and the checkpoint was removed.
        YIELDED: The time budget ran out; a re-invocation was scheduled.
        NO_VALID_ROOTS: No configured root could be resolved; nothing was started.
        CHECKPOINT_UNREADABLE: A checkpoint exists but cannot be loaded.
        FAILED: An unexpected error stopped the invocation.
    """

    COMPLETED = "completed"
    YIELDED = "yielded"
    NO_VALID_ROOTS = "no_valid_roots"
    CHECKPOINT_UNREADABLE = "checkpoint_unreadable"
    FAILED = "failed"


class ScanControllerError(Exception):
    """Base exception for scan controller errors."""


class NoValidRootsError(ScanControllerError):
    """Raised when none of the configured roots can be resolved."""

    def __init__(self, validation: RootValidation) -> None:
        super().__init__("None of the configured roots could be resolved")
        self.validation = validation


class CheckpointUnreadableError(ScanControllerError):
    """Raised when a stored checkpoint cannot be read or decoded."""


@dataclass(frozen=True, slots=True)
class InvocationResult:
    """Result of a single controller invocation.

    Attributes:
        outcome: How the invocation ended.
        state: Scan state at the end of the invocation, if one was loaded.
        summary: Final totals, set when the scan completed.
        validation: Root validation result, set when a fresh scan was attempted.
        visited: Folders visited during this invocation.
        empty_found: Empty folders found during this invocation.
        message: Operator-facing detail for non-successful outcomes.
    """

    outcome: InvocationOutcome
    state: ScanState | None = None
    summary: ScanSummary | None = None
    validation: RootValidation | None = None
    visited: int = 0
    empty_found: int = 0
    message: str = ""


@dataclass(frozen=True, slots=True)
class ScanProgress:
    """Snapshot of a scan in progress, read from the checkpoint."""

    folders_visited: int
    empty_found: int
    queue_depth: int
    roots_seeded: int
    roots_total: int
    pending_rows: int
    invocations: int
    started_at: str
    updated_at: str
    next_wakeup: datetime | None = None

    def to_dict(self) -> dict[str, object]:
        """Serialize to dictionary for JSON output."""
        return {
            "folders_visited": self.folders_visited,
            "empty_found": self.empty_found,
            "queue_depth": self.queue_depth,
            "roots_seeded": self.roots_seeded,
            "roots_total": self.roots_total,
            "pending_rows": self.pending_rows,
            "invocations": self.invocations,
            "started_at": self.started_at,
            "updated_at": self.updated_at,
            "next_wakeup": self.next_wakeup.isoformat() if self.next_wakeup else None,
        }


class ScanController:
    """Drives a resumable scan one invocation at a time.

    Args:
        config: Scan configuration.
        browser: Storage browser for reading folders.
        sink: Report sink for empty-folder rows.
        checkpoints: Store holding the scan state between invocations.
        scheduler: Scheduler used to request the next invocation.
        clock: Monotonic time source for the invocation deadline.
        now: Wall-clock source for the completion timestamp.
    """

    def __init__(
        self,
        config: HollowConfig,
        browser: StorageBrowser,
        sink: ReportSink,
        checkpoints: CheckpointStore,
        scheduler: Scheduler,
        *,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        self._config = config
        self._browser = browser
        self._sink = sink
        self._checkpoints = checkpoints
        self._scheduler = scheduler
        self._clock = clock
        self._now = now or (lambda: datetime.now(UTC))
        self._engine = TraversalEngine(browser, clock=clock)

    def run(self) -> InvocationResult:
        """Run one invocation: start or resume, then work until done or out of time.

        Never raises; every failure is reported through the outcome.
        """
        deadline = self._clock() + self._config.time_budget_seconds

        try:
            state = self.load_state()
        except CheckpointUnreadableError as e:
            logger.error("%s", e)
            return InvocationResult(InvocationOutcome.CHECKPOINT_UNREADABLE, message=str(e))

        validation: RootValidation | None = None
        try:
            if state is None:
                state, validation = self._start_scan()
            return self._drive(state, deadline, validation)
        except NoValidRootsError as e:
            for failure in e.validation.failures:
                logger.error("Root %s rejected: %s", failure.identifier, failure.reason)
            return InvocationResult(
                InvocationOutcome.NO_VALID_ROOTS,
                validation=e.validation,
                message=str(e),
            )
        except Exception as e:
            logger.exception("Scan invocation failed")
            if state is not None:
                # A checkpoint exists; the next invocation resumes from it
                self._schedule_resume()
            return InvocationResult(
                InvocationOutcome.FAILED,
                state=state,
                validation=validation,
                message=f"{type(e).__name__}: {e}",
            )

    def load_state(self) -> ScanState | None:
        """Load the persisted scan state.

        Raises:
            CheckpointUnreadableError: If a checkpoint exists but cannot be loaded.
        """
        return load_scan_state(self._checkpoints)

    def progress(self) -> ScanProgress | None:
        """Summarize the scan in progress, or None if there is none."""
        return read_progress(self._checkpoints, self._scheduler)

    def reset(self) -> bool:
        """Discard the scan in progress and any pending re-invocation."""
        return reset_scan(self._checkpoints, self._scheduler)

    def validate(self) -> RootValidation:
        """Check that the configured roots are accessible, without starting a scan."""
        return validate_roots(self._config.roots, self._browser)

    # === Private helpers ===

    def _start_scan(self) -> tuple[ScanState, RootValidation]:
        """Validate roots and persist the initial state of a new scan.

        Raises:
            NoValidRootsError: If no root resolves.
            ReportSinkError: If the report header cannot be written.
            CheckpointError: If the initial checkpoint cannot be written.
        """
        validation = self.validate()
        if not validation.ok:
            raise NoValidRootsError(validation)

        state = ScanState.fresh(validation.roots)
        self._sink.initialize_schema(REPORT_COLUMNS)
        self._persist(state)
        logger.info("Started scan of %d root(s) into %s", len(state.roots), self._sink.location)
        return state, validation

    def _drive(
        self,
        state: ScanState,
        deadline: float,
        validation: RootValidation | None,
    ) -> InvocationResult:
        """Seed and drain until the scan completes or the deadline passes."""
        state.invocations += 1
        visited_before = state.folders_visited
        empty_before = state.empty_found
        summary: ScanSummary | None = None
        message = ""

        try:
            # Rows left over from an earlier invocation go out first
            self._flush_pending(state)

            while self._clock() < deadline:
                if not state.frontier:
                    if state.has_unseeded_root:
                        root = state.seed_next_root()
                        logger.info("Seeded root %s (%s)", root.display_name, root.identifier)
                        continue
                    if self._flush_pending(state):
                        summary = self._complete(state)
                    # Otherwise the report is unavailable: keep the checkpoint, retry later
                    break

                batch = self._engine.drain_batch(state, self._config.batch_size, deadline)
                state.pending_rows.extend(record.to_row() for record in batch.empty_found)
                self._persist(state)
                # Past the deadline the rows stay buffered for the next invocation
                if self._clock() < deadline:
                    self._flush_pending(state)

            if summary is None:
                self._persist(state)
        except CheckpointError as e:
            # The store still holds the last committed state; redo from there
            logger.error("Checkpoint write failed, stopping this invocation: %s", e)
            message = str(e)

        if summary is None:
            self._schedule_resume()
            logger.info(
                "Yielding after %d folder(s); %d queued",
                state.folders_visited - visited_before,
                len(state.frontier),
            )

        return InvocationResult(
            InvocationOutcome.COMPLETED if summary is not None else InvocationOutcome.YIELDED,
            state=state,
            summary=summary,
            validation=validation,
            visited=state.folders_visited - visited_before,
            empty_found=state.empty_found - empty_before,
            message=message,
        )

    def _flush_pending(self, state: ScanState) -> bool:
        """Write buffered rows to the sink.

        Returns:
            True if no rows remain buffered.

        Raises:
            CheckpointError: If the state cannot be persisted after the write.
        """
        if not state.pending_rows:
            return True
        try:
            self._sink.append_rows(state.pending_rows)
        except ReportSinkError as e:
            logger.warning(
                "Report append failed, keeping %d row(s) for retry: %s",
                len(state.pending_rows),
                e,
            )
            return False
        state.pending_rows.clear()
        self._persist(state)
        return True

    def _complete(self, state: ScanState) -> ScanSummary:
        """Finalize a drained scan."""
        summary = ScanSummary(
            folders_visited=state.folders_visited,
            empty_found=state.empty_found,
            completed_at=self._now().isoformat(),
        )
        self._checkpoints.delete(CHECKPOINT_KEY)
        try:
            self._scheduler.cancel_all(RESUME_HANDLER)
        except SchedulerError as e:
            logger.warning("Could not cancel pending re-invocations: %s", e)
        try:
            self._sink.append_summary(summary)
        except ReportSinkError as e:
            logger.warning("Could not write the summary row: %s", e)
        logger.info(
            "Scan complete: %d folder(s) visited, %d empty",
            summary.folders_visited,
            summary.empty_found,
        )
        return summary

    def _persist(self, state: ScanState) -> None:
        state.touch()
        self._checkpoints.put(CHECKPOINT_KEY, state.to_json())

    def _schedule_resume(self) -> None:
        try:
            self._scheduler.schedule_once(RESUME_HANDLER, self._config.reinvoke_delay_seconds)
        except SchedulerError as e:
            logger.error("Could not schedule the next invocation: %s", e)


def load_scan_state(checkpoints: CheckpointStore) -> ScanState | None:
    """Load the persisted scan state.

    Args:
        checkpoints: Store holding the scan state.

    Returns:
        The stored ScanState, or None if no scan is in progress.

    Raises:
        CheckpointUnreadableError: If a checkpoint exists but cannot be loaded.
    """
    try:
        raw = checkpoints.get(CHECKPOINT_KEY)
    except CheckpointError as e:
        msg = f"Cannot read checkpoint: {e}"
        raise CheckpointUnreadableError(msg) from e

    if raw is None:
        return None

    try:
        return ScanState.from_json(raw)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        msg = f"Checkpoint is corrupt or from an incompatible version: {e}"
        raise CheckpointUnreadableError(msg) from e


def read_progress(checkpoints: CheckpointStore, scheduler: Scheduler) -> ScanProgress | None:
    """Summarize the scan in progress.

    Returns:
        ScanProgress, or None if no scan is in progress.

    Raises:
        CheckpointUnreadableError: If a checkpoint exists but cannot be loaded.
    """
    state = load_scan_state(checkpoints)
    if state is None:
        return None

    pending = scheduler.pending(RESUME_HANDLER)
    return ScanProgress(
        folders_visited=state.folders_visited,
        empty_found=state.empty_found,
        queue_depth=len(state.frontier),
        roots_seeded=state.next_unseeded_root,
        roots_total=len(state.roots),
        pending_rows=len(state.pending_rows),
        invocations=state.invocations,
        started_at=state.started_at,
        updated_at=state.updated_at,
        next_wakeup=pending[0].due_at if pending else None,
    )


def reset_scan(checkpoints: CheckpointStore, scheduler: Scheduler) -> bool:
    """Discard the scan in progress and any pending re-invocation.

    Report rows already written are left alone. An unreadable checkpoint
    is removed as well.

    Returns:
        True if a checkpoint existed.

    Raises:
        CheckpointError: If the checkpoint cannot be removed.
        SchedulerError: If pending triggers cannot be cancelled.
    """
    try:
        existed = checkpoints.get(CHECKPOINT_KEY) is not None
    except CheckpointError:
        existed = True
    checkpoints.delete(CHECKPOINT_KEY)
    scheduler.cancel_all(RESUME_HANDLER)
    logger.info("Scan state reset")
    return existed
