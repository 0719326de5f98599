"""Deferred re-invocation of the scan controller.

When an invocation runs out of time it asks a scheduler to wake the
controller again after a short delay. This module defines that
interface and a file-backed scheduler whose pending triggers are picked
up by ``hollow scan run --follow`` or by ``hollow scan tick`` from a
cron job or systemd timer.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from hollow.core.paths import get_schedule_path

logger = logging.getLogger(__name__)

# Handler name for resuming a scan
RESUME_HANDLER = "resume-scan"


class SchedulerError(Exception):
    """Raised when triggers cannot be read or written."""


@dataclass(frozen=True, slots=True)
class ScheduledTrigger:
    """A pending one-shot re-invocation.

    Attributes:
        handler: Name of the handler to invoke.
        due_at: When the handler should run (timezone-aware UTC).
        created_at: When the trigger was scheduled (timezone-aware UTC).
    """

    handler: str
    due_at: datetime
    created_at: datetime

    def is_due(self, now: datetime) -> bool:
        return self.due_at <= now

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "handler": self.handler,
            "due_at": self.due_at.isoformat(),
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ScheduledTrigger":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If a timestamp is malformed.
        """
        return cls(
            handler=data["handler"],
            due_at=datetime.fromisoformat(data["due_at"]),
            created_at=datetime.fromisoformat(data["created_at"]),
        )


class Scheduler(ABC):
    """Abstract scheduler of one-shot handler invocations."""

    @abstractmethod
    def schedule_once(self, handler: str, delay_seconds: float) -> ScheduledTrigger:
        """Schedule ``handler`` to run once after ``delay_seconds``.

        Any trigger already pending for the same handler is replaced, so a
        handler never has more than one pending trigger.

        Raises:
            SchedulerError: If the trigger cannot be stored.
        """

    @abstractmethod
    def cancel_all(self, handler: str) -> int:
        """Cancel every pending trigger for ``handler``.

        Returns:
            Number of triggers cancelled.

        Raises:
            SchedulerError: If the triggers cannot be updated.
        """

    @abstractmethod
    def pending(self, handler: str) -> list[ScheduledTrigger]:
        """Return the pending triggers for ``handler``, earliest first."""

    @abstractmethod
    def consume_due(self, handler: str) -> ScheduledTrigger | None:
        """Remove and return the earliest due trigger for ``handler``.

        Returns:
            The consumed trigger, or None if nothing is due yet.
        """


class FileScheduler(Scheduler):
    """Keeps pending triggers in a JSON file.

    Storage location: ~/.local/state/hollow/schedule.json

    Args:
        path: Optional override for the schedule file.
        clock: Returns the current time; defaults to ``datetime.now(UTC)``.
    """

    def __init__(
        self,
        path: Path | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._path = path if path is not None else get_schedule_path()
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def path(self) -> Path:
        return self._path

    def schedule_once(self, handler: str, delay_seconds: float) -> ScheduledTrigger:
        if delay_seconds < 0:
            msg = f"Delay must not be negative, got {delay_seconds}"
            raise ValueError(msg)
        now = self._clock()
        trigger = ScheduledTrigger(
            handler=handler,
            due_at=now + timedelta(seconds=delay_seconds),
            created_at=now,
        )
        others = [t for t in self._load() if t.handler != handler]
        self._save([*others, trigger])
        logger.info("Scheduled %s at %s", handler, trigger.due_at.isoformat())
        return trigger

    def cancel_all(self, handler: str) -> int:
        triggers = self._load()
        kept = [t for t in triggers if t.handler != handler]
        cancelled = len(triggers) - len(kept)
        if cancelled:
            self._save(kept)
            logger.info("Cancelled %d pending trigger(s) for %s", cancelled, handler)
        return cancelled

    def pending(self, handler: str) -> list[ScheduledTrigger]:
        return sorted(
            (t for t in self._load() if t.handler == handler),
            key=lambda t: t.due_at,
        )

    def consume_due(self, handler: str) -> ScheduledTrigger | None:
        now = self._clock()
        due = [t for t in self.pending(handler) if t.is_due(now)]
        if not due:
            return None
        trigger = due[0]
        self._save([t for t in self._load() if t != trigger])
        return trigger

    def _load(self) -> list[ScheduledTrigger]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            raise SchedulerError(f"Failed to read schedule {self._path}: {e}") from e

        try:
            data = json.loads(text)
            return [ScheduledTrigger.from_dict(item) for item in data.get("triggers", [])]
        except (json.JSONDecodeError, AttributeError, KeyError, ValueError) as e:
            # A corrupt schedule only loses wake-ups; the checkpoint is untouched
            logger.warning("Ignoring corrupt schedule file %s: %s", self._path, e)
            return []

    def _save(self, triggers: list[ScheduledTrigger]) -> None:
        payload = json.dumps({"triggers": [t.to_dict() for t in triggers]}, indent=2)
        tmp_path: Path | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=self._path.parent,
                delete=False,
                suffix=".tmp",
            ) as f:
                tmp_path = Path(f.name)
                f.write(payload)
            os.replace(str(tmp_path), str(self._path))
        except OSError as e:
            if tmp_path is not None and tmp_path.exists():
                tmp_path.unlink()
            raise SchedulerError(f"Failed to write schedule {self._path}: {e}") from e
