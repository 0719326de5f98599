"""Integration tests for a resumable scan over real folders.

Uses the local browser, file checkpoint store, file scheduler and CSV
sink together; only the monotonic clock is simulated.
"""

import csv
from pathlib import Path

import pytest
from fakes import FakeClock
from hollow.browsers.local import LocalFolderBrowser
from hollow.core.checkpoint import CHECKPOINT_KEY, FileCheckpointStore
from hollow.core.config import HollowConfig
from hollow.core.controller import InvocationOutcome, ScanController
from hollow.core.scheduler import RESUME_HANDLER, FileScheduler
from hollow.models.record import SUMMARY_MARKER, FolderMeta
from hollow.sinks.csv_sink import CsvReportSink


class SlowBrowser(LocalFolderBrowser):
    """Local browser where every folder lookup takes ten simulated seconds."""

    def __init__(self, clock: FakeClock) -> None:
        super().__init__()
        self._clock = clock

    def resolve_folder(self, folder_id: str) -> FolderMeta:
        self._clock.advance(10)
        return super().resolve_folder(folder_id)


@pytest.fixture
def roots(tmp_path: Path) -> list[Path]:
    """Two roots: Projects with nested empty folders, Archive with none."""
    projects = tmp_path / "Projects"
    for rel in ("alpha/src", "alpha/empty", "beta", "gamma/deep/deeper"):
        (projects / rel).mkdir(parents=True)
    (projects / "alpha" / "src" / "main.py").write_text("print()")
    (projects / "beta" / "notes.md").write_text("notes")

    archive = tmp_path / "Archive"
    (archive / "2024").mkdir(parents=True)
    (archive / "2024" / "report.pdf").write_bytes(b"%PDF")
    return [projects, archive]


def _scan(config: HollowConfig, report: Path, clock: FakeClock) -> list[InvocationOutcome]:
    controller = ScanController(
        config,
        SlowBrowser(clock),
        CsvReportSink(report),
        FileCheckpointStore(),
        FileScheduler(),
        clock=clock,
    )
    outcomes = []
    while not outcomes or outcomes[-1] == InvocationOutcome.YIELDED:
        outcomes.append(controller.run().outcome)
        assert len(outcomes) < 50
    return outcomes


def _rows(report: Path) -> list[list[str]]:
    with report.open(newline="", encoding="utf-8") as f:
        return list(csv.reader(f))


def test_time_boxed_scan_matches_single_pass(roots: list[Path], tmp_path: Path) -> None:
    """A scan split over many invocations reports the same folders as one pass."""
    single = tmp_path / "single.csv"
    split = tmp_path / "split.csv"
    base = HollowConfig(roots=[str(r) for r in roots], batch_size=2, time_budget_seconds=3600)

    assert _scan(base, single, FakeClock()) == [InvocationOutcome.COMPLETED]
    outcomes = _scan(base.model_copy(update={"time_budget_seconds": 25}), split, FakeClock())

    assert outcomes[-1] == InvocationOutcome.COMPLETED
    assert len(outcomes) > 2
    assert _rows(split)[:-1] == _rows(single)[:-1]
    assert FileCheckpointStore().get(CHECKPOINT_KEY) is None
    assert FileScheduler().pending(RESUME_HANDLER) == []


def test_empty_folders_and_paths(roots: list[Path], tmp_path: Path) -> None:
    """Leaf folders without files are reported with their ancestor chain."""
    report = tmp_path / "report.csv"
    config = HollowConfig(roots=[str(r) for r in roots])

    _scan(config, report, FakeClock())

    header, *rows, summary = _rows(report)
    assert header[0] == "Folder Name"
    assert [(row[0], row[3], row[6]) for row in rows] == [
        ("empty", "Projects/alpha", "alpha"),
        ("deeper", "Projects/gamma/deep", "deep"),
    ]
    assert summary[0] == SUMMARY_MARKER
    assert summary[3] == "Scanned 10 folders"
    assert summary[6] == "Found 2 empty folders"
