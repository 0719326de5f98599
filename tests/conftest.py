"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest
from fakes import FakeBrowser, FakeClock, FakeFolder, FakeScheduler, ListSink, MemoryCheckpointStore
from hollow.core.config import HollowConfig


@pytest.fixture(autouse=True)
def isolated_xdg(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Point XDG config and state directories at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg-config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "xdg-state"))


@pytest.fixture
def two_root_tree() -> dict[str, FakeFolder]:
    """Root A holds empty folder x and non-empty folder y; root B is empty."""
    return {
        "A": FakeFolder(name="A", children=["x", "y"]),
        "x": FakeFolder(name="x"),
        "y": FakeFolder(name="y", files=1),
        "B": FakeFolder(name="B"),
    }


@pytest.fixture
def browser(two_root_tree: dict[str, FakeFolder]) -> FakeBrowser:
    """Fake browser over the two-root tree."""
    return FakeBrowser(two_root_tree)


@pytest.fixture
def checkpoints() -> MemoryCheckpointStore:
    """In-memory checkpoint store."""
    return MemoryCheckpointStore()


@pytest.fixture
def sink() -> ListSink:
    """In-memory report sink."""
    return ListSink()


@pytest.fixture
def scheduler() -> FakeScheduler:
    """In-memory scheduler."""
    return FakeScheduler()


@pytest.fixture
def clock() -> FakeClock:
    """Manually advanced monotonic clock."""
    return FakeClock()


@pytest.fixture
def config() -> HollowConfig:
    """Scan config for the two-root tree."""
    return HollowConfig(roots=["A", "B"], batch_size=10, time_budget_seconds=60)
