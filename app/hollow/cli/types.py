"""Shared helpers for CLI commands.

This module builds the scan collaborators (browser, sink, checkpoint
store, scheduler) from configuration so every command wires them the
same way.
"""

from pathlib import Path

import typer

from hollow.browsers.base import StorageBrowser
from hollow.browsers.local import LocalFolderBrowser
from hollow.core.checkpoint import CheckpointStore, FileCheckpointStore
from hollow.core.config import ConfigError, ConfigNotFoundError, HollowConfig, load_config
from hollow.core.controller import ScanController
from hollow.core.paths import get_config_path
from hollow.core.scheduler import FileScheduler, Scheduler
from hollow.sinks.base import ReportSink
from hollow.sinks.csv_sink import CsvReportSink
from hollow.utils.formatting import print_error, print_info


class SetupError(Exception):
    """Raised when collaborators cannot be built from the configuration."""


def get_config_path_option(ctx: typer.Context) -> Path | None:
    """Return the --config path stored by the main callback, if any."""
    obj = ctx.find_root().obj or {}
    return obj.get("config_path")


def require_config(config_path: Path | None = None) -> HollowConfig:
    """Load the configuration or exit with a helpful error message.

    Raises:
        typer.Exit: If the configuration cannot be loaded.
    """
    path = config_path or get_config_path()
    try:
        return load_config(path)
    except ConfigNotFoundError as e:
        print_error(f"Config not found: {path}")
        print_info("Run 'hollow config init --root <FOLDER_ID>' to create one.")
        raise typer.Exit(code=1) from e
    except ConfigError as e:
        print_error(f"Failed to load config: {e}")
        raise typer.Exit(code=1) from e


def _require_credentials(config: HollowConfig) -> Path:
    credentials = config.browser.credentials_file
    if credentials is None:
        msg = "browser.credentials_file is required for Google APIs"
        raise SetupError(msg)
    credentials = credentials.expanduser()
    if not credentials.is_file():
        msg = f"Credentials file not found: {credentials}"
        raise SetupError(msg)
    return credentials


def build_browser(config: HollowConfig) -> StorageBrowser:
    """Build the storage browser selected by ``browser.backend``.

    Raises:
        SetupError: If the browser cannot be built.
    """
    if config.browser.backend == "local":
        return LocalFolderBrowser(follow_symlinks=config.browser.follow_shortcuts)

    from hollow.browsers.drive import GoogleDriveBrowser

    credentials = _require_credentials(config)
    try:
        return GoogleDriveBrowser.from_credentials_file(
            credentials,
            num_retries=config.browser.num_retries,
            follow_shortcuts=config.browser.follow_shortcuts,
        )
    except (OSError, ValueError) as e:
        raise SetupError(f"Cannot load Drive credentials: {e}") from e


def build_sink(config: HollowConfig) -> ReportSink:
    """Build the report sink selected by ``report.sink``.

    Raises:
        SetupError: If the sink cannot be built.
    """
    if config.report.sink == "csv":
        return CsvReportSink(config.report.effective_csv_path.expanduser())

    from hollow.sinks.sheets import GoogleSheetsSink, build_sheets_service

    credentials = _require_credentials(config)
    try:
        service = build_sheets_service(credentials)
    except (OSError, ValueError) as e:
        raise SetupError(f"Cannot load Sheets credentials: {e}") from e
    return GoogleSheetsSink(
        service,
        config.report.spreadsheet_id or "",
        config.report.sheet_name,
        num_retries=config.browser.num_retries,
    )


def build_checkpoint_store() -> CheckpointStore:
    """Build the checkpoint store in the state directory."""
    return FileCheckpointStore()


def build_scheduler() -> Scheduler:
    """Build the file-backed scheduler in the state directory."""
    return FileScheduler()


def build_controller(config: HollowConfig, scheduler: Scheduler | None = None) -> ScanController:
    """Wire a ScanController from configuration.

    Args:
        config: Loaded configuration.
        scheduler: Scheduler to share with the caller; built if None.

    Raises:
        SetupError: If a collaborator cannot be built.
    """
    return ScanController(
        config,
        build_browser(config),
        build_sink(config),
        build_checkpoint_store(),
        scheduler or build_scheduler(),
    )
