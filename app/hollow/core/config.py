"""Scan configuration and settings.

This module provides the configuration model and I/O functions for a
scan: which roots to walk, how much work to do per invocation, and
which storage browser and report sink to use.

Configuration is stored in ~/.config/hollow/config.toml
"""

import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated, Literal

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from hollow.core.paths import get_config_path, get_default_report_path

BrowserBackend = Literal["drive", "local"]
SinkKind = Literal["csv", "sheets"]

DEFAULT_BATCH_SIZE = 100
DEFAULT_TIME_BUDGET_SECONDS = 300
DEFAULT_REINVOKE_DELAY_SECONDS = 60
DEFAULT_SHEET_NAME = "Empty Folders"


class BrowserConfig(BaseModel):
    """Storage browser settings.

    Attributes:
        backend: Storage backend ("drive" or "local").
        credentials_file: Service-account key file (required for drive).
        num_retries: Retries for transient API errors.
        follow_shortcuts: Traverse into shortcut/symlink targets.
    """

    model_config = ConfigDict(extra="forbid")

    backend: Annotated[BrowserBackend, Field(description="Storage backend")] = "drive"
    credentials_file: Annotated[
        Path | None,
        Field(description="Service-account key file for Google APIs"),
    ] = None
    num_retries: Annotated[
        int,
        Field(ge=0, le=10, description="Retries for transient API errors (0-10)"),
    ] = 3
    follow_shortcuts: Annotated[
        bool,
        Field(description="Traverse into shortcut or symlink targets"),
    ] = False


class ReportConfig(BaseModel):
    """Report sink settings.

    Attributes:
        sink: Report destination ("csv" or "sheets").
        csv_path: CSV file for the csv sink (default in the state directory).
        spreadsheet_id: Target spreadsheet for the sheets sink.
        sheet_name: Worksheet name for the sheets sink.
    """

    model_config = ConfigDict(extra="forbid")

    sink: Annotated[SinkKind, Field(description="Report destination")] = "csv"
    csv_path: Annotated[Path | None, Field(description="CSV report path")] = None
    spreadsheet_id: Annotated[str | None, Field(description="Google Sheets spreadsheet ID")] = None
    sheet_name: Annotated[str, Field(min_length=1, description="Worksheet name")] = (
        DEFAULT_SHEET_NAME
    )

    @model_validator(mode="after")
    def validate_sink_target(self) -> "ReportConfig":
        """Validate that the sheets sink has a spreadsheet to write to."""
        if self.sink == "sheets" and not self.spreadsheet_id:
            msg = "report.spreadsheet_id is required when report.sink = 'sheets'"
            raise ValueError(msg)
        return self

    @property
    def effective_csv_path(self) -> Path:
        """CSV path to use, falling back to the state directory default."""
        return self.csv_path or get_default_report_path()


class HollowConfig(BaseModel):
    """Complete scan configuration.

    Attributes:
        roots: Root folder identifiers, in the order they are scanned.
        batch_size: Folders visited per batch between checkpoints.
        time_budget_seconds: Wall-clock budget of a single invocation.
        reinvoke_delay_seconds: Delay before a yielded scan is resumed.
        browser: Storage browser settings.
        report: Report sink settings.
    """

    model_config = ConfigDict(extra="forbid")

    roots: Annotated[
        list[str],
        Field(default_factory=list, description="Root folder identifiers in scan order"),
    ]
    batch_size: Annotated[
        int,
        Field(ge=1, le=1000, description="Folders per batch (1-1000)"),
    ] = DEFAULT_BATCH_SIZE
    time_budget_seconds: Annotated[
        float,
        Field(gt=0, le=3600, description="Time budget per invocation in seconds"),
    ] = DEFAULT_TIME_BUDGET_SECONDS
    reinvoke_delay_seconds: Annotated[
        float,
        Field(ge=0, le=86400, description="Delay before resuming in seconds"),
    ] = DEFAULT_REINVOKE_DELAY_SECONDS
    browser: Annotated[BrowserConfig, Field(default_factory=BrowserConfig)]
    report: Annotated[ReportConfig, Field(default_factory=ReportConfig)]

    @field_validator("roots")
    @classmethod
    def strip_roots(cls, v: list[str]) -> list[str]:
        """Strip surrounding whitespace from root identifiers."""
        return [root.strip() for root in v]


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigNotFoundError(ConfigError):
    """Raised when the config file is not found."""


class ConfigParseError(ConfigError):
    """Raised when the config file cannot be parsed."""


def load_config(path: Path | None = None) -> HollowConfig:
    """Load scan configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated HollowConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    try:
        return HollowConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def save_config(config: HollowConfig, path: Path | None = None) -> Path:
    """Save scan configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The HollowConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: HollowConfig) -> dict[str, object]:
    """Convert HollowConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional values are left out.
    """
    browser: dict[str, object] = {
        "backend": config.browser.backend,
        "num_retries": config.browser.num_retries,
        "follow_shortcuts": config.browser.follow_shortcuts,
    }
    if config.browser.credentials_file is not None:
        browser["credentials_file"] = str(config.browser.credentials_file)

    report: dict[str, object] = {
        "sink": config.report.sink,
        "sheet_name": config.report.sheet_name,
    }
    if config.report.csv_path is not None:
        report["csv_path"] = str(config.report.csv_path)
    if config.report.spreadsheet_id is not None:
        report["spreadsheet_id"] = config.report.spreadsheet_id

    return {
        "roots": list(config.roots),
        "batch_size": config.batch_size,
        "time_budget_seconds": config.time_budget_seconds,
        "reinvoke_delay_seconds": config.reinvoke_delay_seconds,
        "browser": browser,
        "report": report,
    }


def get_default_config() -> HollowConfig:
    """Create a default HollowConfig with no roots."""
    return HollowConfig()
