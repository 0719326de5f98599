"""Config commands.

Provides commands to create and display the scan configuration.
"""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from hollow.cli.types import get_config_path_option, require_config
from hollow.core.config import (
    DEFAULT_SHEET_NAME,
    BrowserConfig,
    ConfigError,
    HollowConfig,
    ReportConfig,
    save_config,
)
from hollow.core.paths import get_config_path
from hollow.utils.formatting import console, create_table, print_error, print_info, print_success

app = typer.Typer(
    help="Create and inspect the scan configuration.",
    no_args_is_help=True,
)


@app.command()
def init(
    ctx: typer.Context,
    roots: Annotated[
        list[str],
        typer.Option(
            "--root",
            "-r",
            help="Root folder ID to scan (repeatable, scanned in order).",
        ),
    ],
    backend: Annotated[
        str,
        typer.Option("--backend", help="Storage backend: drive or local."),
    ] = "drive",
    credentials: Annotated[
        Path | None,
        typer.Option("--credentials", help="Service-account key file for Google APIs."),
    ] = None,
    sink: Annotated[
        str,
        typer.Option("--sink", help="Report destination: csv or sheets."),
    ] = "csv",
    csv_path: Annotated[
        Path | None,
        typer.Option("--csv-path", help="CSV report path."),
    ] = None,
    spreadsheet_id: Annotated[
        str | None,
        typer.Option("--spreadsheet-id", help="Spreadsheet ID for the sheets sink."),
    ] = None,
    sheet_name: Annotated[
        str,
        typer.Option("--sheet-name", help="Worksheet name for the sheets sink."),
    ] = DEFAULT_SHEET_NAME,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config."),
    ] = False,
) -> None:
    """Write a new configuration file.

    Examples:
        hollow config init -r 1AbC --credentials ~/key.json
        hollow config init -r ~/Documents --backend local
        hollow config init -r 1AbC --credentials ~/key.json --sink sheets --spreadsheet-id 1XyZ
    """
    path = get_config_path_option(ctx) or get_config_path()
    if path.exists() and not force:
        print_error(f"Config already exists: {path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    try:
        config = HollowConfig(
            roots=roots,
            browser=BrowserConfig(backend=backend, credentials_file=credentials),
            report=ReportConfig(
                sink=sink,
                csv_path=csv_path,
                spreadsheet_id=spreadsheet_id,
                sheet_name=sheet_name,
            ),
        )
    except ValidationError as e:
        print_error(f"Invalid configuration: {e}")
        raise typer.Exit(code=1) from e

    try:
        saved = save_config(config, path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def show(ctx: typer.Context) -> None:
    """Display the effective configuration."""
    config = require_config(get_config_path_option(ctx))

    table = create_table("Configuration")
    table.add_column("Setting", style="muted")
    table.add_column("Value", style="text")

    table.add_row("roots", "\n".join(config.roots) or "[warning](none)[/]")
    table.add_row("batch_size", str(config.batch_size))
    table.add_row("time_budget_seconds", f"{config.time_budget_seconds:g}")
    table.add_row("reinvoke_delay_seconds", f"{config.reinvoke_delay_seconds:g}")
    table.add_row("browser.backend", config.browser.backend)
    table.add_row("browser.credentials_file", str(config.browser.credentials_file or "-"))
    table.add_row("browser.num_retries", str(config.browser.num_retries))
    table.add_row("browser.follow_shortcuts", str(config.browser.follow_shortcuts).lower())
    table.add_row("report.sink", config.report.sink)
    if config.report.sink == "csv":
        table.add_row("report.csv_path", str(config.report.effective_csv_path))
    else:
        table.add_row("report.spreadsheet_id", config.report.spreadsheet_id or "-")
        table.add_row("report.sheet_name", config.report.sheet_name)

    console.print(table)
