"""Validate command for checking configured roots.

This module provides the `hollow validate` command, which resolves every
configured root without starting a scan.
"""

from typing import Annotated

import typer

from hollow.cli.types import SetupError, build_browser, get_config_path_option, require_config
from hollow.core.validator import validate_roots
from hollow.utils.formatting import console, create_table, print_error, print_success

app = typer.Typer(
    name="validate",
    help="Check that the configured roots are accessible.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def validate(
    ctx: typer.Context,
    roots: Annotated[
        list[str] | None,
        typer.Option(
            "--root",
            "-r",
            help="Root folder ID to check instead of the configured roots (repeatable).",
        ),
    ] = None,
) -> None:
    """Resolve each root folder and report the ones that cannot be read.

    Exits with code 1 when no root is accessible.

    Examples:
        hollow validate                  # Check configured roots
        hollow validate -r 1AbC -r 2DeF  # Check specific folders
    """
    if ctx.invoked_subcommand is not None:
        return

    config = require_config(get_config_path_option(ctx))
    try:
        browser = build_browser(config)
    except SetupError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    root_ids = roots or config.roots
    if not root_ids:
        print_error("No roots configured.")
        raise typer.Exit(code=1)

    result = validate_roots(root_ids, browser)

    table = create_table("Roots")
    table.add_column("Identifier", style="muted")
    table.add_column("Name", style="folder_path")
    table.add_column("Status")

    for root in result.roots:
        table.add_row(root.identifier, root.display_name, "[success]OK[/]")
    for failure in result.failures:
        table.add_row(failure.identifier or "(blank)", "", f"[error]{failure.reason}[/]")

    console.print(table)

    if not result.ok:
        print_error("None of the roots could be resolved.")
        raise typer.Exit(code=1)

    print_success(f"{len(result.roots)} of {len(root_ids)} root(s) accessible.")
