"""hollow command-line entry point.

Global options are parsed here and stored on the Typer context; the
command groups live in ``hollow.cli.commands``.
"""

from pathlib import Path
from typing import Annotated

import typer

from hollow import __version__
from hollow.cli.commands import config, scan, validate
from hollow.utils.logs import setup_logging

app = typer.Typer(
    name="hollow",
    help="Find empty folders in Google Drive with a resumable scan.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

app.add_typer(scan.app, name="scan")
app.add_typer(validate.app, name="validate")
app.add_typer(config.app, name="config")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(f"hollow version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Path | None,
        typer.Option("--config", "-c", help="Config file (default: ~/.config/hollow/config.toml)."),
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug detail.")] = False,
    quiet: Annotated[bool, typer.Option("--quiet", "-q", help="Only log errors.")] = False,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=_show_version,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """hollow - find empty folders in Google Drive.

    Walks every folder below the configured roots over as many short
    invocations as needed and reports folders with no files and no
    subfolders.
    """
    setup_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"config_path": config_path, "verbose": verbose, "quiet": quiet}


if __name__ == "__main__":
    app()
