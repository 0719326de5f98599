"""CLI package for hollow.

This package contains the Typer application and all subcommands.
"""

from hollow.cli.main import app

__all__ = ["app"]
