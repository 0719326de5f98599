"""CLI commands for hollow.

This package contains all subcommand implementations.
"""

from hollow.cli.commands import config, scan, validate

__all__ = ["config", "scan", "validate"]
