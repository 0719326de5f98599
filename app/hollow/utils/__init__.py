"""Utility modules for hollow.

This module exports commonly used utility functions.
"""

from hollow.utils.formatting import (
    console,
    create_table,
    err_console,
    format_duration,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from hollow.utils.logs import setup_logging

__all__ = [
    "console",
    "create_table",
    "err_console",
    "format_duration",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "setup_logging",
]
