"""Console output helpers.

Regular output goes to stdout through ``console``; warnings, errors and
log records go to stderr through ``err_console`` so that ``--json`` output
stays machine-readable.
"""

import sys

from rich.console import Console
from rich.table import Table

from hollow.core.theme import get_theme


def _make_console(*, stderr: bool = False) -> Console:
    # Force truecolor on a TTY so hex palette colors render as configured
    stream = sys.stderr if stderr else sys.stdout
    color_system = "truecolor" if stream.isatty() else None
    return Console(theme=get_theme(), stderr=stderr, color_system=color_system)


console = _make_console()
err_console = _make_console(stderr=True)


def create_table(title: str, *, caption: str | None = None) -> Table:
    """Create a themed table with headers enabled and no columns."""
    return Table(
        title=title,
        caption=caption,
        show_header=True,
        header_style="bold_header",
        border_style="border",
        caption_style="muted",
    )


def format_duration(seconds: float) -> str:
    """Format seconds as ``42s``, ``5m 05s`` or ``1h 30m``."""
    total = int(round(seconds))
    if total < 60:
        return f"{total}s"
    minutes, secs = divmod(total, 60)
    if minutes < 60:
        return f"{minutes}m {secs:02d}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes:02d}m"


def print_info(message: str) -> None:
    console.print(f"[info]{message}[/]")


def print_success(message: str) -> None:
    console.print(f"[success]{message}[/]")


def print_warning(message: str) -> None:
    err_console.print(f"[warning]Warning:[/] {message}")


def print_error(message: str) -> None:
    err_console.print(f"[error]Error:[/] {message}")
