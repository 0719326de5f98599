"""Logging setup for the hollow CLI.

Library modules only ever call ``logging.getLogger(__name__)``; the CLI
entry point attaches a single Rich handler on stderr so log records do
not interleave badly with table output on stdout.
"""

import logging

from rich.logging import RichHandler

from hollow.utils.formatting import err_console

_HANDLER_NAME = "hollow-rich"


def setup_logging(*, verbose: bool = False, quiet: bool = False) -> None:
    """Configure the ``hollow`` logger hierarchy.

    Safe to call repeatedly; the handler is installed only once and the
    level is updated on every call.

    Args:
        verbose: Log DEBUG and above.
        quiet: Log ERROR and above. Ignored when ``verbose`` is set.
    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.ERROR
    else:
        level = logging.WARNING

    root = logging.getLogger("hollow")
    root.setLevel(level)

    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = RichHandler(
            console=err_console,
            show_path=verbose,
            rich_tracebacks=True,
            markup=False,
        )
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        root.addHandler(handler)
